import os

from core.errors import PrivilegeError


def is_root() -> bool:
    return os.geteuid() == 0


def ensure_root() -> None:
    """Refuses to go any further without administrative privileges."""
    if not is_root():
        raise PrivilegeError("This program must be run as root (use sudo)")
