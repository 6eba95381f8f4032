import re

from core.decorators import automated_step
from core.errors import ValidationError
from core.models import HostnameCheck, RejectReason

MAX_HOSTNAME_LENGTH = 253
HOSTNAME_CHARSET = re.compile(r"[A-Za-z0-9.-]+")


def validate_hostname(candidate: str) -> HostnameCheck:
    """
    Checks a candidate hostname, in order: empty, length, charset, hyphen placement.
    The verdict carries the first failed check.
    """
    if not candidate:
        return HostnameCheck(False, "Hostname cannot be empty", RejectReason.EMPTY)

    if len(candidate) > MAX_HOSTNAME_LENGTH:
        return HostnameCheck(
            False, f"Hostname too long (max {MAX_HOSTNAME_LENGTH} characters)", RejectReason.TOO_LONG
        )

    if not HOSTNAME_CHARSET.fullmatch(candidate):
        return HostnameCheck(
            False,
            "Hostname contains invalid characters. Use only letters, numbers, hyphens, and dots",
            RejectReason.INVALID_CHARACTERS
        )

    if candidate.startswith("-") or candidate.endswith("-"):
        return HostnameCheck(False, "Hostname cannot start or end with a hyphen", RejectReason.INVALID_HYPHEN)

    return HostnameCheck(True, f"Hostname '{candidate}' is valid")


@automated_step("Validate hostname", error=ValidationError)
def ensure_valid_hostname(candidate: str) -> str:
    """Returns the candidate unchanged, or raises ValidationError with the rejection reason."""
    check = validate_hostname(candidate)
    if not check.accepted:
        raise ValidationError(check.message, reason=check.reason)
    return candidate
