import socket
from abc import ABC, abstractmethod
from pathlib import Path
from typing import Union

from core.decorators import automated_step
from core.errors import ApplyError
from core.settings import AppSettings
from utils.linux import command_exists, run_command
from utils.logger import sys_logger


class HostnameService(ABC):
    """
    Capability to read and set the live system hostname.
    """
    name = "abstract"

    def current(self) -> str:
        """Running kernel hostname (what the `hostname` command prints)."""
        return socket.gethostname()

    @abstractmethod
    def set(self, hostname: str) -> None:
        """Applies the hostname. Raises ApplyError on failure."""


class HostnamectlService(HostnameService):
    """Delegates to systemd-hostnamed, which updates both the record and the session."""
    name = "hostnamectl"

    def set(self, hostname: str) -> None:
        res = run_command(["hostnamectl", "set-hostname", hostname])
        if res.failed:
            raise ApplyError(f"Failed to update hostname using hostnamectl: {res.stderr.strip() or res.returncode}")


class HostnameFileService(HostnameService):
    """Fallback: writes the persisted record, then renames the running session."""
    name = "file"

    def __init__(self, hostname_file: Union[str, Path] = "/etc/hostname"):
        self.hostname_file = Path(hostname_file)

    def set(self, hostname: str) -> None:
        try:
            self.hostname_file.write_text(f"{hostname}\n")
        except OSError as e:
            raise ApplyError(f"Failed to update {self.hostname_file}: {e.strerror or e}") from e

        sys_logger.info(f"Hostname file {self.hostname_file} updated")

        res = run_command(["hostname", hostname])
        if res.failed:
            raise ApplyError(f"Failed to set hostname for the current session: {res.stderr.strip() or res.returncode}")


def select_hostname_service(settings: AppSettings) -> HostnameService:
    """
    Picks the implementation from settings.hostname.method.
    'auto' probes for hostnamectl in PATH.
    """
    method = settings.hostname.method

    if method == "auto":
        method = "hostnamectl" if command_exists("hostnamectl") else "file"

    if method == "hostnamectl":
        service = HostnamectlService()
    else:
        service = HostnameFileService(settings.paths.hostname_file)

    sys_logger.info(f"Hostname service selected: {service.name}")
    return service


@automated_step("Apply new hostname", error=ApplyError)
def apply_hostname(service: HostnameService, new_hostname: str) -> str:
    """
    Sets the live hostname and returns the previous one (needed to rewrite /etc/hosts).
    """
    old_hostname = service.current()
    sys_logger.info(f"Current hostname: {old_hostname}; setting new hostname: {new_hostname}")

    service.set(new_hostname)
    return old_hostname
