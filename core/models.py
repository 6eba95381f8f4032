from dataclasses import dataclass
from enum import Enum
from typing import Optional


class RunState(str, Enum):
    INIT = "INIT"
    VALIDATED = "VALIDATED"
    BACKED_UP = "BACKED_UP"
    HOSTNAME_APPLIED = "HOSTNAME_APPLIED"
    HOSTS_REWRITTEN = "HOSTS_REWRITTEN"
    DONE = "DONE"
    ABORTED = "ABORTED"  # Terminal failure; restore is attempted past BACKED_UP


class RejectReason(str, Enum):
    EMPTY = "EMPTY"
    TOO_LONG = "TOO_LONG"
    INVALID_CHARACTERS = "INVALID_CHARACTERS"
    INVALID_HYPHEN = "INVALID_HYPHEN"


@dataclass
class HostnameCheck:
    """
    Verdict of the hostname validator.
    """
    accepted: bool
    message: str
    reason: Optional[RejectReason] = None


@dataclass
class CommandResult:
    """Outcome of a local OS command."""
    command: str
    returncode: int
    stdout: str = ""
    stderr: str = ""

    @property
    def failed(self) -> bool:
        return self.returncode != 0
