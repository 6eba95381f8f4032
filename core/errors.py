from typing import Optional

from core.models import RejectReason


class RehostError(Exception):
    """
    Base class for every failure that terminates a run.
    """
    exit_code: int = 1


class ValidationError(RehostError):
    def __init__(self, message: str, reason: Optional[RejectReason] = None):
        super().__init__(message)
        self.reason = reason


class PrivilegeError(RehostError):
    pass


class BackupError(RehostError):
    pass


class ApplyError(RehostError):
    pass


class RewriteError(RehostError):
    def __init__(self, message: str, restored: bool = False, written: bool = True):
        super().__init__(message)
        # True when the hosts file was put back from the backup copy
        self.restored = restored
        # False when the failure happened before any write was attempted
        self.written = written
