from tasks.backup import backup_hosts_file, restore_backup
from tasks.hostname_service import apply_hostname, select_hostname_service
from tasks.hosts_file import update_hosts_file
from tasks.privileges import ensure_root
from tasks.validation import ensure_valid_hostname, validate_hostname

__all__ = [
    "ensure_root",
    "validate_hostname",
    "ensure_valid_hostname",
    "backup_hosts_file",
    "restore_backup",
    "select_hostname_service",
    "apply_hostname",
    "update_hosts_file",
]
