import datetime
import errno
import filecmp
import shutil
from pathlib import Path
from typing import Optional, Union

from core.decorators import automated_step
from core.errors import BackupError
from utils.logger import sys_logger

BACKUP_TIMESTAMP_FORMAT = "%Y%m%d%H%M%S"
MAX_BACKUPS_PER_SECOND = 100


def backup_path_for(path: Union[str, Path], now: Optional[datetime.datetime] = None) -> Path:
    """/etc/hosts -> /etc/hosts.backup.20240101120000"""
    timestamp = (now or datetime.datetime.now()).strftime(BACKUP_TIMESTAMP_FORMAT)
    return Path(f"{path}.backup.{timestamp}")


@automated_step("Back up hosts file", error=BackupError)
def backup_hosts_file(path: Union[str, Path], now: Optional[datetime.datetime] = None) -> Path:
    """
    Copies the resolution file next to itself before anything is mutated.
    Backups are never cleaned up automatically.
    """
    source = Path(path)
    if not source.is_file():
        raise BackupError(f"Failed to create backup of {source}: file not found")

    base = backup_path_for(source, now)
    try:
        target = _copy_exclusive(source, base)
    except OSError as e:
        raise BackupError(f"Failed to create backup of {source}: {e.strerror or e}") from e

    sys_logger.info(f"Backup created: {target}")
    return target


def _copy_exclusive(source: Path, base: Path) -> Path:
    """
    Copies into a backup name that does not exist yet.
    A second run within the same second gets a .1, .2, ... suffix.
    """
    for attempt in range(MAX_BACKUPS_PER_SECOND):
        target = base if attempt == 0 else Path(f"{base}.{attempt}")
        try:
            dst = open(target, "xb")
        except FileExistsError:
            continue

        try:
            with dst, open(source, "rb") as src:
                shutil.copyfileobj(src, dst)
            shutil.copystat(str(source), str(target))
        except OSError:
            target.unlink()
            raise
        return target

    raise FileExistsError(errno.EEXIST, "Too many backups in the same second", str(base))


def restore_backup(backup: Union[str, Path], path: Union[str, Path]) -> bool:
    """
    Puts the backup copy back in place.
    Returns False when the file already matches the backup and nothing was written.
    """
    backup, path = Path(backup), Path(path)
    if path.exists() and filecmp.cmp(backup, path, shallow=False):
        return False

    shutil.copy2(backup, path)
    sys_logger.warning(f"Restored {path} from {backup}")
    return True
