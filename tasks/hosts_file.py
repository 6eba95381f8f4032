import errno
import os
import re
import shutil
import tempfile
from pathlib import Path
from typing import List, Sequence, Tuple, Union

from core.decorators import automated_step
from core.errors import RewriteError
from tasks.backup import restore_backup
from utils.logger import sys_logger

LOOPBACK_ADDRESS = "127.0.0.1"

# Names that must keep resolving to loopback whatever the old hostname was
RESERVED_NAMES = frozenset({
    "localhost",
    "localhost.localdomain",
    "ip6-localhost",
    "ip6-loopback",
})

_WHITESPACE = re.compile(r"(\s+)")


# --- LINE HELPERS ---

def is_passthrough(line: str) -> bool:
    """Blank lines and comments are never modified."""
    stripped = line.strip()
    return not stripped or stripped.startswith("#")


def _split_comment(line: str) -> Tuple[str, str]:
    idx = line.find("#")
    if idx == -1:
        return line, ""
    return line[:idx], line[idx:]


def _fields(line: str) -> List[str]:
    content, _ = _split_comment(line)
    return content.split()


def _substitute(line: str, old: str, new: str) -> str:
    """Replaces whole name tokens equal to `old`; the address and inline comment are left alone."""
    content, comment = _split_comment(line)
    parts = _WHITESPACE.split(content)

    seen_address = False
    for i, part in enumerate(parts):
        if not part or part.isspace():
            continue
        if seen_address and part == old:
            parts[i] = new
        seen_address = True

    return "".join(parts) + comment


# --- TRANSFORMS ---

def rewrite_hosts_lines(lines: Sequence[str], old_hostname: str, new_hostname: str) -> List[str]:
    """
    Substitutes every exact-token occurrence of the old hostname in mapping lines.
    """
    if old_hostname in RESERVED_NAMES:
        sys_logger.warning(f"Old hostname '{old_hostname}' is a loopback alias; leaving existing entries untouched")
        return list(lines)

    result = []
    for line in lines:
        if not is_passthrough(line) and old_hostname in _fields(line)[1:]:
            line = _substitute(line, old_hostname, new_hostname)
            sys_logger.info(f"Updated line: {line}")
        result.append(line)
    return result


def has_loopback_entry(lines: Sequence[str], hostname: str) -> bool:
    for line in lines:
        if is_passthrough(line):
            continue
        fields = _fields(line)
        if fields[0] == LOOPBACK_ADDRESS and hostname in fields[1:]:
            return True
    return False


def ensure_loopback_entry(lines: Sequence[str], hostname: str) -> List[str]:
    """
    Makes 127.0.0.1 resolve to `hostname`: appended to the first
    '127.0.0.1 ... localhost' line, or prepended as a new line.
    """
    result = list(lines)
    if has_loopback_entry(result, hostname):
        return result

    for i, line in enumerate(result):
        if is_passthrough(line):
            continue
        fields = _fields(line)
        if fields[0] == LOOPBACK_ADDRESS and "localhost" in fields[1:]:
            content, comment = _split_comment(line)
            names = content.rstrip()
            trailing = content[len(names):] if comment else ""
            result[i] = f"{names} {hostname}{trailing}{comment}"
            sys_logger.info(f"Added {hostname} to loopback line: {result[i]}")
            return result

    entry = f"{LOOPBACK_ADDRESS} localhost {hostname}"
    sys_logger.info(f"Adding localhost entry for new hostname: {entry}")
    return [entry] + result


def render_hosts(content: str, old_hostname: str, new_hostname: str) -> str:
    """
    Full in-memory transform of a hosts file body.
    CRLF files stay CRLF; anything else is written with LF.
    """
    newline = "\r\n" if "\r\n" in content else "\n"
    lines = rewrite_hosts_lines(content.splitlines(), old_hostname, new_hostname)
    lines = ensure_loopback_entry(lines, new_hostname)
    return newline.join(lines) + newline if lines else ""


# --- FILE OPERATIONS ---

def _write_atomic(path: Path, content: str) -> None:
    """
    Writes to a temp file in the same directory, then renames it over `path`.
    Bind-mounted files (containers) cannot be renamed over; those are rewritten in place.
    """
    stat = path.stat()
    temp_path = None

    try:
        with tempfile.NamedTemporaryFile(
                mode="w", encoding="utf-8", newline="",
                dir=str(path.parent), prefix=f".{path.name}.", suffix=".tmp", delete=False
        ) as handle:
            temp_path = handle.name
            handle.write(content)
            handle.flush()
            os.fsync(handle.fileno())

        # Keep mode and ownership of the original
        shutil.copymode(str(path), temp_path)
        temp_stat = os.stat(temp_path)
        if (temp_stat.st_uid, temp_stat.st_gid) != (stat.st_uid, stat.st_gid):
            os.chown(temp_path, stat.st_uid, stat.st_gid)

        try:
            os.replace(temp_path, str(path))
        except OSError as e:
            if e.errno not in (errno.EBUSY, errno.EXDEV):
                raise
            sys_logger.warning(f"Cannot rename over {path} ({e.strerror}); writing in place")
            shutil.copyfile(temp_path, str(path))
    finally:
        if temp_path and os.path.exists(temp_path):
            os.remove(temp_path)


@automated_step("Rewrite hosts file", error=RewriteError)
def update_hosts_file(
        path: Union[str, Path],
        new_hostname: str,
        old_hostname: str,
        backup: Union[str, Path]
) -> None:
    """
    Points the hosts file at the new hostname.
    On a write failure the file is restored from `backup` and RewriteError is raised.
    """
    path = Path(path)

    try:
        # newline="" keeps CRLF visible to render_hosts
        with open(path, encoding="utf-8", newline="") as handle:
            content = handle.read()
    except OSError as e:
        raise RewriteError(f"Failed to read {path}: {e.strerror or e}", written=False) from e
    except UnicodeDecodeError as e:
        raise RewriteError(f"Failed to read {path}: not valid UTF-8 ({e.reason})", written=False) from e

    updated = render_hosts(content, old_hostname, new_hostname)
    if updated == content:
        sys_logger.info(f"{path} already up to date")
        return

    try:
        _write_atomic(path, updated)
    except OSError as e:
        sys_logger.error(f"Failed to update {path}: {e}", exc_info=True)
        restored = False
        try:
            restore_backup(backup, path)
            restored = True
        except OSError as restore_error:
            sys_logger.error(f"Restore from {backup} failed: {restore_error}")
        raise RewriteError(f"Failed to update {path}: {e.strerror or e}", restored=restored) from e

    sys_logger.info(f"{path} updated successfully")
