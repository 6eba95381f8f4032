import shlex
import shutil
import subprocess
from typing import List

from core.models import CommandResult


# --- CORE EXECUTION ---

def run_command(cmd: List[str]) -> CommandResult:
    """
    Runs a local command without a shell and captures its output.
    A missing executable is reported as a failed result (exit code 127).
    """
    printable = " ".join(shlex.quote(part) for part in cmd)

    try:
        proc = subprocess.run(
            cmd,
            stdout=subprocess.PIPE,
            stderr=subprocess.PIPE,
            universal_newlines=True
        )
    except FileNotFoundError as e:
        return CommandResult(command=printable, returncode=127, stderr=str(e))

    return CommandResult(
        command=printable,
        returncode=proc.returncode,
        stdout=proc.stdout,
        stderr=proc.stderr,
    )


# --- TOOLS / COMMANDS ---

def command_exists(command: str) -> bool:
    """Checks if a command exists in PATH."""
    return shutil.which(command) is not None
