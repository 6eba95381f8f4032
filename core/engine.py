from pathlib import Path
from typing import Callable, Optional

from rich.panel import Panel
from rich.prompt import Confirm, Prompt

from core.errors import RehostError, RewriteError
from core.models import RunState
from core.settings import AppSettings
from tasks.backup import backup_hosts_file, restore_backup
from tasks.hostname_service import HostnameService, apply_hostname, select_hostname_service
from tasks.hosts_file import update_hosts_file
from tasks.privileges import ensure_root
from tasks.validation import ensure_valid_hostname
from utils.logger import logger, sys_logger

AskFunc = Callable[[str], str]
ConfirmFunc = Callable[[str], bool]


def _ask(question: str) -> str:
    return Prompt.ask(question, console=logger.console, default="", show_default=False)


def _confirm(question: str) -> bool:
    return Confirm.ask(question, console=logger.console, default=False)


class HostnameUpdater:
    """
    Drives one interactive run:
    Init -> Validated -> BackedUp -> HostnameApplied -> HostsRewritten -> Done.
    Any failure lands in Aborted.
    """

    def __init__(
            self,
            settings: AppSettings,
            service: Optional[HostnameService] = None,
            ask: Optional[AskFunc] = None,
            confirm: Optional[ConfirmFunc] = None
    ):
        self.settings = settings
        self.service = service
        self.ask = ask or _ask
        self.confirm = confirm or _confirm
        self.hosts_file = Path(settings.paths.hosts_file)
        self.state = RunState.INIT
        self.backup_path: Optional[Path] = None

    def _transition(self, state: RunState):
        sys_logger.info(f"STATE {self.state.value} -> {state.value}")
        self.state = state

    def run(self) -> int:
        """
        Executes the whole flow and returns the process exit code.
        """
        logger.console.print(Panel.fit("[bold white]Hostname Update[/bold white]", border_style="blue"))

        try:
            return self._run()
        except RehostError as e:
            self._abort(e)
            return e.exit_code

    def _run(self) -> int:
        # 1. Privileges first: nothing is asked of a user who cannot apply it
        ensure_root()

        # 2. Input & validation
        new_hostname = (self.ask("Enter the new hostname") or "").strip()
        ensure_valid_hostname(new_hostname)
        self._transition(RunState.VALIDATED)

        if self.service is None:
            self.service = select_hostname_service(self.settings)

        current_hostname = self.service.current()

        if new_hostname == current_hostname:
            logger.log_step("warning", f"Hostname is already set to '{new_hostname}'")
            if not self.confirm("Do you want to continue anyway?"):
                return self._cancel()

        # 3. Confirmation
        logger.log_step("info", f"Current hostname: {current_hostname}")
        logger.log_step("info", f"New hostname: {new_hostname}")
        if not self.confirm("Do you want to proceed with these changes?"):
            return self._cancel()

        with logger.workflow("Starting hostname update process"):
            # 4. Backup
            self.backup_path = backup_hosts_file(self.hosts_file)
            logger.log_step("success", f"Backup created: {self.backup_path}")
            self._transition(RunState.BACKED_UP)

            # 5. Hostname
            old_hostname = apply_hostname(self.service, new_hostname)
            logger.log_step("success", f"Hostname updated using {self.service.name}")
            self._transition(RunState.HOSTNAME_APPLIED)

            # 6. /etc/hosts
            update_hosts_file(self.hosts_file, new_hostname, old_hostname, self.backup_path)
            logger.log_step("success", f"{self.hosts_file} file updated successfully")
            self._transition(RunState.HOSTS_REWRITTEN)

        self._transition(RunState.DONE)
        logger.console.print()
        logger.log_step("success", "Hostname update completed successfully!")
        logger.log_step("info", f"New hostname: {self.service.current()}")
        logger.log_step("warning", "Note: You may need to restart your terminal or log out/in for all changes to take effect")
        logger.log_step("warning", "Some applications may require a system reboot to recognize the new hostname")
        return 0

    def _cancel(self) -> int:
        logger.log_step("skip", "Operation cancelled")
        sys_logger.info("Run cancelled by user before any change")
        return 0

    def _abort(self, error: RehostError):
        reached = self.state
        self._transition(RunState.ABORTED)
        logger.log_step("error", str(error))

        if self.backup_path is None:
            return

        if isinstance(error, RewriteError):
            if not error.written:
                logger.log_step("info", f"{self.hosts_file} left unchanged; backup kept at {self.backup_path}")
            elif error.restored:
                logger.log_step("warning", f"Restored {self.hosts_file} from {self.backup_path}")
            else:
                logger.log_step("error", f"Could not restore {self.hosts_file}; backup kept at {self.backup_path}")
            return

        # Failed after BACKED_UP but before the rewrite finished
        sys_logger.info(f"Abort after {reached.value}: checking {self.hosts_file} against backup")
        try:
            if restore_backup(self.backup_path, self.hosts_file):
                logger.log_step("warning", f"Restored {self.hosts_file} from {self.backup_path}")
        except OSError as e:
            sys_logger.error(f"Restore from {self.backup_path} failed: {e}", exc_info=True)
            logger.log_step("error", f"Could not restore {self.hosts_file}; backup kept at {self.backup_path}")
