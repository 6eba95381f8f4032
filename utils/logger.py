import logging
from pathlib import Path
from typing import Union

from rich.console import Console
from rich.theme import Theme

LOG_FORMAT = "%(asctime)s %(levelname)s %(name)s: %(message)s"

# File logger: every step is recorded here, whatever the console verbosity
sys_logger = logging.getLogger("rehost")
sys_logger.addHandler(logging.NullHandler())


class HostLogger:
    def __init__(self):
        # 1. Custom color theme
        self.custom_theme = Theme({
            "success": "bold green",
            "error": "bold red",
            "skip": "bold cyan",
            "warning": "bold yellow",
            "info": "dim white"
        })
        self.console = Console(theme=self.custom_theme)

        # Current nesting depth (indentation)
        self.indent_level = 0

    def log_step(self, status: str, msg: str):
        """
        Prints one status line for the current step.
        Uses the current indentation and the matching icon.
        """
        icons = {
            "success": "✅",
            "error": "❌",
            "skip": "🔵",
            "warning": "🔶",
            "info": "ℹ️"
        }
        icon = icons.get(status, "•")
        indent = "   " * self.indent_level

        self.console.print(f"{indent}{icon} [{status}]{msg}[/{status}]")

    def workflow(self, name: str):
        """Returns the context manager for a top-level workflow."""
        return self._Context(self, name)

    class _Context:
        def __init__(self, logger, name):
            self.logger = logger
            self.name = name

        def __enter__(self):
            indent = "   " * self.logger.indent_level
            self.logger.console.print(f"\n{indent}🚀 [bold blue]{self.name}[/bold blue]")
            self.logger.indent_level += 1
            return self

        def __exit__(self, exc_type, exc_value, traceback):
            self.logger.indent_level -= 1

            if exc_type and not issubclass(exc_type, KeyboardInterrupt):
                self.logger.log_step("error", f"Interrupted by error: {exc_value}")
            # Never suppress: the error keeps propagating
            return False


def configure_file_logging(path: Union[str, Path], level: str = "INFO") -> bool:
    """
    Attaches a file handler to sys_logger.
    Returns False (and warns on the console) when the log file cannot be opened.
    """
    try:
        handler = logging.FileHandler(str(path), encoding="utf-8")
    except OSError as e:
        logger.log_step("warning", f"File logging disabled ({path}: {e.strerror or e})")
        return False

    # One log file per process
    for old_handler in [h for h in sys_logger.handlers if isinstance(h, logging.FileHandler)]:
        sys_logger.removeHandler(old_handler)
        old_handler.close()

    handler.setFormatter(logging.Formatter(LOG_FORMAT))
    sys_logger.addHandler(handler)
    sys_logger.setLevel(getattr(logging, level.upper(), logging.INFO))
    return True


logger = HostLogger()
