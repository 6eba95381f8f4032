from pathlib import Path

import typer

from core.engine import HostnameUpdater
from core.errors import PrivilegeError
from core.settings import load_settings
from core.state import config as global_config
from tasks.privileges import ensure_root
from utils.logger import configure_file_logging, logger, sys_logger

app = typer.Typer(
    help="rehost - interactive hostname and /etc/hosts updater",
    add_completion=False,
)


@app.command()
def main(
        quiet: bool = typer.Option(
            False, "--quiet", "-q",
            help="Disable spinners and step lines (Silent Mode)."
        ),
        config_file: Path = typer.Option(
            "rehost.yaml", "--config", "-c",
            help="Path to the configuration YAML file (optional).",
            dir_okay=False
        )
):
    """
    Prompts for a new hostname, applies it and updates /etc/hosts.
    """
    global_config.VERBOSE = not quiet
    global_config.CONFIG_FILE = str(config_file)

    try:
        settings = load_settings(config_file)
    except ValueError as e:
        logger.log_step("error", str(e))
        raise typer.Exit(code=1)

    # Root check before touching the log file, which is usually root-owned
    try:
        ensure_root()
    except PrivilegeError as e:
        logger.log_step("error", str(e))
        raise typer.Exit(code=e.exit_code)

    configure_file_logging(settings.logging.file, settings.logging.level)
    sys_logger.info(f"Run started (config='{config_file}', hosts='{settings.paths.hosts_file}')")

    try:
        exit_code = HostnameUpdater(settings).run()
    except KeyboardInterrupt:
        logger.console.print()
        logger.log_step("skip", "Interrupted")
        sys_logger.warning("Run interrupted by user")
        raise typer.Exit(code=1)

    sys_logger.info(f"Run finished exit_code={exit_code}")
    raise typer.Exit(code=exit_code)


if __name__ == "__main__":
    app()
