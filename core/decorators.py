from functools import wraps
from typing import Type

from core.errors import RehostError
from core.state import config as global_config
from utils.logger import logger, sys_logger


def automated_step(step_name: str, error: Type[RehostError] = RehostError):
    """
    Decorator that makes stage functions uniform.
    1. Logs start and end to file.
    2. In VERBOSE mode, shows a spinner that turns into the final result.
    3. Converts unexpected exceptions into the stage's typed error.
    """

    def decorator(func):
        @wraps(func)
        def wrapper(*args, **kwargs):
            sys_logger.info(f"START step='{step_name}'")

            try:
                if global_config.VERBOSE:
                    # UI MODE: the spinner line disappears when the block ends
                    with logger.console.status(f"[dim]🔹 {step_name}...[/dim]", spinner="dots"):
                        result = func(*args, **kwargs)
                else:
                    result = func(*args, **kwargs)

            except RehostError as e:
                sys_logger.error(f"FAIL step='{step_name}' error='{type(e).__name__}' message='{e}'")
                raise

            except Exception as e:
                error_msg = f"Unexpected failure in '{step_name}': {e}"
                sys_logger.error(error_msg, exc_info=True)  # full stacktrace to file
                raise error(error_msg) from e

            sys_logger.info(f"END step='{step_name}' status='OK'")
            if global_config.VERBOSE:
                logger.console.print(f"{'   ' * logger.indent_level}[green]✔[/green] [dim]{step_name}[/dim]")
            return result

        return wrapper

    return decorator
