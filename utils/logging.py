"""loguru setup for bakashi-cli.

Two sinks: stderr for the user (warnings only, everything with --debug)
and a rotating log file under the state directory that keeps the full
debug trail of picker, overlay and scraper activity.
"""

import sys

from loguru import logger as _base_logger

from models.config import get_data_path

LOG_FILE_NAME = "bakashi-cli.log"
CONSOLE_FORMAT = (
    "<level>{level: <8}</level> | <cyan>{name}</cyan>:<cyan>{function}</cyan> - <level>{message}</level>"
)
FILE_FORMAT = "{time:YYYY-MM-DD HH:mm:ss} | {level: <8} | {name}:{function}:{line} - {message}"

_initialized = False


def configure_logging(debug: bool = False) -> None:
    """Install the stderr and file sinks.

    Runs once; a later call with debug=True replaces the sinks so --debug
    takes effect even after a module logged during import.

    Args:
        debug: Show DEBUG records on stderr
    """
    global _initialized

    if _initialized and not debug:
        return

    log_dir = get_data_path()
    log_dir.mkdir(parents=True, exist_ok=True)

    _base_logger.remove()
    _base_logger.add(sys.stderr, format=CONSOLE_FORMAT, level="DEBUG" if debug else "WARNING")
    _base_logger.add(
        log_dir / LOG_FILE_NAME,
        format=FILE_FORMAT,
        level="DEBUG",
        rotation="50 MB",
        retention=10,
        compression="zip",
    )

    _initialized = True


def get_logger(name: str):
    """Logger bound to a module name; sets up the sinks on first use."""
    if not _initialized:
        configure_logging()
    return _base_logger.bind(name=name)
