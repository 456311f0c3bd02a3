"""Logger configuration for dayplan.

Level and file sink default to LOG_LEVEL / LOG_FILE from settings, so the CLI
only passes what the user overrides on the command line.
"""

import sys
from pathlib import Path

from loguru import logger

from dayplan.config.settings import settings

CONSOLE_FORMAT = (
    "<green>{time:HH:mm:ss}</green> | <level>{level: <8}</level> | "
    "<cyan>{name}</cyan>:<cyan>{line}</cyan> - <level>{message}</level>"
)
FILE_FORMAT = "{time:YYYY-MM-DD HH:mm:ss} | {level: <8} | {name}:{function}:{line} - {message}"


def setup_logger(
    level: str | None = None,
    log_file: str | None = None,
    rotation: str = "10 MB",
    retention: str = "7 days",
) -> None:
    """Configure loguru with a stderr sink and an optional rotating file sink.

    Args:
        level: Loguru level name. Defaults to settings.log_level.
        log_file: Path of the file sink. Defaults to settings.log_file; no file
            sink when neither is set.
        rotation: Log rotation size (e.g., "10 MB", "1 day")
        retention: Log retention period (e.g., "7 days", "1 month")
    """
    level = (level or settings.log_level).upper()
    log_file = log_file or settings.log_file

    logger.remove()

    # Plain output when stderr is redirected (pipes, CliRunner)
    logger.add(
        sys.stderr,
        format=CONSOLE_FORMAT,
        level=level,
        colorize=sys.stderr.isatty(),
    )

    if log_file:
        log_path = Path(log_file)
        log_path.parent.mkdir(parents=True, exist_ok=True)

        logger.add(
            log_path,
            format=FILE_FORMAT,
            level=level,
            rotation=rotation,
            retention=retention,
            compression="zip",
            backtrace=True,
        )

    logger.debug(f"Logger initialized with level={level} file={log_file or '-'}")
