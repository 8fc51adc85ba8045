"""loguru sinks for the API and CLI.

Modules log with a bracketed component tag (``[MATCHES]``, ``[SYNC]``,
``[STORE]``, ``[ROSTER]``, ``[API]``); sinks are configured once per process
from Settings.
"""

import sys
from pathlib import Path

from loguru import logger

from coachsync.config.settings import Settings
from coachsync.config.settings import settings as default_settings

CONSOLE_FORMAT = (
    "<green>{time:YYYY-MM-DD HH:mm:ss}</green> | <level>{level: <8}</level> | "
    "<cyan>{name}</cyan>:<cyan>{line}</cyan> - <level>{message}</level>"
)
FILE_FORMAT = "{time:YYYY-MM-DD HH:mm:ss.SSS} | {level: <8} | {name}:{function}:{line} - {message}"


def setup_logger(settings: Settings | None = None, level: str | None = None) -> None:
    """Replace the loguru sinks with a console sink and an optional file sink.

    Args:
        settings: Source of log_level, log_file, log_rotation and log_retention
        level: Overrides settings.log_level (e.g. DEBUG for ``--verbose``)
    """
    settings = settings or default_settings
    level = (level or settings.log_level).upper()

    logger.remove()
    logger.add(sys.stderr, format=CONSOLE_FORMAT, level=level, colorize=settings.log_colorize)

    if settings.log_file:
        log_path = Path(settings.log_file)
        log_path.parent.mkdir(parents=True, exist_ok=True)
        logger.add(
            log_path,
            format=FILE_FORMAT,
            level=level,
            rotation=settings.log_rotation,
            retention=settings.log_retention,
            compression="zip",
            backtrace=True,
            diagnose=False,
        )

    logger.debug(f"[LOG] Sinks configured: level={level}, file={settings.log_file or '-'}")
