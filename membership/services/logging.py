"""Logging setup for the membership API server.

Records go to stdout and to settings.log_file. The level comes from the
LOG_LEVEL environment variable, falling back to settings.log_level.
"""

import logging
import os
import sys
from pathlib import Path

from membership.config import settings

LOG_FORMAT = "[%(asctime)s] %(name)s - %(levelname)s - %(message)s"
LOG_DATE_FORMAT = "%Y-%m-%d %H:%M:%S"

# Third-party loggers kept at WARNING unless DEBUG is requested
NOISY_LOGGERS = ("uvicorn.access", "sqlalchemy.engine", "multipart")


def get_log_level(name: str | None = None) -> int:
    """Resolve a level name to a logging constant.

    Args:
        name: Level name; defaults to LOG_LEVEL, then settings.log_level

    Returns:
        Logging level constant (INFO for unknown names)
    """
    level_str = (name or os.getenv("LOG_LEVEL") or settings.log_level).upper()
    level = logging.getLevelName(level_str)
    return level if isinstance(level, int) else logging.INFO


def setup_server_logging(log_file: str | None = None, level: str | None = None) -> None:
    """Configure the root logger with a stdout handler and a file handler.

    Args:
        log_file: Log file path (default: settings.log_file); parent dirs are created
        level: Level name overriding the environment
    """
    log_path = Path(log_file or settings.log_file)
    log_path.parent.mkdir(parents=True, exist_ok=True)

    formatter = logging.Formatter(fmt=LOG_FORMAT, datefmt=LOG_DATE_FORMAT)
    log_level = get_log_level(level)

    root_logger = logging.getLogger()
    root_logger.setLevel(log_level)
    root_logger.handlers.clear()

    for handler in (logging.StreamHandler(sys.stdout), logging.FileHandler(log_path)):
        handler.setLevel(log_level)
        handler.setFormatter(formatter)
        root_logger.addHandler(handler)

    quiet_level = log_level if log_level <= logging.DEBUG else max(log_level, logging.WARNING)
    for name in NOISY_LOGGERS:
        logging.getLogger(name).setLevel(quiet_level)

    logging.getLogger(__name__).debug(
        f"Logging configured: level={logging.getLevelName(log_level)}, file={log_path}"
    )


__all__ = ["get_log_level", "setup_server_logging"]
