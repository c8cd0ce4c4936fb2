"""Logging for the Beacon service.

Every module logs through ``logging.getLogger(__name__)``, so all of them hang
off the ``beacon`` package logger configured here. Decisions go to the
console and a rotating log file. ERROR records (store outages, audit write
failures, pipeline errors) are also copied to ``<LOG_FILE stem>_errors.log``.
"""

import logging
import sys
from logging.handlers import RotatingFileHandler
from pathlib import Path

from ..core.config import Settings, settings

PACKAGE_LOGGER = "beacon"
KEY_PREFIX_CHARS = 5

DETAILED_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(funcName)s:%(lineno)d - %(message)s"
SIMPLE_FORMAT = "%(levelname)s - %(name)s - %(message)s"
DATE_FORMAT = "%Y-%m-%d %H:%M:%S"

# Log a line per HTTP request / SQL statement at INFO; raised unless DEBUG
NOISY_LOGGERS: dict[str, int] = {
    "httpx": logging.WARNING,
    "httpcore": logging.WARNING,
    "sqlalchemy.engine": logging.WARNING,
}


def error_log_path(config: Settings) -> Path:
    return config.LOG_DIR / f"{Path(config.LOG_FILE).stem}_errors.log"


def _rotating_handler(
    path: Path, config: Settings, level: int, formatter: logging.Formatter
) -> RotatingFileHandler:
    handler = RotatingFileHandler(
        path,
        maxBytes=config.LOG_MAX_BYTES,
        backupCount=config.LOG_BACKUP_COUNT,
        encoding="utf-8",
    )
    handler.setFormatter(formatter)
    handler.setLevel(level)
    return handler


def setup_logging(
    config: Settings = settings, name: str = PACKAGE_LOGGER
) -> logging.Logger:
    """Attach console and file handlers to the ``name`` logger once.

    Repeated calls return the already configured logger unchanged.
    """
    logger = logging.getLogger(name)
    if logger.handlers:
        return logger

    logger.setLevel(config.LOG_LEVEL.upper())
    logger.propagate = False

    detailed = logging.Formatter(fmt=DETAILED_FORMAT, datefmt=DATE_FORMAT)
    console = logging.StreamHandler(sys.stdout)
    console.setFormatter(
        logging.Formatter(SIMPLE_FORMAT)
        if config.ENVIRONMENT == "production"
        else detailed
    )
    logger.addHandler(console)

    try:
        config.LOG_DIR.mkdir(parents=True, exist_ok=True)
        logger.addHandler(
            _rotating_handler(config.LOG_DIR / config.LOG_FILE, config, logging.DEBUG, detailed)
        )
        logger.addHandler(
            _rotating_handler(error_log_path(config), config, logging.ERROR, detailed)
        )
    except OSError as e:
        logger.warning(f"File logging disabled, console only: {e}")

    if not config.DEBUG:
        for noisy, level in NOISY_LOGGERS.items():
            logging.getLogger(noisy).setLevel(level)

    return logger


def mask_key(api_key: str | None) -> str:
    """Render an API key for logs without exposing it."""
    if not api_key:
        return "(none)"
    return api_key[:KEY_PREFIX_CHARS] + "..."
