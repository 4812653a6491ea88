"""Centralized logger configuration.

Usage:
    from agilow.utils.logger import get_logger
    logger = get_logger(__name__)

The first call configures the root logger from AGILOW_LOG_LEVEL; entry
points can call ``setup_logging`` themselves to override the level.
"""
import logging
from typing import Optional

from agilow.config import get_settings

LOG_FORMAT = "%(asctime)s [%(levelname)s] %(name)s: %(message)s"

# requests/urllib3 log every connection at DEBUG
NOISY_LOGGERS = ("urllib3", "sqlalchemy.engine")


def setup_logging(level: Optional[str] = None, force: bool = False) -> None:
    level = (level or get_settings().log_level).upper()
    logging.basicConfig(
        level=getattr(logging, level, logging.INFO),
        format=LOG_FORMAT,
        force=force,
    )
    for name in NOISY_LOGGERS:
        logging.getLogger(name).setLevel(max(logging.WARNING, logging.getLogger().level))


def get_logger(name: str) -> logging.Logger:
    if not logging.getLogger().handlers:
        setup_logging()
    return logging.getLogger(name)
