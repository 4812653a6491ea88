"""Logging helpers for the presentation layer.

Messages go to the ``agilow.gui`` logger; nothing here configures handlers,
so importing the GUI in tests leaves global logging alone.
"""

from __future__ import annotations

import logging
from typing import Union

logger = logging.getLogger("agilow.gui")


def log(message: str, level: Union[int, str] = logging.INFO) -> None:
    """Log ``message``; ``level`` may be a number or a name like "warning"."""
    if isinstance(level, str):
        level = logging.getLevelName(level.upper())
        if not isinstance(level, int):
            level = logging.INFO
    logger.log(level, message)
