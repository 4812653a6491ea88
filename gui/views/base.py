"""Base class for GUI views.

Views render plain text lines so they work in a terminal and in tests
without a display.
"""

from __future__ import annotations

from dataclasses import dataclass


@dataclass
class BaseView:
    name: str = "base"
