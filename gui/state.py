"""Application state container.

Holds view flags only; platform, config and recording state are owned by
the session core and read from there.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, Optional


@dataclass
class AppState:
    """Holds ephemeral UI state."""

    current_view: str = "/dashboard"
    show_config_form: bool = False
    show_switch_confirm: bool = False
    selected_board_id: Optional[str] = None
    flags: Dict[str, Any] = field(default_factory=dict)
