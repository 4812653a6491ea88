"""Session-level value types shared by the resolver and the recorder."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Any, Mapping, Optional, Union

from .platforms import Platform, PlatformConfig


class RecordingState(str, Enum):
    IDLE = "idle"
    RECORDING = "recording"
    PROCESSING = "processing"


class RecordingMode(str, Enum):
    BATCH = "batch"
    CONTINUOUS = "continuous"


@dataclass(frozen=True)
class ResolvedSession:
    """The single authoritative record of the active platform and config.

    Instances are immutable; the resolver swaps in a new one on every change,
    so platform, config and the configured flag always move together.
    """

    platform: Optional[Platform] = None
    config: Optional[PlatformConfig] = None

    @property
    def is_configured(self) -> bool:
        return (
            self.platform is not None
            and self.config is not None
            and self.config.platform == self.platform
            and self.config.is_complete()
        )

    @classmethod
    def unconfigured(cls) -> "ResolvedSession":
        return cls()


@dataclass(frozen=True)
class NavigationPayload:
    """One-shot handoff from app selection, configuration or OAuth pages."""

    platform: Optional[Platform] = None
    config: Optional[Union[PlatformConfig, Mapping[str, Any]]] = None
    token: Optional[str] = None
