"""Data schemas and validation."""
from .platforms import (
    AsanaConfig,
    LinearConfig,
    Platform,
    PlatformConfig,
    TrelloConfig,
)
from .schemas import BoardSummary, GatewayResponse, OperationResult
from .session import NavigationPayload, RecordingMode, RecordingState, ResolvedSession

__all__ = [
    "AsanaConfig",
    "LinearConfig",
    "Platform",
    "PlatformConfig",
    "TrelloConfig",
    "BoardSummary",
    "GatewayResponse",
    "OperationResult",
    "NavigationPayload",
    "RecordingMode",
    "RecordingState",
    "ResolvedSession",
]
