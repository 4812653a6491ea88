"""
Agilow - Voice commands for your project board

Resolve which platform (Trello, Linear, Asana) a session is bound to, record
a spoken command, and relay it to the backend for execution.
"""

__version__ = "0.3.0"

# Only the session core is imported by default; audio capture pulls in
# sounddevice lazily when a recording actually starts.
from .activity_log import ActivityLog, LogEntry, LogKind
from .boards import BoardCatalog, DiscoveryResult
from .credentials import CredentialStore, Tier
from .gateway import BackendGateway
from .models import NavigationPayload, Platform, RecordingState, ResolvedSession
from .recording.session import RecordingSession
from .resolver import ConfigResolver

__all__ = [
    "ActivityLog",
    "LogEntry",
    "LogKind",
    "BoardCatalog",
    "DiscoveryResult",
    "CredentialStore",
    "Tier",
    "BackendGateway",
    "NavigationPayload",
    "Platform",
    "RecordingState",
    "ResolvedSession",
    "RecordingSession",
    "ConfigResolver",
]
