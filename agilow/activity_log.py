"""Bounded, newest-first activity log.

Entries are immutable. The log keeps at most ``capacity`` of them: a new
entry goes in at the head, the tail beyond capacity is evicted, then the
buffer is re-sorted newest-first by ``(timestamp, sequence)``. The sequence
number is monotonic, so entries stamped within the same clock tick keep
their insertion order.
"""

from __future__ import annotations

import itertools
import logging
import uuid
from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
from types import MappingProxyType
from typing import Callable, List, Mapping, Optional, Tuple

from agilow.utils.logger import get_logger

logger = get_logger(__name__)

DEFAULT_CAPACITY = 50

_sequence = itertools.count(1)


class LogKind(str, Enum):
    INFO = "info"
    SUCCESS = "success"
    WARNING = "warning"
    ERROR = "error"
    VOICE = "voice"
    TRANSCRIBED = "transcribed"
    TASK = "task"
    DUE_DATE = "due-date"


_LEVELS = {
    LogKind.ERROR: logging.ERROR,
    LogKind.WARNING: logging.WARNING,
}


@dataclass(frozen=True)
class LogEntry:
    kind: LogKind
    message: str
    details: Optional[Mapping[str, str]] = None
    timestamp: datetime = field(default_factory=lambda: datetime.now(timezone.utc))
    sequence: int = field(default_factory=lambda: next(_sequence))
    id: str = field(default_factory=lambda: uuid.uuid4().hex)

    def __post_init__(self):
        if self.details is not None and not isinstance(self.details, MappingProxyType):
            object.__setattr__(self, "details", MappingProxyType(dict(self.details)))

    @property
    def order_key(self) -> Tuple[datetime, int]:
        return (self.timestamp, self.sequence)


class ActivityLog:
    """Append-only record of what the resolver and recorder report."""

    def __init__(self, capacity: int = DEFAULT_CAPACITY):
        if capacity < 1:
            raise ValueError("capacity must be at least 1")
        self.capacity = capacity
        self._entries: List[LogEntry] = []
        self._listeners: List[Callable[[LogEntry], None]] = []

    def __len__(self) -> int:
        return len(self._entries)

    def append(self, entry: LogEntry) -> LogEntry:
        entries = [entry] + self._entries
        del entries[self.capacity:]
        entries.sort(key=lambda e: e.order_key, reverse=True)
        self._entries = entries
        for listener in list(self._listeners):
            listener(entry)
        return entry

    def record(
        self,
        kind: LogKind,
        message: str,
        details: Optional[Mapping[str, Optional[str]]] = None,
    ) -> LogEntry:
        """Build a timestamped entry, mirror it to the logger and append it."""
        if details is not None:
            details = {k: v for k, v in details.items() if v is not None} or None
        entry = LogEntry(kind=kind, message=message, details=details)
        logger.log(_LEVELS.get(kind, logging.INFO), "[%s] %s", kind.value, message)
        return self.append(entry)

    def render(self) -> Tuple[LogEntry, ...]:
        return tuple(self._entries)

    def subscribe(self, listener: Callable[[LogEntry], None]) -> None:
        self._listeners.append(listener)
