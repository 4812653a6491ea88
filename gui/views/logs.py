"""Activity log view."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Iterable, List

from agilow.activity_log import LogEntry, LogKind
from gui.views.base import BaseView

LOG_ICONS = {
    LogKind.INFO: "ℹ️",
    LogKind.SUCCESS: "✅",
    LogKind.WARNING: "⚠️",
    LogKind.ERROR: "❌",
    LogKind.VOICE: "🎙️",
    LogKind.TRANSCRIBED: "📝",
    LogKind.TASK: "📋",
    LogKind.DUE_DATE: "📅",
}


def format_entry(entry: LogEntry) -> str:
    clock = entry.timestamp.astimezone().strftime("%H:%M:%S")
    line = f"{clock} {LOG_ICONS.get(entry.kind, '•')} {entry.message}"
    if entry.details and entry.details.get("due_date"):
        line += f" (due {entry.details['due_date']})"
    return line


@dataclass
class LogsView(BaseView):
    name: str = "logs"

    def render(self, entries: Iterable[LogEntry]) -> List[str]:
        return [format_entry(entry) for entry in entries]
