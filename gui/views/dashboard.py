"""Dashboard view: status line, timer, connection summary and board picker."""

from __future__ import annotations

from dataclasses import dataclass
from typing import List, Optional

from agilow.models.platforms import Platform
from agilow.models.session import RecordingState, ResolvedSession
from gui.views.base import BaseView

STATUS_TEXT = {
    RecordingState.IDLE: "Ready",
    RecordingState.RECORDING: "Recording...",
    RecordingState.PROCESSING: "Processing...",
}


def status_text(state: RecordingState) -> str:
    return STATUS_TEXT[state]


def format_time(seconds: int) -> str:
    """Elapsed seconds as mm:ss."""
    minutes, secs = divmod(max(int(seconds), 0), 60)
    return f"{minutes:02d}:{secs:02d}"


def connected_label(session: ResolvedSession, board_name: Optional[str] = None) -> str:
    if session.platform is None:
        return "Not connected"
    label = f"Connected to {session.platform.display_name}"
    if not session.is_configured:
        label += " (not configured)"
    if board_name:
        label += f" • {board_name}"
    return label


@dataclass
class DashboardView(BaseView):
    name: str = "dashboard"

    def render(self, app) -> List[str]:
        """Plain-text dashboard for the app's current state."""
        session = app.resolver.session
        board_name = None
        if session.platform is Platform.TRELLO and session.config is not None:
            board_name = app.catalog.board_name(session.config.board_id or None)

        lines = [
            connected_label(session, board_name),
            f"{status_text(app.recorder.state)}  {format_time(app.recorder.elapsed_seconds)}",
            f"Mode: {app.recorder.mode.value}",
            f"Assistant: {app.recorder.latest_response}",
        ]
        if session.platform is Platform.TRELLO:
            if app.catalog.error:
                lines.append(f"Boards unavailable: {app.catalog.error}")
            elif not app.catalog.boards:
                lines.append("No boards found")
            for board in app.catalog.boards:
                marker = "*" if session.config and board.id == session.config.board_id else " "
                lines.append(f" {marker} {board.id}  {board.name}")
        return lines
