"""Main application object and command-line front-end.

`AgilowApp` wires the session core together (credential store, activity
log, resolver, board catalog, recorder) and exposes the handful of actions
the dashboard offers. It owns no session state of its own beyond view flags
in `AppState`; everything else is read back from the core.
"""

from __future__ import annotations

import argparse
import asyncio
import sys
from typing import Dict, List, Mapping, Optional

from agilow.activity_log import ActivityLog
from agilow.boards import BoardCatalog, DiscoveryResult
from agilow.config import get_settings
from agilow.credentials import CredentialStore
from agilow.errors import AgilowError, ConfigIncompleteError
from agilow.models.platforms import Platform
from agilow.models.session import NavigationPayload, RecordingState, ResolvedSession
from agilow.navigation import Route, logout, prefill, select_app, submit_configuration
from agilow.recording.session import RecordingSession
from agilow.resolver import ConfigResolver
from agilow.trello_auth import build_authorize_url, complete_authorization
from agilow.utils.logger import setup_logging
from gui.services import clients
from gui.state import AppState
from gui.utils.async_tasks import run_async
from gui.utils.logging import log
from gui.views.dashboard import DashboardView
from gui.views.logs import LogsView
from gui.views.settings import SettingsView


class AgilowApp:
    """Dashboard controller over the voice session core."""

    def __init__(
        self,
        store: Optional[CredentialStore] = None,
        device=None,
        gateway=None,
        http=None,
        activity_log: Optional[ActivityLog] = None,
        tick_seconds: float = 1.0,
    ):
        settings = get_settings()
        self.state = AppState()
        self.store = store or clients.get_credential_store()
        self.activity_log = activity_log or ActivityLog(settings.log_capacity)
        self.resolver = ConfigResolver(self.store, self.activity_log)
        self.catalog = BoardCatalog(self.resolver, http=http)
        self.recorder = RecordingSession(
            self.resolver,
            device or clients.get_recorder(),
            gateway or clients.get_gateway(),
            self.activity_log,
            tick_seconds=tick_seconds,
        )
        self.resolver.subscribe(self._on_session)

    def _on_session(self, session: ResolvedSession) -> None:
        self.state.show_config_form = self.resolver.needs_configuration
        if session.platform is not Platform.TRELLO:
            self.catalog.boards = ()
            self.catalog.error = None

    def switch_view(self, view_name: str) -> None:
        self.state.current_view = view_name

    # ------------------------------------------------------------------
    # Dashboard actions
    # ------------------------------------------------------------------

    async def activate(
        self, navigation_payload: Optional[NavigationPayload] = None
    ) -> ResolvedSession:
        """Resolve the session for this visit and load Trello boards if needed."""
        session = self.resolver.resolve(navigation_payload)
        self.switch_view(Route.DASHBOARD.value)
        if session.platform is Platform.TRELLO:
            await self.refresh_boards()
        return session

    async def refresh_boards(self) -> DiscoveryResult:
        result = await self.catalog.refresh()
        if result.failed:
            log(f"Board discovery failed: {result.error}")
        return result

    def select_platform(self, platform: Platform) -> ResolvedSession:
        return self.resolver.select_platform(platform)

    def save_config(self, platform: Platform, values: Mapping[str, str]) -> bool:
        saved = self.resolver.save_fields(platform, values)
        if saved:
            self.state.show_config_form = False
        return saved

    def cancel_config(self) -> None:
        self.resolver.cancel_configuration()
        self.state.show_config_form = False

    def request_switch(self) -> None:
        self.state.show_switch_confirm = True

    def cancel_switch(self) -> None:
        self.state.show_switch_confirm = False

    def confirm_switch(self) -> str:
        route = self.resolver.switch_platform()
        self.state.show_switch_confirm = False
        self.state.selected_board_id = None
        self.switch_view(route.value)
        return route.value

    async def toggle_recording(self) -> RecordingState:
        await self.recorder.toggle()
        return self.recorder.state

    def choose_board(self, board_id: str) -> bool:
        chosen = self.catalog.select_board(board_id)
        if chosen:
            self.state.selected_board_id = board_id
        return chosen

    def logout(self) -> str:
        route = logout(self.store)
        self.state = AppState(current_view=route)
        return route

    def render(self) -> List[str]:
        lines = DashboardView().render(self)
        if self.state.show_config_form and self.resolver.session.platform is not None:
            platform = self.resolver.session.platform
            lines += SettingsView().render(platform, prefill(self.store, platform))
        lines.append("")
        lines += LogsView().render(self.activity_log.render())
        return lines


# ----------------------------------------------------------------------
# Command line
# ----------------------------------------------------------------------


def _parse_fields(pairs: List[str]) -> Dict[str, str]:
    values = {}
    for pair in pairs:
        name, sep, value = pair.partition("=")
        if not sep:
            raise ValueError(f"Expected NAME=VALUE, got {pair!r}")
        values[name.strip()] = value
    return values


def _platform(value: str) -> Platform:
    platform = Platform.parse(value)
    if platform is None:
        raise argparse.ArgumentTypeError(f"Unknown platform: {value}")
    return platform


async def _record(app: AgilowApp, seconds: float) -> int:
    await app.activate()
    if not await app.recorder.start():
        return 1
    print(f"Recording for {seconds:g}s...")
    await asyncio.sleep(seconds)
    await app.recorder.stop()
    print(app.recorder.latest_response)
    return 0


def _print(lines: List[str]) -> None:
    print("\n".join(lines))


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="agilow", description="Agilow voice manager")
    parser.add_argument("--database-url", help="Override DATABASE_URL")
    parser.add_argument("--log-level", help="Override AGILOW_LOG_LEVEL, e.g. DEBUG")
    commands = parser.add_subparsers(dest="command")

    commands.add_parser("status", help="Show the resolved platform and activity log")

    configure = commands.add_parser("configure", help="Save credentials for a platform")
    configure.add_argument("platform", type=_platform)
    configure.add_argument("fields", nargs="*", help="Fields as NAME=VALUE, e.g. apiKey=...")

    select = commands.add_parser("select", help="Pick a platform on the selection page")
    select.add_argument("platform", type=_platform)

    record = commands.add_parser("record", help="Record one command from the microphone")
    record.add_argument("--seconds", type=float, default=5.0)

    boards = commands.add_parser("boards", help="List Trello boards")
    boards.add_argument("--select", metavar="BOARD_ID", help="Use this board for new tasks")

    commands.add_parser("auth-url", help="Print the Trello authorization URL")
    callback = commands.add_parser("auth-callback", help="Finish Trello authorization")
    callback.add_argument("--token")
    callback.add_argument("--error")

    commands.add_parser("switch", help="Forget the active platform")
    commands.add_parser("logout", help="Remove stored tokens and configs")

    settings = commands.add_parser("settings", help="Write app settings to .env")
    settings.add_argument("values", nargs="+", help="KEY=VALUE pairs")
    return parser


def main(argv=None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)
    if args.log_level:
        setup_logging(args.log_level, force=True)
    if args.command is None:
        parser.print_help()
        return 0

    if args.command == "auth-url":
        try:
            print(build_authorize_url())
        except AgilowError as exc:
            print(exc, file=sys.stderr)
            return 1
        return 0

    if args.command == "settings":
        from gui.services.settings_service import save_settings

        try:
            save_settings(_parse_fields(args.values))
        except (KeyError, ValueError) as exc:
            print(exc, file=sys.stderr)
            return 2
        return 0

    app = AgilowApp(store=clients.get_credential_store(args.database_url))

    if args.command == "status":
        run_async(app.activate)
        _print(app.render())
        return 0

    if args.command == "configure":
        try:
            submit_configuration(app.store, args.platform, _parse_fields(args.fields))
        except (ConfigIncompleteError, ValueError) as exc:
            print(exc, file=sys.stderr)
            return 2
        run_async(app.activate)
        _print(app.render())
        return 0

    if args.command == "select":
        route = select_app(app.store, args.platform)
        print(route)
        if route == Route.DASHBOARD.value:
            run_async(app.activate)
            _print(app.render())
        return 0

    if args.command == "auth-callback":
        params = {k: v for k, v in (("token", args.token), ("error", args.error)) if v}
        try:
            complete_authorization(app.store, params)
        except AgilowError as exc:
            print(f"Trello authorization failed: {exc}", file=sys.stderr)
            return 1
        run_async(app.activate)
        _print(app.render())
        return 0

    if args.command == "record":
        code = run_async(_record, app, args.seconds)
        _print(LogsView().render(app.activity_log.render()))
        return code

    if args.command == "boards":
        session = run_async(app.activate)
        if not (session.platform is Platform.TRELLO and session.is_configured):
            # a stored OAuth token is handed off the same way the selection page does
            if select_app(app.store, Platform.TRELLO) == Route.DASHBOARD.value:
                run_async(app.activate)
        if args.select and not app.choose_board(args.select):
            print("Board selection needs an active Trello session", file=sys.stderr)
            return 1
        _print(DashboardView().render(app))
        return 0

    if args.command == "switch":
        print(app.confirm_switch())
        return 0

    if args.command == "logout":
        print(app.logout())
        return 0

    parser.print_help()
    return 0


if __name__ == "__main__":
    sys.exit(main())
