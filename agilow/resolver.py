"""Session configuration resolver.

Decides, on every activation, which platform is active and which
credentials are in effect. Precedence, first match wins:

1. the one-shot navigation payload (app selection, configure page, OAuth);
2. durable per-platform records (Linear, then Asana);
3. legacy per-field cookies, keyed by the ``platform`` marker cookie;
4. nothing: the caller must prompt for configuration.

The resolver is also the only writer of the resolved session: ``save``,
``select_board``, ``select_platform`` and ``switch_platform`` each swap in a
new immutable ``ResolvedSession``.
"""
from typing import Any, Callable, List, Mapping, Optional, Union

from agilow.activity_log import ActivityLog, LogKind
from agilow.config import get_settings
from agilow.credentials import CredentialStore, PLATFORM_COOKIE
from agilow.errors import ConfigParseError
from agilow.models.platforms import (
    DURABLE_PLATFORMS,
    Platform,
    PlatformConfig,
    TrelloConfig,
    PlatformConfigBase,
    config_from_fields,
    has_config_variant,
)
from agilow.models.session import NavigationPayload, ResolvedSession
from agilow.navigation import Route
from agilow.utils.logger import get_logger

logger = get_logger(__name__)

UNCONFIGURED_MESSAGE = "Voice Manager initialized - Please configure your platform"


class ConfigResolver:
    """Owns the ResolvedSession and reconciles the credential tiers."""

    def __init__(
        self,
        store: CredentialStore,
        activity_log: ActivityLog,
        trello_app_key: Optional[str] = None,
    ):
        self.store = store
        self.log = activity_log
        self.trello_app_key = (
            trello_app_key if trello_app_key is not None else get_settings().trello_app_key
        )
        self._session = ResolvedSession.unconfigured()
        self.needs_configuration = False
        self._listeners: List[Callable[[ResolvedSession], None]] = []

    @property
    def session(self) -> ResolvedSession:
        return self._session

    def subscribe(self, listener: Callable[[ResolvedSession], None]) -> None:
        self._listeners.append(listener)

    def _replace(self, session: ResolvedSession) -> ResolvedSession:
        self._session = session
        for listener in list(self._listeners):
            listener(session)
        return session

    # ------------------------------------------------------------------
    # Activation
    # ------------------------------------------------------------------

    def resolve(
        self, navigation_payload: Optional[NavigationPayload] = None
    ) -> ResolvedSession:
        """Resolve the active platform/config for this activation.

        Without an explicit payload the staged navigation handoff is consumed
        from the store.
        """
        payload = navigation_payload
        if payload is None:
            payload = self.store.consume_navigation()

        session = (
            self._from_navigation(payload)
            or self._from_durable()
            or self._from_cookies()
        )
        if session is None:
            self.needs_configuration = True
            self.log.record(LogKind.INFO, UNCONFIGURED_MESSAGE)
            return self._replace(ResolvedSession.unconfigured())

        self.needs_configuration = not session.is_configured
        self.log.record(LogKind.INFO, f"Connected to {session.platform.display_name}")
        return self._replace(session)

    def _from_navigation(
        self, payload: Optional[NavigationPayload]
    ) -> Optional[ResolvedSession]:
        if payload is None:
            return None
        platform = Platform.parse(payload.platform)
        if platform is None:
            return None

        config = None
        if payload.config is not None:
            config = self._coerce_config(platform, payload.config)
        elif payload.token and platform is Platform.TRELLO:
            # OAuth handoff: key from settings, board chosen later
            config = TrelloConfig(api_key=self.trello_app_key or "", token=payload.token)
        return ResolvedSession(platform=platform, config=config)

    def _coerce_config(
        self, platform: Platform, config: Union[PlatformConfig, Mapping[str, Any]]
    ) -> Optional[PlatformConfig]:
        if isinstance(config, PlatformConfigBase):
            if config.platform != platform:
                logger.warning(
                    "Navigation config is for %s, not %s; ignoring it",
                    config.platform.value,
                    platform.value,
                )
                return None
            return config
        try:
            return config_from_fields(platform, config)
        except ConfigParseError as exc:
            logger.warning("Ignoring navigation config: %s", exc)
            return None

    def _from_durable(self) -> Optional[ResolvedSession]:
        for platform in DURABLE_PLATFORMS:
            try:
                config = self.store.load_durable_config(platform)
            except ConfigParseError as exc:
                logger.error("Error parsing %s config: %s", platform.display_name, exc)
                continue
            if config is None:
                continue
            if not config.is_complete():
                logger.error("Stored %s config is incomplete; skipping", platform.display_name)
                continue
            return ResolvedSession(platform=platform, config=config)
        return None

    def _from_cookies(self) -> Optional[ResolvedSession]:
        cookies = self.store.read_cookie_fields()
        platform = Platform.parse(cookies.get(PLATFORM_COOKIE))
        if platform is None or not has_config_variant(platform):
            return None
        try:
            config = config_from_fields(platform, cookies)
        except ConfigParseError as exc:
            logger.error("Error reading %s cookies: %s", platform.display_name, exc)
            return None
        if not config.is_complete():
            return None
        return ResolvedSession(platform=platform, config=config)

    # ------------------------------------------------------------------
    # User actions
    # ------------------------------------------------------------------

    def save(self, platform: Platform, config: PlatformConfig) -> bool:
        """Persist a complete config and make it the active session.

        An incomplete config (or one for another platform) is rejected
        without touching the session, storage or the log.
        """
        if config is None or config.platform != platform or not config.is_complete():
            return False
        self.store.persist_config(platform, config)
        self.needs_configuration = False
        self._replace(ResolvedSession(platform=platform, config=config))
        self.log.record(
            LogKind.SUCCESS, f"{platform.display_name} configuration saved successfully"
        )
        return True

    def save_fields(self, platform: Platform, values: Mapping[str, Any]) -> bool:
        """``save`` for raw form values."""
        try:
            config = config_from_fields(platform, values)
        except ConfigParseError:
            return False
        return self.save(platform, config)

    def select_board(self, board_id: str) -> bool:
        """Point the active Trello config at ``board_id`` and persist it."""
        session = self._session
        if session.platform is not Platform.TRELLO or not isinstance(
            session.config, TrelloConfig
        ):
            return False
        updated = session.config.model_copy(update={"board_id": board_id})
        if updated.is_complete():
            return self.save(Platform.TRELLO, updated)
        self._replace(ResolvedSession(platform=Platform.TRELLO, config=updated))
        return True

    def select_platform(self, platform: Platform) -> ResolvedSession:
        """Choose a platform, reusing any config already stored for it."""
        config = None
        try:
            if platform in DURABLE_PLATFORMS:
                config = self.store.load_durable_config(platform)
            elif platform is Platform.TRELLO:
                config = config_from_fields(platform, self.store.read_cookie_fields())
        except ConfigParseError as exc:
            logger.error("Error loading saved %s config: %s", platform.display_name, exc)
            config = None

        if config is not None and config.is_complete():
            self.needs_configuration = False
            self.log.record(
                LogKind.INFO, f"Loaded {platform.display_name} config from saved settings"
            )
            return self._replace(ResolvedSession(platform=platform, config=config))

        self.needs_configuration = True
        self.log.record(LogKind.INFO, f"Selected {platform.display_name}")
        return self._replace(ResolvedSession(platform=platform))

    def cancel_configuration(self) -> ResolvedSession:
        """Close the configuration form; an unconfigured platform is dropped."""
        self.needs_configuration = False
        if not self._session.is_configured:
            return self._replace(ResolvedSession.unconfigured())
        return self._session

    def switch_platform(self) -> Route:
        """Forget the active platform so the user can pick another one.

        Legacy cookies are cleared; durable records and the navigation tier
        are kept so returning to the same platform restores it.
        """
        self.store.clear_legacy_cookies()
        self.needs_configuration = False
        self._replace(ResolvedSession.unconfigured())
        self.log.record(LogKind.INFO, "Switched to different app")
        return Route.SELECT_APP
