"""Credential store over the three persistence tiers.

Tier 1 is the one-shot navigation handoff held in memory. Tier 2 is durable
keyed storage, tier 3 the legacy per-field cookies; both live in the SQL
database behind ``agilow.database``. Callers go through this class (and the
resolver) rather than touching tier internals.
"""
from contextlib import contextmanager
from datetime import timedelta
from enum import IntEnum
from typing import Any, Dict, Iterator, Optional

from sqlalchemy.orm import Session, sessionmaker

from agilow.database import repository
from agilow.database.engine import SessionLocal, init_db
from agilow.database.models import utcnow
from agilow.models.platforms import (
    DURABLE_PLATFORMS,
    Platform,
    PlatformConfig,
    parse_config_record,
)
from agilow.models.session import NavigationPayload
from agilow.utils.logger import get_logger

logger = get_logger(__name__)

# Cookies are written to last 50 years, i.e. effectively forever.
COOKIE_TTL = timedelta(days=365 * 50)

NAVIGATION_KEY = "navigation"
PLATFORM_COOKIE = "platform"
TRELLO_TOKEN_KEY = "trello_token"

DURABLE_KEYS: Dict[Platform, str] = {
    Platform.LINEAR: "linear_config",
    Platform.ASANA: "asana_config",
}

# Every cookie name the app has ever written, marker included.
LEGACY_COOKIE_NAMES = (
    "apiKey",
    "token",
    "boardId",
    "workspaceId",
    "personalAccessToken",
    "projectId",
    PLATFORM_COOKIE,
)


class Tier(IntEnum):
    """Persistence tiers, numbered by decreasing read precedence."""

    NAVIGATION = 1
    DURABLE = 2
    COOKIE = 3


class CredentialStore:
    """Read/write/remove access to the persistence tiers."""

    def __init__(
        self,
        session_factory: Optional[sessionmaker] = None,
        create_tables: bool = True,
    ):
        self._session_factory = session_factory or SessionLocal
        self._navigation: Dict[str, Any] = {}
        if create_tables:
            init_db(self._session_factory.kw.get("bind"))

    @contextmanager
    def _session(self) -> Iterator[Session]:
        db = self._session_factory()
        try:
            yield db
        finally:
            db.close()

    # ------------------------------------------------------------------
    # Generic tier access
    # ------------------------------------------------------------------

    def read(self, tier: Tier, key: str) -> Any:
        """Return the raw value stored under ``key`` or None.

        Navigation values are consumed by the read.
        """
        if tier is Tier.NAVIGATION:
            return self._navigation.pop(key, None)
        with self._session() as db:
            if tier is Tier.DURABLE:
                return repository.get_record(db, key)
            return repository.get_cookie(db, key)

    def write(
        self, tier: Tier, key: str, value: Any, ttl: Optional[timedelta] = None
    ) -> None:
        if tier is Tier.NAVIGATION:
            self._navigation[key] = value
            return
        with self._session() as db:
            if tier is Tier.DURABLE:
                repository.put_record(db, key, value)
            else:
                expires_at = utcnow() + (ttl or COOKIE_TTL)
                repository.set_cookie(db, key, value, expires_at=expires_at)

    def remove(self, tier: Tier, key: str) -> None:
        if tier is Tier.NAVIGATION:
            self._navigation.pop(key, None)
            return
        with self._session() as db:
            if tier is Tier.DURABLE:
                repository.delete_record(db, key)
            else:
                repository.delete_cookies(db, [key])

    # ------------------------------------------------------------------
    # Navigation handoff (tier 1)
    # ------------------------------------------------------------------

    def stage_navigation(self, payload: NavigationPayload) -> None:
        self.write(Tier.NAVIGATION, NAVIGATION_KEY, payload)

    def consume_navigation(self) -> Optional[NavigationPayload]:
        return self.read(Tier.NAVIGATION, NAVIGATION_KEY)

    # ------------------------------------------------------------------
    # Platform config layout
    # ------------------------------------------------------------------

    def load_durable_config(self, platform: Platform) -> Optional[PlatformConfig]:
        """Decode the durable record for ``platform``.

        Returns None when nothing is stored; raises ConfigParseError when the
        stored record cannot be decoded.
        """
        key = DURABLE_KEYS.get(platform)
        if key is None:
            return None
        raw = self.read(Tier.DURABLE, key)
        if raw is None:
            return None
        return parse_config_record(platform, raw)

    def read_cookie_fields(self) -> Dict[str, str]:
        """All live legacy cookies (credential fields and marker)."""
        with self._session() as db:
            return repository.get_cookies(db, LEGACY_COOKIE_NAMES)

    def persist_config(self, platform: Platform, config: PlatformConfig) -> None:
        """Write a complete config to every tier that keeps it.

        The durable record is written for platforms that have one; cookie
        fields and the marker are always written for older clients.
        """
        key = DURABLE_KEYS.get(platform)
        if key is not None:
            self.write(Tier.DURABLE, key, config.to_record())
        expires_at = utcnow() + COOKIE_TTL
        with self._session() as db:
            for name, value in config.credential_fields().items():
                repository.set_cookie(db, name, value, expires_at=expires_at)
            repository.set_cookie(db, PLATFORM_COOKIE, platform.value, expires_at=expires_at)
        logger.debug("Persisted %s config", platform.value)

    def clear_legacy_cookies(self) -> int:
        """Delete every tier-3 key. Tiers 1 and 2 are left untouched."""
        with self._session() as db:
            removed = repository.delete_cookies(db, LEGACY_COOKIE_NAMES)
        logger.debug("Cleared %d legacy cookies", removed)
        return removed

    def clear_durable_configs(self) -> None:
        for platform in DURABLE_PLATFORMS:
            self.remove(Tier.DURABLE, DURABLE_KEYS[platform])

    def read_trello_token(self) -> Optional[str]:
        """OAuth token from the durable tier, falling back to the cookie."""
        return self.read(Tier.DURABLE, TRELLO_TOKEN_KEY) or self.read(Tier.COOKIE, "token")
