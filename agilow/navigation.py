"""App selection, configure page and logout handoffs.

These helpers stand in for the presentational pages around the dashboard:
they never touch the resolved session directly, they only write the
credential tiers and stage the one-shot navigation payload that the
resolver consumes on the next activation.
"""

from __future__ import annotations

from enum import Enum
from typing import Any, Dict, Mapping, Tuple

from agilow.credentials import DURABLE_KEYS, TRELLO_TOKEN_KEY, CredentialStore, Tier
from agilow.errors import ConfigIncompleteError, ConfigParseError
from agilow.models.platforms import (
    PLATFORM_FIELDS,
    FieldSpec,
    Platform,
    config_from_fields,
    has_config_variant,
    missing_fields,
    parse_config_record,
)
from agilow.models.session import NavigationPayload
from agilow.utils.logger import get_logger

logger = get_logger(__name__)


class Route(str, Enum):
    LANDING = "/"
    SELECT_APP = "/select-app"
    CONFIGURE = "/configure"
    DASHBOARD = "/dashboard"
    TRELLO_AUTH = "/trello-auth"


def configure_path(platform: Platform) -> str:
    return f"{Route.CONFIGURE.value}/{platform.value}"


def configuration_fields(platform: Platform) -> Tuple[FieldSpec, ...]:
    return PLATFORM_FIELDS.get(platform, ())


def select_app(store: CredentialStore, platform: Platform) -> str:
    """Return where picking ``platform`` on the selection page leads.

    Trello with a known OAuth token goes straight to the dashboard with the
    token handed off; without one it starts authorization. Other platforms
    go to their configure page.
    """
    if platform is Platform.TRELLO:
        token = store.read_trello_token()
        if token:
            store.stage_navigation(NavigationPayload(platform=platform, token=token))
            return Route.DASHBOARD.value
        return Route.TRELLO_AUTH.value
    return configure_path(platform)


def prefill(store: CredentialStore, platform: Platform) -> Dict[str, str]:
    """Saved field values for the configure form, empty when none decode."""
    key = DURABLE_KEYS.get(platform)
    if key is None:
        return {}
    raw = store.read(Tier.DURABLE, key)
    if raw is None:
        return {}
    try:
        return parse_config_record(platform, raw).credential_fields()
    except ConfigParseError as exc:
        logger.warning("Could not prefill %s form: %s", platform.display_name, exc)
        return {}


def submit_configuration(
    store: CredentialStore, platform: Platform, values: Mapping[str, Any]
) -> str:
    """Validate and persist the configure page, then hand off to the dashboard.

    Raises ConfigIncompleteError naming the missing field labels; nothing is
    written in that case.
    """
    if not has_config_variant(platform):
        raise ConfigIncompleteError([f"{platform.display_name} is not available yet"])
    missing = missing_fields(platform, values)
    if missing:
        raise ConfigIncompleteError(missing)
    try:
        config = config_from_fields(platform, values)
    except ConfigParseError as exc:
        raise ConfigIncompleteError([str(exc)]) from exc

    store.persist_config(platform, config)
    store.stage_navigation(NavigationPayload(platform=platform, config=config))
    logger.info("Saved %s configuration", platform.display_name)
    return Route.DASHBOARD.value


def logout(store: CredentialStore) -> str:
    """Drop the stored OAuth token and durable configs, back to landing."""
    store.remove(Tier.DURABLE, TRELLO_TOKEN_KEY)
    store.clear_durable_configs()
    return Route.LANDING.value
