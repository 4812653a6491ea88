"""
Trello authorization handoff.

The authorization itself happens on trello.com; this module only builds the
authorize URL and turns the redirect back into a stored token plus a
navigation payload for the dashboard.
"""
from typing import Mapping, Optional
from urllib.parse import urlencode

from agilow.config import get_settings
from agilow.credentials import TRELLO_TOKEN_KEY, CredentialStore, Tier
from agilow.errors import TrelloAuthError
from agilow.models.platforms import Platform
from agilow.models.session import NavigationPayload
from agilow.navigation import Route
from agilow.utils.logger import get_logger

logger = get_logger(__name__)

TRELLO_AUTH_URL = "https://trello.com/1/authorize"
APP_NAME = "Agilow"


def build_authorize_url(
    app_key: Optional[str] = None, return_url: Optional[str] = None
) -> str:
    """
    Generate the Trello authorization URL.

    Args:
        app_key: Trello app key (or set TRELLO_APP_KEY env var)
        return_url: where Trello redirects with the token (or TRELLO_REDIRECT_URI)

    Returns:
        Authorization URL string
    """
    settings = get_settings()
    app_key = app_key or settings.trello_app_key
    if not app_key:
        raise TrelloAuthError(
            "TRELLO_APP_KEY must be set. Get one from https://trello.com/power-ups/admin"
        )
    params = {
        "expiration": "never",
        "name": APP_NAME,
        "scope": "read,write",
        "response_type": "token",
        "key": app_key,
        "return_url": return_url or settings.trello_redirect_uri,
    }
    return f"{TRELLO_AUTH_URL}?{urlencode(params)}"


def complete_authorization(store: CredentialStore, params: Mapping[str, str]) -> str:
    """
    Handle the redirect back from Trello.

    Args:
        store: credential store to keep the token in
        params: query parameters of the redirect

    Returns:
        The route to continue to (the dashboard)
    """
    token = params.get("token")
    error = params.get("error")
    if token:
        store.write(Tier.DURABLE, TRELLO_TOKEN_KEY, token)
        store.stage_navigation(NavigationPayload(platform=Platform.TRELLO, token=token))
        logger.info("🔐 Stored Trello token")
        return Route.DASHBOARD.value
    if error:
        raise TrelloAuthError(error)
    raise TrelloAuthError("Trello did not return a token")
