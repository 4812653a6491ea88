"""
Board discovery for the one platform that supports it (Trello).

Discovery is advisory: it only populates the board picker. A failed fetch
is reported through ``DiscoveryResult.error`` so the UI can tell "no boards"
apart from "could not load boards"; it is never retried automatically.
"""
import asyncio
from dataclasses import dataclass
from typing import Optional, Tuple

import requests
from pydantic import ValidationError

from agilow.config import get_settings
from agilow.models.platforms import Platform, PlatformConfig, TrelloConfig
from agilow.models.schemas import BoardSummary
from agilow.utils.logger import get_logger

TRELLO_BOARDS_URL = "https://api.trello.com/1/members/me/boards"

MISSING_CREDENTIALS = "Missing Trello API key or token. Please re-authorize."
UNKNOWN_ERROR = "Unknown error fetching boards"
FETCH_FAILED = "Failed to fetch Trello boards"

logger = get_logger(__name__)


@dataclass(frozen=True)
class DiscoveryResult:
    boards: Tuple[BoardSummary, ...] = ()
    error: Optional[str] = None

    @property
    def failed(self) -> bool:
        return self.error is not None


class BoardCatalog:
    """
    Lists the user's Trello boards and applies the user's choice.

    Usage:
        catalog = BoardCatalog(resolver)
        await catalog.refresh()
        catalog.select_board(catalog.boards[0].id)
    """

    def __init__(self, resolver, timeout: Optional[int] = None, http=None):
        self.resolver = resolver
        self.timeout = timeout or get_settings().request_timeout
        self.http = http or requests
        self.boards: Tuple[BoardSummary, ...] = ()
        self.error: Optional[str] = None

    async def discover(self, config: Optional[PlatformConfig]) -> DiscoveryResult:
        """Fetch the boards visible to ``config``; empty for other platforms."""
        if not isinstance(config, TrelloConfig):
            return DiscoveryResult()
        if not config.api_key or not config.token:
            return DiscoveryResult(error=MISSING_CREDENTIALS)

        params = {"key": config.api_key, "token": config.token}
        try:
            response = await asyncio.to_thread(
                self.http.get, TRELLO_BOARDS_URL, params=params, timeout=self.timeout
            )
        except requests.RequestException as exc:
            logger.error("Error fetching Trello boards: %s", exc)
            return DiscoveryResult(error=str(exc) or FETCH_FAILED)

        try:
            payload = response.json()
        except ValueError:
            # Trello answers auth failures with plain text, e.g. "invalid key"
            text = (getattr(response, "text", "") or "").strip()
            logger.error("Trello boards response is not JSON: %s", text[:200])
            return DiscoveryResult(error=text or FETCH_FAILED)

        if isinstance(payload, list):
            boards = []
            for item in payload:
                if not isinstance(item, dict) or not item.get("id"):
                    continue
                try:
                    boards.append(BoardSummary.model_validate(item))
                except ValidationError as exc:
                    logger.warning("Skipping malformed board entry: %s", exc)
            logger.info("Fetched %d Trello boards", len(boards))
            return DiscoveryResult(boards=tuple(boards))
        if isinstance(payload, dict) and payload.get("message"):
            return DiscoveryResult(error=str(payload["message"]))
        return DiscoveryResult(error=UNKNOWN_ERROR)

    async def refresh(self) -> DiscoveryResult:
        """Discover for the resolver's current session and replace the cached list."""
        session = self.resolver.session
        if session.platform is not Platform.TRELLO:
            result = DiscoveryResult()
        else:
            result = await self.discover(session.config)
        self.boards = result.boards
        self.error = result.error
        return result

    def select_board(self, board_id: str) -> bool:
        return self.resolver.select_board(board_id)

    def board_name(self, board_id: Optional[str]) -> Optional[str]:
        for board in self.boards:
            if board.id == board_id:
                return board.name
        return board_id
