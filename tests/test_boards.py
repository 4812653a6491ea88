import asyncio
from unittest.mock import Mock

import requests

from agilow.boards import (
    FETCH_FAILED,
    MISSING_CREDENTIALS,
    TRELLO_BOARDS_URL,
    UNKNOWN_ERROR,
    BoardCatalog,
)
from agilow.models.platforms import LinearConfig, Platform, TrelloConfig
from agilow.models.session import NavigationPayload

TRELLO = TrelloConfig(api_key="k", token="t")


def _http(payload=None, text="", error=None):
    http = Mock()
    if error is not None:
        http.get.side_effect = error
        return http
    response = Mock(text=text)
    if isinstance(payload, Exception):
        response.json.side_effect = payload
    else:
        response.json.return_value = payload
    http.get.return_value = response
    return http


def _discover(catalog, config):
    return asyncio.run(catalog.discover(config))


def test_lists_boards(resolver):
    http = _http([{"id": "b1", "name": "Roadmap"}, {"id": 2, "name": "Ops"}, {"name": "no id"}])
    catalog = BoardCatalog(resolver, http=http)

    result = _discover(catalog, TRELLO)

    assert [(b.id, b.name) for b in result.boards] == [("b1", "Roadmap"), ("2", "Ops")]
    assert result.error is None
    http.get.assert_called_once_with(
        TRELLO_BOARDS_URL, params={"key": "k", "token": "t"}, timeout=catalog.timeout
    )


def test_empty_list_is_not_an_error(resolver):
    result = _discover(BoardCatalog(resolver, http=_http([])), TRELLO)
    assert result.boards == ()
    assert not result.failed


def test_non_trello_config_skips_request(resolver):
    http = _http([])
    result = _discover(BoardCatalog(resolver, http=http), LinearConfig(api_key="k", workspace_id="w"))

    assert result.boards == () and result.error is None
    http.get.assert_not_called()


def test_missing_token(resolver):
    result = _discover(BoardCatalog(resolver, http=_http([])), TrelloConfig(api_key="k"))
    assert result.error == MISSING_CREDENTIALS


def test_error_shapes(resolver):
    assert _discover(BoardCatalog(resolver, http=_http({"message": "invalid token"})), TRELLO).error == "invalid token"
    assert _discover(BoardCatalog(resolver, http=_http({"boards": []})), TRELLO).error == UNKNOWN_ERROR
    assert _discover(BoardCatalog(resolver, http=_http(ValueError("no json"), text="invalid key")), TRELLO).error == "invalid key"
    assert _discover(BoardCatalog(resolver, http=_http(ValueError("no json"))), TRELLO).error == FETCH_FAILED


def test_transport_failure(resolver):
    http = _http(error=requests.ConnectionError("offline"))
    result = _discover(BoardCatalog(resolver, http=http), TRELLO)

    assert result.failed
    assert "offline" in result.error
    assert http.get.call_count == 1


def test_refresh_and_select(store, resolver):
    resolver.resolve(NavigationPayload(platform=Platform.TRELLO, token="oauth"))
    catalog = BoardCatalog(resolver, http=_http([{"id": "b1", "name": "Roadmap"}]))

    asyncio.run(catalog.refresh())
    assert catalog.board_name("b1") == "Roadmap"

    assert catalog.select_board("b1")
    assert resolver.session.is_configured
    assert resolver.session.config.board_id == "b1"


def test_refresh_for_other_platform_clears_boards(resolver):
    catalog = BoardCatalog(resolver, http=_http([{"id": "b1", "name": "Roadmap"}]))
    catalog.boards = ("stale",)

    result = asyncio.run(catalog.refresh())

    assert result.boards == () and catalog.boards == ()
