import asyncio
import json
from unittest.mock import Mock

import pytest
import requests

from agilow.errors import GatewayTransportError, ResponseParseError
from agilow.gateway import BackendGateway, parse_gateway_response
from agilow.models.platforms import AsanaConfig, Platform
from agilow.recording.audio import AudioPayload

AUDIO = AudioPayload(data=b"RIFF....WAVE")


def test_submit_posts_multipart_form():
    http = Mock()
    http.post.return_value = Mock(status_code=200, content=b'{"results": []}')
    gateway = BackendGateway(base_url="http://backend/api/voice", timeout=5, http=http)
    config = AsanaConfig(personal_access_token="pat", project_id="p1")

    reply = asyncio.run(gateway.submit(AUDIO, Platform.ASANA, config))

    assert reply.body == b'{"results": []}'
    args, kwargs = http.post.call_args
    assert args == ("http://backend/api/voice",)
    assert kwargs["files"]["audio"] == ("recording.wav", AUDIO.data, "audio/wav")
    assert kwargs["data"]["platform"] == "asana"
    assert json.loads(kwargs["data"]["config"]) == {"personalAccessToken": "pat", "projectId": "p1"}
    assert kwargs["timeout"] == 5


def test_form_omits_absent_fields():
    assert BackendGateway(base_url="http://x", http=Mock()).build_form(None, None) == {}


def test_transport_error_is_wrapped():
    http = Mock()
    http.post.side_effect = requests.ConnectionError("connection refused")
    gateway = BackendGateway(base_url="http://x", http=http)

    with pytest.raises(GatewayTransportError, match="connection refused"):
        asyncio.run(gateway.submit(AUDIO, None, None))


def test_non_2xx_with_json_body_is_still_a_reply():
    http = Mock()
    http.post.return_value = Mock(status_code=500, content=b'{"results": [{"success": false, "error": "boom"}]}')

    reply = asyncio.run(BackendGateway(base_url="http://x", http=http).submit(AUDIO, None, None))

    assert reply.status_code == 500
    assert parse_gateway_response(reply.body).results[0].error == "boom"


class TestParse:
    def test_not_json_raises(self):
        with pytest.raises(ResponseParseError):
            parse_gateway_response(b"Internal Server Error")

    def test_non_object_is_empty(self):
        response = parse_gateway_response(b"[1, 2]")
        assert response.transcript is None
        assert response.results == []

    def test_lenient_fields(self):
        response = parse_gateway_response(
            json.dumps({"transcript": "", "results": [{"success": 1, "task": {"nested": True}}, 7]}).encode()
        )
        assert response.transcript is None
        assert len(response.results) == 1
        assert response.results[0].success is True
        assert response.results[0].task is None

    def test_results_not_a_list(self):
        assert parse_gateway_response(b'{"transcript": "hi", "results": "none"}').results == []
