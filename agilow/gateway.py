"""
Backend gateway client.

Submits captured audio together with the active platform and config, and
hands back the raw reply. Decoding the body is a separate step
(``parse_gateway_response``) so that "could not reach the backend" and
"backend replied with garbage" stay distinct failures.
"""
import asyncio
import json
from dataclasses import dataclass
from typing import Optional

import requests
from pydantic import ValidationError

from agilow.config import get_settings
from agilow.errors import GatewayTransportError, ResponseParseError
from agilow.models.platforms import Platform, PlatformConfig
from agilow.models.schemas import GatewayResponse
from agilow.recording.audio import AudioPayload
from agilow.utils.logger import get_logger

logger = get_logger(__name__)


@dataclass(frozen=True)
class GatewayReply:
    status_code: int
    body: bytes


class BackendGateway:
    """HTTP client for the voice-processing backend."""

    def __init__(
        self,
        base_url: Optional[str] = None,
        timeout: Optional[int] = None,
        http=None,
    ):
        settings = get_settings()
        self.base_url = base_url or settings.backend_url
        self.timeout = timeout or settings.request_timeout
        self.http = http or requests

    def build_form(
        self, platform: Optional[Platform], config: Optional[PlatformConfig]
    ) -> dict:
        data = {}
        if platform is not None:
            data["platform"] = platform.value
        if config is not None:
            data["config"] = json.dumps(config.credential_fields())
        return data

    def _post(self, audio: AudioPayload, data: dict):
        files = {"audio": (audio.filename, audio.data, audio.mime_type)}
        return self.http.post(self.base_url, files=files, data=data, timeout=self.timeout)

    async def submit(
        self,
        audio: AudioPayload,
        platform: Optional[Platform],
        config: Optional[PlatformConfig],
    ) -> GatewayReply:
        """
        Send one recording to the backend.

        Raises:
            GatewayTransportError: the request could not complete at all
        """
        data = self.build_form(platform, config)
        logger.info(
            "Sending %d bytes of audio (%s) to %s",
            len(audio.data),
            platform.value if platform else "no platform",
            self.base_url,
        )
        try:
            response = await asyncio.to_thread(self._post, audio, data)
        except requests.RequestException as exc:
            raise GatewayTransportError(str(exc) or exc.__class__.__name__) from exc
        return GatewayReply(status_code=response.status_code, body=response.content)


def parse_gateway_response(body: bytes) -> GatewayResponse:
    """
    Decode a gateway body.

    A JSON value that is not an object decodes to an empty response; only a
    body that is not JSON at all raises ResponseParseError.
    """
    try:
        data = json.loads(body)
    except (TypeError, ValueError) as exc:
        raise ResponseParseError("Failed to parse backend response as JSON") from exc
    if not isinstance(data, dict):
        return GatewayResponse()
    try:
        return GatewayResponse.model_validate(data)
    except ValidationError as exc:
        raise ResponseParseError(f"Unexpected backend response: {exc}") from exc
