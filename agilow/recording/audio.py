"""Audio capture device.

``AudioDevice`` is the contract the recording session relies on: acquire
the input, then either release it (finalising the captured audio) or
discard it. ``SoundDeviceRecorder`` implements it on top of PortAudio via
``sounddevice`` and encodes 16-bit PCM WAV in memory.
"""

from __future__ import annotations

import asyncio
import io
import time
import wave
from dataclasses import dataclass
from typing import List, Optional, Protocol

from agilow.config import get_settings
from agilow.errors import DeviceAcquisitionError
from agilow.utils.logger import get_logger

logger = get_logger(__name__)


@dataclass(frozen=True)
class AudioPayload:
    """Finalised recording ready to upload."""

    data: bytes
    mime_type: str = "audio/wav"
    filename: str = "recording.wav"
    duration_seconds: float = 0.0


class AudioDevice(Protocol):
    """Exclusive handle on the capture device."""

    async def acquire(self) -> None: ...
    async def release(self) -> AudioPayload: ...
    async def discard(self) -> None: ...


class SoundDeviceRecorder:
    """Microphone capture through ``sounddevice`` (optional dependency)."""

    def __init__(
        self,
        sample_rate: Optional[int] = None,
        channels: int = 1,
        device: Optional[str] = None,
    ):
        self.sample_rate = sample_rate or get_settings().sample_rate
        self.channels = channels
        self.device = device
        self._stream = None
        self._frames: List[bytes] = []
        self._started_at: Optional[float] = None

    async def acquire(self) -> None:
        if self._stream is not None:
            raise DeviceAcquisitionError("Microphone is already in use")
        try:
            import sounddevice as sd
        except (ImportError, OSError) as exc:
            raise DeviceAcquisitionError(
                f"Audio capture unavailable ({exc}). Install with: pip install sounddevice"
            ) from exc

        self._frames = []

        def _callback(indata, frames, time_info, status):
            if status:
                logger.debug("Input stream status: %s", status)
            self._frames.append(bytes(indata))

        try:
            stream = sd.RawInputStream(
                samplerate=self.sample_rate,
                channels=self.channels,
                dtype="int16",
                device=self.device,
                callback=_callback,
            )
        except (sd.PortAudioError, ValueError) as exc:
            raise DeviceAcquisitionError(str(exc)) from exc

        try:
            await asyncio.to_thread(stream.start)
        except (sd.PortAudioError, ValueError) as exc:
            # opened but not started: close it here, discard() cannot see it
            await asyncio.to_thread(stream.close)
            raise DeviceAcquisitionError(str(exc)) from exc

        self._stream = stream
        self._started_at = time.monotonic()
        logger.info("🎙️ Microphone acquired (%d Hz)", self.sample_rate)

    async def release(self) -> AudioPayload:
        stream, self._stream = self._stream, None
        if stream is None:
            raise DeviceAcquisitionError("Microphone was not acquired")
        await asyncio.to_thread(self._close, stream)
        duration = time.monotonic() - (self._started_at or time.monotonic())
        payload = AudioPayload(data=self._encode_wav(), duration_seconds=duration)
        self._frames = []
        logger.info("Microphone released after %.1fs", duration)
        return payload

    async def discard(self) -> None:
        stream, self._stream = self._stream, None
        self._frames = []
        if stream is not None:
            await asyncio.to_thread(self._close, stream)

    @staticmethod
    def _close(stream) -> None:
        try:
            stream.stop()
        finally:
            stream.close()

    def _encode_wav(self) -> bytes:
        buffer = io.BytesIO()
        with wave.open(buffer, "wb") as wav:
            wav.setnchannels(self.channels)
            wav.setsampwidth(2)
            wav.setframerate(self.sample_rate)
            wav.writeframes(b"".join(self._frames))
        return buffer.getvalue()
