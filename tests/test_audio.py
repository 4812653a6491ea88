import asyncio
import io
import sys
import types
import wave

import pytest

from agilow.errors import DeviceAcquisitionError
from agilow.recording.audio import SoundDeviceRecorder


class PortAudioError(Exception):
    pass


def _fake_sounddevice(fail_start=None):
    """A stand-in for the sounddevice module that records stream calls."""
    streams = []

    class RawInputStream:
        def __init__(self, callback=None, **kwargs):
            self.callback = callback
            self.kwargs = kwargs
            self.calls = []
            streams.append(self)

        def start(self):
            self.calls.append("start")
            if fail_start is not None:
                raise fail_start
            self.callback(b"\x01\x00\x02\x00", 2, None, None)

        def stop(self):
            self.calls.append("stop")

        def close(self):
            self.calls.append("close")

    module = types.SimpleNamespace(PortAudioError=PortAudioError, RawInputStream=RawInputStream)
    return module, streams


def test_failed_start_closes_stream(monkeypatch):
    module, streams = _fake_sounddevice(fail_start=PortAudioError("device busy"))
    monkeypatch.setitem(sys.modules, "sounddevice", module)
    recorder = SoundDeviceRecorder(sample_rate=16000)

    with pytest.raises(DeviceAcquisitionError, match="device busy"):
        asyncio.run(recorder.acquire())
    asyncio.run(recorder.discard())

    assert streams[0].calls == ["start", "close"]


def test_acquire_then_release_encodes_wav(monkeypatch):
    module, streams = _fake_sounddevice()
    monkeypatch.setitem(sys.modules, "sounddevice", module)
    recorder = SoundDeviceRecorder(sample_rate=16000)

    async def scenario():
        await recorder.acquire()
        return await recorder.release()

    payload = asyncio.run(scenario())

    assert streams[0].calls == ["start", "stop", "close"]
    assert streams[0].kwargs["dtype"] == "int16"
    with wave.open(io.BytesIO(payload.data)) as wav:
        assert wav.getframerate() == 16000
        assert wav.readframes(2) == b"\x01\x00\x02\x00"


def test_second_acquire_is_refused(monkeypatch):
    module, _ = _fake_sounddevice()
    monkeypatch.setitem(sys.modules, "sounddevice", module)
    recorder = SoundDeviceRecorder(sample_rate=16000)

    async def scenario():
        await recorder.acquire()
        try:
            await recorder.acquire()
        finally:
            await recorder.discard()

    with pytest.raises(DeviceAcquisitionError, match="already in use"):
        asyncio.run(scenario())
