import asyncio
import json

from agilow.activity_log import LogKind
from agilow.errors import DeviceAcquisitionError
from agilow.models.platforms import LinearConfig, Platform
from agilow.models.session import RecordingMode, RecordingState
from agilow.recording.session import DEFAULT_RESPONSE, RecordingSession, describe_failure, describe_success
from agilow.models.schemas import OperationResult
from conftest import FakeDevice, FakeGateway


def _configured(resolver):
    resolver.save(Platform.LINEAR, LinearConfig(api_key="k1", workspace_id="w1"))


def _make(resolver, activity_log, device=None, gateway=None):
    return RecordingSession(
        resolver,
        device or FakeDevice(),
        gateway or FakeGateway(),
        activity_log,
        tick_seconds=0.01,
    )


def _round_trip(session):
    async def scenario():
        assert await session.start()
        await session.stop()

    asyncio.run(scenario())


def _kinds(activity_log, kind):
    return [e for e in activity_log.render() if e.kind is kind]


def test_start_refused_when_unconfigured(resolver, activity_log):
    device = FakeDevice()
    session = _make(resolver, activity_log, device=device)

    assert asyncio.run(session.start()) is False
    assert session.state is RecordingState.IDLE
    assert device.acquired == 0
    assert len(activity_log) == 0


def test_task_created_reply(resolver, activity_log):
    _configured(resolver)
    body = json.dumps({"results": [{"success": True, "operation": "create", "task": "Buy milk"}]})
    gateway = FakeGateway(body=body.encode())
    session = _make(resolver, activity_log, gateway=gateway)

    _round_trip(session)

    tasks = _kinds(activity_log, LogKind.TASK)
    assert [e.message for e in tasks] == ["Task created: Buy milk"]
    assert dict(tasks[0].details) == {"task_name": "Buy milk", "task_status": "create"}
    assert session.state is RecordingState.IDLE
    _, platform, config = gateway.calls[0]
    assert platform is Platform.LINEAR
    assert config == resolver.session.config


def test_transcript_and_mixed_results(resolver, activity_log):
    _configured(resolver)
    body = {
        "transcript": "add buy milk and close the deploy ticket",
        "results": [
            {"success": True, "operation": "update", "task": "Deploy"},
            {"success": False, "task": "Groceries", "error": "No such list"},
            "garbage",
        ],
    }
    session = _make(resolver, activity_log, gateway=FakeGateway(body=json.dumps(body).encode()))

    _round_trip(session)

    transcribed = _kinds(activity_log, LogKind.TRANSCRIBED)
    assert transcribed[0].message == "Transcribed: add buy milk and close the deploy ticket"
    assert session.latest_response == body["transcript"]
    assert [e.message for e in _kinds(activity_log, LogKind.TASK)] == ["Task update: Deploy"]
    assert [e.message for e in _kinds(activity_log, LogKind.ERROR)] == [
        "Task operation failed for: Groceries - No such list"
    ]


def test_unparseable_body(resolver, activity_log):
    _configured(resolver)
    session = _make(resolver, activity_log, gateway=FakeGateway(body=b"<html>oops</html>"))

    _round_trip(session)

    errors = _kinds(activity_log, LogKind.ERROR)
    assert [e.message for e in errors] == ["Failed to parse backend response as JSON"]
    assert not _kinds(activity_log, LogKind.TRANSCRIBED)
    assert not _kinds(activity_log, LogKind.TASK)
    assert session.state is RecordingState.IDLE
    assert session.latest_response == DEFAULT_RESPONSE


def test_transport_failure(resolver, activity_log):
    _configured(resolver)
    session = _make(resolver, activity_log, gateway=FakeGateway(error="connection refused"))

    _round_trip(session)

    assert _kinds(activity_log, LogKind.ERROR)[0].message == "Failed to send audio: connection refused"
    assert session.state is RecordingState.IDLE


def test_processing_logs_in_order(resolver, activity_log):
    _configured(resolver)
    session = _make(resolver, activity_log)

    _round_trip(session)

    messages = [e.message for e in reversed(activity_log.render())]
    assert messages[-3:] == ["Listening...", "Processing...", "Voice received"]
    assert _kinds(activity_log, LogKind.VOICE)


def test_device_failure_keeps_idle(resolver, activity_log):
    _configured(resolver)
    device = FakeDevice(fail_acquire=DeviceAcquisitionError("Permission denied"))
    session = _make(resolver, activity_log, device=device)

    assert asyncio.run(session.start()) is False

    assert session.state is RecordingState.IDLE
    assert device.discarded == 1
    assert activity_log.render()[0].message == "Failed to start recording: Permission denied"


def test_release_failure_returns_to_idle(resolver, activity_log):
    _configured(resolver)
    gateway = FakeGateway()
    device = FakeDevice(fail_release=RuntimeError("stream lost"))
    session = _make(resolver, activity_log, device=device, gateway=gateway)

    _round_trip(session)

    assert session.state is RecordingState.IDLE
    assert activity_log.render()[0].message == "Failed to stop recording: stream lost"
    assert gateway.calls == []


def test_tick_counts_while_recording_and_stops_after(resolver, activity_log):
    _configured(resolver)
    session = _make(resolver, activity_log)
    states = []
    session.subscribe(lambda s: states.append(s.state))

    async def scenario():
        await session.start()
        await asyncio.sleep(0.1)
        elapsed = session.elapsed_seconds
        await session.stop()
        return elapsed

    assert asyncio.run(scenario()) >= 1
    assert session.elapsed_seconds == 0
    assert states[0] is RecordingState.RECORDING
    assert RecordingState.PROCESSING in states
    assert states[-1] is RecordingState.IDLE


def test_stop_when_idle_is_refused(resolver, activity_log):
    _configured(resolver)
    session = _make(resolver, activity_log)

    assert asyncio.run(session.stop()) is False


def test_toggle_and_mode(resolver, activity_log):
    _configured(resolver)
    session = _make(resolver, activity_log)

    async def scenario():
        await session.toggle()
        recording = session.state
        await session.toggle()
        return recording

    assert asyncio.run(scenario()) is RecordingState.RECORDING
    assert session.state is RecordingState.IDLE
    assert session.toggle_mode() is RecordingMode.CONTINUOUS
    assert session.toggle_mode() is RecordingMode.BATCH


def test_describe_messages():
    assert describe_success(OperationResult(success=True, task="X")) == "Task completed: X"
    assert describe_success(OperationResult(success=True, operation="delete")) == "Task delete"
    assert describe_failure(OperationResult(success=False)) == "Task operation failed"


class SlowDevice(FakeDevice):
    async def acquire(self):
        self.acquired += 1
        await asyncio.sleep(0.01)


def test_start_while_starting_is_refused(resolver, activity_log):
    _configured(resolver)
    device = SlowDevice()
    session = _make(resolver, activity_log, device=device)

    async def scenario():
        results = await asyncio.gather(session.start(), session.start())
        await session.stop()
        return results

    assert sorted(asyncio.run(scenario())) == [False, True]
    assert device.acquired == 1
    assert session.state is RecordingState.IDLE


class BrokenGateway(FakeGateway):
    async def submit(self, audio, platform, config):
        raise RuntimeError("boom")


def test_unexpected_gateway_error_is_logged(resolver, activity_log):
    _configured(resolver)
    session = _make(resolver, activity_log, gateway=BrokenGateway())

    _round_trip(session)

    assert activity_log.render()[0].message == "Failed to send audio: boom"
    assert session.state is RecordingState.IDLE
