"""Recording session state machine.

    idle --start--> recording --stop--> processing --(reply handled)--> idle

``start`` needs a configured session and a free device. ``stop`` releases
the device, then submits the audio with the resolved config as it is at
that moment. Every failure is turned into an activity log entry and the
machine always settles back in ``idle``.

The elapsed-time tick belongs to the active capture: it is created on
entering ``recording`` and cancelled on every way out of it.
"""

from __future__ import annotations

import asyncio
import contextlib
from dataclasses import dataclass
from typing import Callable, List, Optional

from agilow.activity_log import ActivityLog, LogKind
from agilow.errors import GatewayTransportError, ResponseParseError
from agilow.gateway import BackendGateway, parse_gateway_response
from agilow.models.schemas import GatewayResponse, OperationResult
from agilow.models.session import RecordingMode, RecordingState
from agilow.recording.audio import AudioDevice, AudioPayload
from agilow.utils.logger import get_logger

logger = get_logger(__name__)

DEFAULT_RESPONSE = "How can I help you today?"
TICK_SECONDS = 1.0


@dataclass
class _ActiveCapture:
    """State that exists only while recording."""

    ticker: asyncio.Task
    elapsed: int = 0


class RecordingSession:
    """Owns the recording state and the capture device while recording."""

    def __init__(
        self,
        resolver,
        device: AudioDevice,
        gateway: BackendGateway,
        activity_log: ActivityLog,
        tick_seconds: float = TICK_SECONDS,
    ):
        self.resolver = resolver
        self.device = device
        self.gateway = gateway
        self.log = activity_log
        self.tick_seconds = tick_seconds
        self.mode = RecordingMode.BATCH
        self.latest_response = DEFAULT_RESPONSE
        self._state = RecordingState.IDLE
        self._capture: Optional[_ActiveCapture] = None
        self._busy = False
        self._listeners: List[Callable[["RecordingSession"], None]] = []

    @property
    def state(self) -> RecordingState:
        return self._state

    @property
    def elapsed_seconds(self) -> int:
        return self._capture.elapsed if self._capture is not None else 0

    def subscribe(self, listener: Callable[["RecordingSession"], None]) -> None:
        self._listeners.append(listener)

    def _notify(self) -> None:
        for listener in list(self._listeners):
            listener(self)

    def _set_state(self, state: RecordingState) -> None:
        self._state = state
        self._notify()

    def toggle_mode(self) -> RecordingMode:
        self.mode = (
            RecordingMode.CONTINUOUS
            if self.mode is RecordingMode.BATCH
            else RecordingMode.BATCH
        )
        self._notify()
        return self.mode

    # ------------------------------------------------------------------
    # Elapsed-time tick
    # ------------------------------------------------------------------

    async def _tick(self) -> None:
        while True:
            await asyncio.sleep(self.tick_seconds)
            capture = self._capture
            if capture is None or self._state is not RecordingState.RECORDING:
                return
            capture.elapsed += 1
            self._notify()

    async def _leave_recording(self) -> None:
        capture, self._capture = self._capture, None
        if capture is None:
            return
        capture.ticker.cancel()
        with contextlib.suppress(asyncio.CancelledError):
            await capture.ticker

    # ------------------------------------------------------------------
    # Transitions
    # ------------------------------------------------------------------

    async def start(self) -> bool:
        """idle -> recording. Returns False when the action is refused or fails."""
        if self._state is not RecordingState.IDLE or self._busy:
            return False
        if not self.resolver.session.is_configured:
            logger.debug("Start refused: no configured platform")
            return False

        self._busy = True
        try:
            try:
                await self.device.acquire()
            except Exception as exc:
                await self._discard_device()
                self.log.record(LogKind.ERROR, f"Failed to start recording: {exc}")
                return False

            self._capture = _ActiveCapture(ticker=asyncio.create_task(self._tick()))
            self._set_state(RecordingState.RECORDING)
            self.log.record(LogKind.INFO, "Listening...")
            return True
        finally:
            self._busy = False

    async def stop(self) -> bool:
        """recording -> processing -> idle. Returns False when not recording."""
        if self._state is not RecordingState.RECORDING or self._busy:
            return False

        self._busy = True
        try:
            await self._leave_recording()
            try:
                audio = await self.device.release()
            except Exception as exc:
                await self._discard_device()
                self.log.record(LogKind.ERROR, f"Failed to stop recording: {exc}")
                self._set_state(RecordingState.IDLE)
                return True

            self._set_state(RecordingState.PROCESSING)
            self.log.record(LogKind.SUCCESS, "Processing...")
            self.log.record(LogKind.VOICE, "Voice received")
            await self._process(audio)
            return True
        finally:
            if self._state is not RecordingState.IDLE:
                self._set_state(RecordingState.IDLE)
            self._busy = False

    async def toggle(self) -> bool:
        """Single-button control: start when idle, stop when recording."""
        if self._state is RecordingState.IDLE:
            return await self.start()
        return await self.stop()

    async def _discard_device(self) -> None:
        try:
            await self.device.discard()
        except Exception as exc:
            logger.warning("Could not release audio device: %s", exc)

    # ------------------------------------------------------------------
    # Gateway round-trip
    # ------------------------------------------------------------------

    async def _process(self, audio: AudioPayload) -> None:
        session = self.resolver.session
        try:
            reply = await self.gateway.submit(audio, session.platform, session.config)
        except GatewayTransportError as exc:
            self.log.record(LogKind.ERROR, f"Failed to send audio: {exc}")
            return
        except Exception as exc:
            logger.exception("Gateway submit failed unexpectedly")
            self.log.record(LogKind.ERROR, f"Failed to send audio: {exc}")
            return

        try:
            response = parse_gateway_response(reply.body)
        except ResponseParseError:
            self.log.record(LogKind.ERROR, "Failed to parse backend response as JSON")
            return

        self._report(response)

    def _report(self, response: GatewayResponse) -> None:
        if response.transcript:
            self.log.record(
                LogKind.TRANSCRIBED,
                f"Transcribed: {response.transcript}",
                {"transcription": response.transcript},
            )
            self.latest_response = response.transcript

        for result in response.results:
            if result.success:
                self.log.record(
                    LogKind.TASK,
                    describe_success(result),
                    {"task_name": result.task, "task_status": result.operation},
                )
            else:
                self.log.record(LogKind.ERROR, describe_failure(result))


def describe_success(result: OperationResult) -> str:
    verb = "created" if result.operation == "create" else (result.operation or "completed")
    message = f"Task {verb}"
    if result.task:
        message += f": {result.task}"
    return message


def describe_failure(result: OperationResult) -> str:
    message = "Task operation failed"
    if result.task:
        message += f" for: {result.task}"
    if result.error:
        message += f" - {result.error}"
    return message
