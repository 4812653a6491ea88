"""Client factories for the GUI layer."""

from __future__ import annotations

from typing import Optional

from agilow.credentials import CredentialStore
from agilow.gateway import BackendGateway
from agilow.recording.audio import SoundDeviceRecorder


def get_credential_store(database_url: Optional[str] = None) -> CredentialStore:
    """Return a credential store on the configured (or given) database."""

    if database_url is None:
        return CredentialStore()

    from agilow.database.engine import get_engine, make_session_factory

    return CredentialStore(make_session_factory(get_engine(database_url)))


def get_gateway() -> BackendGateway:
    """Return the backend gateway client."""

    return BackendGateway()


def get_recorder() -> SoundDeviceRecorder:
    """Return the microphone recorder.

    sounddevice is only imported when recording starts, so this is safe on
    machines without PortAudio.
    """

    return SoundDeviceRecorder()
