import os
import sys

import pytest
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

# Ensure project root is on path
ROOT = os.path.dirname(os.path.dirname(__file__))
if ROOT not in sys.path:
    sys.path.insert(0, ROOT)

from agilow.activity_log import ActivityLog  # noqa: E402
from agilow.credentials import CredentialStore  # noqa: E402
from agilow.errors import GatewayTransportError  # noqa: E402
from agilow.gateway import GatewayReply  # noqa: E402
from agilow.recording.audio import AudioPayload  # noqa: E402
from agilow.resolver import ConfigResolver  # noqa: E402


def make_store() -> CredentialStore:
    engine = create_engine(
        "sqlite://",
        future=True,
        poolclass=StaticPool,
        connect_args={"check_same_thread": False},
    )
    Session = sessionmaker(bind=engine, autoflush=False, autocommit=False)
    return CredentialStore(session_factory=Session)


@pytest.fixture()
def store():
    return make_store()


@pytest.fixture()
def activity_log():
    return ActivityLog()


@pytest.fixture()
def resolver(store, activity_log):
    return ConfigResolver(store, activity_log, trello_app_key="app-key")


class FakeDevice:
    """In-memory stand-in for the microphone."""

    def __init__(self, fail_acquire=None, fail_release=None):
        self.fail_acquire = fail_acquire
        self.fail_release = fail_release
        self.acquired = 0
        self.released = 0
        self.discarded = 0

    async def acquire(self):
        self.acquired += 1
        if self.fail_acquire:
            raise self.fail_acquire

    async def release(self):
        self.released += 1
        if self.fail_release:
            raise self.fail_release
        return AudioPayload(data=b"RIFF0000WAVE", duration_seconds=1.5)

    async def discard(self):
        self.discarded += 1


class FakeGateway:
    """Returns a canned body, or raises a transport error."""

    def __init__(self, body=b"{}", error=None):
        self.body = body
        self.error = error
        self.calls = []

    async def submit(self, audio, platform, config):
        self.calls.append((audio, platform, config))
        if self.error is not None:
            raise GatewayTransportError(self.error)
        return GatewayReply(status_code=200, body=self.body)


@pytest.fixture()
def device():
    return FakeDevice()
