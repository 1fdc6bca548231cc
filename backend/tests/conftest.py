"""
Pytest Configuration Fixtures

Sets up test environment with isolated in-memory database and a fake
audio engine shared by player and integration tests.
"""
import os

# Set test environment variables BEFORE importing audioshelf modules
# This ensures the config module picks up the admin secret
os.environ.setdefault("ADMIN_PASSWORD", "test_admin_password")
os.environ.setdefault("S3_ACCESS_KEY_ID", "test_access_key")
os.environ.setdefault("S3_SECRET_ACCESS_KEY", "test_secret_key")

from unittest.mock import MagicMock

import pytest
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from audioshelf.models.base import Base
from audioshelf.player.engine import AudioEngine, EngineListener
from audioshelf.services.storage_service import ObjectStorage


@pytest.fixture(scope="function")
def test_engine():
    """
    Create an isolated in-memory SQLite engine for testing.

    Each test function gets a fresh database. StaticPool keeps the single
    connection alive across the threads TestClient uses.
    """
    engine = create_engine(
        "sqlite:///:memory:",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    yield engine
    engine.dispose()


@pytest.fixture(scope="function")
def test_session(test_engine):
    """
    Create a database session for testing.

    All tables are created before the test and dropped after.
    """
    Base.metadata.create_all(test_engine)

    SessionFactory = sessionmaker(bind=test_engine, expire_on_commit=False)

    session = SessionFactory()
    yield session

    session.close()
    Base.metadata.drop_all(test_engine)


# ==================== Object Storage ====================


def _fake_presign(ClientMethod, Params, ExpiresIn):
    return f"https://storage.test/{Params['Key']}?op={ClientMethod}&expires={ExpiresIn}"


@pytest.fixture
def s3_client():
    """MagicMock standing in for the boto3 S3 client."""
    client = MagicMock()
    client.generate_presigned_url.side_effect = _fake_presign
    return client


@pytest.fixture
def storage(s3_client) -> ObjectStorage:
    """ObjectStorage backed by the mocked S3 client."""
    return ObjectStorage(client=s3_client, bucket="test-bucket")


# ==================== Audio Engine ====================


class FakeEngine(AudioEngine):
    """
    In-memory engine. Commands change state silently; the emit_* helpers
    simulate changes the engine makes on its own.
    """

    def __init__(self):
        self.listener: EngineListener = None
        self.source = None
        self._position = 0.0
        self._paused = True
        self.calls = []

    @property
    def position(self) -> float:
        return self._position

    @property
    def paused(self) -> bool:
        return self._paused

    def attach(self, listener):
        self.listener = listener

    def load(self, url, mime_type, start_position=0.0):
        self.calls.append(("load", url, start_position))
        self.source = url
        self._position = start_position
        self._paused = True

    def play(self):
        self.calls.append(("play",))
        self._paused = False

    def pause(self):
        self.calls.append(("pause",))
        self._paused = True

    def seek(self, position):
        self.calls.append(("seek", position))
        self._position = position

    def stop(self):
        self.calls.append(("stop",))
        self.source = None
        self._paused = True

    # Test helpers

    def advance(self, seconds: float):
        self._position += seconds

    def emit_pause(self):
        self._paused = True
        self.listener.on_engine_pause()

    def emit_play(self):
        self._paused = False
        self.listener.on_engine_play()

    def emit_ended(self):
        self.listener.on_engine_ended()

    def loads(self):
        return [call for call in self.calls if call[0] == "load"]


@pytest.fixture
def fake_engine() -> FakeEngine:
    return FakeEngine()
