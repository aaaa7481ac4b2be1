import httpx
import pytest
from fastapi.testclient import TestClient

from meetsync.clients.meeting_client import MeetingClient
from meetsync.config import Settings
from meetsync.main import create_app
from meetsync.services import Registries
from meetsync.stores import memory_stores

TTL_MS = 10_000


class FakeClock:
    """Epoch-ms clock the test moves by hand."""

    def __init__(self, start: int = 1_700_000_000_000) -> None:
        self.now = start

    def __call__(self) -> int:
        return self.now

    def advance(self, ms: int) -> int:
        self.now += ms
        return self.now


class ScriptedClassifier:
    """Returns the scripted labels in order, one per ``detect`` call."""

    def __init__(self, labels: list[str], fail_init: Exception | None = None) -> None:
        self.labels = list(labels)
        self.fail_init = fail_init
        self.calls = 0

    def initialize(self) -> None:
        if self.fail_init is not None:
            raise self.fail_init

    def detect(self, frame, timestamp_ms: float) -> str:
        self.calls += 1
        return self.labels.pop(0) if self.labels else "ERROR"


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def stores():
    return memory_stores()


@pytest.fixture
def registries(stores, clock) -> Registries:
    return Registries.from_stores(stores, ttl_ms=TTL_MS, clock=clock)


@pytest.fixture
def app(stores, clock):
    return create_app(stores, ttl_ms=TTL_MS, clock=clock)


@pytest.fixture
def api(app):
    with TestClient(app) as client:
        yield client


@pytest.fixture
def client_config() -> Settings:
    # Long intervals so the timer loops stay parked; tests tick by hand.
    return Settings(
        heartbeat_interval_seconds=60,
        roster_poll_interval_seconds=60,
        telemetry_poll_interval_seconds=60,
        lifecycle_poll_interval_seconds=60,
    )


@pytest.fixture
async def meeting_client(app):
    client = MeetingClient(
        "http://testserver", transport=httpx.ASGITransport(app=app)
    )
    yield client
    await client.aclose()
