from __future__ import annotations

import json
from collections.abc import AsyncIterator, Callable, Iterator
from threading import Lock
from typing import Any

import httpx
import pytest
from httpx import ASGITransport, AsyncClient

from app.config import get_settings
from app.main import app
from app.observability import log_shipper
from app.observability.log_shipper import LogShipper, ShipperConfig
from app.services.simulation import set_random


class FixedRandom:
    """Deterministic stand-in for ``random.Random`` (values are clamped to the range)."""

    def __init__(self, value: int) -> None:
        self.value = value

    def randrange(self, upper: int) -> int:
        return min(self.value, upper - 1)


class RecordingSink:
    """Fake Logstash HTTP input for ``httpx.MockTransport``."""

    def __init__(self, status_code: int = 200) -> None:
        self.status_code = status_code
        self._lock = Lock()
        self.requests: list[httpx.Request] = []

    def __call__(self, request: httpx.Request) -> httpx.Response:
        request.read()
        with self._lock:
            self.requests.append(request)
        return httpx.Response(self.status_code)

    @property
    def documents(self) -> list[dict[str, Any]]:
        with self._lock:
            requests = list(self.requests)
        return [json.loads(r.content) for r in requests]

    def messages(self) -> list[str]:
        return [doc["message"] for doc in self.documents]


class ErrorRecorder:
    """Collects events the shipper reports on its local error stream."""

    def __init__(self) -> None:
        self._lock = Lock()
        self.events: list[tuple[str, dict[str, Any]]] = []

    def error(self, event: str, **kw: Any) -> None:
        with self._lock:
            self.events.append((event, kw))


@pytest.fixture
def logstash() -> RecordingSink:
    """Sink behind the shared (module-level) shipper."""

    return RecordingSink()


@pytest.fixture
def remote() -> RecordingSink:
    """Sink behind shippers built with ``make_shipper``."""

    return RecordingSink()


@pytest.fixture
def error_log() -> ErrorRecorder:
    return ErrorRecorder()


@pytest.fixture(autouse=True)
def test_environment(monkeypatch: pytest.MonkeyPatch, logstash: RecordingSink, error_log: ErrorRecorder) -> Iterator[None]:
    monkeypatch.delenv("ENVIRONMENT", raising=False)
    monkeypatch.delenv("SERVER_IP", raising=False)
    monkeypatch.delenv("HOST", raising=False)
    monkeypatch.delenv("PORT", raising=False)
    monkeypatch.setenv("SIMULATE_LATENCY", "false")
    get_settings.cache_clear()

    log_shipper.reset_logger()
    set_random(FixedRandom(99))
    log_shipper.init_logger(transport=httpx.MockTransport(logstash), error_log=error_log)

    yield

    log_shipper.reset_logger()
    set_random(None)
    get_settings.cache_clear()


@pytest.fixture
def make_shipper(remote: RecordingSink, error_log: ErrorRecorder) -> Iterator[Callable[..., LogShipper]]:
    created: list[LogShipper] = []

    def factory(environment: str = "production", handler: Callable[..., Any] | None = None, stream: Any = None) -> LogShipper:
        config = ShipperConfig(
            endpoint="http://logstash.test:5000",
            service_name="demo-api",
            environment=environment,
            hostname="test-host",
            server_ip="10.0.0.1",
        )
        shipper = LogShipper(
            config,
            transport=httpx.MockTransport(handler or remote),
            error_log=error_log,
            stream=stream,
        )
        created.append(shipper)
        return shipper

    yield factory

    for shipper in created:
        shipper.close()


@pytest.fixture
def flush_logs() -> Callable[[], None]:
    def flush() -> None:
        assert log_shipper.get_logger().flush(timeout=5)

    return flush


@pytest.fixture
def use_random() -> Callable[[int], None]:
    def apply(value: int) -> None:
        set_random(FixedRandom(value))

    return apply


@pytest.fixture
async def api_client() -> AsyncIterator[AsyncClient]:
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as client:
        yield client
