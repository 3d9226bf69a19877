from __future__ import annotations

import json
from collections.abc import AsyncIterator, Iterator

import httpx
import pytest
from fastapi import FastAPI
from httpx import ASGITransport, AsyncClient
from sqlalchemy.orm import Session

from contactbook.config import Settings, get_settings
from contactbook.db.session import init_store
from contactbook.main import create_app

SINK_URL = "http://sink.test/services/collector/event"
JWT_SECRET = "test-secret-that-is-long-enough-for-hs256"


class SinkRecorder:
    """Stands in for the log-collection endpoint behind an httpx.MockTransport."""

    def __init__(self) -> None:
        self.requests: list[httpx.Request] = []
        self.status_code = 200
        self.refuse_connections = False

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        if self.refuse_connections:
            raise httpx.ConnectError("connection refused", request=request)
        return httpx.Response(self.status_code, json={"text": "Success", "code": 0})

    @property
    def events(self) -> list[dict]:
        return [json.loads(r.content)["event"] for r in self.requests]


@pytest.fixture
def sink() -> SinkRecorder:
    return SinkRecorder()


@pytest.fixture
def settings(monkeypatch: pytest.MonkeyPatch, tmp_path) -> Iterator[Settings]:
    static_dir = tmp_path / "public"
    static_dir.mkdir()
    (static_dir / "index.html").write_text("<h1>Contact Book</h1>", encoding="utf-8")

    monkeypatch.setenv("JWT_SECRET", JWT_SECRET)
    monkeypatch.setenv("DATABASE_URL", f"sqlite+pysqlite:///{tmp_path / 'contacts.db'}")
    monkeypatch.setenv("LOG_SINK_URL", SINK_URL)
    monkeypatch.setenv("LOG_SINK_TOKEN", "sink-token")
    monkeypatch.setenv("STATIC_DIR", str(static_dir))
    # Cheap hashing keeps the suite fast; production default is 10.
    monkeypatch.setenv("BCRYPT_ROUNDS", "4")
    get_settings.cache_clear()

    yield get_settings()

    get_settings.cache_clear()


@pytest.fixture
def app(settings: Settings, sink: SinkRecorder) -> Iterator[FastAPI]:
    application = create_app(settings, log_client=httpx.AsyncClient(transport=httpx.MockTransport(sink)))
    # ASGITransport does not run startup events.
    assert init_store(application.state.engine)
    yield application
    application.state.engine.dispose()


@pytest.fixture
def db(app: FastAPI) -> Iterator[Session]:
    session = app.state.session_factory()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture
async def api_client(app: FastAPI) -> AsyncIterator[AsyncClient]:
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as client:
        yield client
    await app.state.log_forwarder.aclose()
