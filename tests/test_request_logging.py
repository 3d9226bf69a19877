import httpx
from httpx import ASGITransport, AsyncClient
from structlog.testing import capture_logs

from contactbook.main import create_app


async def test_every_request_is_forwarded_to_sink(api_client, app, sink) -> None:
    resp = await api_client.get("/health?verbose=1")
    assert resp.status_code == 200
    await app.state.log_forwarder.wait_pending()

    assert len(sink.events) == 1
    event = sink.events[0]
    assert event["method"] == "GET"
    assert event["url"] == "/health?verbose=1"
    assert event["ip"] == "127.0.0.1"
    assert event["timestamp"].endswith("Z")
    assert sink.requests[0].headers["Authorization"] == "Splunk sink-token"


async def test_rejected_requests_are_logged_too(api_client, app, sink) -> None:
    resp = await api_client.get("/contacts")
    assert resp.status_code == 403
    await app.state.log_forwarder.wait_pending()

    assert [e["url"] for e in sink.events] == ["/contacts"]


async def test_responses_include_x_request_id(api_client) -> None:
    resp = await api_client.get("/health")
    assert resp.headers.get("x-request-id")


async def test_sink_outage_does_not_affect_responses(api_client, app, sink) -> None:
    sink.refuse_connections = True

    with capture_logs() as logs:
        resp = await api_client.post("/signup", json={"email": "outage@x.com", "password": "pw"})
        await app.state.log_forwarder.wait_pending()

    assert resp.status_code == 200
    assert resp.text == "User Created"
    assert any(entry["event"] == "log_forward_failed" for entry in logs)


async def test_request_is_logged_locally(api_client) -> None:
    with capture_logs() as logs:
        await api_client.get("/health")

    local = [entry for entry in logs if entry["event"] == "request"]
    assert len(local) == 1
    assert local[0]["ip"] == "127.0.0.1"
    assert local[0]["url"] == "/health"


async def test_auth_failure_is_logged(api_client) -> None:
    with capture_logs() as logs:
        await api_client.get("/contacts", headers={"Authorization": "Bearer nope"})

    assert any(entry["event"] == "auth_failure" for entry in logs)


async def test_no_sink_url_means_no_forwarding(settings, sink) -> None:
    quiet = settings.model_copy(update={"log_sink_url": None})
    app = create_app(quiet, log_client=httpx.AsyncClient(transport=httpx.MockTransport(sink)))

    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as client:
        resp = await client.get("/health")
    await app.state.log_forwarder.aclose()
    app.state.engine.dispose()

    assert resp.status_code == 200
    assert sink.requests == []


async def test_health_is_degraded_when_store_unreachable(settings, tmp_path, sink) -> None:
    broken = settings.model_copy(
        update={"database_url": f"sqlite+pysqlite:///{tmp_path / 'missing' / 'dir' / 'db.sqlite'}"}
    )
    app = create_app(broken, log_client=httpx.AsyncClient(transport=httpx.MockTransport(sink)))

    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as client:
        resp = await client.get("/health")
    await app.state.log_forwarder.aclose()
    app.state.engine.dispose()

    assert resp.status_code == 200
    assert resp.json() == {"status": "degraded", "store": False}
