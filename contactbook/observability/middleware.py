from __future__ import annotations

import uuid
from datetime import datetime, timezone
from time import perf_counter
from typing import Any, Callable

import structlog
from starlette.datastructures import MutableHeaders

from contactbook.models.schemas import LogRecord
from contactbook.observability.forwarder import LogForwarder
from contactbook.observability.logging import access_logger, log_request


def build_log_record(scope: dict[str, Any]) -> LogRecord:
    client = scope.get("client")
    path = scope.get("path", "")
    query = scope.get("query_string", b"").decode("latin-1")
    timestamp = datetime.now(timezone.utc).isoformat(timespec="milliseconds").replace("+00:00", "Z")
    return LogRecord(
        timestamp=timestamp,
        ip=client[0] if client else None,
        method=scope.get("method", ""),
        url=f"{path}?{query}" if query else path,
    )


class RequestLogMiddleware:
    """Logs every request before routing, forwards it to the log sink, adds request ids."""

    def __init__(self, app: Callable[..., Any], forwarder: LogForwarder) -> None:
        self.app = app
        self.forwarder = forwarder

    async def __call__(self, scope: dict[str, Any], receive: Callable[..., Any], send: Callable[..., Any]) -> None:
        if scope.get("type") != "http":
            await self.app(scope, receive, send)
            return

        request_id = str(uuid.uuid4())
        record = build_log_record(scope)

        structlog.contextvars.bind_contextvars(
            request_id=request_id,
            path=scope.get("path"),
            method=record.method,
        )

        log_request(record)
        self.forwarder.forward(record)

        start = perf_counter()
        status_code: int = 500

        async def send_wrapper(message: dict[str, Any]) -> None:
            nonlocal status_code

            if message.get("type") == "http.response.start":
                status_code = int(message.get("status", 500))
                headers = MutableHeaders(scope=message)
                headers["X-Request-ID"] = request_id

            await send(message)

        try:
            await self.app(scope, receive, send_wrapper)
        finally:
            elapsed_ms = (perf_counter() - start) * 1000.0
            access_logger.info(
                "http_request",
                status_code=status_code,
                elapsed_ms=round(elapsed_ms, 2),
            )
            structlog.contextvars.clear_contextvars()
