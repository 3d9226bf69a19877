from __future__ import annotations

import asyncio
from typing import Any

import httpx
import structlog

from contactbook.config import Settings
from contactbook.models.schemas import LogRecord

logger = structlog.get_logger("log_forwarder")


class LogForwarder:
    """Ships request records to an HTTP log-collection endpoint (Splunk HEC style).

    Each record is posted as ``{"event": <record>}`` from a detached task. Delivery
    failures are logged locally and dropped: no retry, no buffering, and the
    request that produced the record never waits on or sees the outcome.
    """

    def __init__(
        self,
        url: str | None,
        token: str = "",
        auth_scheme: str = "Splunk",
        timeout: float = 5.0,
        client: httpx.AsyncClient | None = None,
    ) -> None:
        self.url = url or None
        self._headers = {"Authorization": f"{auth_scheme} {token}"}
        self._timeout = timeout
        self._client = client
        self._pending: set[asyncio.Task[None]] = set()

    @classmethod
    def from_settings(cls, settings: Settings, client: httpx.AsyncClient | None = None) -> LogForwarder:
        return cls(
            url=settings.log_sink_url,
            token=settings.log_sink_token,
            auth_scheme=settings.log_sink_auth_scheme,
            timeout=settings.log_sink_timeout_seconds,
            client=client,
        )

    @property
    def enabled(self) -> bool:
        return self.url is not None

    def _get_client(self) -> httpx.AsyncClient:
        if self._client is None:
            self._client = httpx.AsyncClient(timeout=self._timeout)
        return self._client

    def forward(self, record: LogRecord) -> asyncio.Task[None] | None:
        """Schedule delivery of ``record`` and return immediately."""
        if not self.enabled:
            return None

        task = asyncio.get_running_loop().create_task(self._send(record.model_dump()))
        self._pending.add(task)
        task.add_done_callback(self._pending.discard)
        return task

    async def _send(self, event: dict[str, Any]) -> None:
        try:
            response = await self._get_client().post(
                self.url,  # type: ignore[arg-type]
                json={"event": event},
                headers=self._headers,
            )
            response.raise_for_status()
        except Exception as exc:  # noqa: BLE001
            logger.warning("log_forward_failed", error=str(exc), error_type=type(exc).__name__)

    async def wait_pending(self) -> None:
        if self._pending:
            await asyncio.gather(*list(self._pending), return_exceptions=True)

    async def aclose(self) -> None:
        await self.wait_pending()
        if self._client is not None:
            await self._client.aclose()
            self._client = None
