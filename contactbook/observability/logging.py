from __future__ import annotations

import logging
import sys
from typing import Any

import structlog

from contactbook.config import Settings
from contactbook.models.schemas import LogRecord


_CONFIGURED = False

access_logger = structlog.get_logger("access")


def build_renderer(log_format: str) -> Any:
    """JSON lines for collectors, or coloured key/value output for a terminal."""
    if log_format == "console":
        return structlog.dev.ConsoleRenderer()
    if log_format == "json":
        return structlog.processors.JSONRenderer()
    raise ValueError(f"unknown LOG_FORMAT: {log_format!r}")


def format_request_line(record: LogRecord) -> str:
    return f"[{record.timestamp}] IP={record.ip} METHOD={record.method} URL={record.url}"


def log_request(record: LogRecord) -> None:
    """Write one inbound request to the local console, before it is routed."""
    access_logger.info(
        "request",
        line=format_request_line(record),
        ip=record.ip,
        url=record.url,
        received_at=record.timestamp,
    )


def configure_logging(settings: Settings) -> None:
    """Route structlog and stdlib logging (uvicorn included) to stdout.

    Level and output format come from ``LOG_LEVEL`` / ``LOG_FORMAT``. Safe to
    call more than once; only the first call has an effect.
    """

    global _CONFIGURED
    if _CONFIGURED:
        return

    pre_chain: list[Any] = [
        structlog.contextvars.merge_contextvars,
        structlog.stdlib.add_logger_name,
        structlog.processors.add_log_level,
        structlog.processors.TimeStamper(fmt="iso", utc=True),
        structlog.processors.StackInfoRenderer(),
        structlog.processors.format_exc_info,
    ]

    structlog.configure(
        processors=[*pre_chain, structlog.stdlib.ProcessorFormatter.wrap_for_formatter],
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=True,
    )

    handler = logging.StreamHandler(sys.stdout)
    handler.setFormatter(
        structlog.stdlib.ProcessorFormatter(
            processor=build_renderer(settings.log_format),
            foreign_pre_chain=pre_chain,
        )
    )

    root = logging.getLogger()
    root.handlers = [handler]
    root.setLevel(settings.log_level)

    # uvicorn's access log would duplicate our own `request`/`http_request` lines.
    levels = {"uvicorn": settings.log_level, "uvicorn.error": settings.log_level, "uvicorn.access": "WARNING"}
    for name, level in levels.items():
        logger = logging.getLogger(name)
        logger.handlers = [handler]
        logger.propagate = False
        logger.setLevel(level)

    # httpx logs every forwarded event at INFO.
    logging.getLogger("httpx").setLevel(logging.WARNING)

    _CONFIGURED = True
