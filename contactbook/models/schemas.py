from __future__ import annotations

from pydantic import BaseModel


class Credentials(BaseModel):
    email: str
    password: str


class TokenResponse(BaseModel):
    token: str


class Contact(BaseModel):
    name: str = ""
    note: str = ""


class HealthResponse(BaseModel):
    status: str
    store: bool


class LogRecord(BaseModel):
    """One inbound request, as printed locally and forwarded to the log sink."""

    timestamp: str
    ip: str | None
    method: str
    url: str
