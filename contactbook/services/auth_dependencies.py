from __future__ import annotations

import uuid

import jwt
import structlog
from fastapi import Depends, Request

from contactbook.config import Settings, get_app_settings
from contactbook.errors import InvalidToken
from contactbook.services.auth_service import decode_session_token

logger = structlog.get_logger(__name__)


def extract_token(authorization: str | None) -> str | None:
    """Accept both ``Bearer <token>`` and a bare token."""
    if not authorization:
        return None
    value = authorization.strip()
    scheme, _, rest = value.partition(" ")
    if scheme.lower() == "bearer":
        value = rest.strip()
    return value or None


async def get_current_user_id(
    request: Request,
    settings: Settings = Depends(get_app_settings),
) -> uuid.UUID:
    token = extract_token(request.headers.get("authorization"))
    if token is None:
        logger.warning("auth_failure", reason="missing_token")
        raise InvalidToken("missing token")

    try:
        payload = decode_session_token(token, settings)
        user_id = uuid.UUID(str(payload.get("sub")))
    except (jwt.InvalidTokenError, ValueError) as exc:
        logger.warning("auth_failure", reason=type(exc).__name__)
        raise InvalidToken(str(exc)) from exc

    structlog.contextvars.bind_contextvars(user_id=str(user_id))
    return user_id
