from __future__ import annotations

import structlog
from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import PlainTextResponse

from contactbook.errors import BadRequest, ContactBookError, SignupFailed

logger = structlog.get_logger(__name__)

# Routes whose generic failure also covers a malformed body.
_BODY_FAILURES: dict[str, type[ContactBookError]] = {
    "/signup": SignupFailed,
}


def register_error_handlers(app: FastAPI) -> None:
    @app.exception_handler(ContactBookError)
    async def contact_book_error_handler(request: Request, exc: ContactBookError) -> PlainTextResponse:
        logger.info(
            "request_failed",
            error_type=type(exc).__name__,
            detail=exc.detail,
            status_code=exc.status_code,
        )
        return PlainTextResponse(exc.public_message, status_code=exc.status_code)

    @app.exception_handler(RequestValidationError)
    async def validation_error_handler(request: Request, exc: RequestValidationError) -> PlainTextResponse:
        failure = _BODY_FAILURES.get(request.url.path, BadRequest)
        # Field locations only; the offending input may hold a password.
        logger.info(
            "request_body_invalid",
            error_type=failure.__name__,
            fields=[".".join(str(part) for part in error["loc"]) for error in exc.errors()],
            status_code=failure.status_code,
        )
        return PlainTextResponse(failure.public_message, status_code=failure.status_code)
