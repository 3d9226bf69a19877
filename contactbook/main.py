from __future__ import annotations

import httpx
import structlog
from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.staticfiles import StaticFiles

from contactbook.api.auth import router as auth_router
from contactbook.api.contacts import router as contacts_router
from contactbook.api.error_handlers import register_error_handlers
from contactbook.config import Settings, get_settings
from contactbook.db.session import create_session_factory, create_store_engine, init_store, ping_store
from contactbook.models.schemas import HealthResponse
from contactbook.observability import LogForwarder, RequestLogMiddleware


def create_app(settings: Settings | None = None, log_client: httpx.AsyncClient | None = None) -> FastAPI:
    """Build the contact book app around one settings object.

    The store engine and the log forwarder are created here, once per app, and
    reached by request handlers through ``app.state``.
    """
    settings = settings or get_settings()
    engine = create_store_engine(settings.database_url)
    forwarder = LogForwarder.from_settings(settings, client=log_client)

    app = FastAPI(title="Contact Book", version="0.1.0")
    app.state.settings = settings
    app.state.engine = engine
    app.state.session_factory = create_session_factory(engine)
    app.state.log_forwarder = forwarder

    register_error_handlers(app)
    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_methods=["*"],
        allow_headers=["*"],
    )
    # Added last so it wraps everything else and sees every request first.
    app.add_middleware(RequestLogMiddleware, forwarder=forwarder)

    app.include_router(auth_router)
    app.include_router(contacts_router)

    @app.on_event("startup")
    def _startup() -> None:
        # A store failure is logged and the app keeps serving; /health reports it.
        init_store(engine)

    @app.on_event("shutdown")
    async def _shutdown() -> None:
        await forwarder.aclose()
        engine.dispose()

    @app.get("/health", response_model=HealthResponse)
    def health(request: Request) -> HealthResponse:
        store_ok = ping_store(request.app.state.engine)
        return HealthResponse(status="ok" if store_ok else "degraded", store=store_ok)

    # Mounted last: routes above take precedence over files in the static dir.
    if settings.static_path.is_dir():
        app.mount("/", StaticFiles(directory=settings.static_path, html=True), name="static")
    else:
        structlog.get_logger(__name__).warning("static_dir_missing", static_dir=str(settings.static_path))
    return app
