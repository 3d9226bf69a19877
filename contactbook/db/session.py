from __future__ import annotations

from collections.abc import Generator

import structlog
from fastapi import Request
from sqlalchemy import create_engine, text
from sqlalchemy.engine import Engine
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session, sessionmaker

from contactbook.db.models import Base

logger = structlog.get_logger(__name__)


def create_store_engine(database_url: str) -> Engine:
    connect_args: dict[str, object] = {}
    if database_url.startswith("sqlite"):
        # Sync routes and dependencies may run on different threadpool workers.
        connect_args["check_same_thread"] = False
    # psycopg3 driver uses `postgresql+psycopg://...`
    return create_engine(database_url, pool_pre_ping=True, connect_args=connect_args)


def create_session_factory(engine: Engine) -> sessionmaker[Session]:
    return sessionmaker(autocommit=False, autoflush=False, bind=engine)


def init_store(engine: Engine) -> bool:
    """Create tables if needed. Returns False (and logs) when the store is unreachable."""
    try:
        Base.metadata.create_all(engine)
    except SQLAlchemyError as exc:
        logger.error("store_connection_failed", error=str(exc))
        return False
    logger.info("store_connected")
    return True


def ping_store(engine: Engine) -> bool:
    try:
        with engine.connect() as conn:
            conn.execute(text("SELECT 1"))
    except SQLAlchemyError as exc:
        logger.warning("store_ping_failed", error=str(exc))
        return False
    return True


def get_db(request: Request) -> Generator[Session, None, None]:
    db = request.app.state.session_factory()
    try:
        yield db
    finally:
        db.close()
