from __future__ import annotations

import uuid
from datetime import datetime, timedelta, timezone
from typing import Any

import bcrypt
import jwt
import structlog
from sqlalchemy import select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from contactbook.config import Settings
from contactbook.db.models import User
from contactbook.errors import DuplicateEmail, SignupFailed, UserNotFound, WrongPassword

logger = structlog.get_logger(__name__)


# bcrypt only reads the first 72 bytes; bcrypt>=5 raises instead of truncating.
_BCRYPT_MAX_BYTES = 72


def _bcrypt_input(password: str) -> bytes:
    return password.encode("utf-8")[:_BCRYPT_MAX_BYTES]


def hash_password(password: str, rounds: int = 10) -> str:
    hashed = bcrypt.hashpw(_bcrypt_input(password), bcrypt.gensalt(rounds=rounds))
    return hashed.decode("utf-8")


def verify_password(password: str, password_hash: str) -> bool:
    try:
        return bcrypt.checkpw(_bcrypt_input(password), password_hash.encode("utf-8"))
    except Exception:
        return False


def create_session_token(user_id: str, settings: Settings) -> str:
    now = datetime.now(timezone.utc)
    payload: dict[str, Any] = {
        "sub": user_id,
        "iat": int(now.timestamp()),
        "exp": int((now + timedelta(minutes=settings.jwt_exp_minutes)).timestamp()),
    }
    return jwt.encode(payload, settings.jwt_secret, algorithm="HS256")


def decode_session_token(token: str, settings: Settings) -> dict[str, Any]:
    return jwt.decode(
        token,
        settings.jwt_secret,
        algorithms=["HS256"],
        options={"require": ["exp", "sub"]},
    )


def signup(db: Session, settings: Settings, email: str, password: str) -> User:
    """Store a new user with a hashed password and no contacts. Issues no token."""
    try:
        user = User(
            id=uuid.uuid4(),
            email=email,
            password_hash=hash_password(password, rounds=settings.bcrypt_rounds),
            contacts=[],
            created_at=datetime.now(timezone.utc),
        )
        db.add(user)
        db.commit()
    except IntegrityError as exc:
        db.rollback()
        logger.warning("signup_failed", email=email, reason="duplicate_email")
        raise DuplicateEmail(f"email already registered: {email}") from exc
    except Exception as exc:  # noqa: BLE001
        db.rollback()
        logger.exception("signup_failed", email=email)
        raise SignupFailed(str(exc)) from exc

    logger.info("user_created", email=email)
    return user


def login(db: Session, settings: Settings, email: str, password: str) -> str:
    user = db.execute(select(User).where(User.email == email)).scalar_one_or_none()
    if user is None:
        logger.info("login_failed", email=email, reason="user_not_found")
        raise UserNotFound(email)

    if not verify_password(password, user.password_hash):
        logger.info("login_failed", email=email, reason="wrong_password")
        raise WrongPassword(email)

    token = create_session_token(user_id=str(user.id), settings=settings)
    logger.info("login_succeeded", email=email)
    return token
