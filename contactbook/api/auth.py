from __future__ import annotations

from fastapi import APIRouter, Depends
from fastapi.responses import PlainTextResponse
from sqlalchemy.orm import Session

from contactbook.config import Settings, get_app_settings
from contactbook.db.session import get_db
from contactbook.models.schemas import Credentials, TokenResponse
from contactbook.services.auth_service import login, signup

router = APIRouter(tags=["auth"])


@router.post("/signup", response_class=PlainTextResponse)
def signup_route(
    payload: Credentials,
    db: Session = Depends(get_db),
    settings: Settings = Depends(get_app_settings),
) -> str:
    signup(db, settings, email=payload.email, password=payload.password)
    return "User Created"


@router.post("/login", response_model=TokenResponse)
def login_route(
    payload: Credentials,
    db: Session = Depends(get_db),
    settings: Settings = Depends(get_app_settings),
) -> TokenResponse:
    token = login(db, settings, email=payload.email, password=payload.password)
    return TokenResponse(token=token)
