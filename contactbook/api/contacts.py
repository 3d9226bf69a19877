from __future__ import annotations

import uuid

from fastapi import APIRouter, Depends
from fastapi.responses import PlainTextResponse
from sqlalchemy.orm import Session

from contactbook.db.session import get_db
from contactbook.models.schemas import Contact
from contactbook.services.auth_dependencies import get_current_user_id
from contactbook.services.contact_service import add_contact, list_contacts

router = APIRouter(tags=["contacts"])


@router.post("/addcontact", response_class=PlainTextResponse)
def add_contact_route(
    payload: Contact,
    user_id: uuid.UUID = Depends(get_current_user_id),
    db: Session = Depends(get_db),
) -> str:
    add_contact(db, user_id, name=payload.name, note=payload.note)
    return "Saved"


@router.get("/contacts", response_model=list[Contact])
def list_contacts_route(
    user_id: uuid.UUID = Depends(get_current_user_id),
    db: Session = Depends(get_db),
) -> list[Contact]:
    return list_contacts(db, user_id)
