from __future__ import annotations

import uuid

import structlog
from sqlalchemy import String, cast, func, update
from sqlalchemy.orm import Session
from sqlalchemy.sql.elements import ColumnElement

from contactbook.db.models import User
from contactbook.errors import ContactOwnerNotFound
from contactbook.models.schemas import Contact

logger = structlog.get_logger(__name__)


def _appended_contacts(dialect_name: str, name: str, note: str) -> ColumnElement:
    """SQL expression for ``users.contacts`` with one more entry at the end.

    The append happens inside the UPDATE itself, so concurrent appends for the
    same user never overwrite each other.
    """
    name_param = cast(name, String)
    note_param = cast(note, String)
    if dialect_name == "postgresql":
        entry = func.jsonb_build_array(func.jsonb_build_object("name", name_param, "note", note_param))
        return User.contacts.op("||")(entry)
    if dialect_name == "sqlite":
        entry = func.json_object("name", name_param, "note", note_param)
        return func.json_insert(User.contacts, "$[#]", entry)
    raise NotImplementedError(f"contact append is not supported on {dialect_name}")


def add_contact(db: Session, user_id: uuid.UUID, name: str, note: str) -> None:
    stmt = (
        update(User)
        .where(User.id == user_id)
        .values(contacts=_appended_contacts(db.get_bind().dialect.name, name, note))
        .returning(User.email)
        .execution_options(synchronize_session=False)
    )
    email = db.execute(stmt).scalar_one_or_none()
    if email is None:
        db.rollback()
        logger.warning("contact_owner_missing", user_id=str(user_id))
        raise ContactOwnerNotFound(str(user_id))

    db.commit()
    logger.info("contact_added", email=email)


def list_contacts(db: Session, user_id: uuid.UUID) -> list[Contact]:
    user = db.get(User, user_id)
    if user is None:
        logger.warning("contact_owner_missing", user_id=str(user_id))
        raise ContactOwnerNotFound(str(user_id))
    return [Contact.model_validate(item) for item in user.contacts]
