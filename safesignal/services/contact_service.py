"""Emergency contact service."""

from __future__ import annotations

from sqlalchemy import select, update
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from safesignal.core.errors import AuthorizationError, NotFoundError, PersistenceError
from safesignal.models.alert_notification import AlertNotification
from safesignal.models.emergency_contact import EmergencyContact
from safesignal.schemas.contact import ContactCreate, ContactUpdate


def list_contacts(db: Session, profile_id: int) -> list[EmergencyContact]:
    """Contacts in fan-out order: priority ascending, then creation order."""
    result = db.execute(
        select(EmergencyContact)
        .where(EmergencyContact.profile_id == profile_id)
        .order_by(EmergencyContact.priority.asc(), EmergencyContact.created_at.asc(), EmergencyContact.id.asc())
    )
    return list(result.scalars().all())


def _get_own_contact(db: Session, contact_id: int, profile_id: int) -> EmergencyContact:
    contact = db.get(EmergencyContact, contact_id)
    if not contact:
        raise NotFoundError("Contact", id=contact_id)
    if contact.profile_id != profile_id:
        raise AuthorizationError("modify", subject="contact", contact_id=contact_id)
    return contact


def _commit(db: Session) -> None:
    try:
        db.commit()
    except SQLAlchemyError as exc:
        db.rollback()
        raise PersistenceError(str(exc)) from exc


def create_contact(db: Session, profile_id: int, data: ContactCreate) -> EmergencyContact:
    contact = EmergencyContact(profile_id=profile_id, **data.model_dump())
    db.add(contact)
    _commit(db)
    db.refresh(contact)
    return contact


def update_contact(db: Session, contact_id: int, profile_id: int, data: ContactUpdate) -> EmergencyContact:
    """Apply the fields that were sent. Only contact_email may be cleared."""
    contact = _get_own_contact(db, contact_id, profile_id)
    for field, value in data.model_dump(exclude_unset=True).items():
        if value is None and field != "contact_email":
            continue
        setattr(contact, field, value)
    _commit(db)
    db.refresh(contact)
    return contact


def delete_contact(db: Session, contact_id: int, profile_id: int) -> None:
    """Delete a contact. Its past notifications stay, detached from the contact."""
    contact = _get_own_contact(db, contact_id, profile_id)
    try:
        db.execute(
            update(AlertNotification)
            .where(AlertNotification.contact_id == contact_id)
            .values(contact_id=None)
        )
        db.delete(contact)
        db.commit()
    except SQLAlchemyError as exc:
        db.rollback()
        raise PersistenceError(str(exc)) from exc
