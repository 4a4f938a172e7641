"""Emergency contacts API."""

from fastapi import APIRouter, Depends, status
from sqlalchemy.orm import Session

from safesignal.core.deps import get_current_profile
from safesignal.db.session import get_db
from safesignal.models.profile import Profile
from safesignal.schemas.contact import ContactCreate, ContactResponse, ContactUpdate
from safesignal.services.contact_service import create_contact, delete_contact, list_contacts, update_contact

router = APIRouter(prefix="/contacts", tags=["contacts"])


@router.get("", response_model=list[ContactResponse])
def list_my_contacts(
    db: Session = Depends(get_db),
    current_profile: Profile = Depends(get_current_profile),
):
    """Current profile's contacts in notification order."""
    return list_contacts(db, current_profile.id)


@router.post("", response_model=ContactResponse, status_code=status.HTTP_201_CREATED)
def add_contact(
    data: ContactCreate,
    db: Session = Depends(get_db),
    current_profile: Profile = Depends(get_current_profile),
):
    return create_contact(db, current_profile.id, data)


@router.put("/{contact_id}", response_model=ContactResponse)
def edit_contact(
    contact_id: int,
    data: ContactUpdate,
    db: Session = Depends(get_db),
    current_profile: Profile = Depends(get_current_profile),
):
    return update_contact(db, contact_id, current_profile.id, data)


@router.delete("/{contact_id}", status_code=status.HTTP_204_NO_CONTENT)
def remove_contact(
    contact_id: int,
    db: Session = Depends(get_db),
    current_profile: Profile = Depends(get_current_profile),
):
    """Delete a contact. Notification history keeps a null contact."""
    delete_contact(db, contact_id, current_profile.id)
