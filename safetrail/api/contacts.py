"""Emergency contacts API."""

from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.orm import Session

from safetrail.db.session import get_db
from safetrail.schemas.contacts import ContactsResponse, ContactsUpdate
from safetrail.services.contact_service import get_contacts, set_contacts

router = APIRouter(prefix="/contacts", tags=["contacts"])


@router.get("/{user_id}", response_model=ContactsResponse)
def read_contacts(user_id: int, db: Session = Depends(get_db)):
    contacts = get_contacts(db, user_id)
    if contacts is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="User not found")
    return ContactsResponse(contacts=contacts)


@router.post("", response_model=ContactsResponse)
def replace_contacts(data: ContactsUpdate, db: Session = Depends(get_db)):
    """Overwrite the whole contact list (no merge)."""
    contacts = set_contacts(db, data.user_id, data.contacts)
    if contacts is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="User not found")
    return ContactsResponse(message="Contacts updated", contacts=contacts)
