"""Emergency contact service."""

from __future__ import annotations

import logging

from sqlalchemy.orm import Session

from safetrail.models.user import User

logger = logging.getLogger(__name__)


def get_contacts(db: Session, user_id: int) -> list[str] | None:
    """Return the user's contacts, or None if the user does not exist."""
    user = db.get(User, user_id)
    if not user:
        return None
    return list(user.emergency_contacts or [])


def set_contacts(db: Session, user_id: int, contacts: list[str]) -> list[str] | None:
    """Replace the whole contact list. Returns None if the user does not exist."""
    user = db.get(User, user_id)
    if not user:
        return None
    cleaned = [c.strip() for c in contacts if c and c.strip()]
    # New list object so past SOS snapshots never alias the live list
    user.emergency_contacts = list(cleaned)
    db.commit()
    db.refresh(user)
    logger.info("Contacts updated user=%s count=%s", user_id, len(cleaned))
    return list(user.emergency_contacts)
