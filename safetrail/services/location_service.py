"""Location history service."""

from __future__ import annotations

from sqlalchemy import select
from sqlalchemy.orm import Session

from safetrail.models.location_ping import LocationPing
from safetrail.models.user import User


def record_location(db: Session, user_id: int, lat: float, lng: float) -> LocationPing | None:
    """Append a location ping. Returns None if the user does not exist."""
    if not db.get(User, user_id):
        return None
    ping = LocationPing(user_id=user_id, latitude=lat, longitude=lng)
    db.add(ping)
    db.commit()
    db.refresh(ping)
    return ping


def list_locations(db: Session, user_id: int, limit: int = 50) -> list[LocationPing]:
    """Location pings for a user, newest first."""
    result = db.execute(
        select(LocationPing)
        .where(LocationPing.user_id == user_id)
        .order_by(LocationPing.created_at.desc(), LocationPing.id.desc())
        .limit(limit)
    )
    return list(result.scalars().all())
