"""SQLAlchemy models."""

from __future__ import annotations

from safetrail.models.location_ping import LocationPing
from safetrail.models.sos_event import SosEvent
from safetrail.models.sos_send_result import SosSendResult
from safetrail.models.user import User

__all__ = [
    "User",
    "LocationPing",
    "SosEvent",
    "SosSendResult",
]
