"""Per-contact send outcome for an SOS event."""

from __future__ import annotations

from typing import Any

from sqlalchemy import Boolean, ForeignKey, Integer, String, Text
from sqlalchemy.orm import Mapped, mapped_column
from sqlalchemy.types import JSON

from safetrail.db.base import Base


class SosSendResult(Base):
    """Outcome of sending the SOS message to one contact."""

    __tablename__ = "sos_send_results"

    id: Mapped[int] = mapped_column(primary_key=True, autoincrement=True)
    sos_event_id: Mapped[int] = mapped_column(ForeignKey("sos_events.id", ondelete="CASCADE"), nullable=False, index=True)
    position: Mapped[int] = mapped_column(Integer, nullable=False)  # index within contacts_notified
    contact: Mapped[str] = mapped_column(String(20), nullable=False)
    success: Mapped[bool] = mapped_column(Boolean, nullable=False)
    provider_ref: Mapped[str | None] = mapped_column(String(100), nullable=True)
    response: Mapped[dict[str, Any] | None] = mapped_column(JSON, nullable=True)
    error: Mapped[str | None] = mapped_column(Text, nullable=True)
