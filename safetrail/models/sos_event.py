"""SOS event model."""

from __future__ import annotations

from datetime import datetime

from sqlalchemy import DateTime, Float, ForeignKey, String
from sqlalchemy.orm import Mapped, mapped_column, relationship
from sqlalchemy.types import JSON

from safetrail.db.base import Base
from safetrail.models.sos_send_result import SosSendResult


class SosEvent(Base):
    """One SOS dispatch. Appended once, never updated."""

    __tablename__ = "sos_events"

    id: Mapped[int] = mapped_column(primary_key=True, autoincrement=True)
    user_id: Mapped[int] = mapped_column(ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    latitude: Mapped[float] = mapped_column(Float, nullable=False)
    longitude: Mapped[float] = mapped_column(Float, nullable=False)
    triggered_by: Mapped[str] = mapped_column(String(50), nullable=False)  # button | volume | voice | auto
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)
    # Copy of the contact list at dispatch time
    contacts_notified: Mapped[list[str]] = mapped_column(JSON, nullable=False)

    send_results: Mapped[list[SosSendResult]] = relationship(
        order_by=SosSendResult.position,
        cascade="all, delete-orphan",
    )

    @property
    def successful_sends(self) -> int:
        return sum(1 for r in self.send_results if r.success)
