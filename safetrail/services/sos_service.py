"""SOS dispatch workflow and history."""

from __future__ import annotations

import logging
import time
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any, Callable
from zoneinfo import ZoneInfo

from sqlalchemy import select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session, selectinload

from safetrail.core.config import Settings
from safetrail.core.sos_policies import BUDGET_EXCEEDED_REASON, DEFAULT_TRIGGER_SOURCE
from safetrail.models.sos_event import SosEvent
from safetrail.models.sos_send_result import SosSendResult
from safetrail.models.user import User
from safetrail.services.sms_service import PROVIDER_ERROR, SendResult, SmsSender

logger = logging.getLogger(__name__)


class SosDispatchError(Exception):
    """Base for failures that end a dispatch before a result is produced."""

    code = "dispatch_failed"
    status_code = 500

    def __init__(self, message: str, *, event_recorded: bool = False) -> None:
        super().__init__(message)
        self.message = message
        self.event_recorded = event_recorded


class DispatchValidationError(SosDispatchError):
    code = "validation_error"
    status_code = 400


class UserNotFoundError(SosDispatchError):
    code = "not_found"
    status_code = 404


class NoContactsError(SosDispatchError):
    code = "no_contacts"
    status_code = 400


class DispatchFailedError(SosDispatchError):
    """Unexpected failure outside the per-contact loop (e.g. persistence)."""


@dataclass
class ContactOutcome:
    contact: str
    success: bool
    provider_ref: str | None = None
    response: dict[str, Any] | None = None
    error: str | None = None


@dataclass
class DispatchResult:
    success: bool
    message: str
    event_id: int
    contacts_total: int
    contacts_notified: int
    latitude: float
    longitude: float
    timestamp: datetime
    triggered_by: str
    outcomes: list[ContactOutcome] = field(default_factory=list)


def build_map_link(lat: float, lng: float, base_url: str = "https://www.google.com/maps") -> str:
    """Map link pointing at the given coordinates."""
    return f"{base_url}?q={lat},{lng}"


def format_alert_time(moment: datetime, tz_name: str = "UTC") -> str:
    """Format like a locale string, e.g. '10/18/2026, 3:04:05 PM'."""
    local = moment.astimezone(ZoneInfo(tz_name))
    hour = local.hour % 12 or 12
    return f"{local:%m/%d/%Y}, {hour}:{local:%M:%S} {local:%p}"


def as_utc(moment: datetime) -> datetime:
    """Attach UTC to naive timestamps read back from SQLite."""
    if moment.tzinfo is None:
        return moment.replace(tzinfo=timezone.utc)
    return moment


def compose_alert_message(name: str, map_link: str, time_text: str) -> str:
    """Build the SOS text sent to every contact."""
    return (
        f"🚨 EMERGENCY ALERT! {name} needs immediate help!\n"
        f"Location: {map_link}\n"
        f"Time: {time_text}\n"
        "Please check on them immediately!"
    )


def summarize(successful: int, total: int) -> str:
    """Client-facing summary for the delivery tier."""
    if total > 0 and successful == total:
        return f"SOS sent successfully to all {total} emergency contacts"
    if successful > 0:
        return f"SOS partially sent: {successful} of {total} emergency contacts notified"
    return "Failed to send SOS to any emergency contact"


class SosDispatcher:
    """Runs one SOS dispatch: guards, compose, fan-out, aggregate, persist.

    Constructed once at startup with the transport and formatting config.
    Pacing between sends belongs to the sender, so nothing here sleeps.
    """

    def __init__(
        self,
        sender: SmsSender,
        *,
        maps_base_url: str = "https://www.google.com/maps",
        alert_timezone: str = "UTC",
        budget_seconds: float | None = None,
        now: Callable[[], datetime] | None = None,
        monotonic: Callable[[], float] = time.monotonic,
    ) -> None:
        self.sender = sender
        self.maps_base_url = maps_base_url
        self.alert_timezone = alert_timezone
        self.budget_seconds = budget_seconds
        self._now = now or (lambda: datetime.now(timezone.utc))
        self._monotonic = monotonic

    @classmethod
    def from_settings(cls, settings: Settings, sender: SmsSender) -> SosDispatcher:
        return cls(
            sender,
            maps_base_url=settings.maps_base_url,
            alert_timezone=settings.alert_timezone,
            budget_seconds=settings.sos_dispatch_budget_seconds,
        )

    def dispatch(
        self,
        db: Session,
        user_id: int | None,
        lat: float | None,
        lng: float | None,
        triggered_by: str | None = DEFAULT_TRIGGER_SOURCE,
    ) -> DispatchResult:
        """Run one dispatch. Every failure surfaces as a SosDispatchError."""
        try:
            return self._dispatch(db, user_id, lat, lng, triggered_by)
        except SosDispatchError:
            raise
        except Exception as exc:  # noqa: BLE001 - surfaced as a generic dispatch failure
            logger.exception("SOS dispatch failed for user=%s", user_id)
            raise DispatchFailedError("Failed to send SOS") from exc

    def _dispatch(
        self,
        db: Session,
        user_id: int | None,
        lat: float | None,
        lng: float | None,
        triggered_by: str | None,
    ) -> DispatchResult:
        # `is None`, not falsiness: 0.0 is a valid coordinate
        if user_id is None or lat is None or lng is None:
            raise DispatchValidationError("Missing data")

        user = db.get(User, user_id)
        if not user:
            raise UserNotFoundError("User not found")

        contacts = list(user.emergency_contacts or [])
        if not contacts:
            raise NoContactsError("No emergency contacts set")

        trigger = triggered_by or DEFAULT_TRIGGER_SOURCE
        created_at = self._now()
        message = compose_alert_message(
            user.name,
            build_map_link(lat, lng, self.maps_base_url),
            format_alert_time(created_at, self.alert_timezone),
        )

        logger.info(
            "SOS dispatch user=%s trigger=%s contacts=%s", user_id, trigger, len(contacts)
        )
        outcomes = self._fan_out(contacts, message)
        successful = sum(1 for o in outcomes if o.success)

        event = SosEvent(
            user_id=user.id,
            latitude=lat,
            longitude=lng,
            triggered_by=trigger,
            created_at=created_at,
            contacts_notified=contacts,
        )
        for position, outcome in enumerate(outcomes):
            event.send_results.append(
                SosSendResult(
                    position=position,
                    contact=outcome.contact,
                    success=outcome.success,
                    provider_ref=outcome.provider_ref,
                    response=outcome.response,
                    error=outcome.error,
                )
            )
        try:
            db.add(event)
            db.flush()
            event_id = event.id
            db.commit()
        except SQLAlchemyError as exc:
            db.rollback()
            logger.exception(
                "SOS history not recorded for user=%s (%s/%s sends succeeded)",
                user_id,
                successful,
                len(contacts),
            )
            raise DispatchFailedError("Failed to record SOS event", event_recorded=False) from exc

        logger.info("SOS event=%s user=%s delivered %s/%s", event_id, user_id, successful, len(contacts))
        return DispatchResult(
            success=successful > 0,
            message=summarize(successful, len(contacts)),
            event_id=event_id,
            contacts_total=len(contacts),
            contacts_notified=successful,
            latitude=lat,
            longitude=lng,
            timestamp=created_at,
            triggered_by=trigger,
            outcomes=outcomes,
        )

    def _fan_out(self, contacts: list[str], message: str) -> list[ContactOutcome]:
        """Send to each contact in order; one failure never stops the rest."""
        started = self._monotonic()
        outcomes: list[ContactOutcome] = []
        for contact in contacts:
            if self.budget_seconds is not None and self._monotonic() - started >= self.budget_seconds:
                logger.warning("SOS budget exceeded, skipping contact %s", contact)
                outcomes.append(ContactOutcome(contact=contact, success=False, error=BUDGET_EXCEEDED_REASON))
                continue
            try:
                result: SendResult = self.sender.send(contact, message)
            except Exception as exc:  # noqa: BLE001 - isolate each contact
                logger.warning("SMS to %s raised: %s", contact, exc)
                outcomes.append(ContactOutcome(contact=contact, success=False, error=PROVIDER_ERROR))
                continue
            if result.success:
                outcomes.append(
                    ContactOutcome(
                        contact=contact,
                        success=True,
                        provider_ref=result.provider_ref,
                        response=result.response,
                    )
                )
            else:
                outcomes.append(
                    ContactOutcome(
                        contact=contact,
                        success=False,
                        response=result.response,
                        error=result.error_reason or PROVIDER_ERROR,
                    )
                )
        return outcomes


def list_history(
    db: Session,
    user_id: int,
    latest_first: bool = False,
    limit: int | None = None,
) -> list[SosEvent]:
    """User's SOS events in insertion order, or newest first."""
    if not db.get(User, user_id):
        raise UserNotFoundError("User not found")

    order = (SosEvent.id.desc(),) if latest_first else (SosEvent.id.asc(),)
    stmt = (
        select(SosEvent)
        .where(SosEvent.user_id == user_id)
        .options(selectinload(SosEvent.send_results))
        .order_by(*order)
    )
    if limit is not None:
        stmt = stmt.limit(limit)
    return list(db.execute(stmt).scalars().all())
