"""SOS dispatch and history API."""

from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from safetrail.core.deps import get_sos_dispatcher
from safetrail.db.session import get_db
from safetrail.models.sos_event import SosEvent
from safetrail.schemas.sos import (
    SmsResult,
    SosDetails,
    SosDispatchResponse,
    SosHistoryItem,
    SosHistoryResponse,
    SosLocation,
    SosRequest,
)
from safetrail.services.sos_service import DispatchResult, SosDispatcher, as_utc, list_history

router = APIRouter(prefix="/sos", tags=["sos"])


def _dispatch_response(result: DispatchResult) -> SosDispatchResponse:
    return SosDispatchResponse(
        success=result.success,
        message=result.message,
        event_id=result.event_id,
        details=SosDetails(
            contacts_total=result.contacts_total,
            contacts_notified=result.contacts_notified,
            location=SosLocation(lat=result.latitude, lng=result.longitude),
            timestamp=result.timestamp,
            triggered_by=result.triggered_by,
        ),
        sms_results=[
            SmsResult(contact=o.contact, success=o.success, response=o.response, error=o.error)
            for o in result.outcomes
        ],
    )


def _history_item(event: SosEvent) -> SosHistoryItem:
    return SosHistoryItem(
        id=event.id,
        location=SosLocation(lat=event.latitude, lng=event.longitude),
        timestamp=as_utc(event.created_at),
        triggered_by=event.triggered_by,
        contacts_notified=list(event.contacts_notified),
        successful_sends=event.successful_sends,
        sms_results=[
            SmsResult(contact=r.contact, success=r.success, response=r.response, error=r.error)
            for r in event.send_results
        ],
    )


@router.post("", response_model=SosDispatchResponse, response_model_exclude_none=True)
def trigger_sos(
    data: SosRequest,
    db: Session = Depends(get_db),
    dispatcher: SosDispatcher = Depends(get_sos_dispatcher),
):
    """Send the SOS alert to every emergency contact and record it.

    Guard and orchestration failures are rendered by the SosDispatchError handler.
    """
    result = dispatcher.dispatch(db, data.user_id, data.lat, data.lng, data.triggered_by)
    return _dispatch_response(result)


@router.get("/history/{user_id}", response_model=SosHistoryResponse, response_model_exclude_none=True)
def sos_history(
    user_id: int,
    latest_first: bool = Query(default=False),
    limit: int | None = Query(default=None, ge=1, le=100),
    db: Session = Depends(get_db),
):
    events = list_history(db, user_id, latest_first=latest_first, limit=limit)
    return SosHistoryResponse(history=[_history_item(e) for e in events])
