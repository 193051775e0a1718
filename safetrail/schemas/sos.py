"""SOS dispatch schemas."""

from datetime import datetime
from typing import Any

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

from safetrail.core.sos_policies import DEFAULT_TRIGGER_SOURCE


class _CamelModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class SosRequest(_CamelModel):
    """SOS trigger. Presence of user_id/lat/lng is checked by the dispatcher."""

    user_id: int | None = None
    lat: float | None = Field(default=None, ge=-90, le=90)
    lng: float | None = Field(default=None, ge=-180, le=180)
    triggered_by: str | None = Field(default=DEFAULT_TRIGGER_SOURCE, max_length=50)


class SosLocation(_CamelModel):
    lat: float
    lng: float


class SosDetails(_CamelModel):
    contacts_total: int
    contacts_notified: int
    location: SosLocation
    timestamp: datetime
    triggered_by: str


class SmsResult(_CamelModel):
    contact: str
    success: bool
    response: dict[str, Any] | None = None
    error: str | None = None


class SosDispatchResponse(_CamelModel):
    success: bool
    message: str
    event_id: int
    details: SosDetails
    sms_results: list[SmsResult]


class SosFailureResponse(_CamelModel):
    success: bool = False
    message: str
    error: str
    event_recorded: bool = False


class SosHistoryItem(_CamelModel):
    id: int
    location: SosLocation
    timestamp: datetime
    triggered_by: str
    contacts_notified: list[str]
    successful_sends: int
    sms_results: list[SmsResult]


class SosHistoryResponse(_CamelModel):
    success: bool = True
    history: list[SosHistoryItem]
