"""Location history and nearby place schemas."""

from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


class LocationReport(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    user_id: int
    lat: float = Field(ge=-90, le=90)
    lng: float = Field(ge=-180, le=180)


class LocationPingResponse(BaseModel):
    id: int
    lat: float
    lng: float
    timestamp: datetime


class LocationHistoryResponse(BaseModel):
    success: bool = True
    locations: list[LocationPingResponse]


class PlaceResponse(BaseModel):
    type: str  # police | hospital | clinic
    name: str
    address: str
    lat: float
    lng: float
    distance: float  # km


class NearbyPlacesResponse(BaseModel):
    success: bool
    message: str | None = None
    places: list[PlaceResponse] = []
