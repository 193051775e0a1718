"""Location history and nearby places API."""

from fastapi import APIRouter, Depends, HTTPException, Query, status
from sqlalchemy.orm import Session

from safetrail.core.sos_policies import DEFAULT_NEARBY_RADIUS_M, MAX_NEARBY_RADIUS_M
from safetrail.db.session import get_db
from safetrail.schemas.location import (
    LocationHistoryResponse,
    LocationPingResponse,
    LocationReport,
    NearbyPlacesResponse,
    PlaceResponse,
)
from safetrail.services import places_service
from safetrail.services.location_service import list_locations, record_location
from safetrail.services.sos_service import as_utc

router = APIRouter(tags=["location"])


@router.post("/location", response_model=LocationPingResponse)
def report_location(data: LocationReport, db: Session = Depends(get_db)):
    """Append the user's current position to their location history."""
    ping = record_location(db, data.user_id, data.lat, data.lng)
    if ping is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="User not found")
    return LocationPingResponse(
        id=ping.id, lat=ping.latitude, lng=ping.longitude, timestamp=as_utc(ping.created_at)
    )


@router.get("/location/{user_id}", response_model=LocationHistoryResponse)
def location_history(
    user_id: int,
    limit: int = Query(default=50, ge=1, le=500),
    db: Session = Depends(get_db),
):
    pings = list_locations(db, user_id, limit)
    return LocationHistoryResponse(
        locations=[
            LocationPingResponse(id=p.id, lat=p.latitude, lng=p.longitude, timestamp=as_utc(p.created_at))
            for p in pings
        ]
    )


@router.get("/nearby-places", response_model=NearbyPlacesResponse)
def nearby_places(
    lat: float = Query(..., ge=-90, le=90),
    lng: float = Query(..., ge=-180, le=180),
    radius: int = Query(default=DEFAULT_NEARBY_RADIUS_M, ge=1, le=MAX_NEARBY_RADIUS_M),
):
    """Police stations, hospitals and clinics around a point, closest first."""
    try:
        places = places_service.find_nearby(lat, lng, radius)
    except places_service.PlacesServiceError:
        return NearbyPlacesResponse(success=False, message="Failed to fetch nearby places", places=[])
    return NearbyPlacesResponse(
        success=True,
        places=[PlaceResponse(**vars(p)) for p in places],
    )
