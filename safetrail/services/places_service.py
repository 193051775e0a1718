"""Nearby safe places lookup (Overpass API) and distance math."""

from __future__ import annotations

import logging
import math
from dataclasses import dataclass
from typing import Any

import httpx

from safetrail.core.config import settings
from safetrail.core.sos_policies import NEARBY_MAX_RESULTS, SAFE_PLACE_AMENITIES

logger = logging.getLogger(__name__)


class PlacesServiceError(Exception):
    """Raised when the Overpass lookup fails."""


@dataclass
class Place:
    """Safe place near a point, distance in km."""

    type: str
    name: str
    address: str
    lat: float
    lng: float
    distance: float


def haversine_km(lat1: float, lon1: float, lat2: float, lon2: float) -> float:
    """Haversine distance between two lat/lng points in kilometers."""
    R = 6371.0  # Earth radius in km
    dlat = math.radians(lat2 - lat1)
    dlon = math.radians(lon2 - lon1)
    a = (
        math.sin(dlat / 2) ** 2
        + math.cos(math.radians(lat1)) * math.cos(math.radians(lat2)) * math.sin(dlon / 2) ** 2
    )
    return R * 2 * math.atan2(math.sqrt(a), math.sqrt(1 - a))


def build_overpass_query(lat: float, lng: float, radius_m: int, timeout: int = 25) -> str:
    """Overpass QL for police/hospital/clinic nodes around a point."""
    nodes = "\n".join(
        f'  node["amenity"="{amenity}"](around:{radius_m},{lat},{lng});'
        for amenity in SAFE_PLACE_AMENITIES
    )
    return f"[out:json][timeout:{timeout}];\n(\n{nodes}\n);\nout body;\n>;\nout skel qt;"


def _to_place(element: dict[str, Any], lat: float, lng: float) -> Place | None:
    tags = element.get("tags") or {}
    amenity = tags.get("amenity")
    # `out skel` returns tagless nodes too
    if not amenity or element.get("lat") is None or element.get("lon") is None:
        return None
    return Place(
        type=amenity,
        name=tags.get("name") or amenity,
        address=tags.get("addr:street") or "Address not available",
        lat=element["lat"],
        lng=element["lon"],
        distance=round(haversine_km(lat, lng, element["lat"], element["lon"]), 3),
    )


def find_nearby(
    lat: float,
    lng: float,
    radius_m: int,
    client: httpx.Client | None = None,
    limit: int = NEARBY_MAX_RESULTS,
) -> list[Place]:
    """Nearby police stations, hospitals and clinics, closest first."""
    timeout = settings.overpass_timeout_seconds
    query = build_overpass_query(lat, lng, radius_m, int(timeout))
    owns_client = client is None
    http = client or httpx.Client(timeout=timeout + 5)
    try:
        response = http.post(
            settings.overpass_url,
            data={"data": query},
            headers={"Content-Type": "application/x-www-form-urlencoded"},
        )
        response.raise_for_status()
        payload = response.json()
    except (httpx.HTTPError, ValueError) as exc:
        logger.warning("Overpass lookup failed at (%s, %s): %s", lat, lng, exc)
        raise PlacesServiceError(str(exc)) from exc
    finally:
        if owns_client:
            http.close()

    places = [p for p in (_to_place(e, lat, lng) for e in payload.get("elements", [])) if p]
    places.sort(key=lambda p: p.distance)
    return places[:limit]
