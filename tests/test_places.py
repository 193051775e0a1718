"""Nearby places + distance tests."""

from urllib.parse import parse_qs

import httpx
import pytest

from safetrail.services import places_service
from safetrail.services.places_service import PlacesServiceError, build_overpass_query, find_nearby, haversine_km

OVERPASS_ELEMENTS = {
    "elements": [
        {"type": "node", "id": 1, "lat": 12.99, "lon": 77.59, "tags": {"amenity": "hospital", "name": "City Hospital"}},
        {"type": "node", "id": 2, "lat": 12.971, "lon": 77.594, "tags": {"amenity": "police", "addr:street": "MG Road"}},
        {"type": "node", "id": 3, "lat": 12.98, "lon": 77.60},
    ]
}


def test_haversine_known_distance():
    # Bangalore -> Chennai ~ 290 km
    assert haversine_km(12.9716, 77.5946, 13.0827, 80.2707) == pytest.approx(290, abs=5)
    assert haversine_km(0, 0, 0, 0) == 0


def test_overpass_query_covers_amenities():
    q = build_overpass_query(1.5, 2.5, 5000)
    for amenity in ("police", "hospital", "clinic"):
        assert f'node["amenity"="{amenity}"](around:5000,1.5,2.5);' in q


def test_find_nearby_sorts_and_maps():
    captured = {}

    def handler(request):
        captured["form"] = parse_qs(request.content.decode())
        return httpx.Response(200, json=OVERPASS_ELEMENTS)

    client = httpx.Client(transport=httpx.MockTransport(handler))
    places = find_nearby(12.9716, 77.5946, 5000, client=client)

    assert "around:5000,12.9716,77.5946" in captured["form"]["data"][0]
    assert [p.type for p in places] == ["police", "hospital"]
    assert places[0].name == "police"
    assert places[0].address == "MG Road"
    assert places[1].name == "City Hospital"
    assert places[1].address == "Address not available"
    assert places[0].distance < places[1].distance


def test_find_nearby_limit():
    many = {"elements": [{"lat": 1 + i / 1000, "lon": 1, "tags": {"amenity": "clinic"}} for i in range(20)]}
    client = httpx.Client(transport=httpx.MockTransport(lambda r: httpx.Response(200, json=many)))
    assert len(find_nearby(1, 1, 5000, client=client)) == 15


def test_find_nearby_upstream_error():
    client = httpx.Client(transport=httpx.MockTransport(lambda r: httpx.Response(504)))
    with pytest.raises(PlacesServiceError):
        find_nearby(1, 1, 5000, client=client)


def test_nearby_places_endpoint(client, monkeypatch):
    def fake_find(lat, lng, radius):
        assert (lat, lng, radius) == (0.0, 0.0, 5000)
        return [places_service.Place("police", "Station", "Address not available", 0.001, 0.0, 0.111)]

    monkeypatch.setattr(places_service, "find_nearby", fake_find)
    r = client.get("/api/nearby-places", params={"lat": 0, "lng": 0})
    assert r.status_code == 200
    assert r.json()["success"] is True
    assert r.json()["places"][0]["name"] == "Station"


def test_nearby_places_endpoint_failure(client, monkeypatch):
    def boom(lat, lng, radius):
        raise PlacesServiceError("down")

    monkeypatch.setattr(places_service, "find_nearby", boom)
    r = client.get("/api/nearby-places", params={"lat": 1, "lng": 1, "radius": 1000})
    assert r.status_code == 200
    assert r.json() == {"success": False, "message": "Failed to fetch nearby places", "places": []}


def test_nearby_places_requires_coordinates(client):
    assert client.get("/api/nearby-places", params={"lat": 1}).status_code == 422
