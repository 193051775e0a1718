"""SOS dispatch and nearby-lookup policy constants."""

from __future__ import annotations

# Trigger source recorded when the client does not send one
DEFAULT_TRIGGER_SOURCE = "button"

# Known trigger sources (informational, not enforced)
KNOWN_TRIGGER_SOURCES = ("button", "volume", "voice", "auto")

# Default search radius for nearby safe places, in meters
DEFAULT_NEARBY_RADIUS_M = 5000

# Upper bound accepted for the nearby radius, in meters
MAX_NEARBY_RADIUS_M = 50000

# Max places returned from a nearby lookup
NEARBY_MAX_RESULTS = 15

# Overpass amenity tags considered "safe places"
SAFE_PLACE_AMENITIES = ("police", "hospital", "clinic")

# Reason recorded for contacts skipped once the dispatch budget ran out
BUDGET_EXCEEDED_REASON = "dispatch time budget exceeded"
