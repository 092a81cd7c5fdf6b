"""Static bounds profiles and the shared in-region predicate.

Two profiles exist because the same upstream data is consumed twice:
the map view only shows what is plausibly inside Israel proper, while
bulk ingestion accepts a wider margin so near-border records survive.
"""

from __future__ import annotations

import math

from landcheck_gis.models.geometry import BoundsProfile

STRICT = BoundsProfile(name="strict", min_lat=29.0, max_lat=34.0, min_lng=34.0, max_lng=36.0)
"""Map display profile."""

LENIENT = BoundsProfile(name="lenient", min_lat=28.0, max_lat=35.0, min_lng=33.0, max_lng=37.0)
"""Bulk ingestion profile."""

_PROFILES: dict[str, BoundsProfile] = {
    STRICT.name: STRICT,
    LENIENT.name: LENIENT,
}


def in_region(lat: float, lng: float, profile: BoundsProfile) -> bool:
    """Return True when ``(lat, lng)`` is finite and inside *profile* (inclusive)."""
    if not (math.isfinite(lat) and math.isfinite(lng)):
        return False
    return profile.contains(lat, lng)


def get_profile(name: str) -> BoundsProfile:
    """Look up a static profile by name (case-insensitive).

    Raises:
        KeyError: If no profile with that name exists.
    """
    key = name.strip().lower()
    if key not in _PROFILES:
        msg = f"Unknown bounds profile '{name}'. Available: {sorted(_PROFILES)}"
        raise KeyError(msg)
    return _PROFILES[key]


def list_profiles() -> list[str]:
    return sorted(_PROFILES)
