"""Typed coordinate models shared by the geodesy and ingestion layers.

- ``Point2D``: an ambiguous raw numeric pair (unit and CRS unknown)
- ``CRSKind``: the coordinate systems the upstream data is known to use
- ``ClassifiedPoint``: a pair resolved to a validated WGS 84 position
- ``CandidateAttempt``: one interpretation tried by the classifier
- ``BoundsProfile``: a named lat/lng region box
- ``ViewportBounds``: a caller-supplied display window

Design notes:
- All models are frozen dataclasses; bounds are inclusive.
- Latitude/longitude are degrees; projected coordinates are metres.
- No magic strings — coordinate systems are a ``CRSKind`` enum.
"""

from __future__ import annotations

import enum
import math
from dataclasses import dataclass

from landcheck_gis.core.exceptions import LandCheckError

# ---------------------------------------------------------------------------
# Validation
# ---------------------------------------------------------------------------


class ModelValidationError(ValueError, LandCheckError):
    """Raised when a domain model is constructed with invalid field values.

    Attributes:
        model: Name of the model class that failed validation.
        field_name: The field that violated the invariant.
        value: The invalid value.
    """

    default_stage = "model_validation"
    default_code = "MODEL_VALIDATION_FAILED"

    def __init__(self, model: str, field_name: str, value: object, message: str) -> None:
        self.model = model
        self.field_name = field_name
        self.value = value
        formatted = f"{model}.{field_name}={value!r}: {message}"
        LandCheckError.__init__(self, formatted)


# ---------------------------------------------------------------------------
# Enums
# ---------------------------------------------------------------------------


class CRSKind(enum.Enum):
    """Coordinate reference systems observed in the upstream tables.

    Values:
        WGS84:        Geographic lat/lng (EPSG:4326), what GeoJSON expects.
        ITM:          Israeli Transverse Mercator grid (EPSG:2039), metres.
        WEB_MERCATOR: Spherical Web Mercator (EPSG:3857), metres.
    """

    WGS84 = "EPSG:4326"
    ITM = "EPSG:2039"
    WEB_MERCATOR = "EPSG:3857"


# ---------------------------------------------------------------------------
# Points
# ---------------------------------------------------------------------------


@dataclass(frozen=True, slots=True)
class Point2D:
    """A raw coordinate pair exactly as stored upstream."""

    x: float
    y: float

    @property
    def is_finite(self) -> bool:
        return math.isfinite(self.x) and math.isfinite(self.y)

    def swapped(self) -> Point2D:
        return Point2D(self.y, self.x)


@dataclass(frozen=True, slots=True)
class ClassifiedPoint:
    """A raw pair resolved to a WGS 84 position inside a bounds profile.

    Attributes:
        lat: Latitude in degrees.
        lng: Longitude in degrees.
        source_crs: The coordinate system the raw pair was read as.
        swapped: Whether the raw axis order had to be flipped.
    """

    lat: float
    lng: float
    source_crs: CRSKind
    swapped: bool = False

    @property
    def coordinates(self) -> tuple[float, float]:
        """GeoJSON ``(lng, lat)`` order."""
        return (self.lng, self.lat)

    @property
    def needs_conversion(self) -> bool:
        """True when the raw value was projected (ITM or Web Mercator)."""
        return self.source_crs is not CRSKind.WGS84

    def to_dict(self) -> dict[str, object]:
        return {
            "lat": self.lat,
            "lng": self.lng,
            "source_crs": self.source_crs.value,
            "swapped": self.swapped,
        }


@dataclass(frozen=True, slots=True)
class CandidateAttempt:
    """One CRS interpretation tried while classifying a raw pair.

    ``lat``/``lng`` are ``None`` when the transform itself failed
    (non-finite input or overflow).
    """

    crs: CRSKind
    swapped: bool
    lat: float | None
    lng: float | None
    reason: str = ""

    def to_dict(self) -> dict[str, object]:
        return {
            "crs": self.crs.value,
            "swapped": self.swapped,
            "lat": self.lat,
            "lng": self.lng,
            "reason": self.reason,
        }


# ---------------------------------------------------------------------------
# Region boxes
# ---------------------------------------------------------------------------


@dataclass(frozen=True, slots=True)
class BoundsProfile:
    """A named, inclusive lat/lng box describing the target region.

    Attributes:
        name: Profile identifier (``"strict"``, ``"lenient"``).
        min_lat: Southern edge in degrees.
        max_lat: Northern edge in degrees.
        min_lng: Western edge in degrees.
        max_lng: Eastern edge in degrees.
    """

    name: str
    min_lat: float
    max_lat: float
    min_lng: float
    max_lng: float

    def __post_init__(self) -> None:
        if not self.name or not self.name.strip():
            raise ModelValidationError("BoundsProfile", "name", self.name, "must not be empty")
        _check_ordered("BoundsProfile", "min_lat", self.min_lat, self.max_lat)
        _check_ordered("BoundsProfile", "min_lng", self.min_lng, self.max_lng)

    def contains(self, lat: float, lng: float) -> bool:
        return self.min_lat <= lat <= self.max_lat and self.min_lng <= lng <= self.max_lng


@dataclass(frozen=True, slots=True)
class ViewportBounds:
    """The visible map window, used to filter accepted features."""

    min_lat: float
    max_lat: float
    min_lng: float
    max_lng: float

    def __post_init__(self) -> None:
        _check_ordered("ViewportBounds", "min_lat", self.min_lat, self.max_lat)
        _check_ordered("ViewportBounds", "min_lng", self.min_lng, self.max_lng)

    def contains(self, lat: float, lng: float) -> bool:
        return self.min_lat <= lat <= self.max_lat and self.min_lng <= lng <= self.max_lng

    @classmethod
    def from_dict(cls, data: dict[str, object]) -> ViewportBounds:
        """Build from the backend's ``minLat``/``maxLat``/``minLng``/``maxLng`` keys.

        Raises:
            ModelValidationError: If a key is missing or not numeric.
        """
        values: dict[str, float] = {}
        for key, attr in (
            ("minLat", "min_lat"),
            ("maxLat", "max_lat"),
            ("minLng", "min_lng"),
            ("maxLng", "max_lng"),
        ):
            raw = data.get(key)
            try:
                values[attr] = float(raw)  # type: ignore[arg-type]
            except (TypeError, ValueError) as exc:
                raise ModelValidationError("ViewportBounds", attr, raw, "must be a number") from exc
        return cls(**values)


# ---------------------------------------------------------------------------
# Validation helpers (module-private)
# ---------------------------------------------------------------------------


def _check_ordered(model: str, field_name: str, lo: float, hi: float) -> None:
    """Raise ``ModelValidationError`` unless ``lo <= hi`` and both are finite."""
    if not (math.isfinite(lo) and math.isfinite(hi)):
        raise ModelValidationError(model, field_name, lo, "bounds must be finite")
    if lo > hi:
        raise ModelValidationError(model, field_name, lo, f"must be <= {hi}")
