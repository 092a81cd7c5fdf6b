"""Coordinate extraction helpers for geometry normalization.

Responsibilities:
- Coercing raw numbers (and numeric strings) to floats
- Reading centroid arrays and centroid objects as ``Point2D``
- Picking the representative vertex of a GeoJSON geometry
- Axis-swapping every vertex of a GeoJSON coordinate tree
- Planar centroids of projected geometries via shapely
"""

from __future__ import annotations

import logging
import math
from typing import Any

from landcheck_gis.core.exceptions import ValidationError
from landcheck_gis.ingest.normalize._constants import (
    LINE_TYPES,
    MULTI_RING_TYPES,
    POINT_TYPES,
    RING_TYPES,
)
from landcheck_gis.models.geometry import Point2D

logger = logging.getLogger("landcheck_gis.ingest.normalize")


# ---------------------------------------------------------------------------
# Exceptions (public API, re-exported from __init__)
# ---------------------------------------------------------------------------


class GeometryUnsupported(ValidationError):
    """Raised when a record's geometry cannot be turned into a feature."""

    default_stage = "normalize"
    default_code = "GEOMETRY_UNSUPPORTED"


class GeometryMissing(GeometryUnsupported):
    """Raised when a record carries no geometry at all."""

    default_code = "GEOMETRY_MISSING"


class MalformedCoordinates(GeometryUnsupported):
    """Raised when coordinates are present but not a usable numeric pair."""

    default_code = "GEOMETRY_MALFORMED"


class WktWithoutCentroid(GeometryUnsupported):
    """Raised for WKT text with no sibling centroid to fall back to."""

    default_code = "WKT_WITHOUT_CENTROID"


# ---------------------------------------------------------------------------
# Scalars and pairs
# ---------------------------------------------------------------------------


def to_float(value: object) -> float:
    """Coerce a number or numeric string to a finite float.

    Raises:
        MalformedCoordinates: On booleans, non-numeric text, or NaN/inf.
    """
    if isinstance(value, bool):
        msg = f"boolean {value!r} is not a coordinate"
        raise MalformedCoordinates(msg)
    if isinstance(value, int | float):
        result = float(value)
    elif isinstance(value, str):
        try:
            result = float(value.strip())
        except ValueError as exc:
            msg = f"non-numeric coordinate {value!r}"
            raise MalformedCoordinates(msg) from exc
    else:
        msg = f"coordinate must be a number, got {type(value).__name__}"
        raise MalformedCoordinates(msg)

    if not math.isfinite(result):
        msg = f"non-finite coordinate {value!r}"
        raise MalformedCoordinates(msg)
    return result


def pair_from_sequence(values: object) -> Point2D:
    """Read the first two entries of ``[x, y, ...]`` as a ``Point2D``.

    Raises:
        MalformedCoordinates: If *values* is not a sequence of at least
            two numeric entries.
    """
    if not isinstance(values, list | tuple) or len(values) < 2:
        msg = f"expected [x, y, ...], got {values!r}"
        raise MalformedCoordinates(msg)
    return Point2D(to_float(values[0]), to_float(values[1]))


def point_from_centroid(payload: object) -> Point2D:
    """Read a centroid array or centroid object as a raw ``(x, y)`` pair.

    Accepted shapes: ``[x, y, ...]``, ``{"coordinates": [x, y]}``,
    ``{"lng"|"lon": ..., "lat": ...}`` (read as ``x=lng, y=lat``) and
    ``{"x": ..., "y": ...}``.

    Raises:
        MalformedCoordinates: If no accepted shape matches.
    """
    if isinstance(payload, list | tuple):
        return pair_from_sequence(payload)

    if isinstance(payload, dict):
        if "coordinates" in payload:
            return pair_from_sequence(payload["coordinates"])
        if "lat" in payload and ("lng" in payload or "lon" in payload):
            lng = payload["lng"] if "lng" in payload else payload["lon"]
            return Point2D(to_float(lng), to_float(payload["lat"]))
        if "x" in payload and "y" in payload:
            return Point2D(to_float(payload["x"]), to_float(payload["y"]))

    msg = f"unrecognised centroid shape {payload!r}"
    raise MalformedCoordinates(msg)


# ---------------------------------------------------------------------------
# GeoJSON geometries
# ---------------------------------------------------------------------------


def representative_point(geometry: dict[str, Any]) -> Point2D:
    """Return the vertex used to classify a whole GeoJSON geometry.

    - ``Point``: the point itself
    - ``LineString`` / ``MultiPoint``: the first vertex
    - ``Polygon`` / ``MultiLineString``: first vertex of the first ring
    - ``MultiPolygon``: first vertex of the first ring of the first polygon

    Raises:
        GeometryUnsupported: For any other geometry type.
        MalformedCoordinates: If the coordinate nesting is wrong or empty.
    """
    geom_type = geometry.get("type")
    coords = geometry.get("coordinates")
    if not isinstance(geom_type, str):
        msg = f"unsupported GeoJSON geometry type {geom_type!r}"
        raise GeometryUnsupported(msg)
    try:
        if geom_type in POINT_TYPES:
            vertex = coords
        elif geom_type in LINE_TYPES:
            vertex = coords[0]  # type: ignore[index]
        elif geom_type in RING_TYPES:
            vertex = coords[0][0]  # type: ignore[index]
        elif geom_type in MULTI_RING_TYPES:
            vertex = coords[0][0][0]  # type: ignore[index]
        else:
            msg = f"unsupported GeoJSON geometry type {geom_type!r}"
            raise GeometryUnsupported(msg)
    except (IndexError, KeyError, TypeError) as exc:
        msg = f"malformed {geom_type} coordinates"
        raise MalformedCoordinates(msg) from exc
    return pair_from_sequence(vertex)


def swap_axes(coordinates: Any) -> Any:
    """Swap the first two ordinates of every position in a coordinate tree.

    Extra ordinates (Z, M) are kept in place.
    """
    if isinstance(coordinates, list | tuple) and coordinates:
        if not isinstance(coordinates[0], list | tuple):
            if len(coordinates) < 2:
                msg = f"position needs two ordinates, got {coordinates!r}"
                raise MalformedCoordinates(msg)
            return [coordinates[1], coordinates[0], *coordinates[2:]]
        return [swap_axes(child) for child in coordinates]
    return coordinates


def planar_centroid(geometry: dict[str, Any]) -> Point2D | None:
    """Centroid of *geometry* in its own (projected) plane, or ``None``.

    Returns ``None`` when shapely cannot build the geometry or the
    result is empty; the caller then falls back to the representative
    point.
    """
    from shapely.errors import GEOSException
    from shapely.geometry import shape

    try:
        centroid = shape(geometry).centroid
    except (GEOSException, AttributeError, IndexError, KeyError, TypeError, ValueError) as exc:
        logger.debug(
            "planar centroid failed | type=%s | error=%s",
            geometry.get("type"),
            exc,
        )
        return None

    if centroid.is_empty:
        return None
    point = Point2D(float(centroid.x), float(centroid.y))
    return point if point.is_finite else None
