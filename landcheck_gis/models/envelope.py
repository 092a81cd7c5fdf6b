"""Raw geometry envelope — the tagged union of ad hoc geometry shapes.

Upstream tables store geometry in whatever shape the scraper produced:
proper GeoJSON objects, GeoJSON serialized into a text column, WKT text,
bare ``[x, y]`` centroid arrays, or small ``{lng, lat}`` / ``{x, y}``
objects. ``detect_envelope`` is the single place that decides which
shape a value is; everything downstream dispatches on ``EnvelopeKind``.
"""

from __future__ import annotations

import enum
import re
from dataclasses import dataclass
from typing import Any

# WKT tag, optionally prefixed with an EWKT ``SRID=n;`` header.
WKT_PATTERN = re.compile(
    r"^\s*(?:SRID=\d+;)?\s*"
    r"(POINT|LINESTRING|POLYGON|MULTIPOINT|MULTILINESTRING|MULTIPOLYGON|GEOMETRYCOLLECTION)"
    r"\s*(?:ZM|Z|M)?\s*\(",
    re.IGNORECASE,
)


class EnvelopeKind(enum.Enum):
    """Recognised raw geometry shapes."""

    GEOJSON = "geojson"
    JSON_STRING = "json_string"
    WKT_STRING = "wkt_string"
    CENTROID_ARRAY = "centroid_array"
    CENTROID_OBJECT = "centroid_object"
    MISSING = "missing"
    UNSUPPORTED = "unsupported"


@dataclass(frozen=True, slots=True)
class RawGeometryEnvelope:
    """A raw geometry value tagged with its detected shape.

    Attributes:
        kind: The detected envelope shape.
        payload: The raw value (a ``Feature`` wrapper is already unwrapped
            to its ``geometry``).
        wkt_type: Upper-cased WKT geometry tag for ``WKT_STRING`` envelopes.
    """

    kind: EnvelopeKind
    payload: Any = None
    wkt_type: str = ""

    @property
    def is_centroid(self) -> bool:
        return self.kind in (EnvelopeKind.CENTROID_ARRAY, EnvelopeKind.CENTROID_OBJECT)


def detect_envelope(raw: object) -> RawGeometryEnvelope:
    """Classify *raw* into one ``RawGeometryEnvelope`` kind.

    Never raises; values with no recognised shape come back as
    ``UNSUPPORTED`` and ``None``/blank strings as ``MISSING``.
    """
    if raw is None:
        return RawGeometryEnvelope(EnvelopeKind.MISSING)

    if isinstance(raw, str):
        text = raw.strip()
        if not text:
            return RawGeometryEnvelope(EnvelopeKind.MISSING)
        if text[0] in "{[":
            return RawGeometryEnvelope(EnvelopeKind.JSON_STRING, text)
        match = WKT_PATTERN.match(text)
        if match:
            return RawGeometryEnvelope(EnvelopeKind.WKT_STRING, text, match.group(1).upper())
        return RawGeometryEnvelope(EnvelopeKind.UNSUPPORTED, raw)

    if isinstance(raw, dict):
        if raw.get("type") == "Feature":
            return detect_envelope(raw.get("geometry"))
        if "type" in raw and "coordinates" in raw:
            return RawGeometryEnvelope(EnvelopeKind.GEOJSON, raw)
        if "coordinates" in raw:
            return RawGeometryEnvelope(EnvelopeKind.CENTROID_OBJECT, raw)
        if "lat" in raw and ("lng" in raw or "lon" in raw):
            return RawGeometryEnvelope(EnvelopeKind.CENTROID_OBJECT, raw)
        if "x" in raw and "y" in raw:
            return RawGeometryEnvelope(EnvelopeKind.CENTROID_OBJECT, raw)
        return RawGeometryEnvelope(EnvelopeKind.UNSUPPORTED, raw)

    if isinstance(raw, list | tuple):
        return RawGeometryEnvelope(EnvelopeKind.CENTROID_ARRAY, raw)

    return RawGeometryEnvelope(EnvelopeKind.UNSUPPORTED, raw)
