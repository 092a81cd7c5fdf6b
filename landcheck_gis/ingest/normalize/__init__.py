"""Geometry normalization — raw backend rows to WGS 84 GeoJSON features.

One normalizer replaces the per-layer if/else chains that each map layer
used to carry. A raw geometry is first tagged by ``detect_envelope`` and
then handled by exactly one branch:

- **GeoJSON** (``type`` + ``coordinates``): classify the representative
  vertex; WGS 84 geometries pass through (axis-fixed if swapped),
  projected ones degrade to a single centroid ``Point``
- **JSON string**: parsed, then treated as GeoJSON or as a centroid
- **WKT string**: never parsed; a sibling centroid is required
- **Centroid array / object**: classified and emitted as a ``Point``
- **Missing**: rejected

The pipeline is split into focused stages:
- **_coordinates**: numeric coercion, representative vertex, axis swap,
  shapely planar centroid
- **_properties**: attribute-bag merge and feature id
- **_constants**: geometry type groups, Hebrew field names, key sets

Graceful degradation: ``normalize`` never raises. Every rejection is
counted in ``rejection_reasons`` by error code; the first few of a load
are logged at WARNING and the rest at DEBUG.
"""

from __future__ import annotations

import json
import logging
from collections import Counter
from typing import TYPE_CHECKING, Any

from landcheck_gis.core.exceptions import ValidationError
from landcheck_gis.geodesy.bounds import in_region
from landcheck_gis.geodesy.classify import classify_point
from landcheck_gis.geodesy.transform import (
    TransformDomainError,
    itm_to_wgs84,
    web_mercator_to_wgs84,
)
from landcheck_gis.ingest.normalize._constants import (
    CENTROID_KEYS,
    HEBREW_FIELD_MAP,
    REJECTION_WARNING_LIMIT,
    SUPPORTED_GEOJSON_TYPES,
)
from landcheck_gis.ingest.normalize._coordinates import (
    GeometryMissing,
    GeometryUnsupported,
    MalformedCoordinates,
    WktWithoutCentroid,
    pair_from_sequence,
    planar_centroid,
    point_from_centroid,
    representative_point,
    swap_axes,
    to_float,
)
from landcheck_gis.ingest.normalize._properties import (
    extract_bag,
    feature_id,
    merge_properties,
)
from landcheck_gis.models.envelope import EnvelopeKind, detect_envelope
from landcheck_gis.models.feature import RAW_ENTITY_KEY, NormalizedFeature
from landcheck_gis.models.geometry import ClassifiedPoint, CRSKind

if TYPE_CHECKING:
    from collections.abc import Iterable

    from landcheck_gis.models.feature import RawRecord
    from landcheck_gis.models.geometry import BoundsProfile, Point2D, ViewportBounds

logger = logging.getLogger("landcheck_gis.ingest.normalize")

# ---------------------------------------------------------------------------
# Public API
# ---------------------------------------------------------------------------

__all__ = [
    "HEBREW_FIELD_MAP",
    "SUPPORTED_GEOJSON_TYPES",
    "GeometryMissing",
    "GeometryNormalizer",
    "GeometryUnsupported",
    "MalformedCoordinates",
    "WktWithoutCentroid",
    "extract_bag",
    "feature_id",
    "merge_properties",
    "pair_from_sequence",
    "planar_centroid",
    "point_from_centroid",
    "representative_point",
    "swap_axes",
    "to_float",
]


class GeometryNormalizer:
    """Turns raw records of one layer load into ``NormalizedFeature`` values.

    A normalizer is created per load; its counters describe that load
    only.

    Attributes:
        layer: Layer name, used for synthesized ids and log context.
        profile: Bounds profile every emitted coordinate must satisfy.
        viewport: Optional display window; accepted features outside it
            are filtered (counted, not rejected).
        accepted: Features emitted so far.
        rejected: Records rejected so far.
        filtered: Accepted features dropped by the viewport.
        rejection_reasons: Rejection counts keyed by error code.
    """

    def __init__(
        self,
        layer: str,
        profile: BoundsProfile,
        *,
        viewport: ViewportBounds | None = None,
    ) -> None:
        self.layer = layer
        self.profile = profile
        self.viewport = viewport
        self.accepted = 0
        self.rejected = 0
        self.filtered = 0
        self.rejection_reasons: Counter[str] = Counter()
        self._sequence = 0

    # -- public ----------------------------------------------------------

    def normalize(self, record: RawRecord) -> NormalizedFeature | None:
        """Normalize one record, or return ``None`` if rejected or filtered."""
        self._sequence += 1
        sequence = self._sequence

        try:
            geometry, anchor, degraded = self._resolve_geometry(record)
        except ValidationError as exc:
            self._reject(exc, sequence)
            return None

        if self.viewport is not None and not self.viewport.contains(anchor.lat, anchor.lng):
            self.filtered += 1
            return None

        self.accepted += 1
        properties = merge_properties(record.properties)
        return NormalizedFeature(
            id=feature_id(properties, self.layer, sequence),
            properties=properties,
            geometry=geometry,
            degraded=degraded,
        )

    def normalize_page(self, records: Iterable[RawRecord]) -> list[NormalizedFeature]:
        """Normalize a page of records, keeping accepted features in input order."""
        features: list[NormalizedFeature] = []
        for record in records:
            feature = self.normalize(record)
            if feature is not None:
                features.append(feature)
        return features

    def stats(self) -> dict[str, Any]:
        return {
            "accepted": self.accepted,
            "rejected": self.rejected,
            "filtered": self.filtered,
            "rejection_reasons": dict(self.rejection_reasons),
        }

    # -- dispatch --------------------------------------------------------

    def _resolve_geometry(
        self, record: RawRecord
    ) -> tuple[dict[str, Any], ClassifiedPoint, bool]:
        """Return ``(geojson_geometry, anchor_point, degraded)`` for *record*."""
        envelope = detect_envelope(record.geometry)

        if envelope.kind is EnvelopeKind.MISSING:
            msg = "record has no geometry"
            raise GeometryMissing(msg, layer=self.layer)

        if envelope.kind is EnvelopeKind.JSON_STRING:
            envelope = detect_envelope(_parse_json(envelope.payload))
            if envelope.kind is not EnvelopeKind.GEOJSON and not envelope.is_centroid:
                msg = "JSON geometry string is neither GeoJSON nor a centroid"
                raise GeometryUnsupported(msg, layer=self.layer)

        if envelope.kind is EnvelopeKind.GEOJSON:
            return self._from_geojson(envelope.payload)

        if envelope.kind is EnvelopeKind.WKT_STRING:
            centroid = _sibling_centroid(record.properties)
            if centroid is None:
                msg = f"WKT without centroid fallback ({envelope.wkt_type})"
                raise WktWithoutCentroid(msg, layer=self.layer)
            point = self._classify(point_from_centroid(centroid))
            return _point_geometry(point), point, True

        if envelope.is_centroid:
            point = self._classify(point_from_centroid(envelope.payload))
            return _point_geometry(point), point, False

        msg = f"unsupported geometry value of type {type(envelope.payload).__name__}"
        raise GeometryUnsupported(msg, layer=self.layer)

    def _from_geojson(
        self, geometry: dict[str, Any]
    ) -> tuple[dict[str, Any], ClassifiedPoint, bool]:
        geom_type = geometry.get("type")
        if not isinstance(geom_type, str) or geom_type not in SUPPORTED_GEOJSON_TYPES:
            msg = f"unsupported GeoJSON geometry type {geom_type!r}"
            raise GeometryUnsupported(msg, layer=self.layer)

        anchor = self._classify(representative_point(geometry))
        coordinates = geometry["coordinates"]

        if not anchor.needs_conversion:
            if anchor.swapped:
                coordinates = swap_axes(coordinates)
            return {"type": geom_type, "coordinates": coordinates}, anchor, False

        if geom_type == "Point":
            return _point_geometry(anchor), anchor, False

        centroid = self._projected_centroid(geometry, anchor)
        point = centroid if centroid is not None else anchor
        return _point_geometry(point), point, True

    # -- helpers ---------------------------------------------------------

    def _classify(self, point: Point2D) -> ClassifiedPoint:
        return classify_point(point, self.profile)

    def _projected_centroid(
        self, geometry: dict[str, Any], anchor: ClassifiedPoint
    ) -> ClassifiedPoint | None:
        """Planar centroid pushed through the anchor's CRS and axis decision."""
        raw = planar_centroid(geometry)
        if raw is None:
            return None
        if anchor.swapped:
            raw = raw.swapped()

        transform = itm_to_wgs84 if anchor.source_crs is CRSKind.ITM else web_mercator_to_wgs84
        try:
            lat, lng = transform(raw.x, raw.y)
        except TransformDomainError:
            return None
        if not in_region(lat, lng, self.profile):
            logger.debug(
                "degraded centroid out of bounds | layer=%s | lat=%s | lng=%s",
                self.layer,
                lat,
                lng,
            )
            return None
        return ClassifiedPoint(lat=lat, lng=lng, source_crs=anchor.source_crs, swapped=anchor.swapped)

    def _reject(self, exc: ValidationError, sequence: int) -> None:
        exc.layer = exc.layer or self.layer
        self.rejected += 1
        self.rejection_reasons[exc.code] += 1
        level = logging.WARNING if self.rejected <= REJECTION_WARNING_LIMIT else logging.DEBUG
        logger.log(
            level,
            "record rejected | layer=%s | seq=%d | code=%s | error=%s",
            self.layer,
            sequence,
            exc.code,
            exc.message,
        )


# ---------------------------------------------------------------------------
# Module-private helpers
# ---------------------------------------------------------------------------


def _parse_json(text: str) -> Any:
    try:
        return json.loads(text)
    except json.JSONDecodeError as exc:
        msg = f"geometry string is not valid JSON: {exc.msg}"
        raise MalformedCoordinates(msg) from exc
    except RecursionError as exc:
        msg = "geometry string is nested too deeply"
        raise MalformedCoordinates(msg) from exc


def _sibling_centroid(properties: dict[str, Any]) -> Any:
    """Centroid value stored next to a WKT geometry, decoded if it is JSON text."""
    value = None
    for key in CENTROID_KEYS:
        if properties.get(key) is not None:
            value = properties[key]
            break
    if value is None:
        raw_entity = properties.get(RAW_ENTITY_KEY)
        if isinstance(raw_entity, dict):
            value = raw_entity.get("centroid")

    if isinstance(value, str):
        envelope = detect_envelope(value)
        if envelope.kind is not EnvelopeKind.JSON_STRING:
            return None
        value = _parse_json(envelope.payload)
        if isinstance(value, dict) and value.get("type") == "Point":
            value = value.get("coordinates")
    elif isinstance(value, dict) and value.get("type") == "Point":
        value = value.get("coordinates")
    return value


def _point_geometry(point: ClassifiedPoint) -> dict[str, Any]:
    return {"type": "Point", "coordinates": [point.lng, point.lat]}
