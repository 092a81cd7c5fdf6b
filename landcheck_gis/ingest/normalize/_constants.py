"""Shared constants for geometry normalization."""

from __future__ import annotations

# GeoJSON geometry types the normalizer accepts, by representative-point depth.
POINT_TYPES = frozenset({"Point"})
LINE_TYPES = frozenset({"LineString", "MultiPoint"})
RING_TYPES = frozenset({"Polygon", "MultiLineString"})
MULTI_RING_TYPES = frozenset({"MultiPolygon"})
SUPPORTED_GEOJSON_TYPES = POINT_TYPES | LINE_TYPES | RING_TYPES | MULTI_RING_TYPES

# Sibling keys consulted for a WKT record's centroid fallback.
CENTROID_KEYS: tuple[str, ...] = ("centroid", "centroid_geom")

# Keys that never reach output properties.
GEOMETRY_CARRIER_KEYS = frozenset({"geometry", "geom", "centroid", "centroid_geom"})
BAG_CONTAINER_KEYS = frozenset({"raw_entity", "attributes"})

# Feature id candidates, in priority order.
ID_KEYS: tuple[str, ...] = ("id", "object_id", "govmap_object_id", "OBJECTID")

# GovMap entity field names (Hebrew) mapped to normalized property names.
HEBREW_FIELD_MAP: dict[str, str] = {
    "גוש": "gush_num",
    "מספר גוש": "gush_num",
    "תת גוש": "gush_suffix",
    "חלקה": "parcel",
    "מספר חלקה": "parcel",
    'שטח רשום (מ"ר)': "legal_area",
    "שטח רשום": "legal_area",
    "סוג בעלות": "ownership_type",
    "הערה": "remark",
}

# Rejections per load logged at WARNING before dropping to DEBUG.
REJECTION_WARNING_LIMIT = 5
