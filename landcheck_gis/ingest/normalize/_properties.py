"""Property merging and feature identity for normalized records.

GovMap-scraped rows carry their attributes twice: once as explicit
columns and once inside a generic bag (``raw_entity.fields`` as
``[{fieldName, fieldValue}]`` or an ``attributes`` dict). The merge puts
bag entries down first and lets explicit, non-null columns win.
"""

from __future__ import annotations

from typing import Any

from landcheck_gis.ingest.normalize._constants import (
    BAG_CONTAINER_KEYS,
    GEOMETRY_CARRIER_KEYS,
    HEBREW_FIELD_MAP,
    ID_KEYS,
)


def extract_bag(properties: dict[str, Any]) -> dict[str, Any]:
    """Flatten the generic attribute bag of a row, mapping known Hebrew names."""
    bag: dict[str, Any] = {}

    raw_entity = properties.get("raw_entity")
    if isinstance(raw_entity, dict):
        fields = raw_entity.get("fields")
        if isinstance(fields, list):
            for entry in fields:
                if not isinstance(entry, dict):
                    continue
                name = entry.get("fieldName")
                if not isinstance(name, str) or not name.strip():
                    continue
                name = name.strip()
                bag[HEBREW_FIELD_MAP.get(name, name)] = entry.get("fieldValue")
        elif isinstance(raw_entity.get("attributes"), dict):
            bag.update(raw_entity["attributes"])

    attributes = properties.get("attributes")
    if isinstance(attributes, dict):
        for key, value in attributes.items():
            bag.setdefault(HEBREW_FIELD_MAP.get(key, key), value)

    return bag


def merge_properties(properties: dict[str, Any]) -> dict[str, Any]:
    """Build output properties from a raw row.

    Bag entries first, then explicit top-level values override them
    unless the explicit value is ``None``. Geometry carriers and bag
    containers are dropped.
    """
    merged = extract_bag(properties)
    for key, value in properties.items():
        if key in GEOMETRY_CARRIER_KEYS or key in BAG_CONTAINER_KEYS:
            continue
        if value is None and key in merged:
            continue
        merged[key] = value
    return merged


def feature_id(properties: dict[str, Any], layer: str, sequence: int) -> str | int:
    """First non-null id-like column, else ``"{layer}:{sequence}"``."""
    for key in ID_KEYS:
        value = properties.get(key)
        if value is not None:
            return value if isinstance(value, str | int) and not isinstance(value, bool) else str(value)
    return f"{layer}:{sequence}"
