"""Data models for raw backend records and normalized map features.

A ``RawRecord`` is one row of a layer chunk exactly as the backend sent
it. A ``NormalizedFeature`` is the output of the geometry normalizer and
the unit the accumulator stores and the map renders.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any

# Keys that may carry a row's geometry, in lookup order.
GEOMETRY_KEYS: tuple[str, ...] = ("geometry", "geom", "centroid", "centroid_geom")

# Generic attribute-bag container holding the scraped GovMap entity.
RAW_ENTITY_KEY = "raw_entity"

DEGRADED_PROPERTY = "_degraded"


@dataclass(frozen=True, slots=True)
class RawRecord:
    """One raw row from a layer chunk.

    Attributes:
        properties: All non-geometry fields of the row (the generic
            attribute bag, if any, is still nested in here).
        geometry: The raw geometry value in whatever shape upstream used.
    """

    properties: dict[str, Any] = field(default_factory=dict)
    geometry: Any = None

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> RawRecord:
        """Build a record from a GeoJSON ``Feature`` or a flat backend row.

        For flat rows the geometry is taken from the first non-null of
        ``geometry``, ``geom``, ``centroid``, ``centroid_geom`` and
        finally ``raw_entity.centroid``. A ``Feature`` whose geometry is
        null falls back to the same keys inside its properties.

        Raises:
            TypeError: If *data* is not a dict.
        """
        if not isinstance(data, dict):
            msg = f"record must be a dict, got {type(data).__name__}"
            raise TypeError(msg)

        if data.get("type") == "Feature":
            props_raw = data.get("properties")
            properties = dict(props_raw) if isinstance(props_raw, dict) else {}
            geometry = data.get("geometry")
            if geometry is None:
                geometry = _find_geometry(properties)
            return cls(properties=properties, geometry=geometry)

        properties = {k: v for k, v in data.items() if k != "geometry"}
        return cls(properties=properties, geometry=_find_geometry(data))

    @classmethod
    def from_row(cls, row: object) -> RawRecord:
        """Like ``from_dict`` but never raises; non-dict rows get no geometry."""
        if isinstance(row, dict):
            return cls.from_dict(row)
        return cls()


def _find_geometry(row: dict[str, Any]) -> Any:
    for key in GEOMETRY_KEYS:
        value = row.get(key)
        if value is not None:
            return value
    raw_entity = row.get(RAW_ENTITY_KEY)
    if isinstance(raw_entity, dict):
        return raw_entity.get("centroid")
    return None


@dataclass(frozen=True, slots=True)
class NormalizedFeature:
    """A validated map feature with WGS 84 GeoJSON geometry.

    Attributes:
        id: Stable identifier (row id, GovMap object id, or synthesized).
        properties: Merged, flattened attribute map.
        geometry: GeoJSON geometry dict; coordinates are always WGS 84.
        degraded: True when a projected polygon/line was reduced to a
            single Point at its centroid instead of being reprojected.
    """

    id: str | int
    properties: dict[str, Any] = field(default_factory=dict)
    geometry: dict[str, Any] = field(default_factory=dict)
    degraded: bool = False

    @property
    def geometry_type(self) -> str:
        return str(self.geometry.get("type", ""))

    def to_dict(self) -> dict[str, Any]:
        """Serialise to a GeoJSON ``Feature`` dict."""
        properties = dict(self.properties)
        if self.degraded:
            properties[DEGRADED_PROPERTY] = True
        return {
            "type": "Feature",
            "id": self.id,
            "properties": properties,
            "geometry": self.geometry,
        }
