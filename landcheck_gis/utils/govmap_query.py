"""GovMap point-radius query builders.

GovMap's ArcGIS REST services and its layers-catalog API both expect
ITM (EPSG:2039) coordinates, while everything the dashboard holds is
WGS 84. These helpers convert once with ``wgs84_to_itm`` and produce
ready-to-send request parameters; they perform no I/O.
"""

from __future__ import annotations

import json

from landcheck_gis.core.exceptions import ValidationError
from landcheck_gis.geodesy.bounds import LENIENT, in_region
from landcheck_gis.geodesy.transform import wgs84_to_itm

GOVMAP_ARCGIS_BASE_URL = "https://ags.govmap.gov.il/arcgis/rest/services"
GOVMAP_ENTITIES_BY_POINT_URL = "https://www.govmap.gov.il/api/layers-catalog/entitiesByPoint"

ITM_WKID = 2039
DEFAULT_RADIUS_M = 500.0


class QueryValidationError(ValidationError):
    """Raised when query inputs cannot produce a meaningful GovMap request."""

    default_stage = "govmap_query"
    default_code = "QUERY_VALIDATION_FAILED"


def _validated_itm(lat: float, lng: float, radius_m: float) -> tuple[float, float]:
    if not radius_m > 0:
        msg = f"radius_m must be > 0, got {radius_m}"
        raise QueryValidationError(msg)
    if not in_region(lat, lng, LENIENT):
        msg = f"({lat}, {lng}) is outside the '{LENIENT.name}' bounds profile"
        raise QueryValidationError(msg)
    return wgs84_to_itm(lat, lng)


def build_point_radius_query(
    lat: float,
    lng: float,
    *,
    radius_m: float = DEFAULT_RADIUS_M,
    out_fields: str = "*",
    return_geometry: bool = False,
) -> dict[str, str]:
    """Build ArcGIS ``/query`` parameters for features near a WGS 84 point.

    Args:
        lat: Latitude in degrees.
        lng: Longitude in degrees.
        radius_m: Search distance in metres.
        out_fields: Comma-separated attribute list (``"*"`` for all).
        return_geometry: Whether the service should return geometries.

    Returns:
        Query-string parameters; ``geometry`` is a JSON-encoded ITM point.

    Raises:
        QueryValidationError: If the radius is not positive or the point
            lies outside the lenient bounds profile.
    """
    x, y = _validated_itm(lat, lng, radius_m)
    geometry = {"x": round(x, 3), "y": round(y, 3), "spatialReference": {"wkid": ITM_WKID}}
    return {
        "geometry": json.dumps(geometry, separators=(",", ":")),
        "geometryType": "esriGeometryPoint",
        "inSR": str(ITM_WKID),
        "spatialRel": "esriSpatialRelIntersects",
        "distance": f"{radius_m:g}",
        "units": "esriSRUnit_Meter",
        "outFields": out_fields,
        "returnGeometry": "true" if return_geometry else "false",
        "f": "json",
    }


def build_query_url(service: str, layer_id: int | str) -> str:
    """Return the MapServer query URL for ``service``/``layer_id``.

    Raises:
        QueryValidationError: If the service name is blank or the layer
            id is not a non-negative integer.
    """
    service = service.strip().strip("/")
    if not service:
        msg = "service must not be empty"
        raise QueryValidationError(msg)
    try:
        layer = int(layer_id)
    except (TypeError, ValueError) as exc:
        msg = f"layer_id must be an integer, got {layer_id!r}"
        raise QueryValidationError(msg) from exc
    if layer < 0:
        msg = f"layer_id must be >= 0, got {layer}"
        raise QueryValidationError(msg)
    return f"{GOVMAP_ARCGIS_BASE_URL}/{service}/MapServer/{layer}/query"


def build_entities_by_point_body(
    lat: float,
    lng: float,
    layers: list[int],
    *,
    radius_m: float = DEFAULT_RADIUS_M,
) -> dict[str, object]:
    """Build the JSON body for GovMap's ``entitiesByPoint`` endpoint.

    Raises:
        QueryValidationError: On an empty layer list, a non-positive
            radius, or a point outside the lenient profile.
    """
    if not layers:
        msg = "at least one layer id is required"
        raise QueryValidationError(msg)
    x, y = _validated_itm(lat, lng, radius_m)
    return {
        "point": [round(x, 3), round(y, 3)],
        "layers": [{"layerId": str(layer)} for layer in layers],
        "tolerance": radius_m,
    }
