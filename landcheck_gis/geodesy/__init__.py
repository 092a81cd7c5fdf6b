"""Geodesy: closed-form transforms, region bounds and CRS classification."""

from landcheck_gis.geodesy.bounds import LENIENT, STRICT, get_profile, in_region, list_profiles
from landcheck_gis.geodesy.classify import (
    WEB_MERCATOR_MIN_ABS,
    WGS84_MAX_ABS,
    ClassificationRejected,
    classify_point,
)
from landcheck_gis.geodesy.transform import (
    TransformDomainError,
    itm_to_wgs84,
    web_mercator_to_wgs84,
    wgs84_to_itm,
    wgs84_to_web_mercator,
)

__all__ = [
    "LENIENT",
    "STRICT",
    "WEB_MERCATOR_MIN_ABS",
    "WGS84_MAX_ABS",
    "ClassificationRejected",
    "TransformDomainError",
    "classify_point",
    "get_profile",
    "in_region",
    "itm_to_wgs84",
    "list_profiles",
    "web_mercator_to_wgs84",
    "wgs84_to_itm",
    "wgs84_to_web_mercator",
]
