"""Closed-form geodetic transforms between ITM, Web Mercator and WGS 84.

The Israeli Transverse Mercator grid (ITM, EPSG:2039) is evaluated with
the standard Transverse Mercator series (Snyder, *Map Projections — A
Working Manual*, pp. 60-64) on the WGS 84 ellipsoid:

- **Forward** (``wgs84_to_itm``): meridional arc ``M``, radius of
  curvature ``N``, 5th-order easting and 6th-order northing terms.
- **Inverse** (``itm_to_wgs84``): footprint latitude via the ``J1..J4``
  series, then 6th-order latitude and 5th-order longitude corrections.

Northings are measured from the grid origin latitude, so the meridional
arc of the origin (``M0``) is subtracted on the way in and added back on
the way out.

Web Mercator (EPSG:3857) uses the spherical formulas used by web tile
services.

Every function is total over finite input and performs no iteration.
Non-finite input, overflow, or a non-finite result raises
``TransformDomainError``; callers treat that as a rejected candidate.
"""

from __future__ import annotations

import math

from landcheck_gis.core.exceptions import ValidationError

# ---------------------------------------------------------------------------
# Ellipsoid (WGS 84)
# ---------------------------------------------------------------------------

SEMI_MAJOR_AXIS_M = 6378137.0
FLATTENING = 1 / 298.257223563

_E2 = 2 * FLATTENING - FLATTENING * FLATTENING
_E4 = _E2 * _E2
_E6 = _E4 * _E2
_EP2 = _E2 / (1 - _E2)  # second eccentricity squared

# ---------------------------------------------------------------------------
# ITM grid parameters (EPSG:2039)
# ---------------------------------------------------------------------------

ITM_SCALE_FACTOR = 1.0000067
ITM_ORIGIN_LAT_DEG = 31.734393611111
ITM_ORIGIN_LON_DEG = 35.204516944444
ITM_FALSE_EASTING_M = 219529.584
ITM_FALSE_NORTHING_M = 626907.39

_LAT0 = math.radians(ITM_ORIGIN_LAT_DEG)
_LON0 = math.radians(ITM_ORIGIN_LON_DEG)

# ---------------------------------------------------------------------------
# Web Mercator
# ---------------------------------------------------------------------------

WEB_MERCATOR_HALF_EXTENT_M = 20037508.34


class TransformDomainError(ValidationError):
    """Raised when a transform receives or produces a non-finite value."""

    default_stage = "geodesy"
    default_code = "TRANSFORM_DOMAIN_ERROR"


# ---------------------------------------------------------------------------
# Series helpers
# ---------------------------------------------------------------------------


def _meridional_arc(phi: float) -> float:
    """Distance along the meridian from the equator to latitude *phi* (radians)."""
    return SEMI_MAJOR_AXIS_M * (
        (1 - _E2 / 4 - 3 * _E4 / 64 - 5 * _E6 / 256) * phi
        - (3 * _E2 / 8 + 3 * _E4 / 32 + 45 * _E6 / 1024) * math.sin(2 * phi)
        + (15 * _E4 / 256 + 45 * _E6 / 1024) * math.sin(4 * phi)
        - (35 * _E6 / 3072) * math.sin(6 * phi)
    )


_M0 = _meridional_arc(_LAT0)

_MU_DIVISOR = SEMI_MAJOR_AXIS_M * (1 - _E2 / 4 - 3 * _E4 / 64 - 5 * _E6 / 256)

_E1 = (1 - math.sqrt(1 - _E2)) / (1 + math.sqrt(1 - _E2))
_J1 = 3 * _E1 / 2 - 27 * _E1**3 / 32
_J2 = 21 * _E1**2 / 16 - 55 * _E1**4 / 32
_J3 = 151 * _E1**3 / 96
_J4 = 1097 * _E1**4 / 512


def _require_finite(context: str, *values: float) -> None:
    for value in values:
        if not math.isfinite(value):
            msg = f"{context}: non-finite value {value!r}"
            raise TransformDomainError(msg)


# ---------------------------------------------------------------------------
# Public API
# ---------------------------------------------------------------------------


def itm_to_wgs84(x: float, y: float) -> tuple[float, float]:
    """Convert an ITM easting/northing (metres) to WGS 84.

    Returns:
        ``(lat, lng)`` in degrees.

    Raises:
        TransformDomainError: On non-finite input or result.
    """
    _require_finite("itm_to_wgs84 input", x, y)
    try:
        m = _M0 + (y - ITM_FALSE_NORTHING_M) / ITM_SCALE_FACTOR
        mu = m / _MU_DIVISOR
        phi1 = (
            mu
            + _J1 * math.sin(2 * mu)
            + _J2 * math.sin(4 * mu)
            + _J3 * math.sin(6 * mu)
            + _J4 * math.sin(8 * mu)
        )

        sin_p = math.sin(phi1)
        cos_p = math.cos(phi1)
        tan_p = math.tan(phi1)
        c1 = _EP2 * cos_p * cos_p
        t1 = tan_p * tan_p
        w = 1 - _E2 * sin_p * sin_p
        n1 = SEMI_MAJOR_AXIS_M / math.sqrt(w)
        r1 = SEMI_MAJOR_AXIS_M * (1 - _E2) / w**1.5
        d = (x - ITM_FALSE_EASTING_M) / (n1 * ITM_SCALE_FACTOR)

        lat = phi1 - (n1 * tan_p / r1) * (
            d**2 / 2
            - (5 + 3 * t1 + 10 * c1 - 4 * c1 * c1 - 9 * _EP2) * d**4 / 24
            + (61 + 90 * t1 + 298 * c1 + 45 * t1 * t1 - 252 * _EP2 - 3 * c1 * c1) * d**6 / 720
        )
        lon = _LON0 + (
            d
            - (1 + 2 * t1 + c1) * d**3 / 6
            + (5 - 2 * c1 + 28 * t1 - 3 * c1 * c1 + 8 * _EP2 + 24 * t1 * t1) * d**5 / 120
        ) / cos_p
        result = (math.degrees(lat), math.degrees(lon))
    except (OverflowError, ValueError, ZeroDivisionError) as exc:
        msg = f"itm_to_wgs84 failed for ({x}, {y}): {exc}"
        raise TransformDomainError(msg) from exc

    _require_finite("itm_to_wgs84 result", *result)
    return result


def wgs84_to_itm(lat: float, lng: float) -> tuple[float, float]:
    """Convert a WGS 84 position to ITM easting/northing.

    Used to build point-radius queries against GovMap, whose ArcGIS
    services expect ``inSR=2039``.

    Returns:
        ``(x, y)`` in metres.

    Raises:
        TransformDomainError: On non-finite input or result.
    """
    _require_finite("wgs84_to_itm input", lat, lng)
    try:
        phi = math.radians(lat)
        lam = math.radians(lng)
        sin_p = math.sin(phi)
        cos_p = math.cos(phi)
        tan_p = math.tan(phi)

        n = SEMI_MAJOR_AXIS_M / math.sqrt(1 - _E2 * sin_p * sin_p)
        t = tan_p * tan_p
        c = _EP2 * cos_p * cos_p
        a = (lam - _LON0) * cos_p
        m = _meridional_arc(phi)

        x = ITM_FALSE_EASTING_M + ITM_SCALE_FACTOR * n * (
            a
            + (1 - t + c) * a**3 / 6
            + (5 - 18 * t + t * t + 72 * c - 58 * _EP2) * a**5 / 120
        )
        y = ITM_FALSE_NORTHING_M + ITM_SCALE_FACTOR * (
            m
            - _M0
            + n
            * tan_p
            * (
                a**2 / 2
                + (5 - t + 9 * c + 4 * c * c) * a**4 / 24
                + (61 - 58 * t + t * t + 600 * c - 330 * _EP2) * a**6 / 720
            )
        )
    except (OverflowError, ValueError, ZeroDivisionError) as exc:
        msg = f"wgs84_to_itm failed for ({lat}, {lng}): {exc}"
        raise TransformDomainError(msg) from exc

    _require_finite("wgs84_to_itm result", x, y)
    return (x, y)


def web_mercator_to_wgs84(x: float, y: float) -> tuple[float, float]:
    """Convert spherical Web Mercator metres to WGS 84.

    Returns:
        ``(lat, lng)`` in degrees.

    Raises:
        TransformDomainError: On non-finite input, overflow, or result.
    """
    _require_finite("web_mercator_to_wgs84 input", x, y)
    try:
        lng = x / WEB_MERCATOR_HALF_EXTENT_M * 180
        lat = y / WEB_MERCATOR_HALF_EXTENT_M * 180
        lat = 180 / math.pi * (2 * math.atan(math.exp(lat * math.pi / 180)) - math.pi / 2)
    except OverflowError as exc:
        msg = f"web_mercator_to_wgs84 overflowed for ({x}, {y})"
        raise TransformDomainError(msg) from exc

    _require_finite("web_mercator_to_wgs84 result", lat, lng)
    return (lat, lng)


def wgs84_to_web_mercator(lat: float, lng: float) -> tuple[float, float]:
    """Convert WGS 84 degrees to spherical Web Mercator metres.

    Returns:
        ``(x, y)`` in metres.

    Raises:
        TransformDomainError: At the poles or on non-finite input.
    """
    _require_finite("wgs84_to_web_mercator input", lat, lng)
    try:
        x = lng * WEB_MERCATOR_HALF_EXTENT_M / 180
        y = math.log(math.tan((90 + lat) * math.pi / 360)) / (math.pi / 180)
        y = y * WEB_MERCATOR_HALF_EXTENT_M / 180
    except (OverflowError, ValueError) as exc:
        msg = f"wgs84_to_web_mercator failed for ({lat}, {lng}): {exc}"
        raise TransformDomainError(msg) from exc

    _require_finite("wgs84_to_web_mercator result", x, y)
    return (x, y)
