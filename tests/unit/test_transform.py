"""Tests for the closed-form geodetic transforms.

Covers:
- ITM forward/inverse round trip over the populated part of the grid
- Agreement with pyproj's Transverse Mercator on the same parameters
- Grid origin maps to the false easting/northing
- Web Mercator inverse and forward formulas
- TransformDomainError on non-finite input and overflow
"""

from __future__ import annotations

import math

import pytest
from pyproj import Transformer

from landcheck_gis.geodesy.transform import (
    ITM_FALSE_EASTING_M,
    ITM_FALSE_NORTHING_M,
    ITM_ORIGIN_LAT_DEG,
    ITM_ORIGIN_LON_DEG,
    WEB_MERCATOR_HALF_EXTENT_M,
    TransformDomainError,
    itm_to_wgs84,
    web_mercator_to_wgs84,
    wgs84_to_itm,
    wgs84_to_web_mercator,
)

ITM_PROJ = (
    "+proj=tmerc +lat_0=31.7343936111111 +lon_0=35.2045169444444 "
    "+k=1.0000067 +x_0=219529.584 +y_0=626907.39 +ellps=WGS84 +units=m +no_defs"
)
GEOGRAPHIC_PROJ = "+proj=longlat +ellps=WGS84 +no_defs"

GRID_LATS = [31.0, 31.25, 31.5, 31.75, 32.0, 32.25, 32.5, 32.75, 33.0]
GRID_LNGS = [34.5, 34.75, 35.0, 35.25, 35.5]


@pytest.fixture(scope="module")
def forward() -> Transformer:
    return Transformer.from_crs(GEOGRAPHIC_PROJ, ITM_PROJ, always_xy=True)


class TestItmRoundTrip:
    """itm_to_wgs84(wgs84_to_itm(p)) recovers p."""

    @pytest.mark.parametrize("lat", GRID_LATS)
    @pytest.mark.parametrize("lng", GRID_LNGS)
    def test_round_trip_within_1e5_degrees(self, lat: float, lng: float) -> None:
        x, y = wgs84_to_itm(lat, lng)
        back_lat, back_lng = itm_to_wgs84(x, y)
        assert back_lat == pytest.approx(lat, abs=1e-5)
        assert back_lng == pytest.approx(lng, abs=1e-5)

    def test_origin_maps_to_false_origin(self) -> None:
        x, y = wgs84_to_itm(ITM_ORIGIN_LAT_DEG, ITM_ORIGIN_LON_DEG)
        assert x == pytest.approx(ITM_FALSE_EASTING_M, abs=1e-3)
        assert y == pytest.approx(ITM_FALSE_NORTHING_M, abs=1e-3)

    def test_false_origin_maps_to_origin(self) -> None:
        lat, lng = itm_to_wgs84(ITM_FALSE_EASTING_M, ITM_FALSE_NORTHING_M)
        assert lat == pytest.approx(ITM_ORIGIN_LAT_DEG, abs=1e-8)
        assert lng == pytest.approx(ITM_ORIGIN_LON_DEG, abs=1e-8)

    def test_tel_aviv_is_mid_range(self) -> None:
        x, y = wgs84_to_itm(32.0749, 34.7668)
        assert 170_000 < x < 190_000
        assert 655_000 < y < 675_000


class TestItmAgainstPyproj:
    """The closed-form series agrees with PROJ's tmerc to sub-centimetre level."""

    @pytest.mark.parametrize("lat", GRID_LATS)
    @pytest.mark.parametrize("lng", GRID_LNGS)
    def test_forward_matches(self, forward: Transformer, lat: float, lng: float) -> None:
        expected_x, expected_y = forward.transform(lng, lat)
        x, y = wgs84_to_itm(lat, lng)
        assert x == pytest.approx(expected_x, abs=0.01)
        assert y == pytest.approx(expected_y, abs=0.01)

    @pytest.mark.parametrize("lat", GRID_LATS)
    @pytest.mark.parametrize("lng", GRID_LNGS)
    def test_inverse_matches(self, forward: Transformer, lat: float, lng: float) -> None:
        x, y = forward.transform(lng, lat)
        got_lat, got_lng = itm_to_wgs84(x, y)
        assert got_lat == pytest.approx(lat, abs=1e-7)
        assert got_lng == pytest.approx(lng, abs=1e-7)


class TestWebMercator:
    def test_origin(self) -> None:
        assert web_mercator_to_wgs84(0.0, 0.0) == pytest.approx((0.0, 0.0))

    def test_half_extent_is_antimeridian(self) -> None:
        _, lng = web_mercator_to_wgs84(WEB_MERCATOR_HALF_EXTENT_M, 0.0)
        assert lng == pytest.approx(180.0)

    def test_inverse_formula(self) -> None:
        x, y = 3_870_000.0, 3_773_000.0
        lat, lng = web_mercator_to_wgs84(x, y)
        scaled = y / WEB_MERCATOR_HALF_EXTENT_M * 180
        expected_lat = 180 / math.pi * (2 * math.atan(math.exp(scaled * math.pi / 180)) - math.pi / 2)
        assert lng == pytest.approx(x / WEB_MERCATOR_HALF_EXTENT_M * 180)
        assert lat == pytest.approx(expected_lat)

    def test_round_trip(self) -> None:
        x, y = wgs84_to_web_mercator(32.0749, 34.7668)
        assert x > 1_000_000
        assert y > 1_000_000
        lat, lng = web_mercator_to_wgs84(x, y)
        assert lat == pytest.approx(32.0749, abs=1e-9)
        assert lng == pytest.approx(34.7668, abs=1e-9)


class TestDomainErrors:
    @pytest.mark.parametrize(
        "func",
        [itm_to_wgs84, wgs84_to_itm, web_mercator_to_wgs84, wgs84_to_web_mercator],
    )
    @pytest.mark.parametrize("bad", [math.nan, math.inf, -math.inf])
    def test_non_finite_input(self, func, bad: float) -> None:
        with pytest.raises(TransformDomainError):
            func(bad, 1.0)
        with pytest.raises(TransformDomainError):
            func(1.0, bad)

    def test_web_mercator_overflow(self) -> None:
        with pytest.raises(TransformDomainError) as exc_info:
            web_mercator_to_wgs84(0.0, 1e300)
        assert exc_info.value.code == "TRANSFORM_DOMAIN_ERROR"
        assert exc_info.value.stage == "geodesy"

    def test_web_mercator_forward_at_pole(self) -> None:
        with pytest.raises(TransformDomainError):
            wgs84_to_web_mercator(-90.0, 0.0)

    def test_domain_error_is_validation_category(self) -> None:
        err = TransformDomainError("x")
        assert err.category == "validation"
        assert err.retryable is False
