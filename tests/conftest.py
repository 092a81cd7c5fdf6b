"""Shared pytest fixtures for the landcheck-gis test suite."""

from __future__ import annotations

import asyncio
from typing import Any

import pytest

from landcheck_gis.geodesy.transform import wgs84_to_itm, wgs84_to_web_mercator
from landcheck_gis.models.feature import RawRecord
from landcheck_gis.models.page import Page
from landcheck_gis.sources.base import PageSource

# ---------------------------------------------------------------------------
# Reference coordinates
# ---------------------------------------------------------------------------

TEL_AVIV_LAT = 32.0749
TEL_AVIV_LNG = 34.7668
TEL_AVIV_ITM = wgs84_to_itm(TEL_AVIV_LAT, TEL_AVIV_LNG)
TEL_AVIV_WEB_MERCATOR = wgs84_to_web_mercator(TEL_AVIV_LAT, TEL_AVIV_LNG)

JERUSALEM_LAT = 31.7683
JERUSALEM_LNG = 35.2137


def make_page(rows: list[Any], *, has_more: bool, page: int = 1) -> Page:
    """Build a ``Page`` from raw backend rows."""
    return Page(
        items=tuple(RawRecord.from_row(row) for row in rows),
        has_more=has_more,
        page=page,
    )


def wgs84_row(row_id: int, lat: float = TEL_AVIV_LAT, lng: float = TEL_AVIV_LNG) -> dict[str, Any]:
    """A flat backend row with a ``[lng, lat]`` centroid."""
    return {"id": row_id, "centroid": [lng, lat]}


def itm_row(row_id: int) -> dict[str, Any]:
    """A flat backend row with an ITM ``[x, y]`` centroid."""
    return {"id": row_id, "centroid": list(TEL_AVIV_ITM)}


def malformed_row(row_id: int) -> dict[str, Any]:
    """A row whose centroid is not a numeric pair."""
    return {"id": row_id, "centroid": ["not", "numbers"]}


# ---------------------------------------------------------------------------
# Fake page sources
# ---------------------------------------------------------------------------


class StaticPageSource(PageSource):
    """Serves a fixed list of pages (or raises listed exceptions) in order.

    Attributes:
        calls: ``(page, page_size)`` of every ``fetch_page`` call.
        closed: Whether ``aclose`` was awaited.
    """

    def __init__(self, pages: list[Page | Exception], layer: str = "parcels") -> None:
        super().__init__(layer)
        self._pages = list(pages)
        self.calls: list[tuple[int, int]] = []
        self.closed = False

    async def fetch_page(self, page: int, page_size: int) -> Page:
        self.calls.append((page, page_size))
        await asyncio.sleep(0)
        if page > len(self._pages):
            return Page(page=page)
        result = self._pages[page - 1]
        if isinstance(result, Exception):
            raise result
        return result

    async def aclose(self) -> None:
        self.closed = True


class GatedPageSource(StaticPageSource):
    """Like ``StaticPageSource`` but each fetch waits for ``release()``."""

    def __init__(self, pages: list[Page | Exception], layer: str = "parcels") -> None:
        super().__init__(pages, layer)
        self.requested = asyncio.Event()
        self._gate = asyncio.Event()

    def release(self) -> None:
        self._gate.set()

    async def fetch_page(self, page: int, page_size: int) -> Page:
        self.requested.set()
        await self._gate.wait()
        return await super().fetch_page(page, page_size)


# ---------------------------------------------------------------------------
# Fixtures
# ---------------------------------------------------------------------------


@pytest.fixture()
def tel_aviv_itm() -> tuple[float, float]:
    """ITM easting/northing of central Tel Aviv."""
    return TEL_AVIV_ITM


@pytest.fixture()
def two_page_source() -> StaticPageSource:
    """Page 1: two WGS 84 points; page 2: one ITM point and one malformed row."""
    return StaticPageSource(
        [
            make_page([wgs84_row(1), wgs84_row(2, JERUSALEM_LAT, JERUSALEM_LNG)], has_more=True, page=1),
            make_page([itm_row(3), malformed_row(4)], has_more=False, page=2),
        ]
    )
