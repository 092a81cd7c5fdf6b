"""Coordinate reference system classification for unlabelled pairs.

Upstream rows carry bare numeric pairs with no CRS tag. The magnitude
of the numbers is enough to tell the three systems apart:

1. Both ``|x|`` and ``|y|`` at most ``WGS84_MAX_ABS`` → degrees, read as
   ``x=lng, y=lat``; if out of bounds, retry swapped.
2. Either magnitude above ``WEB_MERCATOR_MIN_ABS`` → Web Mercator
   metres; no swap retry.
3. Anything in between → ITM metres, read as ``(x, y)``; if out of
   bounds, retry as ``(y, x)``.

The first candidate that lands inside the bounds profile wins. When none
do, ``ClassificationRejected`` carries every attempt for inspection.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from landcheck_gis.core.exceptions import ValidationError
from landcheck_gis.geodesy.bounds import in_region
from landcheck_gis.geodesy.transform import (
    TransformDomainError,
    itm_to_wgs84,
    web_mercator_to_wgs84,
)
from landcheck_gis.models.geometry import (
    CandidateAttempt,
    ClassifiedPoint,
    CRSKind,
    Point2D,
)

if TYPE_CHECKING:
    from collections.abc import Callable

    from landcheck_gis.models.geometry import BoundsProfile

logger = logging.getLogger("landcheck_gis.geodesy")

WGS84_MAX_ABS = 1_000.0
"""Largest magnitude still read as degrees."""

WEB_MERCATOR_MIN_ABS = 1_000_000.0
"""Magnitudes above this are read as Web Mercator metres."""


class ClassificationRejected(ValidationError):
    """Raised when no CRS interpretation of a pair lands inside the profile.

    Attributes:
        point: The raw pair that was classified.
        profile: The bounds profile it was checked against.
        attempts: Every candidate tried, in order.
    """

    default_stage = "classify"
    default_code = "CRS_CLASSIFICATION_REJECTED"

    def __init__(
        self,
        point: Point2D,
        profile: BoundsProfile,
        attempts: tuple[CandidateAttempt, ...] = (),
    ) -> None:
        self.point = point
        self.profile = profile
        self.attempts = attempts
        tried = ", ".join(
            f"{a.crs.name}{'(swapped)' if a.swapped else ''}" for a in attempts
        ) or "none"
        super().__init__(
            f"({point.x}, {point.y}) is outside '{profile.name}' bounds under every "
            f"interpretation (tried: {tried})"
        )

    def to_error_dict(self) -> dict[str, object]:
        payload = super().to_error_dict()
        payload["attempts"] = [a.to_dict() for a in self.attempts]
        return payload


def _wgs84_identity(x: float, y: float) -> tuple[float, float]:
    # GeoJSON order: x is longitude, y is latitude.
    return (y, x)


def _candidates(point: Point2D) -> list[tuple[CRSKind, bool, Callable[[float, float], tuple[float, float]]]]:
    """Ordered ``(crs, swapped, transform)`` interpretations for *point*."""
    ax, ay = abs(point.x), abs(point.y)
    if ax <= WGS84_MAX_ABS and ay <= WGS84_MAX_ABS:
        return [
            (CRSKind.WGS84, False, _wgs84_identity),
            (CRSKind.WGS84, True, _wgs84_identity),
        ]
    if ax > WEB_MERCATOR_MIN_ABS or ay > WEB_MERCATOR_MIN_ABS:
        return [(CRSKind.WEB_MERCATOR, False, web_mercator_to_wgs84)]
    return [
        (CRSKind.ITM, False, itm_to_wgs84),
        (CRSKind.ITM, True, itm_to_wgs84),
    ]


def classify_point(point: Point2D, profile: BoundsProfile) -> ClassifiedPoint:
    """Resolve a raw pair to a validated WGS 84 position.

    Args:
        point: Raw pair in unknown CRS and axis order.
        profile: Region the result must fall inside.

    Returns:
        The first in-bounds interpretation.

    Raises:
        ClassificationRejected: If the pair is non-finite or no
            interpretation lands inside *profile*.
    """
    if not point.is_finite:
        logger.debug("classify rejected non-finite | x=%s | y=%s", point.x, point.y)
        raise ClassificationRejected(point, profile)

    attempts: list[CandidateAttempt] = []
    for crs, swapped, transform in _candidates(point):
        source = point.swapped() if swapped else point
        try:
            lat, lng = transform(source.x, source.y)
        except TransformDomainError as exc:
            attempts.append(CandidateAttempt(crs, swapped, None, None, reason=exc.message))
            logger.debug(
                "classify attempt failed | crs=%s | swapped=%s | error=%s",
                crs.name,
                swapped,
                exc.message,
            )
            continue

        if in_region(lat, lng, profile):
            logger.debug(
                "classify accepted | crs=%s | swapped=%s | lat=%.6f | lng=%.6f",
                crs.name,
                swapped,
                lat,
                lng,
            )
            return ClassifiedPoint(lat=lat, lng=lng, source_crs=crs, swapped=swapped)

        attempts.append(CandidateAttempt(crs, swapped, lat, lng, reason="out of bounds"))
        logger.debug(
            "classify attempt out of bounds | crs=%s | swapped=%s | lat=%s | lng=%s | profile=%s",
            crs.name,
            swapped,
            lat,
            lng,
            profile.name,
        )

    raise ClassificationRejected(point, profile, tuple(attempts))
