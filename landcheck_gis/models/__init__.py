"""Data models and schemas.

Defines the data structures used throughout ingestion:
- Point2D / ClassifiedPoint / CandidateAttempt: coordinate classification
- BoundsProfile / ViewportBounds: region boxes
- RawGeometryEnvelope: tagged union of raw geometry shapes
- RawRecord / NormalizedFeature: backend rows in, GeoJSON features out
- Page / ChunkResponse: paged transport
"""

from landcheck_gis.models.envelope import (
    EnvelopeKind,
    RawGeometryEnvelope,
    detect_envelope,
)
from landcheck_gis.models.feature import NormalizedFeature, RawRecord
from landcheck_gis.models.geometry import (
    BoundsProfile,
    CandidateAttempt,
    ClassifiedPoint,
    CRSKind,
    ModelValidationError,
    Point2D,
    ViewportBounds,
)
from landcheck_gis.models.page import ChunkResponse, Page

__all__ = [
    "BoundsProfile",
    "CandidateAttempt",
    "ChunkResponse",
    "ClassifiedPoint",
    "CRSKind",
    "EnvelopeKind",
    "ModelValidationError",
    "NormalizedFeature",
    "Page",
    "Point2D",
    "RawGeometryEnvelope",
    "RawRecord",
    "ViewportBounds",
    "detect_envelope",
]
