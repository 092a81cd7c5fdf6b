"""Ingestion: geometry normalization, per-layer accumulation and chunked loading."""

from landcheck_gis.ingest.accumulator import LayerAccumulator, LayerSnapshot, LayerStatus
from landcheck_gis.ingest.layers import LayerController
from landcheck_gis.ingest.loader import ChunkedFeatureLoader, LoaderState
from landcheck_gis.ingest.normalize import GeometryNormalizer, GeometryUnsupported

__all__ = [
    "ChunkedFeatureLoader",
    "GeometryNormalizer",
    "GeometryUnsupported",
    "LayerAccumulator",
    "LayerController",
    "LayerSnapshot",
    "LayerStatus",
    "LoaderState",
]
