"""Tests for data models: coordinates, region boxes, envelopes, records and pages."""

from __future__ import annotations

import math

import pytest
from pydantic import ValidationError as PydanticValidationError

from landcheck_gis.models import (
    BoundsProfile,
    CandidateAttempt,
    ChunkResponse,
    ClassifiedPoint,
    CRSKind,
    EnvelopeKind,
    ModelValidationError,
    NormalizedFeature,
    Page,
    Point2D,
    RawRecord,
    ViewportBounds,
    detect_envelope,
)


class TestPoint2D:
    def test_swapped(self) -> None:
        assert Point2D(1.0, 2.0).swapped() == Point2D(2.0, 1.0)

    def test_is_finite(self) -> None:
        assert Point2D(1.0, 2.0).is_finite
        assert not Point2D(math.nan, 2.0).is_finite
        assert not Point2D(1.0, math.inf).is_finite


class TestClassifiedPoint:
    def test_to_dict(self) -> None:
        point = ClassifiedPoint(lat=32.0, lng=34.8, source_crs=CRSKind.ITM, swapped=True)
        assert point.to_dict() == {
            "lat": 32.0,
            "lng": 34.8,
            "source_crs": "EPSG:2039",
            "swapped": True,
        }

    def test_candidate_attempt_to_dict(self) -> None:
        attempt = CandidateAttempt(CRSKind.WEB_MERCATOR, False, None, None, reason="overflow")
        assert attempt.to_dict()["crs"] == "EPSG:3857"
        assert attempt.to_dict()["lat"] is None


class TestBoundsProfile:
    def test_min_greater_than_max_rejected(self) -> None:
        with pytest.raises(ModelValidationError) as exc_info:
            BoundsProfile(name="bad", min_lat=35.0, max_lat=29.0, min_lng=34.0, max_lng=36.0)
        assert exc_info.value.field_name == "min_lat"
        assert isinstance(exc_info.value, ValueError)

    def test_empty_name_rejected(self) -> None:
        with pytest.raises(ModelValidationError):
            BoundsProfile(name=" ", min_lat=29.0, max_lat=34.0, min_lng=34.0, max_lng=36.0)

    def test_non_finite_rejected(self) -> None:
        with pytest.raises(ModelValidationError):
            BoundsProfile(name="x", min_lat=29.0, max_lat=math.inf, min_lng=34.0, max_lng=36.0)

    def test_degenerate_box_allowed(self) -> None:
        box = BoundsProfile(name="pt", min_lat=31.0, max_lat=31.0, min_lng=35.0, max_lng=35.0)
        assert box.contains(31.0, 35.0)


class TestViewportBounds:
    def test_from_dict(self) -> None:
        vp = ViewportBounds.from_dict({"minLat": 31.9, "maxLat": 32.2, "minLng": 34.7, "maxLng": 34.9})
        assert vp.contains(32.0749, 34.7668)
        assert not vp.contains(31.7683, 35.2137)

    def test_from_dict_numeric_strings(self) -> None:
        vp = ViewportBounds.from_dict({"minLat": "31", "maxLat": "32", "minLng": "34", "maxLng": "35"})
        assert vp.max_lat == 32.0

    def test_from_dict_missing_key(self) -> None:
        with pytest.raises(ModelValidationError, match="min_lng"):
            ViewportBounds.from_dict({"minLat": 31, "maxLat": 32, "maxLng": 35})

    def test_inverted_rejected(self) -> None:
        with pytest.raises(ModelValidationError):
            ViewportBounds(min_lat=32.0, max_lat=31.0, min_lng=34.0, max_lng=35.0)


class TestDetectEnvelope:
    @pytest.mark.parametrize(
        ("raw", "kind"),
        [
            (None, EnvelopeKind.MISSING),
            ("   ", EnvelopeKind.MISSING),
            ({"type": "Point", "coordinates": [34.7, 32.0]}, EnvelopeKind.GEOJSON),
            ('{"type": "Point", "coordinates": [34.7, 32.0]}', EnvelopeKind.JSON_STRING),
            ("[34.7, 32.0]", EnvelopeKind.JSON_STRING),
            ("POLYGON((1 2, 3 4, 5 6, 1 2))", EnvelopeKind.WKT_STRING),
            ("SRID=2039;MULTIPOLYGON Z (((1 2 0)))", EnvelopeKind.WKT_STRING),
            ("point(1 2)", EnvelopeKind.WKT_STRING),
            ([34.7, 32.0], EnvelopeKind.CENTROID_ARRAY),
            ((34.7, 32.0), EnvelopeKind.CENTROID_ARRAY),
            ({"coordinates": [34.7, 32.0]}, EnvelopeKind.CENTROID_OBJECT),
            ({"lat": 32.0, "lng": 34.7}, EnvelopeKind.CENTROID_OBJECT),
            ({"lat": 32.0, "lon": 34.7}, EnvelopeKind.CENTROID_OBJECT),
            ({"x": 180000, "y": 660000}, EnvelopeKind.CENTROID_OBJECT),
            ({"foo": 1}, EnvelopeKind.UNSUPPORTED),
            ("hello", EnvelopeKind.UNSUPPORTED),
            (42, EnvelopeKind.UNSUPPORTED),
        ],
    )
    def test_kinds(self, raw: object, kind: EnvelopeKind) -> None:
        assert detect_envelope(raw).kind is kind

    def test_feature_wrapper_unwrapped(self) -> None:
        geometry = {"type": "Point", "coordinates": [34.7, 32.0]}
        envelope = detect_envelope({"type": "Feature", "geometry": geometry, "properties": {}})
        assert envelope.kind is EnvelopeKind.GEOJSON
        assert envelope.payload is geometry

    def test_wkt_type_captured(self) -> None:
        envelope = detect_envelope("SRID=2039;MultiPolygon(((1 2, 3 4, 5 6, 1 2)))")
        assert envelope.wkt_type == "MULTIPOLYGON"

    def test_is_centroid(self) -> None:
        assert detect_envelope([1, 2]).is_centroid
        assert not detect_envelope({"type": "Point", "coordinates": [1, 2]}).is_centroid


class TestRawRecord:
    def test_flat_row_geometry_priority(self) -> None:
        record = RawRecord.from_dict({"id": 1, "geom": "POINT(1 2)", "centroid": [34.7, 32.0]})
        assert record.geometry == "POINT(1 2)"
        assert record.properties["centroid"] == [34.7, 32.0]

    def test_flat_row_raw_entity_centroid_fallback(self) -> None:
        record = RawRecord.from_dict({"id": 1, "raw_entity": {"centroid": [180000, 660000]}})
        assert record.geometry == [180000, 660000]

    def test_geometry_key_removed_from_properties(self) -> None:
        record = RawRecord.from_dict({"id": 1, "geometry": {"type": "Point", "coordinates": [1, 2]}})
        assert "geometry" not in record.properties

    def test_feature(self) -> None:
        record = RawRecord.from_dict(
            {
                "type": "Feature",
                "properties": {"name": "x"},
                "geometry": {"type": "Point", "coordinates": [34.7, 32.0]},
            }
        )
        assert record.properties == {"name": "x"}
        assert record.geometry["type"] == "Point"

    def test_feature_null_geometry_falls_back_to_properties(self) -> None:
        record = RawRecord.from_dict(
            {"type": "Feature", "properties": {"centroid": [34.7, 32.0]}, "geometry": None}
        )
        assert record.geometry == [34.7, 32.0]

    def test_from_dict_rejects_non_dict(self) -> None:
        with pytest.raises(TypeError):
            RawRecord.from_dict(["not", "a", "row"])  # type: ignore[arg-type]

    def test_from_row_never_raises(self) -> None:
        record = RawRecord.from_row("garbage")
        assert record.geometry is None
        assert record.properties == {}


class TestNormalizedFeature:
    def test_to_dict(self) -> None:
        feature = NormalizedFeature(
            id="parcels:1",
            properties={"a": 1},
            geometry={"type": "Point", "coordinates": [34.7, 32.0]},
        )
        assert feature.to_dict() == {
            "type": "Feature",
            "id": "parcels:1",
            "properties": {"a": 1},
            "geometry": {"type": "Point", "coordinates": [34.7, 32.0]},
        }
        assert feature.geometry_type == "Point"

    def test_degraded_flag_in_properties(self) -> None:
        feature = NormalizedFeature(id=1, properties={"a": 1}, geometry={"type": "Point"}, degraded=True)
        assert feature.to_dict()["properties"]["_degraded"] is True
        assert "_degraded" not in feature.properties


class TestChunkResponse:
    def test_aliases(self) -> None:
        chunk = ChunkResponse.model_validate(
            {"features": [{"id": 1}], "hasMore": True, "page": 3, "totalLoaded": 1500, "extra": "x"}
        )
        assert chunk.has_more is True
        assert chunk.total_loaded == 1500
        assert chunk.page == 3

    def test_has_more_defaults_false(self) -> None:
        assert ChunkResponse.model_validate({"features": []}).has_more is False

    def test_missing_features_rejected(self) -> None:
        with pytest.raises(PydanticValidationError):
            ChunkResponse.model_validate({"hasMore": False})

    def test_features_must_be_list(self) -> None:
        with pytest.raises(PydanticValidationError):
            ChunkResponse.model_validate({"features": "nope"})

    def test_non_object_rows_pass_contract(self) -> None:
        chunk = ChunkResponse.model_validate({"features": [{"id": 1}, None, "row", 7], "hasMore": False})
        assert chunk.features == [{"id": 1}, None, "row", 7]


class TestPage:
    def test_from_response(self) -> None:
        chunk = ChunkResponse.model_validate({"features": [{"id": 1}, 7], "hasMore": True})
        page = Page.from_response(chunk, page=2)
        assert len(page) == 2
        assert page.page == 2
        assert page.items[1] == RawRecord()
        assert not page.is_last

    def test_is_last(self) -> None:
        assert Page(items=(), has_more=True).is_last
        assert Page(items=(RawRecord(),), has_more=False).is_last
