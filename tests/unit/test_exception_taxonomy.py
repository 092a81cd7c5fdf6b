"""Tests for the unified exception taxonomy.

Validates:
- LandCheckError hierarchy and structured attributes
- Category classification (validation, transient, permanent, contract)
- ``to_error_dict()`` produces stable payload keys
- Every domain exception is a LandCheckError with a default stage and code
"""

from __future__ import annotations

from typing import ClassVar

from landcheck_gis.core.config import ConfigValidationError
from landcheck_gis.core.exceptions import (
    ContractError,
    LandCheckError,
    PermanentError,
    TransientError,
    ValidationError,
)
from landcheck_gis.geodesy.bounds import STRICT
from landcheck_gis.geodesy.classify import ClassificationRejected
from landcheck_gis.geodesy.transform import TransformDomainError
from landcheck_gis.ingest.normalize import (
    GeometryMissing,
    GeometryUnsupported,
    MalformedCoordinates,
    WktWithoutCentroid,
)
from landcheck_gis.models.geometry import ModelValidationError, Point2D
from landcheck_gis.sources.base import (
    PageContractError,
    PageFetchError,
    PageRejectedError,
    PageUnavailableError,
)
from landcheck_gis.utils.govmap_query import QueryValidationError


class TestLandCheckErrorBase:
    """LandCheckError base class behavior."""

    def test_default_attributes(self) -> None:
        err = LandCheckError("boom")
        assert err.message == "boom"
        assert err.stage == ""
        assert err.code == ""
        assert err.retryable is False
        assert err.layer == ""

    def test_custom_attributes(self) -> None:
        err = LandCheckError("fail", stage="fetch_page", code="X", retryable=True, layer="parcels")
        assert err.stage == "fetch_page"
        assert err.code == "X"
        assert err.retryable is True
        assert err.layer == "parcels"

    def test_str_is_message(self) -> None:
        assert str(LandCheckError("human-readable error")) == "human-readable error"

    def test_to_error_dict_keys(self) -> None:
        d = LandCheckError("x", stage="s", code="C", retryable=True, layer="gushim").to_error_dict()
        assert set(d.keys()) == {"category", "code", "stage", "message", "retryable", "layer"}
        assert d["layer"] == "gushim"
        assert d["category"] == "transient"


class TestCategoryBases:
    """Category base classes set correct defaults."""

    def test_validation_error_not_retryable(self) -> None:
        err = ValidationError("bad input")
        assert err.retryable is False
        assert err.category == "validation"

    def test_transient_error_retryable(self) -> None:
        err = TransientError("timeout")
        assert err.retryable is True
        assert err.category == "transient"

    def test_permanent_error_not_retryable(self) -> None:
        assert PermanentError("gone").category == "permanent"

    def test_contract_error_not_retryable(self) -> None:
        err = ContractError("schema drift")
        assert err.retryable is False
        assert err.category == "contract"

    def test_dynamic_category_from_retryable(self) -> None:
        assert LandCheckError("x", retryable=True).category == "transient"
        assert LandCheckError("x", retryable=False).category == "permanent"


class TestAllExceptionsAreLandCheckError:
    """Every custom exception inherits from LandCheckError."""

    EXCEPTION_CLASSES: ClassVar[list[type[LandCheckError]]] = [
        TransformDomainError,
        ClassificationRejected,
        GeometryUnsupported,
        GeometryMissing,
        MalformedCoordinates,
        WktWithoutCentroid,
        PageFetchError,
        PageContractError,
        PageUnavailableError,
        PageRejectedError,
        ConfigValidationError,
        ModelValidationError,
        QueryValidationError,
    ]

    def test_all_subclass_landcheck_error(self) -> None:
        for cls in self.EXCEPTION_CLASSES:
            assert issubclass(cls, LandCheckError), f"{cls.__name__} is not a LandCheckError"


class TestStageAndCode:
    """Every domain exception has a default stage and code."""

    def test_transform_domain_error(self) -> None:
        err = TransformDomainError("overflow")
        assert (err.stage, err.code) == ("geodesy", "TRANSFORM_DOMAIN_ERROR")

    def test_classification_rejected(self) -> None:
        err = ClassificationRejected(Point2D(1.0, 2.0), STRICT)
        assert (err.stage, err.code) == ("classify", "CRS_CLASSIFICATION_REJECTED")
        assert err.category == "validation"
        assert err.attempts == ()

    def test_geometry_errors(self) -> None:
        assert GeometryUnsupported("x").code == "GEOMETRY_UNSUPPORTED"
        assert GeometryMissing("x").code == "GEOMETRY_MISSING"
        assert MalformedCoordinates("x").code == "GEOMETRY_MALFORMED"
        assert WktWithoutCentroid("x").code == "WKT_WITHOUT_CENTROID"
        assert all(
            cls("x").stage == "normalize"
            for cls in (GeometryUnsupported, GeometryMissing, MalformedCoordinates, WktWithoutCentroid)
        )

    def test_page_fetch_error(self) -> None:
        err = PageFetchError("HTTP 503", layer="parcels", page=4, retryable=True)
        assert (err.stage, err.code) == ("fetch_page", "PAGE_FETCH_FAILED")
        assert err.category == "transient"
        assert str(err) == "[parcels page 4] HTTP 503"

    def test_page_unavailable_is_transient(self) -> None:
        err = PageUnavailableError("HTTP 503", layer="parcels", page=2)
        assert isinstance(err, PageFetchError)
        assert isinstance(err, TransientError)
        assert err.retryable is True
        assert err.category == "transient"
        assert err.code == "PAGE_FETCH_FAILED"

    def test_page_rejected_is_permanent(self) -> None:
        err = PageRejectedError("HTTP 404", layer="parcels", page=2)
        assert isinstance(err, PageFetchError)
        assert isinstance(err, PermanentError)
        assert err.retryable is False
        assert err.category == "permanent"
        assert str(err) == "[parcels page 2] HTTP 404"

    def test_page_contract_error(self) -> None:
        err = PageContractError("drift", layer="parcels", page=1)
        assert isinstance(err, PageFetchError)
        assert err.category == "contract"
        assert err.retryable is False

    def test_config_validation_error(self) -> None:
        err = ConfigValidationError("LANDCHECK_PAGE_SIZE", 0, "must be between 1 and 1000")
        assert (err.stage, err.code) == ("config", "CONFIG_VALIDATION_FAILED")
        assert err.key == "LANDCHECK_PAGE_SIZE"

    def test_model_validation_error(self) -> None:
        err = ModelValidationError("ViewportBounds", "min_lat", 5, "too high")
        assert (err.stage, err.code) == ("model_validation", "MODEL_VALIDATION_FAILED")
        assert isinstance(err, ValueError)
        assert isinstance(err, LandCheckError)

    def test_query_validation_error(self) -> None:
        err = QueryValidationError("radius")
        assert (err.stage, err.code) == ("govmap_query", "QUERY_VALIDATION_FAILED")


class TestErrorDictStability:
    """to_error_dict() always includes required keys regardless of exception type."""

    REQUIRED_KEYS: ClassVar[set[str]] = {"category", "code", "stage", "message", "retryable", "layer"}

    def test_page_error_dict(self) -> None:
        d = PageFetchError("timeout", layer="gushim", page=1, retryable=True).to_error_dict()
        assert set(d.keys()) >= self.REQUIRED_KEYS
        assert d["layer"] == "gushim"

    def test_normalize_error_dict(self) -> None:
        d = GeometryMissing("no geometry", layer="gushim").to_error_dict()
        assert set(d.keys()) >= self.REQUIRED_KEYS
        assert d["category"] == "validation"
