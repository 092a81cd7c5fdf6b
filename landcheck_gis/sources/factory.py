"""Layer registry — maps layer names to chunk endpoints and bounds profiles.

The registry holds one ``LayerSpec`` per known gov layer. New layers are
registered with ``register_layer``; ``get_page_source`` builds the HTTP
source for a layer from an ``IngestConfig``.

Usage::

    from landcheck_gis.sources.factory import get_layer_spec, get_page_source

    spec = get_layer_spec("parcels")
    source = get_page_source("parcels", IngestConfig.from_env())
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import TYPE_CHECKING

from landcheck_gis.core.constants import (
    CHUNK_ENDPOINTS,
    GUSHIM,
    LAND_USE_MAVAT,
    PARCELS,
)
from landcheck_gis.geodesy.bounds import LENIENT, STRICT

if TYPE_CHECKING:
    from landcheck_gis.core.config import IngestConfig
    from landcheck_gis.models.geometry import BoundsProfile, ViewportBounds
    from landcheck_gis.sources.base import PageSource

logger = logging.getLogger("landcheck_gis.sources")


class UnknownLayerError(KeyError):
    """Raised when a layer name is not in the registry."""

    def __init__(self, name: str, available: list[str]) -> None:
        self.name = name
        self.available = available
        super().__init__(f"Unknown layer: {name!r}. Available: {', '.join(available)}")

    def __str__(self) -> str:
        return str(self.args[0])


@dataclass(frozen=True, slots=True)
class LayerSpec:
    """Static description of a chunked gov layer.

    Attributes:
        name: Layer identifier used by the controller and the CLI.
        endpoint: Backend chunk path.
        profile: Bounds profile applied while normalizing the layer.
    """

    name: str
    endpoint: str
    profile: BoundsProfile

    def to_dict(self) -> dict[str, str]:
        return {"name": self.name, "endpoint": self.endpoint, "profile": self.profile.name}


# ---------------------------------------------------------------------------
# Registry
# ---------------------------------------------------------------------------

_LAYER_REGISTRY: dict[str, LayerSpec] = {}


def _register_builtin_layers() -> None:
    """Register the gov layers the dashboard ships with."""
    for name, profile in (
        (PARCELS, STRICT),
        (GUSHIM, STRICT),
        (LAND_USE_MAVAT, LENIENT),
    ):
        _LAYER_REGISTRY[name] = LayerSpec(name=name, endpoint=CHUNK_ENDPOINTS[name], profile=profile)


def _ensure_registry() -> None:
    """Initialise the layer registry once (idempotent)."""
    if not _LAYER_REGISTRY:
        _register_builtin_layers()


# ---------------------------------------------------------------------------
# Public API
# ---------------------------------------------------------------------------


def register_layer(spec: LayerSpec) -> None:
    """Register (or replace) a layer.

    Raises:
        ValueError: If the name or endpoint is empty.
    """
    if not spec.name:
        msg = "Layer name must be non-empty"
        raise ValueError(msg)
    if not spec.endpoint:
        msg = f"Layer {spec.name!r} needs a chunk endpoint"
        raise ValueError(msg)
    _ensure_registry()
    _LAYER_REGISTRY[spec.name] = spec
    logger.debug("Registered layer: %s", spec.name)


def get_layer_spec(name: str) -> LayerSpec:
    """Return the ``LayerSpec`` for *name*.

    Raises:
        UnknownLayerError: If the layer is not registered.
    """
    _ensure_registry()
    spec = _LAYER_REGISTRY.get(name)
    if spec is None:
        raise UnknownLayerError(name, sorted(_LAYER_REGISTRY))
    return spec


def list_layers() -> list[str]:
    """Return the names of all registered layers."""
    _ensure_registry()
    return sorted(_LAYER_REGISTRY)


def get_page_source(
    name: str,
    config: IngestConfig,
    *,
    viewport: ViewportBounds | None = None,
) -> PageSource:
    """Create the HTTP chunk source for a registered layer.

    Raises:
        UnknownLayerError: If the layer is not registered.
    """
    from landcheck_gis.sources.backend import BackendChunkSource

    spec = get_layer_spec(name)
    return BackendChunkSource(
        spec.name,
        spec.endpoint,
        base_url=config.api_base_url,
        timeout_s=config.http_timeout_s,
        viewport=viewport,
    )
