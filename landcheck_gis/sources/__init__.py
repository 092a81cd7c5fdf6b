"""Page sources: the chunk-fetch contract, the HTTP backend and the layer registry."""

from landcheck_gis.sources.base import (
    PageContractError,
    PageFetchError,
    PageRejectedError,
    PageSource,
    PageUnavailableError,
)
from landcheck_gis.sources.factory import (
    LayerSpec,
    UnknownLayerError,
    get_layer_spec,
    get_page_source,
    list_layers,
    register_layer,
)

__all__ = [
    "LayerSpec",
    "PageContractError",
    "PageFetchError",
    "PageRejectedError",
    "PageSource",
    "PageUnavailableError",
    "UnknownLayerError",
    "get_layer_spec",
    "get_page_source",
    "list_layers",
    "register_layer",
]
