"""HTTP page source against the dashboard backend's chunk endpoints.

Issues ``GET {api_base_url}{endpoint}?page=&pageSize=`` through an
``httpx.AsyncClient`` and validates the body against ``ChunkResponse``
before anything reaches the loader. Failure mapping:

- Transport errors and timeouts → ``PageUnavailableError`` (retryable)
- Non-2xx status → ``PageUnavailableError`` for 408, 425, 429 and 5xx,
  ``PageRejectedError`` otherwise
- Non-JSON body or schema mismatch → ``PageContractError`` (never retryable)
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

import httpx
from pydantic import ValidationError as PydanticValidationError

from landcheck_gis.core.constants import DEFAULT_HTTP_TIMEOUT_S
from landcheck_gis.models.page import ChunkResponse, Page
from landcheck_gis.sources.base import (
    PageContractError,
    PageRejectedError,
    PageSource,
    PageUnavailableError,
)

if TYPE_CHECKING:
    from landcheck_gis.models.geometry import ViewportBounds

logger = logging.getLogger("landcheck_gis.sources")

_RETRYABLE_STATUS = frozenset({408, 425, 429})


class BackendChunkSource(PageSource):
    """Fetches layer chunks from the backend proxy.

    Args:
        layer: Layer name (for error and log context).
        endpoint: Chunk path, e.g. ``"/api/parcels/chunk"``.
        base_url: Backend base URL.
        timeout_s: Per-request timeout when the source owns its client.
        viewport: Optional window forwarded as ``min_lat``/``max_lat``/
            ``min_lng``/``max_lng`` so the backend can pre-filter.
        client: Injected ``httpx.AsyncClient``; the caller keeps ownership.
    """

    def __init__(
        self,
        layer: str,
        endpoint: str,
        *,
        base_url: str,
        timeout_s: float = DEFAULT_HTTP_TIMEOUT_S,
        viewport: ViewportBounds | None = None,
        client: httpx.AsyncClient | None = None,
    ) -> None:
        super().__init__(layer)
        self._url = base_url.rstrip("/") + "/" + endpoint.lstrip("/")
        self._viewport = viewport
        self._owns_client = client is None
        self._client = client or httpx.AsyncClient(
            timeout=httpx.Timeout(timeout_s),
            follow_redirects=True,
        )

    @property
    def url(self) -> str:
        return self._url

    def _params(self, page: int, page_size: int) -> dict[str, str | int | float]:
        params: dict[str, str | int | float] = {"page": page, "pageSize": page_size}
        if self._viewport is not None:
            params.update(
                {
                    "min_lat": self._viewport.min_lat,
                    "max_lat": self._viewport.max_lat,
                    "min_lng": self._viewport.min_lng,
                    "max_lng": self._viewport.max_lng,
                }
            )
        return params

    async def fetch_page(self, page: int, page_size: int) -> Page:
        self._check_paging(page, page_size)

        try:
            response = await self._client.get(self._url, params=self._params(page, page_size))
        except httpx.TimeoutException as exc:
            msg = f"Request timed out: {exc}"
            raise PageUnavailableError(msg, layer=self.layer, page=page) from exc
        except httpx.HTTPError as exc:
            msg = f"Transport error: {exc}"
            raise PageUnavailableError(msg, layer=self.layer, page=page) from exc

        status = response.status_code
        if not response.is_success:
            msg = f"HTTP {status} from {self._url}"
            if status in _RETRYABLE_STATUS or status >= 500:
                raise PageUnavailableError(msg, layer=self.layer, page=page)
            raise PageRejectedError(msg, layer=self.layer, page=page)

        try:
            payload = response.json()
        except ValueError as exc:
            msg = f"Response body is not JSON ({response.headers.get('content-type', 'unknown')})"
            raise PageContractError(msg, layer=self.layer, page=page) from exc

        try:
            chunk = ChunkResponse.model_validate(payload)
        except PydanticValidationError as exc:
            msg = f"Chunk payload failed validation ({exc.error_count()} error(s))"
            raise PageContractError(msg, layer=self.layer, page=page) from exc

        logger.debug(
            "chunk fetched | layer=%s | page=%d | rows=%d | has_more=%s",
            self.layer,
            page,
            len(chunk.features),
            chunk.has_more,
        )
        return Page.from_response(chunk, page=page)

    async def aclose(self) -> None:
        if self._owns_client:
            await self._client.aclose()
