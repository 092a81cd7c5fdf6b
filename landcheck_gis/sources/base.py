"""PageSource abstract base class.

Defines the contract every chunk source must implement. The loader
interacts exclusively with this interface — it never knows whether pages
come from the backend proxy over HTTP or from an in-memory fixture.

Lifecycle:
    1. ``fetch_page(page, page_size)`` — return one ``Page`` or raise
       ``PageFetchError``. Pages are one-based.
    2. ``aclose()`` — release transport resources.
"""

from __future__ import annotations

import abc
from typing import TYPE_CHECKING

from landcheck_gis.core.exceptions import (
    ContractError,
    LandCheckError,
    PermanentError,
    TransientError,
)

if TYPE_CHECKING:
    from landcheck_gis.models.page import Page


class PageSource(abc.ABC):
    """Abstract base class for paged layer sources.

    Example usage::

        source = get_page_source("parcels", config)
        page = await source.fetch_page(1, 500)
        while page.has_more:
            page = await source.fetch_page(page.page + 1, 500)
        await source.aclose()
    """

    def __init__(self, layer: str) -> None:
        self._layer = layer

    @property
    def layer(self) -> str:
        """Name of the layer this source serves."""
        return self._layer

    # ------------------------------------------------------------------
    # Abstract methods — every source must implement these
    # ------------------------------------------------------------------

    @abc.abstractmethod
    async def fetch_page(self, page: int, page_size: int) -> Page:
        """Fetch one page of raw records.

        Args:
            page: One-based page number (``>= 1``).
            page_size: Rows per page (``> 0``).

        Returns:
            The validated ``Page``. Malformed payloads are never returned.

        Raises:
            PageFetchError: On transport, status or payload failures.
        """

    async def aclose(self) -> None:  # noqa: B027
        """Release any held resources. Default is a no-op."""

    @staticmethod
    def _check_paging(page: int, page_size: int) -> None:
        if page < 1:
            msg = f"page must be >= 1, got {page}"
            raise ValueError(msg)
        if page_size < 1:
            msg = f"page_size must be > 0, got {page_size}"
            raise ValueError(msg)


# ---------------------------------------------------------------------------
# Page source exceptions
# ---------------------------------------------------------------------------


class PageFetchError(LandCheckError):
    """A page could not be fetched; ends the current load as failed.

    Attributes:
        layer: Layer whose page failed.
        page: One-based page number that failed.
        retryable: Whether the failure looks transient (timeouts, 429, 5xx).
    """

    default_stage = "fetch_page"
    default_code = "PAGE_FETCH_FAILED"

    def __init__(
        self,
        message: str,
        *,
        layer: str = "",
        page: int = 0,
        retryable: bool = False,
    ) -> None:
        self.page = page
        super().__init__(message, layer=layer, retryable=retryable)

    def __str__(self) -> str:
        return f"[{self.layer} page {self.page}] {self.message}"


class PageContractError(PageFetchError, ContractError):
    """The backend answered, but the payload does not match the chunk schema."""

    default_code = "PAGE_CONTRACT_VIOLATION"

    def __init__(self, message: str, *, layer: str = "", page: int = 0) -> None:
        super().__init__(message, layer=layer, page=page, retryable=False)


class PageUnavailableError(PageFetchError, TransientError):
    """Timeout, transport failure or throttling/5xx status; worth retrying later."""

    def __init__(self, message: str, *, layer: str = "", page: int = 0) -> None:
        super().__init__(message, layer=layer, page=page, retryable=True)


class PageRejectedError(PageFetchError, PermanentError):
    """The backend refused the request (4xx other than throttling)."""

    def __init__(self, message: str, *, layer: str = "", page: int = 0) -> None:
        super().__init__(message, layer=layer, page=page, retryable=False)
