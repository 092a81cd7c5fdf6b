"""Page models for chunked layer loading.

``ChunkResponse`` is the pydantic schema of the backend's chunk
endpoints (``/api/<layer>/chunk?page=&pageSize=``) and is used to reject
drifted payloads at the HTTP boundary. ``Page`` is the validated,
transport-independent value the loader consumes.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any

from pydantic import BaseModel, ConfigDict, Field

from landcheck_gis.models.feature import RawRecord


class ChunkResponse(BaseModel):
    """Wire schema of one chunk response.

    Attributes:
        features: Raw rows or GeoJSON features; individual rows are not
            validated here (bad rows are the normalizer's problem).
        has_more: Continuation flag — the sole signal to request the next page.
        page: Echo of the requested page number.
        total_loaded: Rows served so far, as reported by the backend.
    """

    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    features: list[Any]
    has_more: bool = Field(default=False, alias="hasMore")
    page: int | None = None
    total_loaded: int | None = Field(default=None, alias="totalLoaded")


@dataclass(frozen=True, slots=True)
class Page:
    """One successfully fetched page of raw records.

    Attributes:
        items: Raw records in backend order.
        has_more: Whether another page should be requested.
        page: One-based page number.
        total_loaded: Backend-reported running total, if provided.
    """

    items: tuple[RawRecord, ...] = ()
    has_more: bool = False
    page: int = 1
    total_loaded: int | None = None

    def __len__(self) -> int:
        return len(self.items)

    @property
    def is_last(self) -> bool:
        """An empty page or ``has_more=False`` ends the load."""
        return not self.items or not self.has_more

    @classmethod
    def from_response(cls, response: ChunkResponse, *, page: int) -> Page:
        return cls(
            items=tuple(RawRecord.from_row(row) for row in response.features),
            has_more=response.has_more,
            page=response.page or page,
            total_loaded=response.total_loaded,
        )
