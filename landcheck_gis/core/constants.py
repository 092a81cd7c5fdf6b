"""Shared ingestion constants — single source of truth.

Centralises layer names, backend endpoint paths and paging limits that
every map layer previously hard-coded for itself.
"""

from __future__ import annotations

# ---------------------------------------------------------------------------
# Backend proxy
# ---------------------------------------------------------------------------

DEFAULT_API_BASE_URL: str = "http://localhost:3000"
"""Base URL of the dashboard backend that proxies the government sources."""

DEFAULT_HTTP_TIMEOUT_S: float = 30.0

# ---------------------------------------------------------------------------
# Paging
# ---------------------------------------------------------------------------

DEFAULT_PAGE_SIZE: int = 500
"""Rows per chunk request. Tuned against the backend's query limits."""

MAX_PAGE_SIZE: int = 1000
"""Hard upper limit of a single backend range query."""

# ---------------------------------------------------------------------------
# Layer names and chunk endpoints
# ---------------------------------------------------------------------------

PARCELS: str = "parcels"
GUSHIM: str = "gushim"
LAND_USE_MAVAT: str = "land_use_mavat"

CHUNK_ENDPOINTS: dict[str, str] = {
    PARCELS: "/api/parcels/chunk",
    GUSHIM: "/api/gushim/chunk",
    LAND_USE_MAVAT: "/api/land-use-mavat/chunk",
}
