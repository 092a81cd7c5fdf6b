"""Chunked feature loader — the paginated ingestion state machine.

One loader drives one layer: it requests pages strictly sequentially
from a ``PageSource``, normalizes each page with a per-load
``GeometryNormalizer`` and appends accepted features to the layer's
``LayerAccumulator``.

State transitions::

    IDLE ──run()──► LOADING ──empty page / has_more=False / max_pages──► EXHAUSTED
                       │
                       └──fetch or normalize error──► FAILED (partial features kept)

    any ──hide()──► IDLE (accumulator reset, in-flight result discarded)

Cancellation works through the accumulator's generation token: ``run``
captures the generation at start and every later mutation is checked
against it. A page that resolves after ``hide()`` is dropped on arrival,
success or failure alike.
"""

from __future__ import annotations

import enum
import logging
from typing import TYPE_CHECKING

from landcheck_gis.core.constants import DEFAULT_PAGE_SIZE
from landcheck_gis.ingest.accumulator import LayerAccumulator
from landcheck_gis.ingest.normalize import GeometryNormalizer
from landcheck_gis.sources.base import PageFetchError

if TYPE_CHECKING:
    from landcheck_gis.ingest.accumulator import LayerSnapshot
    from landcheck_gis.models.geometry import BoundsProfile, ViewportBounds
    from landcheck_gis.sources.base import PageSource

logger = logging.getLogger("landcheck_gis.ingest")


class LoaderState(enum.Enum):
    """Lifecycle state of a ``ChunkedFeatureLoader``."""

    IDLE = "idle"
    LOADING = "loading"
    EXHAUSTED = "exhausted"
    FAILED = "failed"


class ChunkedFeatureLoader:
    """Loads every page of one layer into its accumulator.

    Args:
        layer: Layer name.
        source: Page source for the layer.
        profile: Bounds profile for the per-load normalizer.
        page_size: Rows per requested page.
        max_pages: Optional cap on pages per load; reaching it ends the
            load as ``EXHAUSTED``.
        viewport: Optional display window handed to the normalizer.
        accumulator: Accumulator to fill; a fresh one is created if omitted.

    Raises:
        ValueError: If ``page_size`` or ``max_pages`` is not positive.
    """

    def __init__(
        self,
        layer: str,
        source: PageSource,
        *,
        profile: BoundsProfile,
        page_size: int = DEFAULT_PAGE_SIZE,
        max_pages: int | None = None,
        viewport: ViewportBounds | None = None,
        accumulator: LayerAccumulator | None = None,
    ) -> None:
        if page_size < 1:
            msg = f"page_size must be > 0, got {page_size}"
            raise ValueError(msg)
        if max_pages is not None and max_pages < 1:
            msg = f"max_pages must be > 0 or None, got {max_pages}"
            raise ValueError(msg)

        self.layer = layer
        self.source = source
        self.profile = profile
        self.page_size = page_size
        self.max_pages = max_pages
        self.viewport = viewport
        self.accumulator = accumulator if accumulator is not None else LayerAccumulator(layer)
        self.state = LoaderState.IDLE
        self.pages_loaded = 0
        self.normalizer: GeometryNormalizer | None = None

    async def run(self, generation: int | None = None) -> LayerSnapshot:
        """Load pages until the layer is exhausted, fails, or is hidden.

        Args:
            generation: Accumulator generation this load belongs to;
                defaults to the current one. A load whose generation is
                already stale returns without fetching.

        Returns:
            The accumulator snapshot after the load ends. For a load
            cancelled by ``hide()`` this is the reset accumulator's view.
        """
        if generation is None:
            generation = self.accumulator.generation
        if not self.accumulator.is_current(generation):
            logger.debug("stale load skipped | layer=%s | generation=%d", self.layer, generation)
            return self.accumulator.snapshot()

        normalizer = GeometryNormalizer(self.layer, self.profile, viewport=self.viewport)
        self.normalizer = normalizer
        self.pages_loaded = 0
        self.state = LoaderState.LOADING
        self.accumulator.start(generation)

        logger.info(
            "load started | layer=%s | generation=%d | page_size=%d | max_pages=%s",
            self.layer,
            generation,
            self.page_size,
            self.max_pages,
        )

        page_number = 1
        while True:
            try:
                page = await self.source.fetch_page(page_number, self.page_size)
            except PageFetchError as exc:
                logger.warning(
                    "page fetch failed | layer=%s | page=%d | code=%s | retryable=%s | error=%s",
                    self.layer,
                    page_number,
                    exc.code,
                    exc.retryable,
                    exc.message,
                )
                return self._fail(generation, page_number, exc.message)
            except Exception as exc:
                logger.exception(
                    "page source raised | layer=%s | page=%d | error=%s",
                    self.layer,
                    page_number,
                    exc,
                )
                return self._fail(generation, page_number, str(exc) or type(exc).__name__)

            if not self.accumulator.is_current(generation):
                logger.debug(
                    "stale page discarded | layer=%s | page=%d | generation=%d",
                    self.layer,
                    page_number,
                    generation,
                )
                return self.accumulator.snapshot()

            rejected_before = normalizer.rejected
            filtered_before = normalizer.filtered
            try:
                features = normalizer.normalize_page(page.items)
            except Exception as exc:
                logger.exception(
                    "page normalization raised | layer=%s | page=%d | error=%s",
                    self.layer,
                    page_number,
                    exc,
                )
                return self._fail(generation, page_number, str(exc) or type(exc).__name__)
            self.accumulator.append(
                generation,
                features,
                rejected=normalizer.rejected - rejected_before,
                filtered=normalizer.filtered - filtered_before,
            )
            self.pages_loaded += 1

            logger.info(
                "page loaded | layer=%s | page=%d | rows=%d | accepted=%d | rejected=%d | has_more=%s",
                self.layer,
                page_number,
                len(page),
                len(features),
                normalizer.rejected - rejected_before,
                page.has_more,
            )

            if page.is_last:
                break
            if self.max_pages is not None and self.pages_loaded >= self.max_pages:
                logger.warning(
                    "max pages reached | layer=%s | max_pages=%d | features=%d",
                    self.layer,
                    self.max_pages,
                    len(self.accumulator.features),
                )
                break
            page_number += 1

        self.state = LoaderState.EXHAUSTED
        self.accumulator.finish(generation)
        logger.info(
            "load finished | layer=%s | pages=%d | features=%d | rejected=%d | filtered=%d",
            self.layer,
            self.pages_loaded,
            len(self.accumulator.features),
            normalizer.rejected,
            normalizer.filtered,
        )
        return self.accumulator.snapshot()

    def hide(self) -> None:
        """Reset the layer; any in-flight page is discarded when it arrives."""
        self.state = LoaderState.IDLE
        self.accumulator.reset()
        logger.info(
            "layer hidden | layer=%s | generation=%d",
            self.layer,
            self.accumulator.generation,
        )

    def _fail(self, generation: int, page_number: int, message: str) -> LayerSnapshot:
        """Mark the load failed unless *generation* went stale meanwhile."""
        if not self.accumulator.is_current(generation):
            logger.debug(
                "stale failure discarded | layer=%s | page=%d | generation=%d",
                self.layer,
                page_number,
                generation,
            )
            return self.accumulator.snapshot()

        self.state = LoaderState.FAILED
        self.accumulator.fail(generation, message)
        normalizer = self.normalizer
        logger.info(
            "load failed | layer=%s | pages=%d | features=%d | rejected=%d",
            self.layer,
            self.pages_loaded,
            len(self.accumulator.features),
            normalizer.rejected if normalizer is not None else 0,
        )
        return self.accumulator.snapshot()
