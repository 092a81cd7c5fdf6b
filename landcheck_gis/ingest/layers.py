"""Layer controller — show/hide toggling over independent per-layer loads.

Each registered layer gets its own accumulator, page source and loader
the first time it is touched. ``show`` starts the loader as an asyncio
task; ``hide`` resets the accumulator through the loader, which strands
any in-flight page. Layers share no mutable state, so visible layers
load concurrently without locks.

Usage::

    controller = LayerController(IngestConfig.from_env())
    controller.subscribe("parcels", render)
    controller.show("parcels")
    snapshot = await controller.wait("parcels")
    await controller.aclose()
"""

from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass, field
from typing import TYPE_CHECKING

from landcheck_gis.ingest.accumulator import LayerAccumulator, LayerSnapshot
from landcheck_gis.ingest.loader import ChunkedFeatureLoader
from landcheck_gis.sources.factory import get_layer_spec, get_page_source

if TYPE_CHECKING:
    from collections.abc import Callable

    from landcheck_gis.core.config import IngestConfig
    from landcheck_gis.models.geometry import ViewportBounds
    from landcheck_gis.sources.base import PageSource

logger = logging.getLogger("landcheck_gis.ingest")


@dataclass(slots=True)
class _LayerEntry:
    accumulator: LayerAccumulator
    source: PageSource
    loader: ChunkedFeatureLoader
    task: asyncio.Task[LayerSnapshot] | None = None
    visible: bool = False
    stale_tasks: set[asyncio.Task[LayerSnapshot]] = field(default_factory=set)


class LayerController:
    """Owns one ``(accumulator, loader, task)`` per layer name.

    Args:
        config: Ingestion configuration (page size, page cap, backend URL).
        source_factory: ``(layer, config, *, viewport) -> PageSource``;
            defaults to the HTTP backend source from the layer registry.
        viewport: Optional display window applied to every layer.
    """

    def __init__(
        self,
        config: IngestConfig,
        *,
        source_factory: Callable[..., PageSource] = get_page_source,
        viewport: ViewportBounds | None = None,
    ) -> None:
        self._config = config
        self._source_factory = source_factory
        self._viewport = viewport
        self._entries: dict[str, _LayerEntry] = {}

    # -- public ----------------------------------------------------------

    def show(self, layer: str) -> asyncio.Task[LayerSnapshot]:
        """Start loading *layer*; a no-op if it is already visible.

        Must be called from within a running event loop.

        Returns:
            The task running the layer's load.

        Raises:
            UnknownLayerError: If the layer is not registered.
        """
        entry = self._entry(layer)
        if entry.visible and entry.task is not None:
            return entry.task

        generation = entry.accumulator.reset()
        entry.visible = True
        entry.task = asyncio.get_running_loop().create_task(
            entry.loader.run(generation), name=f"landcheck-load-{layer}"
        )
        logger.info("layer shown | layer=%s | generation=%d", layer, entry.accumulator.generation)
        return entry.task

    def hide(self, layer: str) -> None:
        """Hide *layer*; an in-flight load is discarded on arrival."""
        entry = self._entries.get(layer)
        if entry is None or not entry.visible:
            return
        entry.visible = False
        entry.loader.hide()
        task = entry.task
        if task is not None and not task.done():
            # Stranded load; tracked until it drains so aclose can cancel it.
            entry.stale_tasks.add(task)
            task.add_done_callback(entry.stale_tasks.discard)

    def is_visible(self, layer: str) -> bool:
        entry = self._entries.get(layer)
        return entry is not None and entry.visible

    def snapshot(self, layer: str) -> LayerSnapshot:
        """Current snapshot of *layer* (idle and empty if never shown)."""
        return self._entry(layer).accumulator.snapshot()

    async def wait(self, layer: str) -> LayerSnapshot:
        """Wait for the current load of *layer* and return the latest snapshot."""
        entry = self._entry(layer)
        if entry.task is not None:
            await entry.task
        return entry.accumulator.snapshot()

    def subscribe(
        self, layer: str, callback: Callable[[LayerSnapshot], None]
    ) -> Callable[[], None]:
        """Register a snapshot callback for *layer*; returns an unsubscribe function."""
        return self._entry(layer).accumulator.subscribe(callback)

    def layers(self) -> list[str]:
        """Names of layers touched so far."""
        return sorted(self._entries)

    async def aclose(self) -> None:
        """Hide every layer, cancel outstanding loads and close sources."""
        tasks = []
        for layer, entry in self._entries.items():
            self.hide(layer)
            pending = {*entry.stale_tasks, *([entry.task] if entry.task is not None else [])}
            for task in pending:
                if not task.done():
                    task.cancel()
                    tasks.append(task)
        if tasks:
            await asyncio.gather(*tasks, return_exceptions=True)
        for entry in self._entries.values():
            await entry.source.aclose()
        self._entries.clear()

    # -- internals -------------------------------------------------------

    def _entry(self, layer: str) -> _LayerEntry:
        entry = self._entries.get(layer)
        if entry is not None:
            return entry

        spec = get_layer_spec(layer)
        accumulator = LayerAccumulator(layer)
        source = self._source_factory(layer, self._config, viewport=self._viewport)
        loader = ChunkedFeatureLoader(
            layer,
            source,
            profile=spec.profile,
            page_size=self._config.page_size,
            max_pages=self._config.page_limit,
            viewport=self._viewport,
            accumulator=accumulator,
        )
        entry = _LayerEntry(accumulator=accumulator, source=source, loader=loader)
        self._entries[layer] = entry
        return entry
