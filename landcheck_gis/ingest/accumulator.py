"""Per-layer feature accumulator and its published snapshots.

The accumulator is the single owner of a layer's growing feature list
and load status. Every mutation takes the generation the caller captured
when its load started; a mutation carrying a stale generation is ignored.
``reset()`` bumps the generation, which is how an in-flight load is
cancelled without touching its task.

After every applied mutation an immutable ``LayerSnapshot`` is published
to subscribers. Features are append-only within a generation, so each
published feature tuple is a prefix of every later one.
"""

from __future__ import annotations

import enum
import logging
from dataclasses import dataclass
from typing import TYPE_CHECKING, Any

if TYPE_CHECKING:
    from collections.abc import Callable, Iterable

    from landcheck_gis.models.feature import NormalizedFeature

logger = logging.getLogger("landcheck_gis.ingest")


class LayerStatus(enum.Enum):
    """Render status derived from a snapshot."""

    IDLE = "idle"
    LOADING = "loading"
    READY = "ready"
    FAILED = "failed"


@dataclass(frozen=True, slots=True)
class LayerSnapshot:
    """Immutable view of an accumulator at one point in time.

    Attributes:
        layer: Layer name.
        features: Accepted features in arrival order.
        loading: Whether a load is in progress.
        error: Failure text of the last load, if it failed.
        generation: Accumulator generation the snapshot belongs to.
        rejected: Records rejected during the current generation.
        filtered: Records dropped by the viewport during the current generation.
        completed: Whether the current generation's load finished.
    """

    layer: str
    features: tuple[NormalizedFeature, ...] = ()
    loading: bool = False
    error: str | None = None
    generation: int = 0
    rejected: int = 0
    filtered: int = 0
    completed: bool = False

    @property
    def status(self) -> LayerStatus:
        if self.loading:
            return LayerStatus.LOADING
        if self.error is not None:
            return LayerStatus.FAILED
        if self.completed:
            return LayerStatus.READY
        return LayerStatus.IDLE

    def __len__(self) -> int:
        return len(self.features)

    def to_feature_collection(self) -> dict[str, Any]:
        """GeoJSON ``FeatureCollection`` of the accepted features."""
        return {
            "type": "FeatureCollection",
            "features": [feature.to_dict() for feature in self.features],
        }

    def to_dict(self) -> dict[str, Any]:
        """Status summary without the features themselves."""
        return {
            "layer": self.layer,
            "status": self.status.value,
            "loading": self.loading,
            "error": self.error,
            "generation": self.generation,
            "features": len(self.features),
            "rejected": self.rejected,
            "filtered": self.filtered,
        }


class LayerAccumulator:
    """Owner of one layer's features, status and generation token.

    Example usage::

        acc = LayerAccumulator("parcels")
        generation = acc.generation
        acc.start(generation)
        acc.append(generation, features)
        acc.finish(generation)
        acc.snapshot().status  # LayerStatus.READY
    """

    def __init__(self, layer: str) -> None:
        self.layer = layer
        self._features: list[NormalizedFeature] = []
        self._loading = False
        self._error: str | None = None
        self._completed = False
        self._generation = 0
        self._rejected = 0
        self._filtered = 0
        self._subscribers: list[Callable[[LayerSnapshot], None]] = []

    # -- read side -------------------------------------------------------

    @property
    def generation(self) -> int:
        return self._generation

    @property
    def features(self) -> tuple[NormalizedFeature, ...]:
        return tuple(self._features)

    @property
    def loading(self) -> bool:
        return self._loading

    @property
    def error(self) -> str | None:
        return self._error

    @property
    def rejected(self) -> int:
        return self._rejected

    @property
    def filtered(self) -> int:
        return self._filtered

    def is_current(self, generation: int) -> bool:
        return generation == self._generation

    def snapshot(self) -> LayerSnapshot:
        return LayerSnapshot(
            layer=self.layer,
            features=tuple(self._features),
            loading=self._loading,
            error=self._error,
            generation=self._generation,
            rejected=self._rejected,
            filtered=self._filtered,
            completed=self._completed,
        )

    def subscribe(self, callback: Callable[[LayerSnapshot], None]) -> Callable[[], None]:
        """Register *callback* for every published snapshot.

        Returns:
            A zero-argument function that removes the subscription.
        """
        self._subscribers.append(callback)

        def _unsubscribe() -> None:
            if callback in self._subscribers:
                self._subscribers.remove(callback)

        return _unsubscribe

    # -- mutations -------------------------------------------------------

    def reset(self) -> int:
        """Clear all state and bump the generation. Returns the new generation."""
        self._generation += 1
        self._features = []
        self._loading = False
        self._error = None
        self._completed = False
        self._rejected = 0
        self._filtered = 0
        self._publish()
        return self._generation

    def start(self, generation: int) -> bool:
        """Mark a load of *generation* as in progress."""
        if not self._accepts(generation, "start"):
            return False
        self._loading = True
        self._error = None
        self._completed = False
        self._publish()
        return True

    def append(
        self,
        generation: int,
        features: Iterable[NormalizedFeature],
        *,
        rejected: int = 0,
        filtered: int = 0,
    ) -> bool:
        """Append accepted features and add to the rejection/filter counters."""
        if not self._accepts(generation, "append"):
            return False
        self._features.extend(features)
        self._rejected += rejected
        self._filtered += filtered
        self._publish()
        return True

    def finish(self, generation: int) -> bool:
        """Mark the load of *generation* as completed."""
        if not self._accepts(generation, "finish"):
            return False
        self._loading = False
        self._completed = True
        self._publish()
        return True

    def fail(self, generation: int, error: str) -> bool:
        """Mark the load of *generation* as failed, keeping its features."""
        if not self._accepts(generation, "fail"):
            return False
        self._loading = False
        self._error = error
        self._publish()
        return True

    # -- internals -------------------------------------------------------

    def _accepts(self, generation: int, operation: str) -> bool:
        if generation == self._generation:
            return True
        logger.debug(
            "stale mutation ignored | layer=%s | op=%s | generation=%d | current=%d",
            self.layer,
            operation,
            generation,
            self._generation,
        )
        return False

    def _publish(self) -> None:
        if not self._subscribers:
            return
        snapshot = self.snapshot()
        for callback in list(self._subscribers):
            callback(snapshot)
