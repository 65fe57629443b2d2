"""Core interfaces shared by the cache engines.

Every engine memoizes a two-argument origin function keyed by an ``ArgPair``.
Engines that hold values through reclaimable slots obtain those slots from a
``ReclamationPolicy``, so the engine never decides by itself when a value dies.
"""

__authors__ = ["Dominik Dahlem"]
__status__ = "Production"

from abc import ABC, abstractmethod
from collections.abc import Callable, Hashable
from typing import Any, NamedTuple

from .utils import notify_sink


class ArgPair(NamedTuple):
    """Immutable ordered pair of arguments used as a cache key.

    Equality and hash are component-wise. Mutable components must not be
    mutated while an equal key is resident in a cache.
    """

    first: Any
    second: Any


class Memoizer(ABC):
    """Base class for two-argument memoizers.

    Subclasses own a backing table and implement ``get``: return the cached
    value for ``key`` or compute it with ``compute_fn`` and store it.

    Args:
        origin: Two-argument function being memoized
    """

    def __init__(self, origin: Callable[[Any, Any], Any]):
        if not callable(origin):
            raise TypeError(
                f"{type(self).__name__} requires a callable origin, "
                f"got {type(origin).__name__}"
            )
        self.origin = origin
        self.n_hits = 0
        self.n_misses = 0

    @abstractmethod
    def get(self, key: ArgPair, compute_fn: Callable[[], Any]) -> Any:
        """Return the value cached under key, computing it on a miss.

        Args:
            key: Cache key
            compute_fn: Zero-argument callable producing the value

        Returns:
            Cached or freshly computed value
        """

    @abstractmethod
    def __len__(self) -> int:
        """Number of entries currently in the backing table."""

    @abstractmethod
    def __contains__(self, key: Hashable) -> bool:
        """Whether key is resident in the backing table."""

    def __call__(self, first: Any, second: Any) -> Any:
        key = ArgPair(first, second)
        return self.get(key, lambda: self.origin(first, second))

    def stats(self) -> dict:
        """Get cache statistics.

        Returns:
            Dict with hit/miss counters and current size
        """
        return {
            "hits": self.n_hits,
            "misses": self.n_misses,
            "size": len(self),
        }


class ReclaimableSlot(ABC):
    """Handle around a cached value that may empty at any time.

    Once a slot reports empty it stays empty. A slot created with a sink is
    delivered to that sink at most once, through ``enqueue``.
    """

    def __init__(self, sink: Any = None):
        self.sink = sink
        self._enqueued = False

    @abstractmethod
    def get(self, default: Any = None) -> Any:
        """Return the held value, or default if it was reclaimed."""

    @property
    def reclaimed(self) -> bool:
        """Whether the slot no longer holds its value."""
        marker = object()
        return self.get(marker) is marker

    def enqueue(self) -> bool:
        """Deliver this slot to its sink.

        Returns:
            True if the slot was delivered now, False if it had no sink or
            was already delivered
        """
        if self.sink is None or self._enqueued:
            return False
        self._enqueued = True
        notify_sink(self.sink, self)
        return True


class ReclamationPolicy(ABC):
    """Factory for reclaimable slots; decides when held values may die."""

    @abstractmethod
    def slot(self, value: Any, sink: Any = None) -> ReclaimableSlot:
        """Create a slot holding value.

        Args:
            value: Value to hold
            sink: Optional notification sink the slot is delivered to once
                it is found reclaimed

        Returns:
            New reclaimable slot
        """
