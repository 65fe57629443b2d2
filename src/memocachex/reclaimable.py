"""Unbounded memoizer whose entries can be reclaimed under memory pressure.

Values are held through reclaimable slots obtained from a policy. Each call
sweeps the table and purges slots that have emptied since the last call,
delivering them to the optional notification sink.
"""

__authors__ = ["Dominik Dahlem"]
__status__ = "Production"

import logging
from collections.abc import Callable, Hashable
from typing import Any

from .interfaces import ArgPair, Memoizer, ReclaimableSlot, ReclamationPolicy
from .slots import SoftPolicy
from .utils import is_sink

logger = logging.getLogger(__name__)

_MISSING = object()


class ReclaimableCache(Memoizer):
    """Memoizer with no capacity bound and policy-driven reclamation.

    Features:
    - A live slot is served without calling the origin
    - An empty or missing slot is recomputed and replaced by a fresh slot
    - Every successful call sweeps out empty slots
    - Swept slots are delivered once to ``sink`` (if any)

    Args:
        origin: Two-argument function being memoized
        sink: Optional queue-like (``put``) or list-like (``append``) object
            receiving reclaimed slots
        policy: Reclamation policy creating the slots (default: ``SoftPolicy()``)

    Example:
        >>> import queue
        >>> reclaimed = queue.SimpleQueue()
        >>> cache = ReclaimableCache(expensive, sink=reclaimed)
        >>> result = cache(x, y)
    """

    def __init__(
        self,
        origin: Callable[[Any, Any], Any],
        sink: Any = None,
        policy: ReclamationPolicy | None = None,
    ):
        super().__init__(origin)
        if sink is not None and not is_sink(sink):
            raise TypeError(
                f"sink must provide put() or append(), got {type(sink).__name__}"
            )
        self.sink = sink
        self.policy = policy if policy is not None else SoftPolicy()
        self.table: dict[ArgPair, ReclaimableSlot] = {}
        self.n_reclaimed = 0

    def get(self, key: ArgPair, compute_fn: Callable[[], Any]) -> Any:
        stale = self.table.get(key)
        value = stale.get(_MISSING) if stale is not None else _MISSING

        if value is _MISSING:
            self.n_misses += 1
            value = compute_fn()
            # A re-entrant call may already have swept the stale slot
            if stale is not None and self.table.get(key) is stale:
                self._discard(stale)
            self.table[key] = self.policy.slot(value, self.sink)
        else:
            self.n_hits += 1

        self.sweep()
        return value

    def sweep(self) -> int:
        """Remove every entry whose slot has emptied.

        Returns:
            Number of entries removed
        """
        empty = [key for key, slot in self.table.items() if slot.reclaimed]
        for key in empty:
            self._discard(self.table.pop(key))
        if empty:
            logger.debug(f"Swept {len(empty)} reclaimed slot(s)")
        return len(empty)

    def _discard(self, slot: ReclaimableSlot) -> None:
        self.n_reclaimed += 1
        slot.enqueue()

    def __len__(self) -> int:
        return len(self.table)

    def __contains__(self, key: Hashable) -> bool:
        slot = self.table.get(key)
        return slot is not None and not slot.reclaimed

    def stats(self) -> dict:
        stats = super().stats()
        stats.update(reclaimed=self.n_reclaimed)
        return stats
