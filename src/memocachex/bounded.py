"""Bounded memoizer evicting the least-hit entry on overflow.

The backing table is a ``cachetools.Cache`` that counts hits per key and
picks the entry with the fewest hits when it has to make room.
"""

__authors__ = ["Dominik Dahlem"]
__status__ = "Production"

import logging
from collections.abc import Callable, Hashable
from typing import Any

from cachetools import Cache

from .interfaces import ArgPair, Memoizer

logger = logging.getLogger(__name__)


class HitCountCache(Cache):
    """Cache that evicts the key with the lowest hit count.

    A key's counter starts at 1 when it is inserted and grows by one on every
    successful lookup. Among keys with equal counters the one inserted first
    is evicted. Re-inserting an evicted key starts it over at the end of the
    insertion order.

    Args:
        maxsize: Maximum number of entries
    """

    def __init__(self, maxsize: int):
        Cache.__init__(self, maxsize)
        # Insertion-ordered, doubles as the tie-break order
        self.__hits: dict[Hashable, int] = {}

    def __getitem__(self, key, cache_getitem=Cache.__getitem__):
        value = cache_getitem(self, key)
        if key in self.__hits:
            self.__hits[key] += 1
        return value

    def __setitem__(self, key, value, cache_setitem=Cache.__setitem__):
        cache_setitem(self, key, value)
        if key not in self.__hits:
            self.__hits[key] = 1

    def __delitem__(self, key, cache_delitem=Cache.__delitem__):
        cache_delitem(self, key)
        del self.__hits[key]

    def hits(self, key: Hashable) -> int:
        """Hit counter of a resident key.

        Raises:
            KeyError: If key is not resident
        """
        return self.__hits[key]

    def loser(self) -> Hashable:
        """Key that would be evicted next.

        Raises:
            KeyError: If the cache is empty
        """
        if not self.__hits:
            raise KeyError(f"{type(self).__name__} is empty")
        # min() keeps the first of equal counters, i.e. the earliest inserted
        return min(self.__hits, key=self.__hits.__getitem__)

    def popitem(self):
        """Remove and return the (key, value) pair with the fewest hits."""
        key = self.loser()
        hits = self.__hits[key]
        value = self.pop(key)
        logger.debug(f"Evicted {key!r} with {hits} hit(s)")
        return key, value


class BoundedHitCache(Memoizer):
    """Memoizer holding at most ``capacity`` entries.

    A resident key is served from the table and its hit counter bumped. A new
    key is computed first; only when the computation succeeds is the loser
    evicted (if the table is full) and the new key inserted with one hit.

    Args:
        origin: Two-argument function being memoized
        capacity: Maximum number of entries, 0 disables storage entirely

    Example:
        >>> cache = BoundedHitCache(lambda x, y: x + y, capacity=2)
        >>> cache(1, 2)
        3
        >>> ArgPair(1, 2) in cache
        True
    """

    def __init__(self, origin: Callable[[Any, Any], Any], capacity: int):
        super().__init__(origin)
        if isinstance(capacity, bool) or not isinstance(capacity, int):
            raise ValueError(
                f"capacity must be an integer, got {type(capacity).__name__}"
            )
        if capacity < 0:
            raise ValueError(f"capacity must be >= 0, got {capacity}")
        self.capacity = capacity
        self.table = HitCountCache(maxsize=max(capacity, 1))
        self.n_evictions = 0

    def get(self, key: ArgPair, compute_fn: Callable[[], Any]) -> Any:
        try:
            value = self.table[key]
        except KeyError:
            pass
        else:
            self.n_hits += 1
            return value

        self.n_misses += 1
        value = compute_fn()

        if self.capacity == 0:
            self.n_evictions += 1
            return value

        if len(self.table) >= self.capacity:
            self.table.popitem()
            self.n_evictions += 1
        self.table[key] = value
        return value

    def hits(self, key: ArgPair) -> int:
        """Hit counter of a resident key.

        Raises:
            KeyError: If key is not resident
        """
        return self.table.hits(key)

    def __len__(self) -> int:
        return len(self.table)

    def __contains__(self, key: Hashable) -> bool:
        return key in self.table

    def stats(self) -> dict:
        stats = super().stats()
        stats.update(capacity=self.capacity, evictions=self.n_evictions)
        return stats
