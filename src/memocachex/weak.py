"""Key-liveness driven store.

An entry lives exactly as long as its key object is strongly referenced
somewhere outside the store. Values are held strongly.
"""

__authors__ = ["Dominik Dahlem"]
__status__ = "Production"

import weakref
from collections.abc import Callable
from typing import Any

_MISSING = object()


class WeakKeyStore:
    """Memoizer keyed by weakly referenced keys.

    Lookups match keys by equality, so an equal key object finds the entry
    while the original key is alive. Keys must be hashable and weakly
    referenceable.

    Args:
        origin: Optional single-argument function used by ``__call__``
    """

    def __init__(self, origin: Callable[[Any], Any] | None = None):
        if origin is not None and not callable(origin):
            raise TypeError(
                f"WeakKeyStore origin must be callable, got {type(origin).__name__}"
            )
        self.origin = origin
        self.table: weakref.WeakKeyDictionary = weakref.WeakKeyDictionary()

    def get(self, key: Any, compute_fn: Callable[[], Any]) -> Any:
        """Return the value stored under key, computing it on a miss.

        Args:
            key: Hashable, weakly referenceable key
            compute_fn: Zero-argument callable producing the value

        Returns:
            Stored or freshly computed value

        Raises:
            TypeError: If key cannot be weakly referenced
        """
        value = self.table.get(key, _MISSING)
        if value is _MISSING:
            value = compute_fn()
            self.table[key] = value
        return value

    def __call__(self, key: Any) -> Any:
        if self.origin is None:
            raise TypeError("WeakKeyStore was created without an origin function")
        return self.get(key, lambda: self.origin(key))

    def __len__(self) -> int:
        return len(self.table)

    def __contains__(self, key: Any) -> bool:
        return key in self.table
