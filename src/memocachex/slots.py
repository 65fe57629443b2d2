"""Reclaimable slot implementations and the policies that create them.

Three policies are provided:
- ``StrongPolicy``: slots never empty on their own (deterministic tests)
- ``WeakPolicy``: slots empty as soon as the garbage collector frees the value
- ``SoftPolicy``: slots keep their value strongly while recently used and fall
  back to a weak reference once they leave the retained window or memory
  pressure is signalled
"""

__authors__ = ["Dominik Dahlem"]
__status__ = "Production"

import logging
import sys
import weakref
from typing import Any

from cachetools import LRUCache

from .interfaces import ReclaimableSlot, ReclamationPolicy
from .utils import env_number, process_rss_mb

logger = logging.getLogger(__name__)

_EMPTY = object()


class StrongSlot(ReclaimableSlot):
    """Slot holding its value strongly until ``clear`` is called."""

    def __init__(self, value: Any, sink: Any = None):
        super().__init__(sink)
        self._value = value

    def get(self, default: Any = None) -> Any:
        return default if self._value is _EMPTY else self._value

    def clear(self) -> None:
        """Empty the slot by hand."""
        self._value = _EMPTY


class WeakSlot(ReclaimableSlot):
    """Slot holding only a weak reference to its value.

    Raises:
        TypeError: If the value cannot be weakly referenced
    """

    def __init__(self, value: Any, sink: Any = None):
        super().__init__(sink)
        self._ref = weakref.ref(value)

    def get(self, default: Any = None) -> Any:
        value = self._ref()
        return default if value is None else value


def _held_refs(holder: Any) -> int:
    return sys.getrefcount(holder._strong)


class _Holder:
    pass


_sample = _Holder()
_sample._strong = object()
# Reference count of a value whose only owner is one holder attribute
_SLOT_ONLY_REFS = _held_refs(_sample)
del _sample


class SoftSlot(ReclaimableSlot):
    """Slot with a strong reference that can be downgraded to a weak one.

    While the slot is strong it never reports empty. ``soften`` drops the
    strong reference; afterwards the value survives only while something
    outside the slot still holds it. Values that cannot be weakly referenced
    (lists, dicts, ints, ...) keep their strong reference once softened and
    are released the first time the slot finds it is their only owner.
    Immortal objects such as small ints or ``None`` are never released.
    """

    def __init__(self, value: Any, policy: "SoftPolicy", sink: Any = None):
        super().__init__(sink)
        self._strong = value
        self._soft = False
        try:
            self._ref = weakref.ref(value)
        except TypeError:
            self._ref = None
        self._policy = policy

    @property
    def soft(self) -> bool:
        """Whether the slot has left the retained window."""
        return self._soft

    def get(self, default: Any = None) -> Any:
        if not self._soft:
            self._policy.touch(self)
            return self._strong
        if self._ref is not None:
            value = self._ref()
            return default if value is None else value
        return default if self.reclaimed else self._strong

    @property
    def reclaimed(self) -> bool:
        # Checked without touching so sweeps leave the LRU order alone
        if not self._soft:
            return False
        if self._ref is not None:
            return self._ref() is None
        if self._strong is not _EMPTY and _held_refs(self) <= _SLOT_ONLY_REFS:
            self._strong = _EMPTY
        return self._strong is _EMPTY

    def soften(self) -> None:
        """Drop the strong reference to the value."""
        self._soft = True
        if self._ref is not None:
            self._strong = _EMPTY


class _RetainedSlots(LRUCache):
    """LRU set of strongly held slots; evicted slots are softened."""

    def popitem(self):
        slot, marker = super().popitem()
        slot.soften()
        return slot, marker


class StrongPolicy(ReclamationPolicy):
    """Policy whose slots are only emptied explicitly."""

    def slot(self, value: Any, sink: Any = None) -> StrongSlot:
        return StrongSlot(value, sink)


class WeakPolicy(ReclamationPolicy):
    """Policy delegating reclamation to the garbage collector."""

    def slot(self, value: Any, sink: Any = None) -> WeakSlot:
        return WeakSlot(value, sink)


class SoftPolicy(ReclamationPolicy):
    """Soft-reference policy with an LRU retained window.

    The ``retain`` most recently created or read slots hold their values
    strongly. A slot pushed out of that window is softened. ``pressure``
    softens every retained slot at once; it runs automatically on slot
    creation when ``max_rss_mb`` is set and the process is above it.

    Args:
        retain: Number of slots held strongly (default: ``MEMOCACHEX_RETAIN``
            or 128)
        max_rss_mb: Resident memory threshold in megabytes that triggers
            pressure (default: ``MEMOCACHEX_MAX_RSS_MB`` or disabled)
    """

    def __init__(self, retain: int | None = None, max_rss_mb: float | None = None):
        retain = env_number("MEMOCACHEX_RETAIN", 128) if retain is None else retain
        if max_rss_mb is None:
            max_rss_mb = env_number("MEMOCACHEX_MAX_RSS_MB", None, cast=float)
        if retain < 1:
            raise ValueError(f"retain must be >= 1, got {retain}")
        if max_rss_mb is not None and max_rss_mb <= 0:
            raise ValueError(f"max_rss_mb must be > 0, got {max_rss_mb}")

        self.retain = int(retain)
        self.max_rss_mb = max_rss_mb
        self.retained = _RetainedSlots(maxsize=self.retain)

    def slot(self, value: Any, sink: Any = None) -> SoftSlot:
        if self.max_rss_mb is not None:
            rss = process_rss_mb()
            if rss > self.max_rss_mb:
                logger.info(
                    f"Memory pressure: RSS {rss:.1f} MB exceeds "
                    f"{self.max_rss_mb:.1f} MB, softening {len(self.retained)} slot(s)"
                )
                self.pressure()
        slot = SoftSlot(value, self, sink)
        self.retained[slot] = True
        return slot

    def touch(self, slot: SoftSlot) -> None:
        """Mark slot as most recently used."""
        if slot in self.retained:
            self.retained.get(slot)

    def pressure(self) -> int:
        """Soften every retained slot.

        Returns:
            Number of slots softened
        """
        n_softened = len(self.retained)
        while self.retained:
            self.retained.popitem()
        logger.debug(f"Softened {n_softened} retained slot(s)")
        return n_softened
