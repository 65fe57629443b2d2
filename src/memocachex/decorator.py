"""Arity adapters and the ``memoize`` decorator.

Adapters re-expose a two-argument engine as a one-argument function, a
zero-argument scalar, or a text source by filling the missing arguments with
the shared ``PLACEHOLDER``. They add no caching policy of their own.
"""

__authors__ = ["Dominik Dahlem"]
__status__ = "Production"

import functools
import logging
from collections.abc import Callable
from typing import Any

from .bounded import BoundedHitCache
from .interfaces import Memoizer
from .reclaimable import ReclaimableCache
from .utils import PLACEHOLDER

logger = logging.getLogger(__name__)


class _Text(str):
    """``str`` subclass that can be weakly referenced by reclaimable slots."""


class CachedFunc:
    """Memoized single-argument function.

    Args:
        func: Function of one argument
        engine: Two-argument memoizer class (default: ``ReclaimableCache``)
        **engine_kwargs: Extra arguments for the engine (e.g. ``capacity``)

    Example:
        >>> square = CachedFunc(lambda x: x * x, BoundedHitCache, capacity=16)
        >>> square(4)
        16
    """

    def __init__(
        self,
        func: Callable[[Any], Any],
        engine: Callable[..., Memoizer] = ReclaimableCache,
        **engine_kwargs: Any,
    ):
        self.cache = engine(lambda _placeholder, arg: func(arg), **engine_kwargs)

    def __call__(self, arg: Any) -> Any:
        return self.cache(PLACEHOLDER, arg)


class CachedScalar:
    """Memoized zero-argument computation.

    Args:
        scalar: Callable taking no arguments
        engine: Two-argument memoizer class (default: ``ReclaimableCache``)
        **engine_kwargs: Extra arguments for the engine
    """

    def __init__(
        self,
        scalar: Callable[[], Any],
        engine: Callable[..., Memoizer] = ReclaimableCache,
        **engine_kwargs: Any,
    ):
        self.cache = engine(lambda _first, _second: scalar(), **engine_kwargs)

    def value(self) -> Any:
        """Cached value, computed on first use or after reclamation."""
        return self.cache(PLACEHOLDER, PLACEHOLDER)

    def __call__(self) -> Any:
        return self.value()


class CachedText:
    """Memoized text source.

    The computed text is stored as a private ``str`` subclass so reclaimable
    slots can track it. Callers receive a plain ``str`` equal by content to
    the computed text, not necessarily the same object.

    Args:
        text: Callable returning a string
        engine: Two-argument memoizer class (default: ``ReclaimableCache``)
        **engine_kwargs: Extra arguments for the engine
    """

    def __init__(
        self,
        text: Callable[[], str],
        engine: Callable[..., Memoizer] = ReclaimableCache,
        **engine_kwargs: Any,
    ):
        self.cache = engine(lambda _first, _second: _Text(text()), **engine_kwargs)

    def as_string(self) -> str:
        """Cached text as a plain string."""
        return str(self.cache(PLACEHOLDER, PLACEHOLDER))

    def __str__(self) -> str:
        return self.as_string()


def memoize(
    capacity: int | None = None,
    *,
    sink: Any = None,
    policy: Any = None,
) -> Callable[[Callable[[Any, Any], Any]], Memoizer]:
    """Decorate a two-argument function with a cache.

    Args:
        capacity: If given, use a ``BoundedHitCache`` of that size; otherwise
            a ``ReclaimableCache``
        sink: Notification sink for the reclaimable engine
        policy: Reclamation policy for the reclaimable engine

    Returns:
        Decorator producing the memoizer

    Raises:
        ValueError: If capacity is combined with sink or policy

    Example:
        >>> @memoize(capacity=256)
        ... def distance(a, b):
        ...     return abs(a - b)
    """
    if capacity is not None and (sink is not None or policy is not None):
        raise ValueError("sink and policy only apply when capacity is None")

    def decorate(func: Callable[[Any, Any], Any]) -> Memoizer:
        if capacity is not None:
            cache = BoundedHitCache(func, capacity)
        else:
            cache = ReclaimableCache(func, sink=sink, policy=policy)
        functools.update_wrapper(cache, func)
        logger.info(
            f"Memoized function: {getattr(func, '__qualname__', repr(func))} "
            f"(engine: {type(cache).__name__}, capacity: {capacity})"
        )
        return cache

    return decorate
