"""Helper functions shared by the cache engines and adapters.

This module provides the placeholder key used by the arity adapters,
delivery of reclaimed slots to notification sinks, and a process memory reading.
"""

__authors__ = ["Dominik Dahlem"]
__status__ = "Production"

import logging
import os
from typing import Any

import psutil

logger = logging.getLogger(__name__)


class _Placeholder:
    """Fixed argument supplied by adapters in place of a missing argument."""

    __slots__ = ()

    def __repr__(self) -> str:
        return "PLACEHOLDER"

    def __reduce__(self) -> str:
        return "PLACEHOLDER"


PLACEHOLDER = _Placeholder()


def is_sink(obj: Any) -> bool:
    """Check whether obj can receive reclaimed slots.

    A sink is anything queue-like (``put``) or list-like (``append``).
    """
    return callable(getattr(obj, "put", None)) or callable(
        getattr(obj, "append", None)
    )


def notify_sink(sink: Any, item: Any) -> None:
    """Deliver item to a queue-like or list-like sink.

    Args:
        sink: Object with ``put`` (e.g. ``queue.SimpleQueue``) or ``append``
            (e.g. ``list``, ``collections.deque``)
        item: Item to deliver

    Raises:
        TypeError: If sink supports neither method
    """
    put = getattr(sink, "put", None)
    if callable(put):
        put(item)
        return
    append = getattr(sink, "append", None)
    if callable(append):
        append(item)
        return
    raise TypeError(f"Sink of type {type(sink).__name__} has no put() or append()")


def process_rss_mb() -> float:
    """Resident set size of the current process in megabytes."""
    process = psutil.Process(os.getpid())
    return process.memory_info().rss / (1024 * 1024)


def env_number(name: str, default: Any, cast: type = int) -> Any:
    """Read a numeric setting from the environment.

    Args:
        name: Environment variable name
        default: Value returned when the variable is unset or empty
        cast: Conversion applied to the raw string

    Returns:
        Converted value or default

    Raises:
        ValueError: If the variable is set but cannot be converted
    """
    raw = os.getenv(name)
    if raw is None or raw.strip() == "":
        return default
    try:
        return cast(raw)
    except ValueError as e:
        raise ValueError(f"Invalid value for {name}: {raw!r}") from e
