"""memocachex: Memoization of two-argument functions with pluggable eviction.

This library wraps a pure, possibly expensive two-argument function with a cache.
Two engines are provided: a bounded cache that evicts the least-hit entry when
full, and an unbounded cache whose values are held through reclaimable slots
that a policy may empty under memory pressure. A weak-keyed store and
single-argument, scalar and text adapters complete the toolkit.

Basic usage:
    >>> from memocachex import BoundedHitCache, ReclaimableCache, SoftPolicy
    >>>
    >>> # Keep the 512 most-hit pairs
    >>> similarity = BoundedHitCache(compute_similarity, capacity=512)
    >>> score = similarity(doc_a, doc_b)
    >>>
    >>> # Keep everything until memory gets tight
    >>> embeddings = ReclaimableCache(
    ...     embed_pair,
    ...     policy=SoftPolicy(retain=1024, max_rss_mb=4096),
    ... )
    >>> vector = embeddings(model_name, text)
"""

__authors__ = ["Dominik Dahlem"]
__status__ = "Production"
__version__ = "0.1.0"

from .bounded import BoundedHitCache, HitCountCache
from .decorator import CachedFunc, CachedScalar, CachedText, memoize
from .interfaces import ArgPair, Memoizer, ReclaimableSlot, ReclamationPolicy
from .reclaimable import ReclaimableCache
from .slots import SoftPolicy, StrongPolicy, WeakPolicy
from .utils import PLACEHOLDER
from .weak import WeakKeyStore

__all__ = [
    "PLACEHOLDER",
    "ArgPair",
    "BoundedHitCache",
    "CachedFunc",
    "CachedScalar",
    "CachedText",
    "HitCountCache",
    "Memoizer",
    "ReclaimableCache",
    "ReclaimableSlot",
    "ReclamationPolicy",
    "SoftPolicy",
    "StrongPolicy",
    "WeakKeyStore",
    "WeakPolicy",
    "memoize",
    "__version__",
]
