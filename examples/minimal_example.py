"""Minimal working example for memocachex.

The simplest possible use case: memoize an expensive two-argument function.
"""

import time

from memocachex import memoize


# 1. Your expensive, pure two-argument function
@memoize(capacity=128)
def edit_distance(a: str, b: str) -> int:
    time.sleep(0.01)  # Pretend this is slow
    prev = list(range(len(b) + 1))
    for i, ca in enumerate(a, 1):
        cur = [i]
        for j, cb in enumerate(b, 1):
            cur.append(min(prev[j] + 1, cur[j - 1] + 1, prev[j - 1] + (ca != cb)))
        prev = cur
    return prev[-1]


# 2. Call it as usual
words = ["kitten", "sitting", "mitten", "fitting"]
for _ in range(3):
    for a in words:
        for b in words:
            edit_distance(a, b)

# 3. Only the first pass computed anything
print(edit_distance.stats())
