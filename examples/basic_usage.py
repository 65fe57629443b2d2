"""Basic usage examples for memocachex.

This demonstrates both engines on a tensor workload: a bounded cache for a
hot set of feature-pair similarities, and a reclaimable cache whose entries
give way when the process is under memory pressure.
"""

import logging
import queue

import torch

from memocachex import (
    BoundedHitCache,
    CachedFunc,
    CachedText,
    ReclaimableCache,
    SoftPolicy,
)


# 1. Define your expensive two-argument computation
class FeatureSimilarity:
    """Cross-attention style similarity between two feature tables."""

    def __init__(self, num_items=100, feature_dim=128):
        torch.manual_seed(0)
        self.features = torch.randn(num_items, 32, feature_dim)
        self.calls = 0

    def __call__(self, i, j):
        self.calls += 1
        a, b = self.features[i], self.features[j]
        return torch.softmax(a @ b.T / a.shape[-1] ** 0.5, dim=-1) @ b


def main():
    logging.basicConfig(level=logging.INFO)
    print("=== memocachex Basic Usage Example ===\n")

    # 2. Bounded cache: keep the 32 most-hit pairs
    similarity = FeatureSimilarity()
    bounded = BoundedHitCache(similarity, capacity=32)
    for step in range(500):
        i, j = step % 10, (step * 7) % 10  # Hot set of pairs
        bounded(i, j)
    print(f"Bounded: {bounded.stats()} (origin calls: {similarity.calls})\n")

    # 3. Reclaimable cache: keep everything until memory gets tight
    reclaimed = queue.SimpleQueue()
    policy = SoftPolicy(retain=16)
    reclaimable = ReclaimableCache(FeatureSimilarity(), sink=reclaimed, policy=policy)

    pinned = reclaimable(0, 1)  # Held by us, survives any pressure
    for i in range(50):
        reclaimable(i, (i + 1) % 50)

    print(f"Before pressure: {reclaimable.stats()}")
    policy.pressure()  # Simulate a memory-pressure event
    assert reclaimable(0, 1) is pinned
    print(f"After pressure:  {reclaimable.stats()}")
    print(f"Reclaimed slots delivered to sink: {reclaimed.qsize()}\n")

    # 4. Adapters for other arities
    norm = CachedFunc(
        lambda i: similarity.features[i].norm().item(), BoundedHitCache, capacity=8
    )
    print(f"Norm of item 3: {norm(3):.3f}")

    banner = CachedText(lambda: f"{similarity.features.shape[0]} items cached")
    print(f"Banner: {banner}")


if __name__ == "__main__":
    main()
