"""Benchmark suite for memocachex.

Measures and reports:
- Hit rates of BoundedHitCache at different capacities on a skewed workload
- Speedup over calling the origin directly
- Resident memory of ReclaimableCache under different SoftPolicy windows

The origin is a tensor workload (pairwise feature similarity) so the numbers
reflect an expensive computation. Generates a markdown report with results.
"""

import argparse
import random
import time
from collections import defaultdict
from dataclasses import dataclass

import torch

from memocachex import BoundedHitCache, ReclaimableCache, SoftPolicy
from memocachex.utils import process_rss_mb


@dataclass
class BenchmarkResult:
    """Single benchmark result."""

    name: str
    metric: str
    value: float
    unit: str
    details: str = ""


class PairSimilarity:
    """Simulates an expensive two-argument computation on feature tensors."""

    def __init__(self, num_items=512, feature_dim=256):
        torch.manual_seed(42)
        self.features = torch.randn(num_items, 64, feature_dim)
        self.call_count = 0

    def __call__(self, i, j):
        self.call_count += 1
        a, b = self.features[i], self.features[j]
        return torch.softmax(a @ b.T, dim=-1) @ b


def skewed_workload(num_items: int, num_calls: int, seed: int = 42) -> list[tuple]:
    """Zipf-like pairs: a few hot pairs, a long cold tail."""
    rng = random.Random(seed)
    hot = max(2, num_items // 16)
    calls = []
    for _ in range(num_calls):
        pool = hot if rng.random() < 0.8 else num_items
        calls.append((rng.randrange(pool), rng.randrange(pool)))
    return calls


def benchmark_hit_rate(num_calls: int) -> list[BenchmarkResult]:
    """Hit rate of BoundedHitCache against capacity."""
    print("\n[Benchmark] Bounded Hit Rate")
    print("=" * 60)

    results = []
    workload = skewed_workload(512, num_calls)

    for capacity in [0, 16, 64, 256, 1024]:
        origin = PairSimilarity()
        cache = BoundedHitCache(origin, capacity=capacity)
        for i, j in workload:
            cache(i, j)

        stats = cache.stats()
        hit_rate = stats["hits"] / num_calls
        print(
            f"  capacity={capacity:5d}  hit rate={hit_rate:.1%}  "
            f"evictions={stats['evictions']}"
        )
        results.append(
            BenchmarkResult(
                name="Bounded Hit Rate",
                metric=f"Capacity {capacity}",
                value=hit_rate * 100,
                unit="%",
                details=f"{stats['evictions']} evictions, {origin.call_count} computes",
            )
        )

    return results


def benchmark_speedup(num_calls: int) -> list[BenchmarkResult]:
    """Wall time with and without caching."""
    print("\n[Benchmark] Cache Speedup")
    print("=" * 60)

    workload = skewed_workload(512, num_calls)
    runs = {
        "No cache": PairSimilarity(),
        "BoundedHitCache(256)": BoundedHitCache(PairSimilarity(), capacity=256),
        "ReclaimableCache": ReclaimableCache(PairSimilarity()),
    }

    results = []
    for label, fn in runs.items():
        start = time.time()
        for i, j in workload:
            fn(i, j)
        elapsed = time.time() - start
        print(f"  {label:22s} {elapsed:.3f}s")
        results.append(
            BenchmarkResult(
                name="Cache Speedup",
                metric=label,
                value=elapsed,
                unit="seconds",
                details=f"{num_calls / elapsed:.0f} calls/sec",
            )
        )

    return results


def benchmark_soft_memory(num_calls: int) -> list[BenchmarkResult]:
    """Resident memory of ReclaimableCache against the SoftPolicy window."""
    print("\n[Benchmark] Soft Policy Memory")
    print("=" * 60)

    results = []
    workload = skewed_workload(512, num_calls, seed=7)

    for retain in [16, 128, 1024]:
        baseline = process_rss_mb()
        cache = ReclaimableCache(PairSimilarity(), policy=SoftPolicy(retain=retain))
        for i, j in workload:
            cache(i, j)
        grown = process_rss_mb() - baseline
        stats = cache.stats()
        print(
            f"  retain={retain:5d}  entries={stats['size']}  "
            f"reclaimed={stats['reclaimed']}  RSS +{grown:.1f} MB"
        )
        results.append(
            BenchmarkResult(
                name="Soft Policy Memory",
                metric=f"Retain {retain}",
                value=grown,
                unit="MB",
                details=f"{stats['size']} entries, {stats['reclaimed']} reclaimed",
            )
        )
        del cache

    return results


def generate_markdown_report(all_results: list[BenchmarkResult], output_file: str):
    """Generate markdown report from benchmark results."""
    print(f"\n[Report] Generating markdown report: {output_file}")

    grouped = defaultdict(list)
    for result in all_results:
        grouped[result.name].append(result)

    with open(output_file, "w") as f:
        f.write("# memocachex Benchmark Report\n\n")
        f.write(f"**Generated:** {time.strftime('%Y-%m-%d %H:%M:%S')}\n\n")
        f.write(f"**System:** {torch.get_num_threads()} CPU threads\n\n")
        f.write("---\n\n")

        for bench_name, results in grouped.items():
            f.write(f"## {bench_name}\n\n")
            f.write("| Metric | Value | Details |\n")
            f.write("|--------|-------|----------|\n")
            for result in results:
                value_str = f"{result.value:.3f} {result.unit}"
                f.write(f"| {result.metric} | {value_str} | {result.details} |\n")
            f.write("\n")

            if bench_name == "Cache Speedup":
                no_cache = next(r for r in results if r.metric == "No cache")
                f.write("**Interpretation:**\n")
                for r in results:
                    if r is not no_cache:
                        f.write(f"- {r.metric}: {no_cache.value / r.value:.1f}x faster\n")
                f.write("\n")

    print(f"  Report saved to: {output_file}")


def main():
    parser = argparse.ArgumentParser(description="Benchmark memocachex engines")
    parser.add_argument(
        "--output",
        default="BENCHMARK.md",
        help="Output markdown file (default: BENCHMARK.md)",
    )
    parser.add_argument(
        "--calls",
        type=int,
        default=5000,
        help="Number of calls per workload (default: 5000)",
    )
    parser.add_argument(
        "--skip-memory",
        action="store_true",
        help="Skip memory benchmark",
    )
    args = parser.parse_args()

    print("=" * 60)
    print("memocachex Benchmark Suite")
    print("=" * 60)

    all_results = []
    all_results.extend(benchmark_hit_rate(args.calls))
    all_results.extend(benchmark_speedup(args.calls))
    if not args.skip_memory:
        all_results.extend(benchmark_soft_memory(args.calls))

    generate_markdown_report(all_results, args.output)

    print("\n" + "=" * 60)
    print("Benchmark Complete!")
    print("=" * 60)


if __name__ == "__main__":
    main()
