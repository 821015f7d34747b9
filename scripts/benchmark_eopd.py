#!/usr/bin/env python3
"""
Benchmark the uncovered-tuple search on random triangulations.

Usage:
    uv run python scripts/benchmark_eopd.py [--vertices N,...] [--count N] [--no-cache]

Examples:
    uv run python scripts/benchmark_eopd.py
    uv run python scripts/benchmark_eopd.py --vertices 12,16,20 --count 20
    uv run python scripts/benchmark_eopd.py --output results.json
"""

from __future__ import annotations

import argparse
import json
import random
import time
from pathlib import Path
from typing import Any

from eopd import SearchOptions, SearchStats, analyse

from generate_triangulations import random_triangulation


def benchmark_size(
    n: int,
    count: int,
    options: SearchOptions,
    seed: int = 42,
) -> dict[str, Any]:
    """
    Analyse ``count`` random triangulations with ``n`` vertices.

    Returns:
        Dict with timing, uncovered count and aggregated counters
    """
    rng = random.Random(seed + n)
    graphs = [random_triangulation(n, 4 * n, rng) for _ in range(count)]

    totals = SearchStats()
    uncovered = 0
    start = time.perf_counter()
    for emb in graphs:
        result, stats = analyse(emb, options)
        totals.merge(stats)
        uncovered += result is not None
    elapsed = time.perf_counter() - start

    return {
        "num_vertices": n,
        "graphs": count,
        "uncovered": uncovered,
        "time_seconds": elapsed,
        **totals.as_dict(),
    }


def main():
    parser = argparse.ArgumentParser(description="Benchmark the eOPD tuple search")
    parser.add_argument("--vertices", default="12,14,16,18", help="Comma-separated vertex counts")
    parser.add_argument("--count", type=int, default=10, help="Triangulations per size")
    parser.add_argument("--no-cache", action="store_true", help="Disable the patch cache")
    parser.add_argument("--output", help="Output JSON file for results")

    args = parser.parse_args()

    options = SearchOptions(use_cache=not args.no_cache)
    sizes = [int(s) for s in args.vertices.split(",")]

    print(f"{'n':>4s}{'time':>10s}{'uncov':>7s}{'3-tup':>9s}{'4-tup':>9s}{'hits':>9s}{'search':>9s}")
    results = []
    for n in sizes:
        r = benchmark_size(n, args.count, options)
        results.append(r)
        print(
            f"{n:>4d}{r['time_seconds']:>10.4f}{r['uncovered']:>7d}"
            f"{r['three_tuples']:>9d}{r['four_tuples']:>9d}"
            f"{r['cache_hits']:>9d}{r['searches']:>9d}"
        )

    if args.output and results:
        with open(Path(args.output), "w") as f:
            json.dump(results, f, indent=2)
        print(f"\nResults saved to {args.output}")


if __name__ == "__main__":
    main()
