#!/usr/bin/env python3
"""
Fan-out benchmark for the iterative coordinator.

Walks a synthetic tree of keys whose children are only discovered once the
parent's future resolves, so every level is fed back through ``remap``.

Usage examples:
  PYTHONPATH=src python scripts/fanout_benchmark.py
  PYTHONPATH=src python scripts/fanout_benchmark.py --branching 8 --depth 4 --latency-ms 2
"""

from __future__ import annotations

import argparse
import asyncio
import statistics
import time

from itermap import IterativeCoordinator
from itermap.observability import InMemoryTelemetrySink


async def run_benchmark(
    *,
    branching: int,
    depth: int,
    latency_ms: float,
    overlap: bool,
) -> None:
    latency_s = latency_ms / 1000.0
    started_at: dict[tuple[int, ...], float] = {}
    durations: list[float] = []
    duplicates = 0

    async def expand(node: tuple[int, ...]) -> list[tuple[int, ...]]:
        await asyncio.sleep(latency_s)
        if len(node) >= depth:
            return []
        children = [node + (i,) for i in range(branching)]
        if overlap and node:
            # Sibling subtrees share one child, exercising dedup.
            children.append(node[:-1] + (0,))
        return children

    def map_fn(node: tuple[int, ...]):
        started_at[node] = time.perf_counter()
        return expand(node)

    def reduce_fn(count, children, remap, node, resolved, rejected):
        nonlocal duplicates
        durations.append(time.perf_counter() - started_at[node])
        for child in children:
            if not remap(child):
                duplicates += 1
        return count + 1

    sink = InMemoryTelemetrySink()
    coordinator = IterativeCoordinator([()], name="bench", telemetry=sink)
    coordinator.reduce(reduce_fn, 0)

    started = time.perf_counter()
    coordinator.map(map_fn)
    visited = await asyncio.wait_for(coordinator.future, timeout=120)
    elapsed = time.perf_counter() - started

    snapshot = coordinator.snapshot()
    throughput = visited / elapsed if elapsed > 0 else 0.0
    p50 = statistics.median(durations) if durations else 0.0
    p95 = sorted(durations)[int(0.95 * (len(durations) - 1))] if durations else 0.0

    print(f"branching={branching}")
    print(f"depth={depth}")
    print(f"overlap={overlap}")
    print(f"key_latency_ms={latency_ms:.2f}")
    print(f"keys_visited={visited}")
    print(f"keys_mapped={snapshot.mapped}")
    print(f"spans={len(sink.spans())}")
    print(f"duplicate_remaps={duplicates}")
    print(f"elapsed_s={elapsed:.3f}")
    print(f"throughput_kps={throughput:.2f}")
    print(f"key_duration_p50_ms={p50 * 1000:.2f}")
    print(f"key_duration_p95_ms={p95 * 1000:.2f}")


def parse_args() -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Iterative coordinator fan-out benchmark")
    parser.add_argument("--branching", type=int, default=4)
    parser.add_argument("--depth", type=int, default=5)
    parser.add_argument("--latency-ms", type=float, default=5.0)
    parser.add_argument("--overlap", action="store_true")
    return parser.parse_args()


def main() -> None:
    args = parse_args()
    asyncio.run(
        run_benchmark(
            branching=args.branching,
            depth=args.depth,
            latency_ms=args.latency_ms,
            overlap=args.overlap,
        )
    )


if __name__ == "__main__":
    main()
