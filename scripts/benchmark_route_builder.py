#!/usr/bin/env python3
"""Benchmark patrol route building and the agent tick.

Times build_route() on a handful of generated maps at several length caps,
then times a PatrolWorld tick with many agents. Finishes with correctness
checks against tcod's Dijkstra flood fill.

Usage:
    python scripts/benchmark_route_builder.py
"""

# ruff: noqa: E402  # Allow path setup before importing project modules

from __future__ import annotations

import sys
import timeit
from pathlib import Path

import numpy as np
import tcod.path

# Add the project root to Python path so running as a script works.
project_root = Path(__file__).resolve().parent.parent
if str(project_root) not in sys.path:
    sys.path.insert(0, str(project_root))

from ambler.environment.map import NavigationMap
from ambler.game.patrol_world import PatrolWorld
from ambler.navigation.route import build_route
from ambler.types import WorldTilePos
from ambler.util import rng
from ambler.util.coordinates import are_adjacent

# ---------------------------------------------------------------------------
# Map generators
# ---------------------------------------------------------------------------


def _make_open_field(width: int, height: int) -> NavigationMap:
    """All-walkable map (largest reachable set)."""
    nav_map = NavigationMap(width, height)
    nav_map.navigable[:] = True
    return nav_map


def _make_yard(
    width: int, height: int, wall_fraction: float, seed: int, start: WorldTilePos
) -> NavigationMap:
    """Random unwalkable tiles and scattered solid props.

    The start tile is forced usable so the benchmark measures route building
    rather than an instant INVALID_START.
    """
    generator = np.random.default_rng(seed)
    nav_map = NavigationMap(width, height)
    nav_map.navigable[:] = generator.random((width, height)) > wall_fraction
    nav_map.collision[:] = generator.random((width, height)) < 0.03
    nav_map.navigable[start] = True
    nav_map.collision[start] = False
    return nav_map


def _make_ring(width: int, height: int) -> NavigationMap:
    """Rectangle border only, the simple-cycle fast path."""
    nav_map = NavigationMap(width, height)
    nav_map.navigable[0, :] = True
    nav_map.navigable[-1, :] = True
    nav_map.navigable[:, 0] = True
    nav_map.navigable[:, -1] = True
    return nav_map


def _reachable_mask(nav_map: NavigationMap, start: WorldTilePos) -> np.ndarray:
    """Tiles reachable from start by cardinal steps, via tcod.path.dijkstra2d."""
    cost = nav_map.usable_mask().astype(np.int32)
    dist = tcod.path.maxarray(cost.shape, dtype=np.int32)
    dist[start] = 0
    tcod.path.dijkstra2d(dist, cost, cardinal=1, diagonal=None, out=dist)
    return dist < np.iinfo(np.int32).max


def _bench(fn: object, *args: object) -> float:
    """Time *fn(*args)* and return average ms per call."""
    # Warm up
    fn(*args)  # type: ignore[operator]
    timer = timeit.Timer(lambda: fn(*args))  # type: ignore[operator]
    number, total = timer.autorange()
    return (total / number) * 1000


# ---------------------------------------------------------------------------
# Main
# ---------------------------------------------------------------------------


def main() -> None:
    rng.init(42)

    scenarios: list[tuple[str, NavigationMap, WorldTilePos]] = [
        ("Open 64x48", _make_open_field(64, 48), (32, 24)),
        ("Yard 64x48 (35%)", _make_yard(64, 48, 0.35, 42, (5, 5)), (5, 5)),
        ("Yard 128x128 (25%)", _make_yard(128, 128, 0.25, 99, (10, 10)), (10, 10)),
        ("Ring 40x30", _make_ring(40, 30), (0, 0)),
    ]
    caps = (25, 100, 400)

    print("Route builder benchmark")
    print("=" * 70)
    header = "".join(f"{f'cap {cap}':>12}" for cap in caps)
    print(f"{'Scenario':<28}{header}")
    print("-" * 70)

    for name, nav_map, start in scenarios:
        timings = [_bench(build_route, start, nav_map, cap) for cap in caps]
        print(f"{name:<28}" + "".join(f"{ms:>10.3f}ms" for ms in timings))

    print("-" * 70)
    print()

    print("Agent tick benchmark")
    print("=" * 70)
    nav_map = _make_open_field(64, 48)
    world = PatrolWorld(nav_map)
    for i in range(200):
        world.spawn_agent(i % 64, (i // 64) * 8)
    tick_ms = _bench(world.update, 1 / 60)
    print(f"{'200 agents, 64x48 open':<28}{tick_ms:>10.3f}ms per tick")
    world.close()
    print()

    # ------------------------------------------------------------------
    # Correctness checks
    # ------------------------------------------------------------------
    print("Correctness checks...")
    for name, nav_map, start in scenarios:
        result = build_route(start, nav_map, max_length=10_000)
        reachable = _reachable_mask(nav_map, start)
        if not result.ok:
            print(f"  {name}: no route ({result.failure})")
            continue

        outside = [tile for tile in result.route.waypoints if not reachable[tile]]
        covered = result.route.unique_tiles == int(np.count_nonzero(reachable))
        steps_ok = all(
            are_adjacent(a, b)
            for a, b in zip(
                result.route.waypoints, result.route.waypoints[1:], strict=False
            )
        )
        status = "OK!" if not outside and covered and steps_ok else "FAIL"
        print(
            f"  {name}: {len(result.route)} waypoints, "
            f"{result.route.unique_tiles} unique, {result.route.mode_name} {status}"
        )


if __name__ == "__main__":
    main()
