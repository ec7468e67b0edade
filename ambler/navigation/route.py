"""Patrol route building.

A patrol route is an ordered list of waypoints that together cover the
walkable area reachable from an agent's spawn tile. build_route() produces
one in three passes:

1. **Reachable set (BFS).** Collect usable tiles outward from the start in
   FIFO order until ``max_length`` tiles are found or the area runs out.
   FIFO is what makes a capped result a compact blob around the start
   instead of a long tendril in one direction.

2. **Ring check.** If every collected tile has exactly two collected
   neighbors, the area is a simple cycle (a necklace: one neighbor means a
   dead end, three or more a junction). Rings are walked once around and
   replayed in loop mode::

       A - B        route: A B C D, loop A B C D A B ...
       |   |
       D - C

3. **DFS with backtracking.** Anything else is traversed depth-first,
   re-emitting a tile every time a branch returns to it. The route then
   stays contiguous (each step moves one tile) at the cost of revisits::

           A
           |        route: A B C B D B A
       C - B - D

   If the route happens to end next to (or on) its first tile it is
   replayed as a loop, otherwise as ping-pong.

Failures (bad start tile, area too small) come back as a RouteBuildResult
with ``failure`` set; they are an expected outcome, never an exception.
"""

from __future__ import annotations

import logging
from collections import deque
from collections.abc import Collection, Iterator
from dataclasses import dataclass
from enum import Enum
from typing import ClassVar

from ambler import config
from ambler.navigation.oracle import (
    TileBlock,
    WalkabilityOracle,
    probe_tile,
    usable_neighbors,
)
from ambler.types import WorldTilePos
from ambler.util.coordinates import are_adjacent

logger = logging.getLogger(__name__)


class RouteError(Exception):
    """Base class for patrol route errors."""


class BuildFailure(Enum):
    """Why build_route() could not produce a route."""

    INVALID_START = "invalid_start"  # Start tile fails the oracle
    ROUTE_TOO_SHORT = "route_too_short"  # Fewer than 2 waypoints


@dataclass(frozen=True)
class Route:
    """An immutable waypoint sequence plus its traversal mode.

    Attributes:
        waypoints: Tiles in traversal order. May repeat tiles (backtracks).
        is_closed: True for loop mode, False for ping-pong mode.
    """

    EMPTY: ClassVar[Route]

    waypoints: tuple[WorldTilePos, ...] = ()
    is_closed: bool = False

    def __post_init__(self) -> None:
        if len(self.waypoints) == 1:
            raise ValueError("A route needs at least 2 waypoints (or none at all)")

    def __len__(self) -> int:
        return len(self.waypoints)

    @property
    def is_valid(self) -> bool:
        return bool(self.waypoints)

    @property
    def unique_tiles(self) -> int:
        return len(set(self.waypoints))

    @property
    def mode_name(self) -> str:
        return "loop" if self.is_closed else "ping-pong"


Route.EMPTY = Route()


@dataclass(frozen=True)
class RouteBuildResult:
    """Outcome of build_route().

    Attributes:
        start: The requested start tile.
        route: The built route, or Route.EMPTY on failure.
        failure: None on success, otherwise the reason for failure.
        block: For INVALID_START, which oracle check the start tile failed.
    """

    start: WorldTilePos
    route: Route = Route.EMPTY
    failure: BuildFailure | None = None
    block: TileBlock | None = None

    @property
    def ok(self) -> bool:
        return self.failure is None


def build_route(
    start: WorldTilePos,
    oracle: WalkabilityOracle,
    max_length: int = config.DEFAULT_MAX_ROUTE_LENGTH,
) -> RouteBuildResult:
    """Build a patrol route covering the area reachable from ``start``.

    Args:
        start: Tile the route begins on (normally the agent's tile).
        oracle: Tile grid to query. Treated as a snapshot; callers rebuild
            after editing it.
        max_length: Caps the reachable-set size and the waypoint count.

    Returns:
        A RouteBuildResult. Check ``ok`` before using ``route``.

    Raises:
        ValueError: If ``max_length`` is less than 1.
    """
    if max_length < 1:
        raise ValueError(f"max_length must be at least 1, got {max_length}")

    block = probe_tile(oracle, start[0], start[1])
    if block is not None:
        logger.warning(
            f"Cannot build patrol route: start tile {start} is "
            f"{block.name.lower().replace('_', ' ')}"
        )
        return RouteBuildResult(
            start=start, failure=BuildFailure.INVALID_START, block=block
        )

    reachable = collect_reachable(start, oracle, max_length)

    if is_simple_cycle(reachable, oracle):
        waypoints = _walk_ring(start, reachable, oracle)
        is_closed = True
    else:
        waypoints = _traverse_with_backtracking(start, reachable, oracle, max_length)
        # Even a DFS route may end beside (or on) its first tile; loop it then.
        is_closed = len(waypoints) >= 2 and (
            waypoints[-1] == waypoints[0] or are_adjacent(waypoints[-1], waypoints[0])
        )

    if len(waypoints) < 2:
        logger.warning(
            f"Cannot build patrol route from {start}: "
            f"route too short ({len(waypoints)} waypoints)"
        )
        return RouteBuildResult(start=start, failure=BuildFailure.ROUTE_TOO_SHORT)

    route = Route(tuple(waypoints), is_closed)
    logger.info(
        f"Created patrol route: {len(route)} waypoints, "
        f"{route.unique_tiles} unique tiles, mode={route.mode_name}, start={start}"
    )
    return RouteBuildResult(start=start, route=route)


# ---------------------------------------------------------------------------
# Passes
# ---------------------------------------------------------------------------


def collect_reachable(
    start: WorldTilePos, oracle: WalkabilityOracle, max_length: int
) -> list[WorldTilePos]:
    """Usable tiles connected to ``start``, nearest first, at most max_length.

    ``start`` is assumed usable.
    """
    collected: list[WorldTilePos] = []
    queue: deque[WorldTilePos] = deque([start])
    seen: set[WorldTilePos] = {start}

    while queue and len(collected) < max_length:
        current = queue.popleft()
        collected.append(current)
        for neighbor in usable_neighbors(oracle, current):
            if neighbor not in seen:
                seen.add(neighbor)
                queue.append(neighbor)

    return collected


def is_simple_cycle(
    tiles: Collection[WorldTilePos], oracle: WalkabilityOracle
) -> bool:
    """True if ``tiles`` form a ring: 3+ tiles, each with exactly 2 in-set neighbors."""
    if len(tiles) < 3:
        return False
    tile_set = set(tiles)
    return all(
        len(_neighbors_in_set(tile, tile_set, oracle)) == 2 for tile in tile_set
    )


def _neighbors_in_set(
    tile: WorldTilePos, tile_set: set[WorldTilePos], oracle: WalkabilityOracle
) -> list[WorldTilePos]:
    return [n for n in usable_neighbors(oracle, tile) if n in tile_set]


def _walk_ring(
    start: WorldTilePos, ring: list[WorldTilePos], oracle: WalkabilityOracle
) -> list[WorldTilePos]:
    # Each ring tile has exactly two ring neighbors and one of them was just
    # visited, so there is a single choice at every step until the ring closes.
    ring_set = set(ring)
    waypoints: list[WorldTilePos] = []
    visited: set[WorldTilePos] = set()
    current: WorldTilePos | None = start

    while current is not None and len(waypoints) < len(ring_set):
        waypoints.append(current)
        visited.add(current)
        current = next(
            (
                n
                for n in _neighbors_in_set(current, ring_set, oracle)
                if n not in visited
            ),
            None,
        )

    return waypoints


@dataclass
class _Frame:
    """One level of the explicit DFS stack.

    ``neighbors`` is consumed lazily, so each candidate's visited status is
    checked only when the traversal reaches it, like a recursive DFS would.
    """

    tile: WorldTilePos
    neighbors: Iterator[WorldTilePos]


def _traverse_with_backtracking(
    start: WorldTilePos,
    tiles: list[WorldTilePos],
    oracle: WalkabilityOracle,
    max_length: int,
) -> list[WorldTilePos]:
    tile_set = set(tiles)

    def descend(tile: WorldTilePos) -> _Frame:
        visited.add(tile)
        path.append(tile)
        return _Frame(tile, iter(_neighbors_in_set(tile, tile_set, oracle)))

    path: list[WorldTilePos] = []
    visited: set[WorldTilePos] = set()
    stack = [descend(start)]

    while stack:
        frame = stack[-1]
        child = next(frame.neighbors, None)

        if child is None:
            # Branch exhausted: return to the parent and re-emit it.
            stack.pop()
            if stack and len(path) < max_length:
                path.append(stack[-1].tile)
            continue

        if child not in visited and len(path) < max_length:
            stack.append(descend(child))

    return path
