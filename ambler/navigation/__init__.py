"""Patrol route building and replay.

- build_route: BFS reachable set, ring detection, DFS-with-backtracking
- Route / RouteBuildResult: immutable results, failures returned not raised
- RouteCursor: loop or ping-pong replay of a Route
- WalkabilityOracle: the tile-grid protocol routes are built against
"""

from .cursor import CursorExhaustedError, RouteCursor
from .oracle import (
    CARDINAL_OFFSETS,
    TileBlock,
    WalkabilityOracle,
    is_usable,
    probe_tile,
    usable_neighbors,
)
from .route import (
    BuildFailure,
    Route,
    RouteBuildResult,
    RouteError,
    build_route,
    collect_reachable,
    is_simple_cycle,
)

__all__ = [
    "CARDINAL_OFFSETS",
    "BuildFailure",
    "CursorExhaustedError",
    "Route",
    "RouteBuildResult",
    "RouteCursor",
    "RouteError",
    "TileBlock",
    "WalkabilityOracle",
    "build_route",
    "collect_reachable",
    "is_simple_cycle",
    "is_usable",
    "probe_tile",
    "usable_neighbors",
]
