from __future__ import annotations

from collections.abc import Iterator
from enum import Enum, auto
from typing import Protocol, runtime_checkable

from ambler.types import GridDimensions, TileCoord, WorldTilePos

# Cardinal expansion order: +X, -X, +Y, -Y. Route building depends on this
# order being fixed so the same map always produces the same route.
CARDINAL_OFFSETS: tuple[WorldTilePos, ...] = ((1, 0), (-1, 0), (0, 1), (0, -1))


@runtime_checkable
class WalkabilityOracle(Protocol):
    """Read-only view of the tile grid a patrol route is built on."""

    @property
    def bounds(self) -> GridDimensions: ...

    def is_walkable(self, x: TileCoord, y: TileCoord) -> bool: ...

    def is_obstructed(self, x: TileCoord, y: TileCoord) -> bool: ...


class TileBlock(Enum):
    """Why a tile can't be part of a patrol route."""

    OUT_OF_BOUNDS = auto()
    NOT_WALKABLE = auto()
    OBSTRUCTED = auto()


def probe_tile(
    oracle: WalkabilityOracle, x: TileCoord, y: TileCoord
) -> TileBlock | None:
    """Check whether a single tile is usable and return the reason if not.

    This is the authoritative definition of a usable tile for route building
    and agent placement. The check order is bounds -> navigation flag ->
    collision flag.

    Returns:
        ``None`` if the tile is usable, or a :class:`TileBlock` explaining
        why it is not.
    """
    width, height = oracle.bounds
    if not (0 <= x < width and 0 <= y < height):
        return TileBlock.OUT_OF_BOUNDS
    if not oracle.is_walkable(x, y):
        return TileBlock.NOT_WALKABLE
    if oracle.is_obstructed(x, y):
        return TileBlock.OBSTRUCTED
    return None


def is_usable(oracle: WalkabilityOracle, tile: WorldTilePos) -> bool:
    return probe_tile(oracle, tile[0], tile[1]) is None


def usable_neighbors(
    oracle: WalkabilityOracle, tile: WorldTilePos
) -> Iterator[WorldTilePos]:
    """Yield the usable 4-neighbors of a tile in CARDINAL_OFFSETS order."""
    x, y = tile
    for dx, dy in CARDINAL_OFFSETS:
        nx, ny = x + dx, y + dy
        if probe_tile(oracle, nx, ny) is None:
            yield (nx, ny)
