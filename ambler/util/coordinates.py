"""Conversion functions between tile and world coordinate systems."""

from __future__ import annotations

import math
from dataclasses import dataclass

from ambler.constants.movement import MotionConstants as MC
from ambler.types import TileCoord, UnitStep, WorldPos, WorldTilePos

# =============================================================================
# BOUNDS AND ADJACENCY
# =============================================================================


def is_valid_world_tile_pos(
    pos: WorldTilePos, map_width: TileCoord, map_height: TileCoord
) -> bool:
    """Check if world tile position is within map bounds."""
    x, y = pos
    return 0 <= x < map_width and 0 <= y < map_height


def manhattan_distance(a: WorldTilePos, b: WorldTilePos) -> int:
    return abs(a[0] - b[0]) + abs(a[1] - b[1])


def are_adjacent(a: WorldTilePos, b: WorldTilePos) -> bool:
    """True if two tiles are cardinal neighbors (Manhattan distance 1).

    Diagonal tiles are distance 2 and therefore not adjacent.
    """
    return manhattan_distance(a, b) == 1


def sign(value: float) -> UnitStep:
    return (value > 0) - (value < 0)


# =============================================================================
# TILE <-> WORLD
# =============================================================================


def tile_anchor(tile: WorldTilePos, tile_size: float) -> WorldPos:
    """World position of a tile's bottom-center point (where feet stand)."""
    tx, ty = tile
    return (tx * tile_size + tile_size * 0.5, ty * tile_size + float(tile_size))


def world_to_tile(pos: WorldPos, tile_size: float) -> WorldTilePos:
    """Tile containing a ground-contact point.

    The Y lookup is nudged upward by a small epsilon so an agent standing on
    a tile's bottom edge (its anchor) maps to that tile, not the one below.
    """
    wx, wy = pos
    return (
        math.floor(wx / tile_size),
        math.floor((wy - MC.TILE_LOOKUP_EPSILON_Y) / tile_size),
    )


# =============================================================================
# HITBOXES
# =============================================================================


@dataclass(frozen=True)
class Hitbox:
    """Axis-aligned box in world space. Y grows downward."""

    min_x: float
    min_y: float
    max_x: float
    max_y: float

    @classmethod
    def at_feet(
        cls,
        pos: WorldPos,
        half_width: float = MC.HITBOX_HALF_WIDTH,
        height: float = MC.HITBOX_HEIGHT,
        epsilon: float = MC.COLLISION_EPSILON,
    ) -> Hitbox:
        """Box standing on a ground-contact point, shrunk inward by epsilon."""
        x, y = pos
        return cls(
            min_x=x - half_width + epsilon,
            min_y=y - height + epsilon,
            max_x=x + half_width - epsilon,
            max_y=y - epsilon,
        )

    def intersects(self, other: Hitbox) -> bool:
        # Strict comparisons: boxes that merely share an edge don't overlap.
        return (
            self.min_x < other.max_x
            and self.max_x > other.min_x
            and self.min_y < other.max_y
            and self.max_y > other.min_y
        )


def feet_overlap(a: WorldPos, b: WorldPos) -> bool:
    """True if two same-sized characters standing at a and b overlap."""
    return Hitbox.at_feet(a).intersects(Hitbox.at_feet(b))
