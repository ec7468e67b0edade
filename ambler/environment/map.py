from __future__ import annotations

from collections.abc import Iterable

import numpy as np

from ambler import config
from ambler.types import GridDimensions, TileCoord, WorldCoord, WorldTilePos
from ambler.util.coordinates import is_valid_world_tile_pos


class NavigationMap:
    """Per-tile navigation, collision and elevation layers.

    Navigation marks where NPCs are allowed to walk (painted by a level
    designer to define patrol areas). Collision marks solid obstacles; a
    tile with both flags set is still blocked, e.g. a rock dropped on a path.
    Elevation is a per-tile visual height offset in world units used for
    stairs and ledges.

    All arrays have shape (width, height) and are indexed as ``arr[x, y]``.
    Reads outside the map report "not walkable" / zero elevation and writes
    outside it are ignored, so callers can probe neighbors without bounds
    checks.

    The map implements the WalkabilityOracle protocol. It does not notify
    anyone when edited: publish a WorldEditedEvent after a batch of edits.
    """

    def __init__(
        self,
        width: TileCoord,
        height: TileCoord,
        tile_size: int = config.DEFAULT_TILE_SIZE,
    ) -> None:
        if width <= 0 or height <= 0:
            raise ValueError(f"Map dimensions must be positive, got {width}x{height}")
        if tile_size <= 0:
            raise ValueError(f"tile_size must be positive, got {tile_size}")

        self.width: TileCoord = width
        self.height: TileCoord = height
        self.tile_size = tile_size
        self.structural_revision: int = 0

        self.navigable = np.zeros((width, height), dtype=bool, order="F")
        self.collision = np.zeros((width, height), dtype=bool, order="F")
        self.elevation = np.zeros((width, height), dtype=np.int16, order="F")

    @classmethod
    def from_ascii(
        cls, rows: Iterable[str], tile_size: int = config.DEFAULT_TILE_SIZE
    ) -> NavigationMap:
        """Build a map from text rows, top row first.

        ``.`` is walkable, ``#`` is walkable-but-solid (collision), anything
        else (spaces, ``~``...) is off the navigation layer. Short rows are
        padded with non-walkable tiles.
        """
        lines = [row.rstrip("\n") for row in rows]
        while lines and not lines[-1].strip():
            lines.pop()
        if not lines:
            raise ValueError("ASCII map is empty")

        width = max(len(line) for line in lines)
        game_map = cls(width, len(lines), tile_size=tile_size)
        for y, line in enumerate(lines):
            for x, glyph in enumerate(line):
                if glyph == config.ASCII_WALKABLE:
                    game_map.navigable[x, y] = True
                elif glyph == config.ASCII_SOLID:
                    game_map.navigable[x, y] = True
                    game_map.collision[x, y] = True
        return game_map

    # ------------------------------------------------------------------
    # WalkabilityOracle
    # ------------------------------------------------------------------

    @property
    def bounds(self) -> GridDimensions:
        return (self.width, self.height)

    def in_bounds(self, x: TileCoord, y: TileCoord) -> bool:
        return is_valid_world_tile_pos((x, y), self.width, self.height)

    def is_walkable(self, x: TileCoord, y: TileCoord) -> bool:
        return self.in_bounds(x, y) and bool(self.navigable[x, y])

    def is_obstructed(self, x: TileCoord, y: TileCoord) -> bool:
        return self.in_bounds(x, y) and bool(self.collision[x, y])

    # ------------------------------------------------------------------
    # Editing
    # ------------------------------------------------------------------

    def set_navigation(self, x: TileCoord, y: TileCoord, walkable: bool) -> None:
        if self.in_bounds(x, y):
            self.navigable[x, y] = walkable
            self.structural_revision += 1

    def set_collision(self, x: TileCoord, y: TileCoord, solid: bool) -> None:
        if self.in_bounds(x, y):
            self.collision[x, y] = solid
            self.structural_revision += 1

    def set_elevation(self, x: TileCoord, y: TileCoord, elevation: int) -> None:
        # Elevation is visual only; it does not bump structural_revision.
        if self.in_bounds(x, y):
            self.elevation[x, y] = elevation

    def get_elevation(self, x: TileCoord, y: TileCoord) -> int:
        if not self.in_bounds(x, y):
            return 0
        return int(self.elevation[x, y])

    def elevation_at_world_pos(self, world_x: WorldCoord, world_y: WorldCoord) -> float:
        """Elevation of the tile under a world-space point."""
        tx = int(np.floor(world_x / self.tile_size))
        ty = int(np.floor(world_y / self.tile_size))
        return float(self.get_elevation(tx, ty))

    # ------------------------------------------------------------------
    # Queries
    # ------------------------------------------------------------------

    def usable_mask(self) -> np.ndarray:
        """Boolean (width, height) array of tiles a patrol route may use."""
        return self.navigable & ~self.collision

    def navigation_count(self) -> int:
        return int(np.count_nonzero(self.navigable))

    def usable_tiles(self) -> list[WorldTilePos]:
        xs, ys = np.nonzero(self.usable_mask())
        return [(int(x), int(y)) for x, y in zip(xs, ys, strict=True)]
