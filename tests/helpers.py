"""Map builders and small fakes shared across the test suite."""

from __future__ import annotations

from collections.abc import Sequence
from random import Random

from ambler.environment.map import NavigationMap
from ambler.types import GridDimensions, TileCoord, WorldTilePos


def ascii_map(*rows: str, tile_size: int = 16) -> NavigationMap:
    """Shorthand for NavigationMap.from_ascii with rows as varargs."""
    return NavigationMap.from_ascii(rows, tile_size=tile_size)


def corridor_map(length: int = 5) -> NavigationMap:
    """A single-row corridor of ``length`` tiles starting at (0, 0)."""
    return ascii_map("." * length)


def ring_map(width: int = 3, height: int = 3) -> NavigationMap:
    """The border of a width x height rectangle; the interior is off-map."""
    rows = ["." * width]
    rows += ["." + " " * (width - 2) + "." for _ in range(height - 2)]
    rows.append("." * width)
    return ascii_map(*rows)


def t_shape_map() -> NavigationMap:
    """Stem (1, 0) above a bar (0, 1) (1, 1) (2, 1).

        .
       ...
    """
    return ascii_map(" . ", "...")


def open_field_map(width: int, height: int) -> NavigationMap:
    return ascii_map(*["." * width for _ in range(height)])


class FakeOracle:
    """WalkabilityOracle backed by an explicit tile set, recording queries."""

    def __init__(
        self,
        walkable: Sequence[WorldTilePos],
        bounds: GridDimensions = (10, 10),
        obstructed: Sequence[WorldTilePos] = (),
    ) -> None:
        self._walkable = set(walkable)
        self._obstructed = set(obstructed)
        self._bounds = bounds
        self.queries: list[tuple[str, TileCoord, TileCoord]] = []

    @property
    def bounds(self) -> GridDimensions:
        return self._bounds

    def is_walkable(self, x: TileCoord, y: TileCoord) -> bool:
        self.queries.append(("walkable", x, y))
        return (x, y) in self._walkable

    def is_obstructed(self, x: TileCoord, y: TileCoord) -> bool:
        self.queries.append(("obstructed", x, y))
        return (x, y) in self._obstructed


class ScriptedRandom(Random):
    """Random with scripted random() rolls and lower-bound uniform().

    random() pops the scripted values, then returns 0.99 (never pauses).
    uniform(a, b) always returns a, so pause and roll durations are the
    minimum of their ranges.
    """

    def __init__(self, rolls: Sequence[float] = ()) -> None:
        super().__init__(0)
        self.rolls = list(rolls)

    def getrandbits(self, k: int) -> int:
        # Defining this keeps choice() off the scripted random().
        return super().getrandbits(k)

    def random(self) -> float:
        if self.rolls:
            return self.rolls.pop(0)
        return 0.99

    def uniform(self, a: float, b: float) -> float:
        return a
