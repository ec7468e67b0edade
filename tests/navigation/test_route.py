"""Tests for patrol route building."""

from __future__ import annotations

import logging

import numpy as np
import pytest
import tcod.path

from ambler.navigation.oracle import TileBlock, is_usable
from ambler.navigation.route import (
    BuildFailure,
    Route,
    build_route,
    collect_reachable,
    is_simple_cycle,
)
from ambler.util.coordinates import are_adjacent, manhattan_distance
from tests.helpers import (
    FakeOracle,
    ascii_map,
    corridor_map,
    open_field_map,
    ring_map,
    t_shape_map,
)


def assert_contiguous(route: Route) -> None:
    for a, b in zip(route.waypoints, route.waypoints[1:], strict=False):
        assert are_adjacent(a, b), f"{a} -> {b} is not a single step"


class TestRouteValue:
    """Tests for the Route dataclass itself."""

    def test_empty_route_is_invalid(self) -> None:
        assert not Route.EMPTY.is_valid
        assert len(Route.EMPTY) == 0

    def test_single_waypoint_route_is_rejected(self) -> None:
        with pytest.raises(ValueError):
            Route(((0, 0),))

    def test_unique_tiles_ignores_backtracks(self) -> None:
        route = Route(((0, 0), (1, 0), (0, 0)), is_closed=True)
        assert len(route) == 3
        assert route.unique_tiles == 2

    def test_mode_name(self) -> None:
        assert Route(((0, 0), (1, 0)), is_closed=True).mode_name == "loop"
        assert Route(((0, 0), (1, 0))).mode_name == "ping-pong"


class TestSimpleCycles:
    """Rings are walked once around in loop mode."""

    def test_two_by_two_block_is_a_four_cycle(self) -> None:
        result = build_route((0, 0), open_field_map(2, 2))

        assert result.ok
        assert result.route.is_closed
        assert result.route.waypoints == ((0, 0), (1, 0), (1, 1), (0, 1))

    def test_ring_border_follows_cardinal_order(self) -> None:
        result = build_route((0, 0), ring_map(3, 3))

        assert result.route.is_closed
        assert result.route.waypoints == (
            (0, 0),
            (1, 0),
            (2, 0),
            (2, 1),
            (2, 2),
            (1, 2),
            (0, 2),
            (0, 1),
        )

    def test_ring_visits_each_tile_exactly_once(self) -> None:
        nav_map = ring_map(5, 4)
        result = build_route((2, 0), nav_map)

        assert len(result.route) == len(nav_map.usable_tiles())
        assert result.route.unique_tiles == len(result.route)
        assert_contiguous(result.route)
        # Last waypoint steps back onto the first.
        assert are_adjacent(result.route.waypoints[-1], result.route.waypoints[0])

    def test_is_simple_cycle_rejects_junctions_and_dead_ends(self) -> None:
        nav_map = t_shape_map()
        assert not is_simple_cycle(nav_map.usable_tiles(), nav_map)
        corridor = corridor_map(4)
        assert not is_simple_cycle(corridor.usable_tiles(), corridor)

    def test_is_simple_cycle_needs_three_tiles(self) -> None:
        nav_map = corridor_map(2)
        assert not is_simple_cycle(nav_map.usable_tiles(), nav_map)


class TestBacktrackingTraversal:
    """Non-ring areas are covered depth-first with backtracks."""

    def test_corridor_from_the_end_walks_out_and_back(self) -> None:
        result = build_route((0, 0), corridor_map(5))

        xs = [x for x, _ in result.route.waypoints]
        assert xs == [0, 1, 2, 3, 4, 3, 2, 1, 0]
        # The walk returns to its first tile, so it replays as a loop.
        assert result.route.is_closed

    def test_corridor_from_the_middle(self) -> None:
        result = build_route((2, 0), corridor_map(5))

        xs = [x for x, _ in result.route.waypoints]
        assert xs == [2, 3, 4, 3, 2, 1, 0, 1, 2]

    def test_t_shape_backtracks_through_the_junction(self) -> None:
        stem, junction, right, left = (1, 0), (1, 1), (2, 1), (0, 1)

        result = build_route(stem, t_shape_map())

        assert result.route.waypoints == (
            stem,
            junction,
            right,
            junction,
            left,
            junction,
            stem,
        )
        assert result.route.is_closed

    def test_every_usable_tile_is_covered(self) -> None:
        nav_map = ascii_map(
            "..#...",
            ".  . .",
            "......",
        )
        result = build_route((0, 0), nav_map)

        assert result.ok
        assert set(result.route.waypoints) == set(nav_map.usable_tiles())
        assert_contiguous(result.route)

    def test_obstructed_tiles_split_areas(self) -> None:
        nav_map = ascii_map("..#..")
        result = build_route((0, 0), nav_map)

        assert set(result.route.waypoints) == {(0, 0), (1, 0)}


class TestLengthCap:
    """max_length caps both the reachable set and the waypoint count."""

    def test_reachable_set_is_collected_nearest_first(self) -> None:
        nav_map = open_field_map(10, 10)

        tiles = collect_reachable((0, 0), nav_map, max_length=5)

        assert tiles == [(0, 0), (1, 0), (0, 1), (2, 0), (1, 1)]
        assert all(manhattan_distance(t, (0, 0)) <= 2 for t in tiles)

    def test_capped_route_stays_inside_the_reachable_set(self) -> None:
        nav_map = open_field_map(10, 10)

        result = build_route((0, 0), nav_map, max_length=5)

        assert result.route.waypoints == ((0, 0), (1, 0), (2, 0), (1, 0), (1, 1))
        assert not result.route.is_closed
        assert_contiguous(result.route)

    def test_capped_route_ending_beside_start_is_closed(self) -> None:
        nav_map = open_field_map(10, 10)

        result = build_route((0, 0), nav_map, max_length=4)

        # Irregular, with a backtrack, but the last step is next to the start.
        assert result.route.waypoints == ((0, 0), (1, 0), (2, 0), (1, 0))
        assert result.route.is_closed

    @pytest.mark.parametrize("max_length", [2, 7, 25, 100])
    def test_waypoint_count_never_exceeds_cap(self, max_length: int) -> None:
        result = build_route((4, 4), open_field_map(20, 20), max_length=max_length)

        assert result.ok
        assert len(result.route) <= max_length
        assert_contiguous(result.route)

    def test_max_length_must_be_positive(self) -> None:
        with pytest.raises(ValueError):
            build_route((0, 0), corridor_map(3), max_length=0)


class TestBuildFailures:
    """Failures are returned, not raised."""

    @pytest.mark.parametrize(
        ("rows", "start", "block"),
        [
            ((".",), (-1, 0), TileBlock.OUT_OF_BOUNDS),
            ((".",), (0, 5), TileBlock.OUT_OF_BOUNDS),
            ((". ",), (1, 0), TileBlock.NOT_WALKABLE),
            ((".#",), (1, 0), TileBlock.OBSTRUCTED),
        ],
    )
    def test_invalid_start(
        self, rows: tuple[str, ...], start: tuple[int, int], block: TileBlock
    ) -> None:
        result = build_route(start, ascii_map(*rows))

        assert not result.ok
        assert result.failure is BuildFailure.INVALID_START
        assert result.block is block
        assert result.route is Route.EMPTY

    def test_isolated_tile_is_too_short(self) -> None:
        result = build_route((1, 1), ascii_map("   ", " . ", "   "))

        assert result.failure is BuildFailure.ROUTE_TOO_SHORT
        assert not result.route.is_valid

    def test_cap_of_one_is_too_short(self) -> None:
        result = build_route((0, 0), corridor_map(5), max_length=1)

        assert result.failure is BuildFailure.ROUTE_TOO_SHORT

    def test_failures_are_logged(self, caplog: pytest.LogCaptureFixture) -> None:
        with caplog.at_level(logging.WARNING):
            build_route((1, 0), ascii_map(". "))

        assert "not walkable" in caplog.text

    def test_success_is_logged(self, caplog: pytest.LogCaptureFixture) -> None:
        with caplog.at_level(logging.INFO):
            build_route((0, 0), open_field_map(2, 2))

        assert "Created patrol route: 4 waypoints" in caplog.text
        assert "mode=loop" in caplog.text


class TestDeterminism:
    def test_same_input_same_route(self) -> None:
        nav_map = ascii_map(
            ".....",
            ". # .",
            ".....",
            "  .  ",
        )

        first = build_route((0, 0), nav_map)
        second = build_route((0, 0), nav_map)

        assert first == second

    def test_works_with_any_oracle(self) -> None:
        oracle = FakeOracle([(3, 3), (4, 3), (5, 3)])

        result = build_route((3, 3), oracle)

        assert [x for x, _ in result.route.waypoints] == [3, 4, 5, 4, 3]


class TestReachabilityCrossCheck:
    """Every waypoint must be reachable from the start through usable tiles."""

    @pytest.mark.parametrize("seed", [1, 2, 3, 4])
    def test_waypoints_match_dijkstra_reachability(self, seed: int) -> None:
        generator = np.random.default_rng(seed)
        nav_map = open_field_map(16, 12)
        nav_map.navigable[:] = generator.random((16, 12)) < 0.7
        nav_map.collision[:] = generator.random((16, 12)) < 0.05
        nav_map.navigable[0, 0] = True
        nav_map.collision[0, 0] = False

        result = build_route((0, 0), nav_map, max_length=500)

        cost = nav_map.usable_mask().astype(np.int32)
        dist = tcod.path.maxarray(cost.shape, dtype=np.int32)
        dist[0, 0] = 0
        tcod.path.dijkstra2d(dist, cost, cardinal=1, diagonal=None, out=dist)
        reachable = dist < np.iinfo(np.int32).max

        if result.ok:
            for x, y in result.route.waypoints:
                assert reachable[x, y]
                assert is_usable(nav_map, (x, y))
            # Uncapped routes cover the whole connected area.
            assert result.route.unique_tiles == int(np.count_nonzero(reachable))
        else:
            assert result.failure is BuildFailure.ROUTE_TOO_SHORT
            assert int(np.count_nonzero(reachable)) == 1
