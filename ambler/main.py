"""Headless patrol simulation.

Loads an ASCII map, spawns agents, runs a fixed number of ticks and prints
where every agent ended up. Useful for eyeballing routes without a game.

Usage:
    python -m ambler maps/yard.txt --agent 2,3 --agent 10,4 --ticks 1200
    python -m ambler maps/yard.txt --agent 2,3 --obstacle 5,3 --log-level DEBUG
"""

from __future__ import annotations

import argparse
import logging
import sys
from pathlib import Path

from ambler import config
from ambler.environment.map import NavigationMap
from ambler.game.patrol_world import PatrolWorld
from ambler.types import DeltaTime, WorldPos, WorldTilePos
from ambler.util import rng
from ambler.util.coordinates import tile_anchor

logger = logging.getLogger(__name__)


def parse_tile(text: str) -> WorldTilePos:
    """Parse an ``X,Y`` tile argument."""
    try:
        x_text, y_text = text.split(",")
        return (int(x_text), int(y_text))
    except ValueError:
        raise argparse.ArgumentTypeError(
            f"Expected a tile as X,Y, got {text!r}"
        ) from None


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="ambler", description="Run patrol agents on an ASCII map"
    )
    parser.add_argument("map", type=Path, help="ASCII map file ('.' walkable)")
    parser.add_argument(
        "--agent",
        type=parse_tile,
        action="append",
        default=[],
        metavar="X,Y",
        help="Spawn an agent on this tile (repeatable)",
    )
    parser.add_argument(
        "--ticks", type=int, default=config.DEFAULT_SIM_TICKS, help="Ticks to run"
    )
    parser.add_argument(
        "--dt",
        type=float,
        default=config.DEFAULT_SIM_DELTA_TIME,
        help="Seconds per tick",
    )
    parser.add_argument("--seed", default=config.RANDOM_SEED, help="Random seed")
    parser.add_argument(
        "--tile-size", type=int, default=config.DEFAULT_TILE_SIZE, help="Tile size"
    )
    parser.add_argument(
        "--max-route-length",
        type=int,
        default=config.DEFAULT_MAX_ROUTE_LENGTH,
        help="Route length cap",
    )
    parser.add_argument(
        "--obstacle",
        type=parse_tile,
        default=None,
        metavar="X,Y",
        help="Park a stationary obstacle (the player) on this tile",
    )
    parser.add_argument(
        "--log-level",
        default="WARNING",
        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
        help="Logging verbosity",
    )
    return parser


def run(args: argparse.Namespace) -> PatrolWorld:
    """Build the world described by ``args`` and tick it to completion."""
    rng.init(args.seed)

    nav_map = NavigationMap.from_ascii(
        args.map.read_text().splitlines(), tile_size=args.tile_size
    )
    obstacle: WorldPos | None = None
    if args.obstacle is not None:
        obstacle = tile_anchor(args.obstacle, nav_map.tile_size)

    world = PatrolWorld(nav_map, max_route_length=args.max_route_length)
    try:
        for index, (x, y) in enumerate(args.agent, start=1):
            world.spawn_agent(x, y, name=f"npc{index}")

        delta_time = DeltaTime(args.dt)
        for _ in range(args.ticks):
            world.update(delta_time, obstacle)
    except BaseException:
        world.close()
        raise
    return world


def print_summary(world: PatrolWorld, args: argparse.Namespace) -> None:
    elapsed = args.ticks * args.dt
    print(f"Simulated {args.ticks} ticks ({elapsed:.2f}s) on {args.map}")
    for agent in world.agents:
        route = agent.route
        if route.is_valid:
            route_text = (
                f"{len(route)} waypoints, {route.unique_tiles} unique, "
                f"{route.mode_name}"
            )
        else:
            route_text = "no route"
        print(
            f"  {agent.name}: tile={agent.tile} target={agent.target_tile} "
            f"mode={agent.mode.name} facing={agent.facing.name} route={route_text}"
        )


def main(argv: list[str] | None = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)

    logging.basicConfig(
        level=getattr(logging, args.log_level),
        format="%(levelname)s %(name)s: %(message)s",
    )

    if args.ticks < 0:
        parser.error("--ticks must not be negative")
    if args.dt <= 0:
        parser.error("--dt must be positive")

    try:
        world = run(args)
    except (OSError, ValueError) as e:
        logger.error(f"Simulation failed: {e}")
        return 1

    try:
        print_summary(world, args)
    finally:
        world.close()
    return 0


if __name__ == "__main__":
    sys.exit(main())
