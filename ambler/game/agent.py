"""Patrol agent motion controller.

A PatrolAgent walks a patrol route in continuous world space, one tick at a
time. Each tick runs, in priority order:

1. Elevation easing (always).
2. Obstacle overlap: if the tracked obstacle (the player) overlaps the
   agent, stop dead for this tick and arm a short resume delay.
3. STOPPED_EXTERNALLY: stay idle until the resume delay runs out (or until
   resume() when held by stop()).
4. STANDING_STILL_PAUSED: count down the rest, looking around every 2s.
5. STANDING_STILL_NO_ROUTE: look around forever. Only reinitialize_route()
   or a fresh set_tile_position() leaves this state; a stranded agent never
   searches on its own.
6. WALKING: walk toward the target waypoint; on arrival pull the next one
   from the RouteCursor, building the route first if there is none, and
   occasionally roll for a rest.

Position is the agent's ground-contact point (bottom-center of the sprite).
"""

from __future__ import annotations

import logging
import math

from ambler import config
from ambler.constants.movement import MotionConstants as MC
from ambler.events import RouteBuildFailedEvent, publish_event
from ambler.game.character import ElevationTween, WalkCycle
from ambler.game.enums import LOOK_AROUND_DIRECTIONS, Facing, MotionMode
from ambler.navigation.cursor import CursorExhaustedError, RouteCursor
from ambler.navigation.oracle import WalkabilityOracle
from ambler.navigation.route import Route, build_route
from ambler.types import AgentId, DeltaTime, WorldPos, WorldTilePos
from ambler.util import rng
from ambler.util.coordinates import feet_overlap, sign, tile_anchor, world_to_tile
from ambler.util.rng import RNG

logger = logging.getLogger(__name__)


def facing_for_delta(dx: float, dy: float, current: Facing) -> Facing:
    """Facing for a movement or tile delta.

    Horizontal wins only when strictly larger; ties face up/down. A zero
    delta keeps the current facing.
    """
    if abs(dx) > abs(dy):
        return Facing.RIGHT if dx > 0 else Facing.LEFT
    if dy != 0:
        return Facing.DOWN if dy > 0 else Facing.UP
    return current


def _default_stream(name: str | None, agent_id: AgentId | None) -> RNG:
    # World-spawned agents are keyed by id; standalone ones by name.
    key = agent_id if agent_id is not None else name or "anonymous"
    return rng.stream_for(key)


class PatrolAgent:
    """Per-agent motion state machine. See the module docstring."""

    def __init__(
        self,
        tile: WorldTilePos = (0, 0),
        tile_size: int = config.DEFAULT_TILE_SIZE,
        *,
        name: str | None = None,
        agent_id: AgentId | None = None,
        speed: float = MC.WALK_SPEED,
        max_route_length: int = config.DEFAULT_MAX_ROUTE_LENGTH,
        rng: RNG | None = None,
    ) -> None:
        self.name = name
        self.agent_id = agent_id
        self.speed = speed
        self.max_route_length = max_route_length
        self.rng: RNG = rng if rng is not None else _default_stream(name, agent_id)

        self.facing = Facing.DOWN
        self.mode = MotionMode.WALKING
        self.cursor = RouteCursor()
        self.elevation = ElevationTween()
        self.walk = WalkCycle()

        # Countdown timers, each only ticking in the state that owns it.
        self.wait_timer = 0.0  # WALKING: rest before moving again
        self.pause_timer = 0.0  # STANDING_STILL_PAUSED: rest remaining
        self.pause_roll_timer = 0.0  # WALKING: time until the next rest roll
        self.look_around_timer = 0.0  # Idle states: time until next glance
        self.resume_timer = 0.0  # STOPPED_EXTERNALLY: delay before moving

        self.held = False
        self._resume_mode = MotionMode.WALKING

        self.tile_size = tile_size
        self.position: WorldPos = (0.0, 0.0)
        self.tile: WorldTilePos = tile
        self.target_tile: WorldTilePos = tile
        self.set_tile_position(tile[0], tile[1], tile_size)

    def __repr__(self) -> str:
        label = self.name or f"agent#{self.agent_id}"
        return f"PatrolAgent({label}, tile={self.tile}, mode={self.mode.name})"

    # ------------------------------------------------------------------
    # Read-only views
    # ------------------------------------------------------------------

    @property
    def route(self) -> Route:
        return self.cursor.route

    @property
    def has_route(self) -> bool:
        return self.cursor.is_valid()

    @property
    def is_stopped(self) -> bool:
        return self.mode is MotionMode.STOPPED_EXTERNALLY

    # ------------------------------------------------------------------
    # Entry points
    # ------------------------------------------------------------------

    def set_tile_position(
        self,
        tile_x: int,
        tile_y: int,
        tile_size: int,
        preserve_route: bool = False,
    ) -> None:
        """Place the agent on a tile, standing at its bottom-center.

        Args:
            tile_x: Tile column.
            tile_y: Tile row.
            tile_size: Tile edge length in world units.
            preserve_route: Keep the current route. Otherwise the route is
                discarded and the next arrival builds a fresh one from the
                new tile.
        """
        if tile_size <= 0:
            raise ValueError(f"tile_size must be positive, got {tile_size}")

        self.tile_size = tile_size
        self.tile = (tile_x, tile_y)
        self.target_tile = self.tile
        self.position = tile_anchor(self.tile, tile_size)

        if not preserve_route:
            self.cursor.replace(Route.EMPTY)
            self.wait_timer = 0.0
            self.pause_timer = 0.0
            self._set_base_mode(MotionMode.WALKING)

    def update(
        self,
        delta_time: DeltaTime | float,
        oracle: WalkabilityOracle | None,
        obstacle: WorldPos | None = None,
    ) -> None:
        """Advance the agent by one tick.

        Args:
            delta_time: Seconds since the previous tick.
            oracle: Tile grid used for route building. Without one the tick
                does nothing.
            obstacle: Ground-contact point of the tracked obstacle (usually
                the player), or None to skip obstacle checks this tick.
        """
        if oracle is None:
            return

        self.elevation.update(delta_time)

        if obstacle is not None and feet_overlap(self.position, obstacle):
            self._stop_for_obstacle()
            return

        match self.mode:
            case MotionMode.STOPPED_EXTERNALLY:
                self._update_stopped(delta_time)
            case MotionMode.STANDING_STILL_PAUSED:
                self._update_paused(delta_time)
            case MotionMode.STANDING_STILL_NO_ROUTE:
                self.walk.reset()
                self._look_around(delta_time)
            case MotionMode.WALKING:
                self._update_walking(delta_time, oracle, obstacle)

    def reinitialize_route(self, oracle: WalkabilityOracle) -> bool:
        """Rebuild the route from the current tile after a world edit.

        Returns:
            True if a route was built. On failure the agent idles in
            STANDING_STILL_NO_ROUTE until called again.
        """
        self.tile = world_to_tile(self.position, self.tile_size)
        self.cursor.reset()
        if not self._build_route(oracle):
            return False
        # Head back to the tile the new route starts on before following it.
        self.target_tile = self.tile
        self.wait_timer = 0.0
        return True

    def stop(self) -> None:
        """Hold the agent in place (e.g. while it is being talked to)."""
        self.held = True
        self._enter_stopped()

    def resume(self) -> None:
        """Release a stop() hold immediately."""
        if not self.held:
            return
        self.held = False
        self.resume_timer = 0.0
        if self.mode is MotionMode.STOPPED_EXTERNALLY:
            self.mode = self._resume_mode
        self._resume_mode = MotionMode.WALKING

    def set_target_elevation(self, elevation: float) -> None:
        self.elevation.set_target(elevation)

    # ------------------------------------------------------------------
    # Per-state updates
    # ------------------------------------------------------------------

    def _update_stopped(self, delta_time: float) -> None:
        self.walk.reset()
        if self.held:
            return
        self.resume_timer -= delta_time
        if self.resume_timer <= 0.0:
            self.resume_timer = 0.0
            self.mode = self._resume_mode
            self._resume_mode = MotionMode.WALKING
            logger.debug(f"{self!r} resumed")

    def _update_paused(self, delta_time: float) -> None:
        self.walk.reset()
        self.pause_timer -= delta_time
        if self.pause_timer <= 0.0:
            self.pause_timer = 0.0
            self.mode = MotionMode.WALKING
            return
        self._look_around(delta_time)

    def _update_walking(
        self,
        delta_time: float,
        oracle: WalkabilityOracle,
        obstacle: WorldPos | None,
    ) -> None:
        self.tile = world_to_tile(self.position, self.tile_size)

        if self.wait_timer > 0.0:
            self.wait_timer = max(0.0, self.wait_timer - delta_time)

        self.walk.advance(delta_time)
        if self.wait_timer > 0.0:
            return

        if self.has_route and self.pause_roll_timer > 0.0:
            self.pause_roll_timer -= delta_time

        target = tile_anchor(self.target_tile, self.tile_size)
        dx = target[0] - self.position[0]
        dy = target[1] - self.position[1]
        distance = math.hypot(dx, dy)

        if distance < MC.WAYPOINT_REACH_THRESHOLD:
            self.position = target
            self.tile = self.target_tile
            self._on_waypoint_reached(oracle)
            return

        if distance <= MC.MIN_MOVEMENT_DISTANCE:
            return

        # Never step past the target; a long frame would otherwise overshoot
        # and oscillate around it.
        step = min(self.speed * delta_time, distance)
        ux, uy = dx / distance, dy / distance
        candidate = (self.position[0] + ux * step, self.position[1] + uy * step)

        if obstacle is not None and feet_overlap(candidate, obstacle):
            self.wait_timer = MC.BLOCKED_RETRY_DELAY
            return

        self.position = candidate
        self.facing = facing_for_delta(sign(ux), sign(uy), self.facing)

    def _on_waypoint_reached(self, oracle: WalkabilityOracle) -> None:
        if not self.has_route and not self._build_route(oracle):
            return

        if self.pause_roll_timer <= 0.0:
            self._seed_pause_roll()
            if self.rng.random() < MC.PAUSE_CHANCE:
                self._enter_pause(self.rng.uniform(*MC.PAUSE_DURATION_RANGE))
                return

        try:
            next_tile = self.cursor.next_waypoint()
        except CursorExhaustedError:
            self.wait_timer = MC.NO_WAYPOINT_RETRY_DELAY
            return

        self.target_tile = next_tile
        self.facing = facing_for_delta(
            next_tile[0] - self.tile[0], next_tile[1] - self.tile[1], self.facing
        )

    # ------------------------------------------------------------------
    # Transitions
    # ------------------------------------------------------------------

    def _build_route(self, oracle: WalkabilityOracle) -> bool:
        result = build_route(self.tile, oracle, self.max_route_length)
        if not result.ok:
            assert result.failure is not None
            logger.warning(
                f"{self!r} has no patrol route ({result.failure.value}); idling"
            )
            self.cursor.replace(Route.EMPTY)
            self._enter_no_route()
            publish_event(
                RouteBuildFailedEvent(
                    agent=self, tile=self.tile, reason=result.failure.value
                )
            )
            return False

        self.cursor.replace(result.route)
        self.pause_timer = 0.0
        self._seed_pause_roll()
        self._set_base_mode(MotionMode.WALKING)
        return True

    def _seed_pause_roll(self) -> None:
        self.pause_roll_timer = self.rng.uniform(*MC.PAUSE_ROLL_INTERVAL_RANGE)

    def _enter_pause(self, duration: float) -> None:
        logger.debug(f"{self!r} resting for {duration:.2f}s")
        self.mode = MotionMode.STANDING_STILL_PAUSED
        self.pause_timer = duration
        self._start_idling()

    def _enter_no_route(self) -> None:
        self.pause_timer = 0.0
        self._set_base_mode(MotionMode.STANDING_STILL_NO_ROUTE)
        self._start_idling()

    def _start_idling(self) -> None:
        self.look_around_timer = MC.LOOK_AROUND_INTERVAL
        self.walk.reset()
        self.facing = self.rng.choice(LOOK_AROUND_DIRECTIONS)

    def _look_around(self, delta_time: float) -> None:
        self.look_around_timer -= delta_time
        if self.look_around_timer <= 0.0:
            self.facing = self.rng.choice(LOOK_AROUND_DIRECTIONS)
            self.look_around_timer = MC.LOOK_AROUND_INTERVAL

    def _stop_for_obstacle(self) -> None:
        if not self.is_stopped:
            logger.debug(f"{self!r} stopped by obstacle")
        self._enter_stopped()
        self.resume_timer = MC.OBSTACLE_RESUME_DELAY

    def _enter_stopped(self) -> None:
        if self.mode is not MotionMode.STOPPED_EXTERNALLY:
            self._resume_mode = self.mode
            self.mode = MotionMode.STOPPED_EXTERNALLY
        self.walk.reset()

    def _set_base_mode(self, mode: MotionMode) -> None:
        # While stopped, remember the mode to return to instead of leaving
        # STOPPED_EXTERNALLY early.
        if self.mode is MotionMode.STOPPED_EXTERNALLY:
            self._resume_mode = mode
        else:
            self.mode = mode
