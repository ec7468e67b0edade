from __future__ import annotations

import logging
from dataclasses import dataclass, field

from ambler import config
from ambler.constants.movement import MotionConstants as MC
from ambler.environment.map import NavigationMap
from ambler.events import (
    AgentRemovedEvent,
    WorldEditedEvent,
    publish_event,
    subscribe_to_event,
    unsubscribe_from_event,
)
from ambler.game.agent import PatrolAgent
from ambler.navigation.oracle import probe_tile
from ambler.types import AgentId, DeltaTime, TileCoord, WorldPos, WorldTilePos
from ambler.util.coordinates import world_to_tile
from ambler.util.rng import RNG

logger = logging.getLogger(__name__)


@dataclass
class RouteRecalculation:
    """Summary of one PatrolWorld.recalculate_routes() pass."""

    succeeded: list[PatrolAgent] = field(default_factory=list)
    failed: list[PatrolAgent] = field(default_factory=list)
    removed: list[PatrolAgent] = field(default_factory=list)


class PatrolWorld:
    """
    Owns the patrol agents living on one NavigationMap and drives them.

    The world ticks every agent, keeps their elevation in sync with the map,
    and rebuilds routes whenever a WorldEditedEvent announces that the
    walkable-tile set changed. It is not a renderer or an editor; whoever
    edits the map publishes the event.
    """

    def __init__(
        self,
        nav_map: NavigationMap,
        *,
        remove_stranded: bool = config.REMOVE_STRANDED_AGENTS,
        max_route_length: int = config.DEFAULT_MAX_ROUTE_LENGTH,
    ) -> None:
        self.nav_map = nav_map
        self.remove_stranded = remove_stranded
        self.max_route_length = max_route_length

        self.agents: list[PatrolAgent] = []
        self._agent_id_registry: dict[AgentId, PatrolAgent] = {}
        self._next_agent_id = 1

        # Agents skipped by update(), e.g. while talking to the player.
        self.frozen: set[AgentId] = set()

        self._closed = False
        subscribe_to_event(WorldEditedEvent, self._on_world_edited)

    def close(self) -> None:
        """Stop listening for world edits."""
        if not self._closed:
            unsubscribe_from_event(WorldEditedEvent, self._on_world_edited)
            self._closed = True

    # ------------------------------------------------------------------
    # Roster
    # ------------------------------------------------------------------

    def spawn_agent(
        self,
        tile_x: TileCoord,
        tile_y: TileCoord,
        *,
        name: str | None = None,
        rng: RNG | None = None,
    ) -> PatrolAgent:
        """Place a new agent on a usable tile.

        The route is built on the agent's first tick, not here.

        Raises:
            ValueError: If the tile is out of bounds, off the navigation
                layer, or obstructed.
        """
        block = probe_tile(self.nav_map, tile_x, tile_y)
        if block is not None:
            raise ValueError(
                f"Cannot spawn agent at ({tile_x}, {tile_y}): {block.name.lower()}"
            )

        agent_id = AgentId(self._next_agent_id)
        self._next_agent_id += 1
        agent = PatrolAgent(
            (tile_x, tile_y),
            self.nav_map.tile_size,
            name=name,
            agent_id=agent_id,
            max_route_length=self.max_route_length,
            rng=rng,
        )
        agent.elevation.snap_to(self.nav_map.get_elevation(tile_x, tile_y))

        self.agents.append(agent)
        self._agent_id_registry[agent_id] = agent
        return agent

    def remove_agent(self, agent: PatrolAgent) -> None:
        try:
            self.agents.remove(agent)
        except ValueError:
            # Agent was not in the list; ignore.
            pass
        if agent.agent_id is not None:
            self._agent_id_registry.pop(agent.agent_id, None)
            self.frozen.discard(agent.agent_id)

    def get_agent_by_id(self, agent_id: AgentId) -> PatrolAgent | None:
        return self._agent_id_registry.get(agent_id)

    # ------------------------------------------------------------------
    # Ticking
    # ------------------------------------------------------------------

    def update(
        self, delta_time: DeltaTime | float, obstacle: WorldPos | None = None
    ) -> None:
        for agent in self.agents:
            if agent.agent_id in self.frozen:
                continue
            agent.update(delta_time, self.nav_map, obstacle)
            agent.set_target_elevation(
                self.nav_map.elevation_at_world_pos(*_ground_probe(agent.position))
            )

    # ------------------------------------------------------------------
    # World edits
    # ------------------------------------------------------------------

    def _on_world_edited(self, event: WorldEditedEvent) -> None:
        logger.debug(
            f"World edited (revision {event.revision}, {len(event.tiles)} tiles)"
        )
        self.recalculate_routes()

    def recalculate_routes(self) -> RouteRecalculation:
        """Rebuild every agent's route against the current map.

        Agents standing on a tile that is no longer usable are removed.
        Agents whose rebuild fails are removed too when ``remove_stranded``
        is set, otherwise they idle in place.
        """
        summary = RouteRecalculation()

        for agent in list(self.agents):
            tile = world_to_tile(agent.position, self.nav_map.tile_size)
            block = probe_tile(self.nav_map, tile[0], tile[1])
            if block is not None:
                self._remove_with_event(agent, tile, block.name.lower())
                summary.removed.append(agent)
                continue

            if agent.reinitialize_route(self.nav_map):
                summary.succeeded.append(agent)
                continue

            summary.failed.append(agent)
            if self.remove_stranded:
                self._remove_with_event(agent, tile, "stranded")
                summary.removed.append(agent)

        logger.info(
            f"Recalculated patrol routes: {len(summary.succeeded)} ok, "
            f"{len(summary.failed)} failed, {len(summary.removed)} removed"
        )
        return summary

    def _remove_with_event(
        self, agent: PatrolAgent, tile: WorldTilePos, reason: str
    ) -> None:
        logger.warning(f"Removing {agent!r} at {tile}: {reason}")
        self.remove_agent(agent)
        if agent.agent_id is not None:
            publish_event(
                AgentRemovedEvent(agent_id=agent.agent_id, tile=tile, reason=reason)
            )


def _ground_probe(position: WorldPos) -> WorldPos:
    # Feet sit on the tile's bottom edge; sample just above it.
    return (position[0], position[1] - MC.TILE_LOOKUP_EPSILON_Y)
