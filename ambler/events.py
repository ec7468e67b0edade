"""Global event system for world-edit notifications and agent diagnostics.

The bus decouples whoever edits the navigation grid (an editor, a scripted
door, a test) from the PatrolWorld that has to rebuild routes afterwards.
It uses a global instance so editing code doesn't need a PatrolWorld
reference.

USE FOR:
- Announcing that the walkable-tile set changed (WorldEditedEvent)
- Reporting stranded or removed agents to logs, UI, or tests

DO NOT USE FOR:
- The per-tick motion update (call PatrolAgent.update directly)
- Anything that needs a return value (call the method instead)

The bus is fire-and-forget and synchronous: handlers run immediately inside
publish(). A failing handler is logged and does not stop the others.
"""

import logging
from collections import defaultdict
from collections.abc import Callable
from dataclasses import dataclass
from typing import Any

from ambler.types import AgentId, WorldTilePos

logger = logging.getLogger(__name__)


@dataclass
class PatrolEvent:
    """Base class for all patrol events."""


@dataclass
class WorldEditedEvent(PatrolEvent):
    """The walkable or collision tile set changed.

    Attributes:
        tiles: Tiles that were edited, if known. An empty tuple means
            "anything may have changed".
        revision: The map's structural_revision after the edit.
    """

    tiles: tuple[WorldTilePos, ...] = ()
    revision: int = 0


@dataclass
class RouteBuildFailedEvent(PatrolEvent):
    """An agent could not build a patrol route from its current tile."""

    agent: Any  # Avoid circular imports
    tile: WorldTilePos
    reason: str


@dataclass
class AgentRemovedEvent(PatrolEvent):
    """PatrolWorld dropped an agent after a world edit."""

    agent_id: AgentId
    tile: WorldTilePos
    reason: str


type EventHandler = Callable[[Any], None]


class EventBus:
    """Synchronous publish/subscribe dispatch keyed by exact event class."""

    def __init__(self) -> None:
        self._handlers: defaultdict[type[PatrolEvent], list[EventHandler]] = (
            defaultdict(list)
        )

    def subscribe(self, event_type: type[PatrolEvent], handler: EventHandler) -> None:
        self._handlers[event_type].append(handler)

    def unsubscribe(
        self, event_type: type[PatrolEvent], handler: EventHandler
    ) -> None:
        """Drop ``handler``. Unknown handlers are ignored."""
        handlers = self._handlers.get(event_type)
        if not handlers or handler not in handlers:
            return
        handlers.remove(handler)
        if not handlers:
            del self._handlers[event_type]

    def publish(self, event: PatrolEvent) -> None:
        event_type = type(event)
        # Snapshot: a handler may unsubscribe itself mid-dispatch.
        for handler in tuple(self._handlers.get(event_type, ())):
            try:
                handler(event)
            except Exception:
                logger.exception(
                    f"Error handling event {event_type.__name__} "
                    f"in {getattr(handler, '__qualname__', handler)!r}"
                )


_global_event_bus = EventBus()


def subscribe_to_event(event_type: type[PatrolEvent], handler: EventHandler) -> None:
    _global_event_bus.subscribe(event_type, handler)


def unsubscribe_from_event(
    event_type: type[PatrolEvent], handler: EventHandler
) -> None:
    _global_event_bus.unsubscribe(event_type, handler)


def publish_event(event: PatrolEvent) -> None:
    """Dispatch ``event`` on the global bus before returning."""
    _global_event_bus.publish(event)


def reset_event_bus_for_testing() -> None:
    """Replace the global bus with an empty one. Use only in tests."""
    global _global_event_bus
    _global_event_bus = EventBus()
