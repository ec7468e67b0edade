"""Tests for the event bus system."""

import logging

import pytest

from ambler.events import (
    AgentRemovedEvent,
    EventBus,
    PatrolEvent,
    WorldEditedEvent,
    publish_event,
    reset_event_bus_for_testing,
    subscribe_to_event,
    unsubscribe_from_event,
)
from ambler.types import AgentId


class TestEventBus:
    """Tests for the EventBus class."""

    def test_handler_exception_does_not_crash_event_bus(
        self, caplog: pytest.LogCaptureFixture
    ) -> None:
        """A failing handler is logged and the remaining handlers still run."""
        bus = EventBus()
        handler_calls: list[str] = []

        def failing_handler(event: PatrolEvent) -> None:
            handler_calls.append("failing")
            raise ValueError("Handler failed!")

        def succeeding_handler(event: PatrolEvent) -> None:
            handler_calls.append("succeeding")

        bus.subscribe(WorldEditedEvent, failing_handler)
        bus.subscribe(WorldEditedEvent, succeeding_handler)

        with caplog.at_level(logging.ERROR):
            bus.publish(WorldEditedEvent())

        assert handler_calls == ["failing", "succeeding"]
        assert "Error handling event WorldEditedEvent" in caplog.text
        assert "Handler failed!" in caplog.text

    def test_handlers_only_see_their_event_type(self) -> None:
        bus = EventBus()
        received: list[PatrolEvent] = []
        bus.subscribe(AgentRemovedEvent, received.append)

        bus.publish(WorldEditedEvent())
        bus.publish(AgentRemovedEvent(agent_id=AgentId(1), tile=(0, 0), reason="x"))

        assert len(received) == 1
        assert isinstance(received[0], AgentRemovedEvent)

    def test_unsubscribe(self) -> None:
        bus = EventBus()
        received: list[PatrolEvent] = []
        bus.subscribe(WorldEditedEvent, received.append)

        bus.unsubscribe(WorldEditedEvent, received.append)
        bus.publish(WorldEditedEvent())

        assert received == []

    def test_unsubscribing_unknown_handler_is_harmless(self) -> None:
        bus = EventBus()

        bus.unsubscribe(WorldEditedEvent, print)
        bus.subscribe(WorldEditedEvent, print)
        bus.unsubscribe(WorldEditedEvent, len)

    def test_resubscribing_after_last_handler_left(self) -> None:
        bus = EventBus()
        received: list[PatrolEvent] = []
        bus.subscribe(WorldEditedEvent, received.append)
        bus.unsubscribe(WorldEditedEvent, received.append)

        bus.subscribe(WorldEditedEvent, received.append)
        bus.publish(WorldEditedEvent(revision=2))

        assert received == [WorldEditedEvent(revision=2)]

    def test_handler_may_unsubscribe_itself_during_dispatch(self) -> None:
        bus = EventBus()
        calls: list[str] = []

        def once(event: PatrolEvent) -> None:
            calls.append("once")
            bus.unsubscribe(WorldEditedEvent, once)

        bus.subscribe(WorldEditedEvent, once)
        bus.subscribe(WorldEditedEvent, lambda event: calls.append("always"))

        bus.publish(WorldEditedEvent())
        bus.publish(WorldEditedEvent())

        assert calls == ["once", "always", "always"]


class TestGlobalEventBus:
    """Tests for the global event bus API."""

    def setup_method(self) -> None:
        """Reset the global event bus before each test."""
        reset_event_bus_for_testing()

    def test_global_subscribe_and_publish(self) -> None:
        received: list[WorldEditedEvent] = []

        subscribe_to_event(WorldEditedEvent, received.append)
        publish_event(WorldEditedEvent(tiles=((1, 2),), revision=3))

        assert received == [WorldEditedEvent(tiles=((1, 2),), revision=3)]

    def test_global_unsubscribe(self) -> None:
        received: list[WorldEditedEvent] = []
        subscribe_to_event(WorldEditedEvent, received.append)

        unsubscribe_from_event(WorldEditedEvent, received.append)
        publish_event(WorldEditedEvent())

        assert received == []

    def test_reset_drops_all_handlers(self) -> None:
        received: list[WorldEditedEvent] = []
        subscribe_to_event(WorldEditedEvent, received.append)

        reset_event_bus_for_testing()
        publish_event(WorldEditedEvent())

        assert received == []
