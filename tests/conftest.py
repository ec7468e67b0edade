from __future__ import annotations

from collections.abc import Iterator

import pytest

from ambler.events import reset_event_bus_for_testing
from ambler.util import rng

TEST_SEED = "burrito1"


@pytest.fixture(autouse=True)
def fresh_event_bus() -> Iterator[None]:
    """Give every test an empty global event bus."""
    reset_event_bus_for_testing()
    yield
    reset_event_bus_for_testing()


@pytest.fixture(autouse=True)
def seeded_rng() -> None:
    """Reseed the global rng so random draws are reproducible per test."""
    rng.init(TEST_SEED)
