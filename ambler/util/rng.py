"""Seedable per-agent random streams.

Every random decision an agent makes (whether to rest at a waypoint, how
long to rest, which way to look while idle) draws from that agent's own
generator. Each generator is seeded from one master seed plus the agent's
key, so:

1. The same master seed replays the same pauses and look-arounds
2. Spawning, removing or ticking one agent never shifts another's rolls
3. Tests can pin a seed, or inject their own ``random.Random``

Usage:
    # At startup
    from ambler.util import rng
    rng.init(config.RANDOM_SEED)

    # Per agent, at construction
    self.rng = rng.stream_for(agent_id)
"""

from __future__ import annotations

import zlib
from collections.abc import Sequence
from random import Random
from typing import TYPE_CHECKING, Protocol, TypeVar

if TYPE_CHECKING:
    from ambler.types import RandomSeed

T = TypeVar("T")

MOTION_DOMAIN = "agent.motion"


class RandomSource(Protocol):
    """The three draws an agent makes. ``random.Random`` satisfies this."""

    def random(self) -> float: ...

    def uniform(self, a: float, b: float) -> float: ...

    def choice(self, seq: Sequence[T]) -> T: ...


# Use this in type hints: `def foo(rng: RNG) -> float:`
type RNG = RandomSource

_master_seed: RandomSeed = None


def derive_seed(master_seed: RandomSeed, key: object) -> int | None:
    """Seed for the stream named ``key``, or None when unseeded.

    crc32 rather than hash(): str hashing is salted per process
    (PYTHONHASHSEED), which would break cross-run replay.
    """
    if master_seed is None:
        return None
    return zlib.crc32(f"{master_seed}:{MOTION_DOMAIN}:{key}".encode())


def init(master_seed: RandomSeed = None) -> None:
    """Set the master seed for streams created from now on.

    Agents keep the generator they were built with; reseeding does not
    rewind them.
    """
    global _master_seed
    _master_seed = master_seed


def stream_for(key: object) -> Random:
    """A fresh generator for the agent identified by ``key``.

    Equal keys under the same master seed give identical sequences. With no
    master seed the generator is seeded from the OS.
    """
    return Random(derive_seed(_master_seed, key))
