"""Small capabilities shared by anything drawn as a walking character.

The player and patrol agents both need a smoothed elevation offset and a
walk cycle, but nothing ever treats them polymorphically. Instead of a base
class each character owns these components:

    agent.elevation.set_target(map.elevation_at_world_pos(*agent.position))
    agent.elevation.update(dt)
"""

from __future__ import annotations

from dataclasses import dataclass

from ambler.constants.movement import MotionConstants as MC
from ambler.types import DeltaTime


def smoothstep(t: float) -> float:
    """Cubic Hermite ease, 3t^2 - 2t^3, for t in [0, 1]."""
    return t * t * (3.0 - 2.0 * t)


@dataclass
class ElevationTween:
    """Visual height offset that eases toward the elevation under the feet.

    Attributes:
        offset: Current offset in world units (positive = drawn higher).
        target: Offset being eased toward.
        start: Offset when the current transition began.
        progress: 0.0 at the start of a transition, 1.0 when settled.
        duration: Transition length in seconds.
    """

    offset: float = 0.0
    target: float = 0.0
    start: float = 0.0
    progress: float = 1.0
    duration: float = MC.ELEVATION_TRANSITION_TIME

    def set_target(self, elevation: float) -> None:
        """Begin easing toward ``elevation`` unless it is already the target."""
        if elevation != self.target:
            self.start = self.offset
            self.target = elevation
            self.progress = 0.0

    def snap_to(self, elevation: float) -> None:
        """Jump straight to ``elevation`` with no transition (e.g. on spawn)."""
        self.offset = self.target = self.start = elevation
        self.progress = 1.0

    def update(self, delta_time: DeltaTime | float) -> None:
        if self.progress >= 1.0:
            return
        self.progress += delta_time / self.duration
        if self.progress >= 1.0:
            self.progress = 1.0
            self.offset = self.target
        else:
            eased = smoothstep(self.progress)
            self.offset = self.start + (self.target - self.start) * eased

    @property
    def settled(self) -> bool:
        return self.progress >= 1.0


@dataclass
class WalkCycle:
    """Four-step walk animation: left step, neutral, right step, neutral."""

    frame: int = 0
    sequence_index: int = 0
    elapsed: float = 0.0
    frame_time: float = MC.WALK_FRAME_TIME

    def advance(self, delta_time: DeltaTime | float) -> None:
        self.elapsed += delta_time
        if self.elapsed >= self.frame_time:
            self.elapsed -= self.frame_time
            self.step()

    def step(self) -> None:
        self.sequence_index = (self.sequence_index + 1) % len(MC.WALK_SEQUENCE)
        self.frame = MC.WALK_SEQUENCE[self.sequence_index]

    def reset(self) -> None:
        """Snap back to the idle pose."""
        self.frame = 0
        self.sequence_index = 0
        self.elapsed = 0.0
