from enum import Enum, auto


class Facing(Enum):
    """Cardinal direction a character faces.

    Values match the host game's sprite-sheet row order.
    """

    DOWN = 0  # Towards the camera, +Y
    UP = 1  # Away from the camera, -Y
    LEFT = 2  # -X
    RIGHT = 3  # +X


# Order used when picking a random direction to look at.
LOOK_AROUND_DIRECTIONS = (Facing.LEFT, Facing.RIGHT, Facing.UP, Facing.DOWN)


class MotionMode(Enum):
    """Top-level state of a PatrolAgent. Exactly one is active at a time."""

    WALKING = auto()
    STANDING_STILL_NO_ROUTE = auto()  # No valid route could be built
    STANDING_STILL_PAUSED = auto()  # Route is fine, agent is resting
    STOPPED_EXTERNALLY = auto()  # Obstacle overlap or an external hold
