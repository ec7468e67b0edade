"""Constants for patrol agent movement and idle behavior."""


class MotionConstants:
    """Constants for the patrol agent motion state machine.

    Distances are in world units (tile_size units per tile), durations in
    seconds.
    """

    # --- Walking ---
    WALK_SPEED = 25.0  # World units per second
    WAYPOINT_REACH_THRESHOLD = 0.5  # Snap to target below this distance
    MIN_MOVEMENT_DISTANCE = 0.001  # Avoids dividing by a zero-length vector

    # Nudges the tile lookup upward so an agent standing exactly on a tile's
    # bottom edge resolves to the tile above its feet.
    TILE_LOOKUP_EPSILON_Y = 0.1

    # --- Hitbox (shared by the agent and the tracked obstacle) ---
    HITBOX_HALF_WIDTH = 8.0
    HITBOX_HEIGHT = 16.0
    COLLISION_EPSILON = 0.05  # Inward shrink so edge-adjacent boxes don't touch

    # --- Waiting ---
    BLOCKED_RETRY_DELAY = 0.5  # Speculative move would hit the obstacle
    OBSTACLE_RESUME_DELAY = 0.5  # After the obstacle stops overlapping
    NO_WAYPOINT_RETRY_DELAY = 1.0  # Cursor had nothing to give

    # --- Random rests ---
    PAUSE_CHANCE = 0.30  # Rolled at a waypoint once the roll timer expires
    PAUSE_DURATION_RANGE = (2.0, 5.0)
    PAUSE_ROLL_INTERVAL_RANGE = (5.0, 10.0)

    # --- Idle look-around ---
    LOOK_AROUND_INTERVAL = 2.0

    # --- Animation ---
    WALK_FRAME_TIME = 0.15  # Seconds per walk-cycle step
    WALK_SEQUENCE = (1, 0, 2, 0)  # Left step, neutral, right step, neutral

    # --- Elevation ---
    ELEVATION_TRANSITION_TIME = 0.15
