"""
Configuration constants.

Centralizes the tunable values of the patrol subsystem that are not part of
the per-tick motion model (those live in ``ambler.constants.movement``).
Organized by functional area for easy maintenance.
"""

from pathlib import Path

# =============================================================================
# GENERAL
# =============================================================================

PROJECT_ROOT_PATH = Path(__file__).resolve().parent.parent

# RANDOM_SEED = None
RANDOM_SEED = "burrito1"

# =============================================================================
# WORLD GRID
# =============================================================================

# Edge length of one tile in world units (pixels in the host game).
DEFAULT_TILE_SIZE = 16

# ASCII map glyphs understood by NavigationMap.from_ascii().
ASCII_WALKABLE = "."
ASCII_SOLID = "#"  # Walkable for navigation, but blocked by collision

# =============================================================================
# PATROL ROUTES
# =============================================================================

# Caps both the BFS reachable-set collection and the final waypoint count.
# Large open areas would otherwise produce huge routes.
DEFAULT_MAX_ROUTE_LENGTH = 100

# When a world edit leaves an agent unable to build any route, remove it from
# the world instead of leaving it idling in place.
REMOVE_STRANDED_AGENTS = True

# =============================================================================
# HEADLESS SIMULATION
# =============================================================================

DEFAULT_SIM_TICKS = 600
DEFAULT_SIM_DELTA_TIME = 1 / 60
