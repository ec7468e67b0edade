from __future__ import annotations

from typing import NewType

# =============================================================================
# SPATIAL TYPES
# =============================================================================

type TileCoord = int  # Always integer tile position

# World tile coordinates - absolute positions on the navigation grid
type WorldTileCoord = TileCoord  # Example: x=5, y=3
type WorldTilePos = tuple[
    WorldTileCoord, WorldTileCoord
]  # Example: (5, 3) = tile 5,3 on map

# Continuous world coordinates (tile_size units per tile). Agents are anchored
# at the bottom-center of their sprite, i.e. where the feet touch the ground.
type WorldCoord = float  # Example: x=88.0
type WorldPos = tuple[WorldCoord, WorldCoord]  # Example: (88.0, 48.0)

# Integer grid step
type UnitStep = int  # One of -1, 0, 1

# Dimensions
type GridDimensions = tuple[int, int]  # Example: (64, 48) = 64x48 tile map

# =============================================================================
# TIME-RELATED TYPES
# =============================================================================

# Real-world time elapsed between two ticks, in seconds. Every timer in the
# motion controller is decremented by this value.
DeltaTime = NewType("DeltaTime", float)

# =============================================================================
# GAME-RELATED TYPES
# =============================================================================

# Unique identifier for an agent in a PatrolWorld. Assigned sequentially.
AgentId = NewType("AgentId", int)

# Random seed for deterministic behavior.
# Can be an int for numeric seeds or a descriptive string like "burrito1".
type RandomSeed = int | str | None
