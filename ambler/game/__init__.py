"""Patrol agents and the world that drives them."""

from .agent import PatrolAgent
from .enums import Facing, MotionMode
from .patrol_world import PatrolWorld, RouteRecalculation

__all__ = [
    "Facing",
    "MotionMode",
    "PatrolAgent",
    "PatrolWorld",
    "RouteRecalculation",
]
