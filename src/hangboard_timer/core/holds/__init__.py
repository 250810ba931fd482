"""
Hold and workout definitions for hangboard-timer.

Each workout program is an ordered catalog of HoldDefinition objects that
parameterises the shared session engine.
"""

from .base import HoldDefinition, WorkoutDefinition
from .registry import WORKOUT_REGISTRY, get_workout, visible_workouts

__all__ = [
    "HoldDefinition",
    "WorkoutDefinition",
    "WORKOUT_REGISTRY",
    "get_workout",
    "visible_workouts",
]
