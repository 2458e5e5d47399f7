"""
Exercise catalog for liftlog.

Each exercise is described by an ExerciseDefinition loaded from the
bundled YAML library; users add their own through the workout store.
"""

from .base import ExerciseDefinition
from .registry import (
    EXERCISE_LIBRARY,
    all_exercises,
    categories_for_workout_type,
    filter_by_categories,
    find_exercise,
    get_exercise,
)

__all__ = [
    "ExerciseDefinition",
    "EXERCISE_LIBRARY",
    "all_exercises",
    "categories_for_workout_type",
    "filter_by_categories",
    "find_exercise",
    "get_exercise",
]
