"""
Exercise registry.

The library is loaded from the bundled YAML files at import time. If no
exercise can be loaded a RuntimeError is raised; the catalog commands
cannot work without it.

Custom exercises are per-user and live in the workout store; functions
here accept them as an extra sequence so lookups cover both.
"""

from __future__ import annotations

import re
from typing import Iterable, Sequence

from ..config import WORKOUT_TYPE_CATEGORIES
from .base import ExerciseDefinition


def _build_registry() -> dict[str, ExerciseDefinition]:
    from .loader import load_exercises_from_yaml

    loaded = load_exercises_from_yaml()
    if not loaded:
        raise RuntimeError(
            "liftlog: no exercise definitions could be loaded from YAML. "
            "Check that src/liftlog/exercises/*.yaml files are present and valid."
        )
    return loaded


EXERCISE_LIBRARY: dict[str, ExerciseDefinition] = _build_registry()


def get_exercise(exercise_id: str) -> ExerciseDefinition:
    """
    Return the library ExerciseDefinition for the given exercise_id.

    Args:
        exercise_id: Library id, e.g. "bench-press"

    Returns:
        ExerciseDefinition for the requested exercise

    Raises:
        ValueError: If exercise_id is not in the library
    """
    if exercise_id not in EXERCISE_LIBRARY:
        raise ValueError(f"Unknown exercise '{exercise_id}'")
    return EXERCISE_LIBRARY[exercise_id]


def find_exercise(
    exercise_id: str,
    custom: Sequence[ExerciseDefinition] = (),
) -> ExerciseDefinition | None:
    """Look up an exercise in the library, then in the custom exercises."""
    if exercise_id in EXERCISE_LIBRARY:
        return EXERCISE_LIBRARY[exercise_id]
    for ex in custom:
        if ex.exercise_id == exercise_id:
            return ex
    return None


def all_exercises(custom: Sequence[ExerciseDefinition] = ()) -> list[ExerciseDefinition]:
    """Library exercises followed by custom ones not shadowing a library id."""
    merged = list(EXERCISE_LIBRARY.values())
    merged.extend(ex for ex in custom if ex.exercise_id not in EXERCISE_LIBRARY)
    return merged


def categories_for_workout_type(workout_type: str) -> list[str]:
    """
    Categories an exercise must carry (at least one) to fit a workout type.

    Unknown workout types map to an empty list.
    """
    return list(WORKOUT_TYPE_CATEGORIES.get(workout_type, []))


def filter_by_categories(
    categories: Iterable[str],
    exercises: Iterable[ExerciseDefinition] | None = None,
) -> list[ExerciseDefinition]:
    """Exercises having at least one of the given categories."""
    wanted = tuple(categories)
    pool = exercises if exercises is not None else EXERCISE_LIBRARY.values()
    return [ex for ex in pool if ex.matches_any(wanted)]


def slugify(name: str) -> str:
    """Lower-case, hyphen-separated id fragment from a display name."""
    slug = re.sub(r"[^a-z0-9]+", "-", name.lower()).strip("-")
    return slug


def custom_exercise_id(name: str) -> str:
    """Id given to a user-created exercise, e.g. 'custom-cable-row'."""
    slug = slugify(name)
    if not slug:
        raise ValueError(f"Cannot derive an exercise id from {name!r}")
    return f"custom-{slug}"
