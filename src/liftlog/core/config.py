"""
Configuration constants for the workout log and personal-best engine.

All tunable rules are centralized here so the engine and the store agree
on them.
"""

from typing import Final

# =============================================================================
# COMPLETION RULE
# =============================================================================

# Every set at the session's top weight must exceed this many reps
COMPLETION_REPS_THRESHOLD: Final[int] = 8

# =============================================================================
# RECOMMENDATION
# =============================================================================

RECOMMENDED_INCREMENT_KG: Final[float] = 2.5  # Bump once the working weight is cleared

# =============================================================================
# SETS PER EXERCISE
# =============================================================================

DEFAULT_NUM_SETS: Final[int] = 3
MIN_SETS: Final[int] = 2
MAX_SETS: Final[int] = 5

# =============================================================================
# CATALOG
# =============================================================================

EXERCISE_CATEGORIES: Final[tuple[str, ...]] = (
    "pull",
    "push",
    "legs",
    "calisthenics",
    "upper-body",
    "lower-body",
    "full-body",
)

# Workout-type filter -> categories an exercise must carry (at least one)
WORKOUT_TYPE_CATEGORIES: Final[dict[str, list[str]]] = {
    "pull": ["pull"],
    "push": ["push"],
    "legs": ["legs"],
    "calisthenics": ["calisthenics"],
    "upper-body": ["pull", "push", "upper-body"],
    "lower-body": ["legs", "lower-body"],
    "full-body": [
        "full-body", "pull", "push", "legs", "upper-body", "lower-body", "calisthenics",
    ],
}

# Legacy workoutType -> display name, used when upgrading old documents
WORKOUT_TYPE_NAMES: Final[dict[str, str]] = {
    "push": "Push Day",
    "pull": "Pull Day",
    "legs": "Legs Day",
    "calisthenics": "Calisthenics",
    "full-body": "Full Body",
    "upper-body": "Upper Body",
    "lower-body": "Lower Body",
}

# =============================================================================
# USERS
# =============================================================================

DEFAULT_USERS: Final[list[dict[str, str]]] = [
    {"id": "tom", "name": "Tom"},
    {"id": "tomer", "name": "Tomer"},
]
