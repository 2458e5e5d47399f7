"""
Pure set-list computations.

Everything the personal-best engine needs to know about one exercise
occurrence is derived from its list of sets by the functions here. All
functions are pure and tolerate missing kg/reps.
"""

from typing import Sequence

from .config import COMPLETION_REPS_THRESHOLD
from .models import WorkoutSet


def valid_sets(sets: Sequence[WorkoutSet]) -> list[WorkoutSet]:
    """
    Return the sets that carry a positive weight and a rep count.

    Args:
        sets: Sets of one exercise occurrence

    Returns:
        Valid sets, in their original order
    """
    return [s for s in sets if s.is_valid]


def highest_kg(sets: Sequence[WorkoutSet]) -> float:
    """
    Heaviest weight among the valid sets.

    Sets with a weight but no reps are unfinished and do not count.

    Args:
        sets: Sets of one exercise occurrence

    Returns:
        Top weight in kg, or 0.0 when there are no valid sets
    """
    return max((s.kg for s in valid_sets(sets)), default=0.0)  # type: ignore[type-var]


def top_kg(sets: Sequence[WorkoutSet]) -> float:
    """Heaviest weight entered on any set, with or without reps (0.0 when none)."""
    return max((s.kg for s in sets if s.kg is not None and s.kg > 0), default=0.0)


def sets_at_highest(sets: Sequence[WorkoutSet]) -> list[WorkoutSet]:
    """Valid sets performed at the top weight, in set order."""
    valid = valid_sets(sets)
    if not valid:
        return []
    top = max(s.kg for s in valid)  # type: ignore[type-var]
    return [s for s in valid if s.kg == top]


def reps_at_highest(sets: Sequence[WorkoutSet]) -> list[int]:
    """
    Reps of each set at the top weight.

    Args:
        sets: Sets of one exercise occurrence

    Returns:
        Rep counts in set order, e.g. [10, 12, 10]
    """
    return [s.reps for s in sets_at_highest(sets)]  # type: ignore[misc]


def total_reps_at_highest(sets: Sequence[WorkoutSet]) -> int:
    """Volume at the top weight: sum of reps_at_highest()."""
    return sum(reps_at_highest(sets))


def is_completed(sets: Sequence[WorkoutSet]) -> bool:
    """
    Check whether an exercise occurrence counts as completed.

    Completed means every valid set at the top weight has more than
    COMPLETION_REPS_THRESHOLD reps. Lighter warm-up sets are ignored, and
    a top-weight set without reps is not valid so it cannot block
    completion.

    Args:
        sets: Sets of one exercise occurrence

    Returns:
        True if completed; False otherwise (including when no set is valid)
    """
    top_sets = sets_at_highest(sets)
    if not top_sets:
        return False
    return all(s.reps > COMPLETION_REPS_THRESHOLD for s in top_sets)  # type: ignore[operator]


def has_data(sets: Sequence[WorkoutSet]) -> bool:
    """True if at least one set has a kg or reps value entered."""
    return any(s.has_data for s in sets)
