"""
Exercise history list with PB marking.

Every occurrence of an exercise across a user's workouts becomes one
ExerciseHistoryEntry. Exactly one entry (if any has a weight) is marked as
the PB: the best completed entry, or the best entry overall when the
exercise was never completed.
"""

from __future__ import annotations

from typing import Iterable

from ..metrics import has_data, highest_kg, is_completed, top_kg, total_reps_at_highest
from ..models import ExerciseHistoryEntry, PersonalBest, Workout, WorkoutSet
from .personal_best import compute_personal_best, iter_occurrences


def _pb_sort_key(entry: ExerciseHistoryEntry) -> tuple[float, int, str]:
    return (highest_kg(entry.sets), total_reps_at_highest(entry.sets), entry.date)


def pick_pb_entry(entries: list[ExerciseHistoryEntry]) -> ExerciseHistoryEntry | None:
    """
    Select the single PB entry.

    Candidates are the completed entries with a weight, or every weighted
    entry when none is completed. Ranked by top weight, then reps at the top
    weight, then date, all descending. The sort is stable, so exact ties go
    to the entry listed first.

    Args:
        entries: History entries in traversal order (most recent first)

    Returns:
        The PB entry, or None if no entry has a weight
    """
    weighted = [e for e in entries if highest_kg(e.sets) > 0]
    completed = [e for e in weighted if e.is_completed]
    pool = completed or weighted
    if not pool:
        return None
    return sorted(pool, key=_pb_sort_key, reverse=True)[0]


def compute_exercise_history(
    workouts: Iterable[Workout],
    exercise_id: str | None = None,
) -> list[ExerciseHistoryEntry]:
    """
    Build the annotated history list for one exercise (or all exercises).

    Args:
        workouts: Every workout of one user
        exercise_id: Restrict to this exercise; all exercises when None

    Returns:
        Entries sorted by top weight descending, then date descending.
        Empty when there is no data.
    """
    entries: list[ExerciseHistoryEntry] = []
    for occ in iter_occurrences(workouts, exercise_id):
        sets = occ.exercise.sets
        if not has_data(sets):
            continue
        entries.append(
            ExerciseHistoryEntry(
                date=occ.date,
                order=occ.exercise.order,
                sets=[WorkoutSet(kg=s.kg, reps=s.reps) for s in sets],
                workout_id=occ.workout_id,
                is_pb=False,
                is_completed=is_completed(sets),
            )
        )

    pb_entry = pick_pb_entry(entries)
    if pb_entry is not None:
        pb_entry.is_pb = True

    entries.sort(key=lambda e: (top_kg(e.sets), e.date), reverse=True)
    return entries


def exercise_detail(
    workouts: Iterable[Workout],
    exercise_id: str,
) -> tuple[PersonalBest | None, list[ExerciseHistoryEntry]]:
    """PB record and annotated history for the exercise detail view."""
    workouts = list(workouts)
    return (
        compute_personal_best(workouts, exercise_id),
        compute_exercise_history(workouts, exercise_id),
    )
