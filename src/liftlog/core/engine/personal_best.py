"""
Personal-best aggregation.

Builds one PersonalBest per exercise from a user's full workout history.
Two independent tracks are kept per exercise:

- completed best: heaviest completed top weight, more volume at that
  weight on ties, first found on exact ties;
- current working weight: heaviest top weight regardless of completion,
  most recent on ties.

The recommendation bumps the completed weight by RECOMMENDED_INCREMENT_KG
once it is at or above the current working weight.

Occurrences are visited most recent first: workouts ordered by
(date, created_at) descending with a stable sort, exercises in list
order within a workout. That order is the tie-break whenever two
candidates are equal on every compared field.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Iterable, Iterator

from ..config import RECOMMENDED_INCREMENT_KG
from ..metrics import highest_kg, is_completed, reps_at_highest
from ..models import PersonalBest, Workout, WorkoutExercise


@dataclass
class Occurrence:
    """One exercise performed in one workout, tagged with its session."""

    workout: Workout
    exercise: WorkoutExercise

    @property
    def date(self) -> str:
        return self.workout.date

    @property
    def workout_id(self) -> str:
        return self.workout.id


def order_workouts(workouts: Iterable[Workout]) -> list[Workout]:
    """Return workouts most recent first, by date then creation time."""
    return sorted(workouts, key=lambda w: (w.date, w.created_at), reverse=True)


def iter_occurrences(
    workouts: Iterable[Workout],
    exercise_id: str | None = None,
) -> Iterator[Occurrence]:
    """
    Yield exercise occurrences most recent first.

    Args:
        workouts: Workouts of one user, in any order
        exercise_id: Only yield this exercise when given

    Yields:
        Occurrence for each matching exercise entry
    """
    for workout in order_workouts(workouts):
        for exercise in workout.exercises:
            if exercise_id is not None and exercise.exercise_id != exercise_id:
                continue
            yield Occurrence(workout=workout, exercise=exercise)


def recommend_kg(completed_kg: float | None, current_kg: float) -> float:
    """
    Suggest the weight for the next session.

    Stay on the current weight until it has been cleared; once a completed
    weight is at or above it, add RECOMMENDED_INCREMENT_KG.
    """
    if completed_kg is not None and completed_kg >= current_kg:
        return completed_kg + RECOMMENDED_INCREMENT_KG
    return current_kg


def build_personal_best(
    occurrences: Iterable[Occurrence],
    user_id: str | None = None,
) -> PersonalBest | None:
    """
    Aggregate one exercise's occurrences into a PersonalBest.

    Occurrences without any valid weighted set are ignored.

    Args:
        occurrences: Occurrences of a single exercise, most recent first
        user_id: Owner; taken from the first occurrence's workout when omitted

    Returns:
        PersonalBest, or None if no occurrence carried a weight
    """
    best: PersonalBest | None = None

    for occ in occurrences:
        sets = occ.exercise.sets
        top_kg = highest_kg(sets)
        if top_kg <= 0:
            continue
        top_reps = reps_at_highest(sets)

        if best is None:
            best = PersonalBest(
                user_id=user_id if user_id is not None else occ.workout.user_id,
                exercise_id=occ.exercise.exercise_id,
                current_kg=top_kg,
                current_reps=list(top_reps),
                current_date=occ.date,
                current_workout_id=occ.workout_id,
                recommended_kg=top_kg,
            )
        elif top_kg > best.current_kg or (
            top_kg == best.current_kg and occ.date > best.current_date
        ):
            best.current_kg = top_kg
            best.current_reps = list(top_reps)
            best.current_date = occ.date
            best.current_workout_id = occ.workout_id

        if is_completed(sets):
            replace = (
                best.completed_kg is None
                or top_kg > best.completed_kg
                or (top_kg == best.completed_kg and sum(top_reps) > sum(best.completed_reps))
            )
            if replace:
                best.completed_kg = top_kg
                best.completed_reps = list(top_reps)
                best.completed_date = occ.date
                best.completed_workout_id = occ.workout_id

    if best is not None:
        best.recommended_kg = recommend_kg(best.completed_kg, best.current_kg)
    return best


def compute_all_personal_bests(workouts: Iterable[Workout]) -> dict[str, PersonalBest]:
    """
    Compute the PersonalBest of every exercise in a user's history.

    The input is not modified; calling this twice on the same workouts gives
    equal results.

    Args:
        workouts: Every workout of one user, completed or not

    Returns:
        {exercise_id: PersonalBest}; exercises never performed with a
        weight have no key
    """
    by_exercise: dict[str, list[Occurrence]] = {}
    for occ in iter_occurrences(workouts):
        by_exercise.setdefault(occ.exercise.exercise_id, []).append(occ)

    result: dict[str, PersonalBest] = {}
    for exercise_id, occurrences in by_exercise.items():
        pb = build_personal_best(occurrences)
        if pb is not None:
            result[exercise_id] = pb
    return result


def compute_personal_best(
    workouts: Iterable[Workout],
    exercise_id: str,
) -> PersonalBest | None:
    """PersonalBest for a single exercise, or None when there is no data."""
    return build_personal_best(iter_occurrences(workouts, exercise_id))
