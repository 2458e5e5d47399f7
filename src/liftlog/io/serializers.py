"""
JSON serialization for workout data models.

Handles conversion between dataclasses and JSON-compatible dicts. Stored
documents keep the camelCase keys of the original workout documents
(``exerciseId``, ``isCompleted``, ...). Documents written by the old
flat-field schema are upgraded to the ``sets`` layout on read.
"""

import json
import re
from datetime import datetime
from typing import Any

from ..core.config import DEFAULT_NUM_SETS, EXERCISE_CATEGORIES, WORKOUT_TYPE_NAMES
from ..core.engine.config_loader import user_display_name
from ..core.exercises.base import ExerciseDefinition
from ..core.models import (
    ExerciseHistoryEntry,
    PersonalBest,
    Workout,
    WorkoutExercise,
    WorkoutSet,
    WorkoutTemplate,
)


class ValidationError(Exception):
    """Raised when data validation fails."""

    pass


def validate_date(date_str: str) -> str:
    """
    Validate and normalize date string to ISO format.

    Args:
        date_str: Date string to validate

    Returns:
        Normalized YYYY-MM-DD string

    Raises:
        ValidationError: If date format is invalid
    """
    if not isinstance(date_str, str) or not re.match(r"^\d{4}-\d{2}-\d{2}$", date_str):
        raise ValidationError(f"Invalid date format: {date_str}. Expected YYYY-MM-DD")

    try:
        datetime.strptime(date_str, "%Y-%m-%d")
    except ValueError as e:
        raise ValidationError(f"Invalid date: {date_str}") from e

    return date_str


def validate_user(user_id: str, allowed: list[str]) -> str:
    """
    Validate a user id against the configured users.

    Raises:
        ValidationError: If the id is empty or not configured
    """
    if not user_id or user_id not in allowed:
        valid = ", ".join(allowed)
        raise ValidationError(f"Valid user is required ({valid}), got {user_id!r}")
    return user_id


def validate_non_negative(value: int | float, name: str) -> int | float:
    """
    Validate that a value is non-negative.

    Raises:
        ValidationError: If value is negative
    """
    if value < 0:
        raise ValidationError(f"{name} must be non-negative, got {value}")
    return value


def _optional_number(value: Any, name: str) -> float | None:
    """Accept None or a real number (not bool); reject anything else."""
    if value is None:
        return None
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        raise ValidationError(f"{name} must be a number or null, got {value!r}")
    validate_non_negative(value, name)
    return float(value)


# =============================================================================
# SETS AND EXERCISES
# =============================================================================


def workout_set_to_dict(workout_set: WorkoutSet) -> dict[str, Any]:
    """Convert WorkoutSet to JSON-compatible dict."""
    return {"kg": workout_set.kg, "reps": workout_set.reps}


def dict_to_workout_set(data: dict[str, Any]) -> WorkoutSet:
    """
    Convert dict to WorkoutSet.

    Raises:
        ValidationError: If kg or reps is not a non-negative number
    """
    kg = _optional_number(data.get("kg"), "kg")
    reps = _optional_number(data.get("reps"), "reps")
    return WorkoutSet(kg=kg, reps=int(reps) if reps is not None else None)


def _legacy_sets(data: dict[str, Any]) -> list[WorkoutSet]:
    """
    Build the sets list of an old flat-field exercise.

    Old documents had one ``scaleKg`` shared by up to three ``setNReps``
    fields. Every present reps field becomes one set at that weight; an
    exercise with none of them gets DEFAULT_NUM_SETS empty sets.
    """
    kg = _optional_number(data.get("scaleKg"), "scaleKg")
    sets: list[WorkoutSet] = []
    for key in ("set1Reps", "set2Reps", "set3Reps"):
        if key in data:
            reps = _optional_number(data[key], key)
            sets.append(WorkoutSet(kg=kg, reps=int(reps) if reps is not None else None))
    if not sets:
        sets = [WorkoutSet() for _ in range(DEFAULT_NUM_SETS)]
    return sets


def workout_exercise_to_dict(exercise: WorkoutExercise) -> dict[str, Any]:
    """Convert WorkoutExercise to JSON-compatible dict."""
    return {
        "id": exercise.id,
        "exerciseId": exercise.exercise_id,
        "order": exercise.order,
        "sets": [workout_set_to_dict(s) for s in exercise.sets],
        "notes": exercise.notes,
        "photos": list(exercise.photos),
    }


def dict_to_workout_exercise(data: dict[str, Any], position: int = 1) -> WorkoutExercise:
    """
    Convert dict to WorkoutExercise, upgrading the legacy layout.

    Args:
        data: Dict representation
        position: 1-based position in the workout, used when ``order`` is absent

    Returns:
        WorkoutExercise instance

    Raises:
        ValidationError: If data is invalid
    """
    exercise_id = data.get("exerciseId")
    if not isinstance(exercise_id, str) or not exercise_id:
        raise ValidationError(f"exerciseId is required, got {exercise_id!r}")

    if isinstance(data.get("sets"), list):
        sets = [dict_to_workout_set(s) for s in data["sets"]]
    else:
        sets = _legacy_sets(data)

    order = data.get("order")
    if order is None:
        order = position

    try:
        return WorkoutExercise(
            id=str(data.get("id") or f"ex-{position}"),
            exercise_id=exercise_id,
            order=int(order),
            sets=sets,
            notes=str(data.get("notes") or ""),
            photos=[str(p) for p in data.get("photos") or []],
        )
    except ValueError as e:
        raise ValidationError(str(e)) from e


# =============================================================================
# WORKOUTS
# =============================================================================


def legacy_workout_name(workout_type: str, user_id: str) -> str:
    """Name for an old document that only had a workout type, e.g. "Tom's Push Day"."""
    type_name = WORKOUT_TYPE_NAMES.get(workout_type) or workout_type or "Workout"
    return f"{user_display_name(user_id)}'s {type_name}"


def workout_to_dict(workout: Workout) -> dict[str, Any]:
    """Convert Workout to JSON-compatible dict."""
    d: dict[str, Any] = {
        "id": workout.id,
        "userId": workout.user_id,
        "workoutName": workout.workout_name,
        "date": workout.date,
        "exercises": [workout_exercise_to_dict(e) for e in workout.exercises],
        "isCompleted": workout.is_completed,
        "createdAt": workout.created_at,
        "updatedAt": workout.updated_at,
    }
    if workout.template_id is not None:
        d["templateId"] = workout.template_id
    return d


def dict_to_workout(data: dict[str, Any]) -> Workout:
    """
    Convert dict to Workout.

    Accepts ``_id`` in place of ``id`` and derives ``workoutName`` from the
    legacy ``workoutType`` field when needed.

    Raises:
        ValidationError: If data is invalid
    """
    workout_id = data.get("id") or data.get("_id")
    if not workout_id:
        raise ValidationError("Workout id is required")

    user_id = data.get("userId")
    if not isinstance(user_id, str) or not user_id:
        raise ValidationError(f"userId is required, got {user_id!r}")

    date = validate_date(data.get("date", ""))

    name = data.get("workoutName")
    if not name:
        name = legacy_workout_name(str(data.get("workoutType") or ""), user_id)

    is_completed = data.get("isCompleted", False)
    if not isinstance(is_completed, bool):
        raise ValidationError(f"isCompleted must be true or false, got {is_completed!r}")

    exercises = [
        dict_to_workout_exercise(e, position=i)
        for i, e in enumerate(data.get("exercises") or [], 1)
    ]

    try:
        return Workout(
            id=str(workout_id),
            user_id=user_id,
            workout_name=str(name),
            date=date,
            exercises=exercises,
            is_completed=is_completed,
            created_at=str(data.get("createdAt") or ""),
            updated_at=str(data.get("updatedAt") or ""),
            template_id=data.get("templateId"),
        )
    except ValueError as e:
        raise ValidationError(str(e)) from e


def workout_to_json_line(workout: Workout) -> str:
    """Serialize a workout as one compact JSONL line."""
    return json.dumps(workout_to_dict(workout), separators=(",", ":"), ensure_ascii=False)


# =============================================================================
# TEMPLATES AND CUSTOM EXERCISES
# =============================================================================


def template_to_dict(template: WorkoutTemplate) -> dict[str, Any]:
    """Convert WorkoutTemplate to JSON-compatible dict."""
    return {
        "id": template.id,
        "userId": template.user_id,
        "name": template.name,
        "exerciseIds": list(template.exercise_ids),
        "createdAt": template.created_at,
        "updatedAt": template.updated_at,
    }


def dict_to_template(data: dict[str, Any]) -> WorkoutTemplate:
    """Convert dict to WorkoutTemplate."""
    try:
        return WorkoutTemplate(
            id=str(data.get("id") or data.get("_id")),
            user_id=str(data["userId"]),
            name=str(data.get("name") or ""),
            exercise_ids=[str(e) for e in data.get("exerciseIds") or []],
            created_at=str(data.get("createdAt") or ""),
            updated_at=str(data.get("updatedAt") or ""),
        )
    except (KeyError, ValueError) as e:
        raise ValidationError(f"Invalid template: {e}") from e


def custom_exercise_to_dict(exercise: ExerciseDefinition, user_id: str) -> dict[str, Any]:
    """Convert a user-created ExerciseDefinition to its stored dict."""
    return {
        "userId": user_id,
        "exerciseId": exercise.exercise_id,
        "name": exercise.name,
        "categories": list(exercise.categories),
        "photo": exercise.default_photo,
    }


def dict_to_custom_exercise(data: dict[str, Any]) -> ExerciseDefinition:
    """Convert a stored custom exercise dict to an ExerciseDefinition."""
    categories = tuple(str(c) for c in data.get("categories") or ())
    unknown = [c for c in categories if c not in EXERCISE_CATEGORIES]
    if unknown:
        raise ValidationError(f"Unknown categories: {unknown}")
    if not data.get("exerciseId") or not data.get("name"):
        raise ValidationError("Custom exercise needs exerciseId and name")
    return ExerciseDefinition(
        exercise_id=str(data["exerciseId"]),
        name=str(data["name"]),
        categories=categories,
        group="custom",
        default_photo=data.get("photo"),
        is_custom=True,
    )


# =============================================================================
# DERIVED RECORDS (output only)
# =============================================================================


def personal_best_to_dict(pb: PersonalBest) -> dict[str, Any]:
    """Convert PersonalBest to the JSON shape served to clients."""
    return {
        "userId": pb.user_id,
        "exerciseId": pb.exercise_id,
        "completedKg": pb.completed_kg,
        "completedReps": list(pb.completed_reps),
        "completedDate": pb.completed_date,
        "completedWorkoutId": pb.completed_workout_id,
        "currentKg": pb.current_kg,
        "currentReps": list(pb.current_reps),
        "currentDate": pb.current_date,
        "currentWorkoutId": pb.current_workout_id,
        "recommendedKg": pb.recommended_kg,
    }


def history_entry_to_dict(entry: ExerciseHistoryEntry) -> dict[str, Any]:
    """Convert ExerciseHistoryEntry to the JSON shape served to clients."""
    return {
        "date": entry.date,
        "order": entry.order,
        "sets": [workout_set_to_dict(s) for s in entry.sets],
        "workoutId": entry.workout_id,
        "isPB": entry.is_pb,
        "isCompleted": entry.is_completed,
    }


# =============================================================================
# SET STRING PARSING (CLI input)
# =============================================================================

# "3x10@50" / "3 x 10 @ 52.5kg": N sets of R reps at W kg
_REPEAT_RE = re.compile(
    r"^(\d+)\s*[x×]\s*(\d+|-)\s*@\s*(\d+(?:\.\d+)?|-)\s*(?:kg)?$", re.IGNORECASE
)
# "50x10" / "52.5kg x 9" / "-x10" / "50x-": one set of W kg for R reps
_SINGLE_RE = re.compile(
    r"^(\d+(?:\.\d+)?|-)\s*(?:kg)?\s*[x×]\s*(\d+|-)$", re.IGNORECASE
)


def _parse_kg(raw: str) -> float | None:
    return None if raw == "-" else float(raw)


def _parse_reps(raw: str) -> int | None:
    return None if raw == "-" else int(raw)


def parse_sets_string(sets_str: str) -> list[WorkoutSet]:
    """
    Parse a comma-separated set list.

    Formats per item:
        50x10      one set, 50 kg for 10 reps
        52.5kg x 9 same, with unit
        3x10@50    three sets of 10 reps at 50 kg
        -x10       reps only (weight not entered yet)
        50x-       weight only (reps not entered yet)

    Args:
        sets_str: e.g. "50x10, 50x10, 52.5x9"

    Returns:
        Parsed sets in order

    Raises:
        ValidationError: If an item cannot be parsed
    """
    result: list[WorkoutSet] = []
    for part in sets_str.split(","):
        item = part.strip()
        if not item:
            continue

        m = _REPEAT_RE.match(item)
        if m:
            count = int(m.group(1))
            if count < 1:
                raise ValidationError(f"Set count must be positive in '{item}'")
            reps = _parse_reps(m.group(2))
            kg = _parse_kg(m.group(3))
            result.extend(WorkoutSet(kg=kg, reps=reps) for _ in range(count))
            continue

        m = _SINGLE_RE.match(item)
        if m:
            result.append(WorkoutSet(kg=_parse_kg(m.group(1)), reps=_parse_reps(m.group(2))))
            continue

        raise ValidationError(
            f"Cannot parse set '{item}'. Use KGxREPS (e.g. 50x10) or NxREPS@KG (e.g. 3x10@50)"
        )

    if not result:
        raise ValidationError("No sets given")
    return result
