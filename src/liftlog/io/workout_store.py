"""
JSONL-based document storage for workouts.

Handles reading, writing, and managing the workout log, workout templates
and user-created exercises. This is the data source the personal-best
engine reads from; the engine itself never touches files.
"""

import json
import uuid
from datetime import datetime
from pathlib import Path
from typing import Callable

from ..core.config import DEFAULT_NUM_SETS, MAX_SETS, MIN_SETS
from ..core.engine.config_loader import configured_user_ids
from ..core.engine.personal_best import order_workouts
from ..core.exercises.base import ExerciseDefinition
from ..core.exercises.registry import EXERCISE_LIBRARY, custom_exercise_id
from ..core.models import Workout, WorkoutExercise, WorkoutSet, WorkoutTemplate
from .serializers import (
    ValidationError,
    custom_exercise_to_dict,
    dict_to_custom_exercise,
    dict_to_template,
    dict_to_workout,
    template_to_dict,
    validate_date,
    validate_user,
    workout_to_json_line,
)


def _now() -> str:
    return datetime.now().isoformat(timespec="microseconds")


def _new_id() -> str:
    return uuid.uuid4().hex


def _empty_sets(count: int) -> list[WorkoutSet]:
    if count < MIN_SETS or count > MAX_SETS:
        raise ValidationError(f"Number of sets must be between {MIN_SETS} and {MAX_SETS}, got {count}")
    return [WorkoutSet() for _ in range(count)]


class WorkoutStore:
    """
    Manages workout data stored under one data directory.

    Files:
    - workouts.jsonl: one workout document per line, all users
    - templates.json: list of workout templates
    - custom_exercises.json: list of user-created exercises
    """

    def __init__(self, data_dir: str | Path, users: list[str] | None = None):
        """
        Initialize the workout store.

        Args:
            data_dir: Directory holding the data files
            users: Allowed user ids (default: the configured users)
        """
        self.data_dir = Path(data_dir)
        self.workouts_path = self.data_dir / "workouts.jsonl"
        self.templates_path = self.data_dir / "templates.json"
        self.custom_exercises_path = self.data_dir / "custom_exercises.json"
        self.users = list(users) if users is not None else configured_user_ids()

    def exists(self) -> bool:
        """Check if the workout log exists."""
        return self.workouts_path.exists()

    def init(self) -> None:
        """
        Initialize empty data files if they don't exist.

        Creates the data directory if needed.
        """
        self.data_dir.mkdir(parents=True, exist_ok=True)

        if not self.workouts_path.exists():
            self.workouts_path.touch()
        for path in (self.templates_path, self.custom_exercises_path):
            if not path.exists():
                path.write_text("[]\n")

    def check_user(self, user_id: str) -> str:
        """Raise ValidationError unless user_id is a configured user."""
        return validate_user(user_id, self.users)

    # =========================================================================
    # WORKOUTS
    # =========================================================================

    def load_all(self) -> list[Workout]:
        """
        Load every workout in file order.

        Raises:
            FileNotFoundError: If the workout log doesn't exist
            ValidationError: If a line is not a valid workout document
        """
        if not self.workouts_path.exists():
            raise FileNotFoundError(
                f"Workout log not found: {self.workouts_path}. Run 'init' first."
            )

        workouts: list[Workout] = []

        with open(self.workouts_path, "r", encoding="utf-8") as f:
            for line_num, line in enumerate(f, 1):
                line = line.strip()
                if not line:
                    continue

                try:
                    data = json.loads(line)
                    if not isinstance(data, dict):
                        raise ValidationError("expected a JSON object")
                    workouts.append(dict_to_workout(data))
                except (json.JSONDecodeError, ValidationError) as e:
                    raise ValidationError(
                        f"Error parsing line {line_num} in {self.workouts_path}: {e}"
                    ) from e

        return workouts

    def load_workouts(self, user_id: str) -> list[Workout]:
        """
        Load every workout of one user, completed or not.

        Args:
            user_id: Configured user id

        Returns:
            Workouts most recent first (date, then creation time)
        """
        self.check_user(user_id)
        return order_workouts(w for w in self.load_all() if w.user_id == user_id)

    def _write_workouts(self, workouts: list[Workout]) -> None:
        """
        Write all workouts to the log.

        Args:
            workouts: Workouts to write
        """
        with open(self.workouts_path, "w", encoding="utf-8") as f:
            for workout in workouts:
                f.write(workout_to_json_line(workout) + "\n")

    def get_workout(self, workout_id: str) -> Workout:
        """
        Get one workout by id.

        Raises:
            KeyError: If no workout has this id
        """
        for workout in self.load_all():
            if workout.id == workout_id:
                return workout
        raise KeyError(f"Workout not found: {workout_id}")

    def find_in_progress(self, user_id: str) -> Workout | None:
        """Most recent workout of the user that is not completed, if any."""
        for workout in self.load_workouts(user_id):
            if not workout.is_completed:
                return workout
        return None

    def create_workout(
        self,
        user_id: str,
        workout_name: str | None = None,
        date: str | None = None,
        template: WorkoutTemplate | None = None,
        num_sets: int = DEFAULT_NUM_SETS,
    ) -> Workout:
        """
        Start a new in-progress workout.

        Args:
            user_id: Configured user id
            workout_name: Display name (default: the template's name)
            date: YYYY-MM-DD (default: today)
            template: Pre-fill exercises from this template
            num_sets: Empty sets created per template exercise

        Returns:
            The stored workout

        Raises:
            ValidationError: If the user, date, name or set count is invalid
        """
        self.check_user(user_id)
        if date is None:
            date = datetime.now().strftime("%Y-%m-%d")
        validate_date(date)

        name = workout_name or (template.name if template is not None else "")
        if not name.strip():
            raise ValidationError("Workout name is required")

        exercises: list[WorkoutExercise] = []
        if template is not None:
            exercises = [
                WorkoutExercise(
                    id=_new_id(),
                    exercise_id=exercise_id,
                    order=i,
                    sets=_empty_sets(num_sets),
                )
                for i, exercise_id in enumerate(template.exercise_ids, 1)
            ]

        now = _now()
        workout = Workout(
            id=_new_id(),
            user_id=user_id,
            workout_name=name.strip(),
            date=date,
            exercises=exercises,
            is_completed=False,
            created_at=now,
            updated_at=now,
            template_id=template.id if template is not None else None,
        )

        workouts = self.load_all()
        workouts.append(workout)
        self._write_workouts(workouts)
        return workout

    def save_workout(self, workout: Workout) -> Workout:
        """
        Replace the stored workout with the same id.

        Bumps ``updated_at``.

        Raises:
            KeyError: If no workout has this id
        """
        workouts = self.load_all()
        for i, existing in enumerate(workouts):
            if existing.id == workout.id:
                workout.created_at = existing.created_at
                workout.updated_at = _now()
                workouts[i] = workout
                self._write_workouts(workouts)
                return workout
        raise KeyError(f"Workout not found: {workout.id}")

    def delete_workout(self, workout_id: str) -> Workout:
        """
        Delete one workout.

        Returns:
            The deleted workout

        Raises:
            KeyError: If no workout has this id
        """
        workouts = self.load_all()
        for i, existing in enumerate(workouts):
            if existing.id == workout_id:
                del workouts[i]
                self._write_workouts(workouts)
                return existing
        raise KeyError(f"Workout not found: {workout_id}")

    def _modify(self, workout_id: str, change: Callable[[Workout], None]) -> Workout:
        """Load one workout, apply change() to it, and save it back."""
        workout = self.get_workout(workout_id)
        change(workout)
        return self.save_workout(workout)

    @staticmethod
    def _exercise_at(workout: Workout, exercise_index: int) -> WorkoutExercise:
        if exercise_index < 0 or exercise_index >= len(workout.exercises):
            raise IndexError(
                f"Exercise index {exercise_index} out of range (0..{len(workout.exercises) - 1})"
            )
        return workout.exercises[exercise_index]

    def add_exercise(
        self,
        workout_id: str,
        exercise_id: str,
        num_sets: int = DEFAULT_NUM_SETS,
    ) -> Workout:
        """Append an exercise with empty sets to a workout."""
        sets = _empty_sets(num_sets)

        def change(workout: Workout) -> None:
            workout.exercises.append(
                WorkoutExercise(
                    id=_new_id(),
                    exercise_id=exercise_id,
                    order=len(workout.exercises) + 1,
                    sets=sets,
                )
            )

        return self._modify(workout_id, change)

    def remove_exercise(self, workout_id: str, exercise_index: int) -> Workout:
        """Remove the exercise at a 0-based position; other orders are left as they are."""

        def change(workout: Workout) -> None:
            self._exercise_at(workout, exercise_index)
            del workout.exercises[exercise_index]

        return self._modify(workout_id, change)

    def update_set(
        self,
        workout_id: str,
        exercise_index: int,
        set_index: int,
        kg: float | None,
        reps: int | None,
    ) -> Workout:
        """
        Overwrite one set's weight and reps.

        Raises:
            IndexError: If the exercise or set position is out of range
        """
        new_set = WorkoutSet(kg=kg, reps=reps)

        def change(workout: Workout) -> None:
            exercise = self._exercise_at(workout, exercise_index)
            if set_index < 0 or set_index >= len(exercise.sets):
                raise IndexError(
                    f"Set index {set_index} out of range (0..{len(exercise.sets) - 1})"
                )
            exercise.sets[set_index] = new_set

        return self._modify(workout_id, change)

    def replace_sets(
        self,
        workout_id: str,
        exercise_index: int,
        sets: list[WorkoutSet],
    ) -> Workout:
        """
        Replace all sets of an exercise.

        Raises:
            ValidationError: If the number of sets is outside MIN_SETS..MAX_SETS
        """
        if len(sets) < MIN_SETS or len(sets) > MAX_SETS:
            raise ValidationError(
                f"An exercise needs {MIN_SETS}..{MAX_SETS} sets, got {len(sets)}"
            )

        def change(workout: Workout) -> None:
            self._exercise_at(workout, exercise_index).sets = list(sets)

        return self._modify(workout_id, change)

    def add_set(self, workout_id: str, exercise_index: int) -> Workout:
        """Append an empty set, up to MAX_SETS."""

        def change(workout: Workout) -> None:
            exercise = self._exercise_at(workout, exercise_index)
            if len(exercise.sets) >= MAX_SETS:
                raise ValidationError(f"An exercise can have at most {MAX_SETS} sets")
            exercise.sets.append(WorkoutSet())

        return self._modify(workout_id, change)

    def remove_set(self, workout_id: str, exercise_index: int) -> Workout:
        """Drop the last set, keeping at least MIN_SETS."""

        def change(workout: Workout) -> None:
            exercise = self._exercise_at(workout, exercise_index)
            if len(exercise.sets) <= MIN_SETS:
                raise ValidationError(f"An exercise needs at least {MIN_SETS} sets")
            exercise.sets.pop()

        return self._modify(workout_id, change)

    def set_notes(self, workout_id: str, exercise_index: int, notes: str) -> Workout:
        """Replace the notes of one exercise."""

        def change(workout: Workout) -> None:
            self._exercise_at(workout, exercise_index).notes = notes

        return self._modify(workout_id, change)

    def complete_workout(self, workout_id: str) -> Workout:
        """Mark a workout as completed."""

        def change(workout: Workout) -> None:
            workout.is_completed = True

        return self._modify(workout_id, change)

    def reopen_workout(self, workout_id: str) -> Workout:
        """Mark a workout as in progress again so it can be resumed."""

        def change(workout: Workout) -> None:
            workout.is_completed = False

        return self._modify(workout_id, change)

    # =========================================================================
    # TEMPLATES
    # =========================================================================

    def _read_json_list(self, path: Path) -> list[dict]:
        if not path.exists():
            return []
        try:
            with open(path, "r", encoding="utf-8") as f:
                data = json.load(f)
        except json.JSONDecodeError as e:
            raise ValidationError(f"Error parsing {path}: {e}") from e
        if not isinstance(data, list):
            raise ValidationError(f"Expected a JSON list in {path}")
        return data

    def _write_json_list(self, path: Path, items: list[dict]) -> None:
        self.data_dir.mkdir(parents=True, exist_ok=True)
        with open(path, "w", encoding="utf-8") as f:
            json.dump(items, f, indent=2, ensure_ascii=False)

    def _all_templates(self) -> list[WorkoutTemplate]:
        return [dict_to_template(d) for d in self._read_json_list(self.templates_path)]

    def load_templates(self, user_id: str) -> list[WorkoutTemplate]:
        """Templates of one user, most recently updated first."""
        self.check_user(user_id)
        templates = [t for t in self._all_templates() if t.user_id == user_id]
        return sorted(templates, key=lambda t: t.updated_at, reverse=True)

    def get_template(self, template_id: str) -> WorkoutTemplate:
        """
        Get one template by id.

        Raises:
            KeyError: If no template has this id
        """
        for template in self._all_templates():
            if template.id == template_id:
                return template
        raise KeyError(f"Template not found: {template_id}")

    def create_template(
        self,
        user_id: str,
        name: str,
        exercise_ids: list[str] | None = None,
    ) -> WorkoutTemplate:
        """
        Save a new template.

        Raises:
            ValidationError: If the user is unknown or the name is blank
        """
        self.check_user(user_id)
        if not name or not name.strip():
            raise ValidationError("Template name is required")

        now = _now()
        template = WorkoutTemplate(
            id=_new_id(),
            user_id=user_id,
            name=name.strip(),
            exercise_ids=list(exercise_ids or []),
            created_at=now,
            updated_at=now,
        )
        templates = self._all_templates()
        templates.append(template)
        self._write_json_list(self.templates_path, [template_to_dict(t) for t in templates])
        return template

    def update_template(
        self,
        template_id: str,
        name: str | None = None,
        exercise_ids: list[str] | None = None,
    ) -> WorkoutTemplate:
        """
        Rename a template and/or replace its exercise list.

        Raises:
            KeyError: If no template has this id
            ValidationError: If the new name is blank
        """
        if name is not None and not name.strip():
            raise ValidationError("Template name is required")

        templates = self._all_templates()
        for template in templates:
            if template.id == template_id:
                if name is not None:
                    template.name = name.strip()
                if exercise_ids is not None:
                    template.exercise_ids = list(exercise_ids)
                template.updated_at = _now()
                self._write_json_list(
                    self.templates_path, [template_to_dict(t) for t in templates]
                )
                return template
        raise KeyError(f"Template not found: {template_id}")

    def delete_template(self, template_id: str) -> WorkoutTemplate:
        """
        Delete one template.

        Raises:
            KeyError: If no template has this id
        """
        templates = self._all_templates()
        for i, template in enumerate(templates):
            if template.id == template_id:
                del templates[i]
                self._write_json_list(
                    self.templates_path, [template_to_dict(t) for t in templates]
                )
                return template
        raise KeyError(f"Template not found: {template_id}")

    # =========================================================================
    # CUSTOM EXERCISES
    # =========================================================================

    def load_custom_exercises(self, user_id: str) -> list[ExerciseDefinition]:
        """Exercises created by one user."""
        self.check_user(user_id)
        return [
            dict_to_custom_exercise(d)
            for d in self._read_json_list(self.custom_exercises_path)
            if d.get("userId") == user_id
        ]

    def add_custom_exercise(
        self,
        user_id: str,
        name: str,
        categories: list[str],
        photo: str | None = None,
    ) -> ExerciseDefinition:
        """
        Create a user exercise with id ``custom-<slug of name>``.

        Raises:
            ValidationError: If the name is blank, no category is given, or
                the id is already taken
        """
        self.check_user(user_id)
        if not name or not name.strip():
            raise ValidationError("Exercise name is required")
        if not categories:
            raise ValidationError("At least one category is required")

        try:
            exercise_id = custom_exercise_id(name)
        except ValueError as e:
            raise ValidationError(str(e)) from e

        raw = self._read_json_list(self.custom_exercises_path)
        taken = exercise_id in EXERCISE_LIBRARY or any(
            d.get("userId") == user_id and d.get("exerciseId") == exercise_id for d in raw
        )
        if taken:
            raise ValidationError(f"Exercise already exists: {exercise_id}")

        exercise = dict_to_custom_exercise(
            {
                "exerciseId": exercise_id,
                "name": name.strip(),
                "categories": list(categories),
                "photo": photo,
            }
        )
        raw.append(custom_exercise_to_dict(exercise, user_id) | {"createdAt": _now()})
        self._write_json_list(self.custom_exercises_path, raw)
        return exercise
