"""
Data models for liftlog.

Stored documents (sets, exercises, workouts, templates) and the derived
records produced by the personal-best engine. Derived records are never
persisted; they are rebuilt from the workout history on every request.
"""

from dataclasses import dataclass, field


def _validate_date(date_str: str) -> None:
    """Validate date string is ISO format YYYY-MM-DD."""
    import re

    if not re.match(r"^\d{4}-\d{2}-\d{2}$", date_str):
        raise ValueError(f"Invalid date format: {date_str}. Expected YYYY-MM-DD")

    from datetime import datetime

    try:
        datetime.strptime(date_str, "%Y-%m-%d")
    except ValueError as e:
        raise ValueError(f"Invalid date: {date_str}") from e


@dataclass
class WorkoutSet:
    """
    One set of an exercise, each with its own weight and reps.

    Either field may be None while the set is still being filled in.
    """

    kg: float | None = None
    reps: int | None = None

    def __post_init__(self) -> None:
        """Validate set data."""
        if self.kg is not None and self.kg < 0:
            raise ValueError("kg must be non-negative")
        if self.reps is not None and self.reps < 0:
            raise ValueError("reps must be non-negative")

    @property
    def is_valid(self) -> bool:
        """True when the set carries a positive weight and a rep count."""
        return self.kg is not None and self.kg > 0 and self.reps is not None

    @property
    def has_data(self) -> bool:
        """True when anything at all has been entered."""
        return self.kg is not None or self.reps is not None


@dataclass
class WorkoutExercise:
    """
    One exercise performed within one workout.

    ``order`` is the 1-based position at creation time; it is display
    metadata only and may drift after edits.
    """

    id: str
    exercise_id: str
    order: int
    sets: list[WorkoutSet] = field(default_factory=list)
    notes: str = ""
    photos: list[str] = field(default_factory=list)

    def __post_init__(self) -> None:
        if not self.exercise_id:
            raise ValueError("exercise_id must be non-empty")
        if self.order < 1:
            raise ValueError("order must be 1 or greater")


@dataclass
class Workout:
    """
    A training session.

    Created in progress; mutated while the user trains; terminal once
    ``is_completed`` is set. In-progress workouts are never removed
    automatically.
    """

    id: str
    user_id: str
    workout_name: str
    date: str  # ISO format: YYYY-MM-DD
    exercises: list[WorkoutExercise] = field(default_factory=list)
    is_completed: bool = False
    created_at: str = ""  # ISO datetime
    updated_at: str = ""
    template_id: str | None = None

    def __post_init__(self) -> None:
        """Validate workout data."""
        _validate_date(self.date)
        if not self.user_id:
            raise ValueError("user_id must be non-empty")


@dataclass
class WorkoutTemplate:
    """A reusable list of exercises to start a workout from."""

    id: str
    user_id: str
    name: str
    exercise_ids: list[str] = field(default_factory=list)
    created_at: str = ""
    updated_at: str = ""

    def __post_init__(self) -> None:
        if not self.name.strip():
            raise ValueError("Template name is required")


@dataclass
class PersonalBest:
    """
    Personal-best projection for one (user, exercise) pair.

    The completed track holds the best session in which the exercise was
    completed (None when it never was). The current track holds the
    heaviest weight worked, most recent on ties, regardless of completion.
    """

    user_id: str
    exercise_id: str
    current_kg: float
    current_reps: list[int]
    current_date: str
    current_workout_id: str
    recommended_kg: float
    completed_kg: float | None = None
    completed_reps: list[int] = field(default_factory=list)
    completed_date: str | None = None
    completed_workout_id: str | None = None

    @property
    def has_completion(self) -> bool:
        return self.completed_kg is not None


@dataclass
class ExerciseHistoryEntry:
    """One occurrence of an exercise in a workout, annotated for display."""

    date: str
    order: int
    sets: list[WorkoutSet]
    workout_id: str
    is_pb: bool = False
    is_completed: bool = False
