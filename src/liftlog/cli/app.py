"""Shared Typer app object, shared option types, and store utilities."""

from pathlib import Path
from typing import Annotated, NoReturn, Optional

import typer

from ..core.engine.config_loader import default_data_dir
from ..core.exercises.base import ExerciseDefinition
from ..core.models import Workout
from ..io.serializers import ValidationError
from ..io.workout_store import WorkoutStore
from . import views

# Shared --user option type used across all commands
UserOption = Annotated[
    str,
    typer.Option("--user", "-u", help="User id (see 'liftlog users')"),
]

# Shared --data-dir option type used across all commands
DataDirOption = Annotated[
    Optional[Path],
    typer.Option("--data-dir", "-p", help="Directory holding the workout data files"),
]

JsonOption = Annotated[
    bool,
    typer.Option("--json", "-j", help="Output as JSON for machine processing"),
]

app = typer.Typer(
    name="liftlog",
    help="Workout log with personal bests and next-weight recommendations.",
    no_args_is_help=False,
    invoke_without_command=True,
)


def get_store(data_dir: Path | None) -> WorkoutStore:
    """Get an initialised workout store at data_dir or the configured location."""
    if data_dir is None:
        data_dir = default_data_dir()
    store = WorkoutStore(data_dir)
    store.init()
    return store


def get_user_store(data_dir: Path | None, user_id: str) -> WorkoutStore:
    """
    Get the store and check the user id, exiting with an error if unknown.

    Args:
        data_dir: Data directory option value
        user_id: User id option value

    Returns:
        Initialised WorkoutStore
    """
    store = get_store(data_dir)
    try:
        store.check_user(user_id)
    except ValidationError as e:
        views.print_error(str(e))
        raise typer.Exit(1)
    return store


def exit_with_error(e: Exception) -> NoReturn:
    """Print a store or validation error and exit with status 1."""
    message = e.args[0] if isinstance(e, KeyError) and e.args else str(e)
    views.print_error(str(message))
    raise typer.Exit(1)


def load_custom(store: WorkoutStore, user_id: str) -> list[ExerciseDefinition]:
    """Load the user's custom exercises, exiting with an error if the file is unreadable."""
    try:
        return store.load_custom_exercises(user_id)
    except ValidationError as e:
        exit_with_error(e)


def load_user_workouts(store: WorkoutStore, user_id: str) -> list[Workout]:
    """Load the user's workouts, exiting with an error if the file is unreadable."""
    try:
        return store.load_workouts(user_id)
    except ValidationError as e:
        exit_with_error(e)


def resolve_workout(store: WorkoutStore, user_id: str, workout_id: str | None) -> Workout:
    """
    Find the workout a command acts on.

    Args:
        store: Workout store
        user_id: Owner the workout must belong to
        workout_id: Explicit id; the user's in-progress workout when None

    Returns:
        The workout
    """
    try:
        if workout_id is None:
            workout = store.find_in_progress(user_id)
            if workout is None:
                views.print_error("No workout in progress.")
                views.print_info("Start one with 'liftlog start' or reopen one with 'liftlog resume'.")
                raise typer.Exit(1)
        else:
            workout = store.get_workout(workout_id)
    except (FileNotFoundError, KeyError, ValidationError) as e:
        exit_with_error(e)

    if workout.user_id != user_id:
        views.print_error(f"Workout {workout.id} belongs to another user")
        raise typer.Exit(1)
    return workout
