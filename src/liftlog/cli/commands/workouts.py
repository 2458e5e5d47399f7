"""Workout commands: start, log sets, complete, resume, show and delete workouts."""

import json
from typing import Annotated, Optional

import typer

from ...core.config import MAX_SETS, MIN_SETS
from ...core.engine import compute_all_personal_bests
from ...core.engine.config_loader import load_app_config
from ...core.exercises.registry import find_exercise
from ...core.models import WorkoutTemplate
from ...io.serializers import ValidationError, parse_sets_string, workout_to_dict
from ...io.workout_store import WorkoutStore
from .. import views
from ..app import (
    DataDirOption,
    JsonOption,
    UserOption,
    app,
    exit_with_error,
    get_user_store,
    load_custom,
    load_user_workouts,
    resolve_workout,
)

WorkoutOption = Annotated[
    Optional[str],
    typer.Option("--workout", "-w", help="Workout id (default: the workout in progress)"),
]

ExerciseNumArg = Annotated[
    int,
    typer.Argument(help="Exercise number in the workout (see # in show-workout)"),
]


def _find_template(store: WorkoutStore, user_id: str, ref: str) -> WorkoutTemplate:
    """Template by id, or by case-insensitive name among the user's templates."""
    for t in store.load_templates(user_id):
        if t.id == ref or t.name.lower() == ref.lower():
            return t
    views.print_error(f"Template not found: {ref}")
    views.print_info("List templates with 'liftlog templates'.")
    raise typer.Exit(1)


def _exercise_index(exercise_num: int, count: int) -> int:
    """Convert a 1-based exercise number from the command line to an index."""
    if exercise_num < 1 or exercise_num > count:
        if count == 0:
            views.print_error("This workout has no exercises yet.")
        else:
            views.print_error(f"Exercise number must be between 1 and {count}")
        raise typer.Exit(1)
    return exercise_num - 1


def _show_after_change(store: WorkoutStore, user_id: str, workout_id: str) -> None:
    workout = store.get_workout(workout_id)
    custom = load_custom(store, user_id)
    views.print_workout(workout, custom)


@app.command("start")
def start(
    user_id: UserOption,
    name: Annotated[
        Optional[str],
        typer.Option("--name", "-n", help="Workout name (default: the template's name)"),
    ] = None,
    date: Annotated[
        Optional[str],
        typer.Option("--date", "-d", help="Workout date (YYYY-MM-DD, default: today)"),
    ] = None,
    template_ref: Annotated[
        Optional[str],
        typer.Option("--template", "-t", help="Template id or name to pre-fill exercises"),
    ] = None,
    num_sets: Annotated[
        Optional[int],
        typer.Option("--sets", "-s", help=f"Empty sets per template exercise ({MIN_SETS}-{MAX_SETS})"),
    ] = None,
    data_dir: DataDirOption = None,
) -> None:
    """
    Start a new workout.

      liftlog start -u tom --name "Push Day" --template "Push Day"
    """
    store = get_user_store(data_dir, user_id)

    template = _find_template(store, user_id, template_ref) if template_ref else None

    if name is None and template is None:
        name = views.console.input("Workout name: ").strip()

    if num_sets is None:
        num_sets = int(load_app_config()["default_num_sets"])

    existing = store.find_in_progress(user_id)
    if existing is not None:
        views.print_warning(
            f"'{existing.workout_name}' ({existing.date}) is still in progress."
        )

    try:
        workout = store.create_workout(
            user_id,
            workout_name=name,
            date=date,
            template=template,
            num_sets=num_sets,
        )
    except ValidationError as e:
        exit_with_error(e)

    views.print_success(f"Started '{workout.workout_name}' on {workout.date} (id {workout.id})")
    if workout.exercises:
        views.print_workout(workout, load_custom(store, user_id))


@app.command("add-exercise")
def add_exercise(
    user_id: UserOption,
    exercise_id: Annotated[
        str,
        typer.Argument(help="Exercise id (see 'liftlog exercises')"),
    ],
    num_sets: Annotated[
        Optional[int],
        typer.Option("--sets", "-s", help=f"Number of empty sets ({MIN_SETS}-{MAX_SETS})"),
    ] = None,
    workout_id: WorkoutOption = None,
    data_dir: DataDirOption = None,
) -> None:
    """
    Add an exercise to a workout.
    """
    store = get_user_store(data_dir, user_id)
    workout = resolve_workout(store, user_id, workout_id)

    custom = load_custom(store, user_id)
    exercise = find_exercise(exercise_id, custom)
    if exercise is None:
        views.print_error(f"Unknown exercise '{exercise_id}'")
        views.print_info("List exercises with 'liftlog exercises'.")
        raise typer.Exit(1)

    if num_sets is None:
        num_sets = int(load_app_config()["default_num_sets"])

    try:
        store.add_exercise(workout.id, exercise.exercise_id, num_sets)
    except (KeyError, ValidationError) as e:
        exit_with_error(e)

    views.print_success(f"Added {exercise.name} to '{workout.workout_name}'")


@app.command("remove-exercise")
def remove_exercise(
    user_id: UserOption,
    exercise_num: ExerciseNumArg,
    workout_id: WorkoutOption = None,
    data_dir: DataDirOption = None,
) -> None:
    """
    Remove an exercise from a workout.
    """
    store = get_user_store(data_dir, user_id)
    workout = resolve_workout(store, user_id, workout_id)
    index = _exercise_index(exercise_num, len(workout.exercises))
    removed = workout.exercises[index]

    try:
        store.remove_exercise(workout.id, index)
    except (KeyError, IndexError) as e:
        exit_with_error(e)

    custom = load_custom(store, user_id)
    views.print_success(f"Removed {views.exercise_name(removed.exercise_id, custom)}")


@app.command("log-sets")
def log_sets(
    user_id: UserOption,
    exercise_num: ExerciseNumArg,
    sets: Annotated[
        str,
        typer.Option("--sets", "-s", help="Sets: KGxREPS,... or NxREPS@KG, e.g. 50x10,50x10,52.5x9"),
    ],
    workout_id: WorkoutOption = None,
    data_dir: DataDirOption = None,
) -> None:
    """
    Replace all sets of an exercise.

      liftlog log-sets -u tom 1 --sets "50x10, 50x12, 50x10"
    """
    store = get_user_store(data_dir, user_id)
    workout = resolve_workout(store, user_id, workout_id)
    index = _exercise_index(exercise_num, len(workout.exercises))

    try:
        parsed = parse_sets_string(sets)
    except ValidationError as e:
        views.print_error(f"Invalid sets format: {e}")
        raise typer.Exit(1)

    try:
        store.replace_sets(workout.id, index, parsed)
    except (KeyError, IndexError, ValidationError) as e:
        exit_with_error(e)

    _show_after_change(store, user_id, workout.id)


@app.command("log-set")
def log_set(
    user_id: UserOption,
    exercise_num: ExerciseNumArg,
    set_num: Annotated[int, typer.Argument(help="Set number (1-based)")],
    kg: Annotated[
        Optional[float],
        typer.Option("--kg", "-k", help="Weight in kg"),
    ] = None,
    reps: Annotated[
        Optional[int],
        typer.Option("--reps", "-r", help="Repetitions"),
    ] = None,
    workout_id: WorkoutOption = None,
    data_dir: DataDirOption = None,
) -> None:
    """
    Enter the weight and reps of one set.

    Omitted values keep what the set already had.
    """
    store = get_user_store(data_dir, user_id)
    workout = resolve_workout(store, user_id, workout_id)
    index = _exercise_index(exercise_num, len(workout.exercises))
    current_sets = workout.exercises[index].sets

    if set_num < 1 or set_num > len(current_sets):
        views.print_error(f"Set number must be between 1 and {len(current_sets)}")
        raise typer.Exit(1)

    old = current_sets[set_num - 1]
    new_kg = kg if kg is not None else old.kg
    new_reps = reps if reps is not None else old.reps

    try:
        store.update_set(workout.id, index, set_num - 1, new_kg, new_reps)
    except (KeyError, IndexError, ValueError) as e:
        exit_with_error(e)

    _show_after_change(store, user_id, workout.id)


@app.command("add-set")
def add_set(
    user_id: UserOption,
    exercise_num: ExerciseNumArg,
    workout_id: WorkoutOption = None,
    data_dir: DataDirOption = None,
) -> None:
    """
    Add an empty set to an exercise.
    """
    store = get_user_store(data_dir, user_id)
    workout = resolve_workout(store, user_id, workout_id)
    index = _exercise_index(exercise_num, len(workout.exercises))

    try:
        store.add_set(workout.id, index)
    except (KeyError, IndexError, ValidationError) as e:
        exit_with_error(e)

    _show_after_change(store, user_id, workout.id)


@app.command("remove-set")
def remove_set(
    user_id: UserOption,
    exercise_num: ExerciseNumArg,
    workout_id: WorkoutOption = None,
    data_dir: DataDirOption = None,
) -> None:
    """
    Remove the last set of an exercise.
    """
    store = get_user_store(data_dir, user_id)
    workout = resolve_workout(store, user_id, workout_id)
    index = _exercise_index(exercise_num, len(workout.exercises))

    try:
        store.remove_set(workout.id, index)
    except (KeyError, IndexError, ValidationError) as e:
        exit_with_error(e)

    _show_after_change(store, user_id, workout.id)


@app.command("note")
def note(
    user_id: UserOption,
    exercise_num: ExerciseNumArg,
    text: Annotated[str, typer.Argument(help="Note text (empty string clears it)")],
    workout_id: WorkoutOption = None,
    data_dir: DataDirOption = None,
) -> None:
    """
    Set the notes of an exercise.
    """
    store = get_user_store(data_dir, user_id)
    workout = resolve_workout(store, user_id, workout_id)
    index = _exercise_index(exercise_num, len(workout.exercises))

    try:
        store.set_notes(workout.id, index, text)
    except (KeyError, IndexError) as e:
        exit_with_error(e)

    views.print_success("Notes saved.")


@app.command("complete")
def complete(
    user_id: UserOption,
    workout_id: WorkoutOption = None,
    data_dir: DataDirOption = None,
) -> None:
    """
    Finish a workout and show next-session weights.
    """
    store = get_user_store(data_dir, user_id)
    workout = resolve_workout(store, user_id, workout_id)

    try:
        store.complete_workout(workout.id)
        pbs = compute_all_personal_bests(store.load_workouts(user_id))
        workout = store.get_workout(workout.id)
    except (KeyError, ValidationError) as e:
        exit_with_error(e)

    views.print_success(f"Completed '{workout.workout_name}' ({workout.date})")
    views.print_workout(workout, load_custom(store, user_id), pbs=pbs)


@app.command("resume")
def resume(
    user_id: UserOption,
    workout_id: Annotated[
        Optional[str],
        typer.Argument(help="Workout id (default: the workout in progress)"),
    ] = None,
    data_dir: DataDirOption = None,
) -> None:
    """
    Continue a workout; a completed workout is marked in progress again.
    """
    store = get_user_store(data_dir, user_id)
    workout = resolve_workout(store, user_id, workout_id)

    if workout.is_completed:
        try:
            workout = store.reopen_workout(workout.id)
        except KeyError as e:
            exit_with_error(e)
        views.print_info(f"Reopened '{workout.workout_name}' ({workout.date}).")

    pbs = compute_all_personal_bests(load_user_workouts(store, user_id))
    views.print_workout(workout, load_custom(store, user_id), pbs=pbs)


@app.command("show-workouts")
def show_workouts(
    user_id: UserOption,
    limit: Annotated[
        Optional[int],
        typer.Option("--limit", "-l", help="Limit number of workouts to show"),
    ] = None,
    data_dir: DataDirOption = None,
    json_out: JsonOption = False,
) -> None:
    """
    List workouts, most recent first.
    """
    store = get_user_store(data_dir, user_id)

    try:
        workouts = store.load_workouts(user_id)
    except (FileNotFoundError, ValidationError) as e:
        exit_with_error(e)

    if limit is not None:
        workouts = workouts[:limit]

    if json_out:
        print(json.dumps([workout_to_dict(w) for w in workouts], indent=2, ensure_ascii=False))
        return

    views.print_workouts(workouts)


@app.command("show-workout")
def show_workout(
    user_id: UserOption,
    workout_id: Annotated[
        Optional[str],
        typer.Argument(help="Workout id (default: the workout in progress)"),
    ] = None,
    data_dir: DataDirOption = None,
    json_out: JsonOption = False,
) -> None:
    """
    Display one workout with its sets.
    """
    store = get_user_store(data_dir, user_id)
    workout = resolve_workout(store, user_id, workout_id)

    if json_out:
        print(json.dumps(workout_to_dict(workout), indent=2, ensure_ascii=False))
        return

    pbs = compute_all_personal_bests(load_user_workouts(store, user_id))
    views.print_workout(workout, load_custom(store, user_id), pbs=pbs)


@app.command("delete-workout")
def delete_workout(
    user_id: UserOption,
    workout_id: Annotated[str, typer.Argument(help="Workout id (see show-workouts)")],
    force: Annotated[
        bool,
        typer.Option("--force", "-f", help="Skip confirmation prompt"),
    ] = False,
    data_dir: DataDirOption = None,
) -> None:
    """
    Remove a workout permanently.
    """
    store = get_user_store(data_dir, user_id)
    workout = resolve_workout(store, user_id, workout_id)

    views.console.print(f"Workout to delete: [bold]{workout.workout_name}[/bold] ({workout.date})")

    if not force and not views.confirm_action("Delete this workout?"):
        views.print_info("Cancelled.")
        raise typer.Exit(0)

    try:
        store.delete_workout(workout.id)
    except KeyError as e:
        exit_with_error(e)

    views.print_success(f"Deleted '{workout.workout_name}' ({workout.date})")
