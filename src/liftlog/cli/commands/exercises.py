"""Exercise commands: pb, history, exercise, exercises, add-custom-exercise."""

import json
from typing import Annotated, Optional

import typer

from ...core.config import EXERCISE_CATEGORIES, WORKOUT_TYPE_CATEGORIES
from ...core.engine import compute_all_personal_bests, compute_exercise_history, exercise_detail
from ...core.exercises.registry import all_exercises, categories_for_workout_type, filter_by_categories, find_exercise
from ...io.serializers import (
    ValidationError,
    history_entry_to_dict,
    personal_best_to_dict,
)
from .. import views
from ..app import DataDirOption, JsonOption, UserOption, app, exit_with_error, get_user_store, load_custom

ExerciseFilterOption = Annotated[
    Optional[str],
    typer.Option("--exercise", "-e", help="Exercise id (default: all exercises)"),
]


@app.command("pb")
def pb(
    user_id: UserOption,
    exercise_id: ExerciseFilterOption = None,
    data_dir: DataDirOption = None,
    json_out: JsonOption = False,
) -> None:
    """
    Show personal bests and the recommended next weight.
    """
    store = get_user_store(data_dir, user_id)

    try:
        workouts = store.load_workouts(user_id)
    except (FileNotFoundError, ValidationError) as e:
        exit_with_error(e)

    pbs = compute_all_personal_bests(workouts)
    if exercise_id is not None:
        pbs = {k: v for k, v in pbs.items() if k == exercise_id}

    if json_out:
        if exercise_id is not None:
            record = pbs.get(exercise_id)
            print(json.dumps(personal_best_to_dict(record) if record else None, indent=2))
        else:
            print(json.dumps({k: personal_best_to_dict(v) for k, v in pbs.items()}, indent=2))
        return

    views.print_personal_bests(pbs, load_custom(store, user_id))


@app.command("history")
def history(
    user_id: UserOption,
    exercise_id: ExerciseFilterOption = None,
    limit: Annotated[
        Optional[int],
        typer.Option("--limit", "-l", help="Limit number of entries to show"),
    ] = None,
    data_dir: DataDirOption = None,
    json_out: JsonOption = False,
) -> None:
    """
    Show exercise history, heaviest first, with the PB entry marked.
    """
    store = get_user_store(data_dir, user_id)

    try:
        workouts = store.load_workouts(user_id)
    except (FileNotFoundError, ValidationError) as e:
        exit_with_error(e)

    entries = compute_exercise_history(workouts, exercise_id)
    if limit is not None:
        entries = entries[:limit]

    if json_out:
        print(json.dumps([history_entry_to_dict(e) for e in entries], indent=2))
        return

    title = "History"
    if exercise_id is not None:
        title = f"{views.exercise_name(exercise_id, load_custom(store, user_id))} history"
    views.print_history(entries, title=title)


@app.command("exercise")
def exercise(
    user_id: UserOption,
    exercise_id: Annotated[str, typer.Argument(help="Exercise id (see 'liftlog exercises')")],
    data_dir: DataDirOption = None,
    json_out: JsonOption = False,
) -> None:
    """
    Show one exercise: catalog entry, personal best and history.
    """
    store = get_user_store(data_dir, user_id)
    custom = load_custom(store, user_id)

    definition = find_exercise(exercise_id, custom)
    if definition is None:
        views.print_error(f"Unknown exercise '{exercise_id}'")
        raise typer.Exit(1)

    try:
        workouts = store.load_workouts(user_id)
    except (FileNotFoundError, ValidationError) as e:
        exit_with_error(e)

    record, entries = exercise_detail(workouts, exercise_id)

    if json_out:
        print(json.dumps({
            "exerciseId": definition.exercise_id,
            "name": definition.name,
            "categories": list(definition.categories),
            "isCustom": definition.is_custom,
            "personalBest": personal_best_to_dict(record) if record else None,
            "history": [history_entry_to_dict(e) for e in entries],
        }, indent=2))
        return

    views.print_exercise_detail(definition, record, entries)


@app.command("exercises")
def exercises(
    user_id: UserOption,
    category: Annotated[
        Optional[str],
        typer.Option(
            "--category", "-c",
            help=f"Workout type filter: {', '.join(WORKOUT_TYPE_CATEGORIES)}",
        ),
    ] = None,
    data_dir: DataDirOption = None,
) -> None:
    """
    List the exercise catalog with each exercise's next weight.
    """
    store = get_user_store(data_dir, user_id)

    try:
        custom = store.load_custom_exercises(user_id)
        workouts = store.load_workouts(user_id)
    except (FileNotFoundError, ValidationError) as e:
        exit_with_error(e)

    listed = all_exercises(custom)
    if category is not None:
        if category not in WORKOUT_TYPE_CATEGORIES:
            views.print_error(
                f"Unknown category '{category}'. Choose from: {', '.join(WORKOUT_TYPE_CATEGORIES)}"
            )
            raise typer.Exit(1)
        listed = filter_by_categories(categories_for_workout_type(category), listed)

    views.console.print(views.format_catalog_table(listed, compute_all_personal_bests(workouts)))


@app.command("add-custom-exercise")
def add_custom_exercise(
    user_id: UserOption,
    name: Annotated[str, typer.Argument(help="Exercise name, e.g. 'Cable Row'")],
    categories: Annotated[
        list[str],
        typer.Option(
            "--category", "-c",
            help=f"Category (repeatable): {', '.join(EXERCISE_CATEGORIES)}",
        ),
    ],
    data_dir: DataDirOption = None,
) -> None:
    """
    Create your own exercise.

      liftlog add-custom-exercise -u tom "Cable Row" -c pull -c upper-body
    """
    store = get_user_store(data_dir, user_id)

    try:
        created = store.add_custom_exercise(user_id, name, categories)
    except ValidationError as e:
        exit_with_error(e)

    views.print_success(f"Created '{created.name}' (id {created.exercise_id})")
