"""Template and user commands: templates, template-create/update/delete, users."""

import json
from typing import Annotated, Optional

import typer

from ...core.engine.config_loader import load_app_config
from ...core.exercises.registry import find_exercise
from ...io.serializers import ValidationError, template_to_dict
from ...io.workout_store import WorkoutStore
from .. import views
from ..app import DataDirOption, JsonOption, UserOption, app, exit_with_error, get_user_store, load_custom

ExerciseIdsOption = Annotated[
    Optional[list[str]],
    typer.Option("--exercise", "-e", help="Exercise id (repeatable, in workout order)"),
]


def _check_exercise_ids(store: WorkoutStore, user_id: str, exercise_ids: list[str]) -> None:
    """Exit with an error if any id is neither in the library nor a custom exercise."""
    custom = load_custom(store, user_id)
    unknown = [e for e in exercise_ids if find_exercise(e, custom) is None]
    if unknown:
        views.print_error(f"Unknown exercise(s): {', '.join(unknown)}")
        raise typer.Exit(1)


def _owned_template_id(store: WorkoutStore, user_id: str, ref: str) -> str:
    for t in store.load_templates(user_id):
        if t.id == ref or t.name.lower() == ref.lower():
            return t.id
    views.print_error(f"Template not found: {ref}")
    raise typer.Exit(1)


@app.command("templates")
def templates(
    user_id: UserOption,
    data_dir: DataDirOption = None,
    json_out: JsonOption = False,
) -> None:
    """
    List workout templates.
    """
    store = get_user_store(data_dir, user_id)

    try:
        items = store.load_templates(user_id)
    except ValidationError as e:
        exit_with_error(e)

    if json_out:
        print(json.dumps([template_to_dict(t) for t in items], indent=2, ensure_ascii=False))
        return

    views.print_templates(items, load_custom(store, user_id))


@app.command("template-create")
def template_create(
    user_id: UserOption,
    name: Annotated[str, typer.Argument(help="Template name")],
    exercise_ids: ExerciseIdsOption = None,
    data_dir: DataDirOption = None,
) -> None:
    """
    Save a reusable list of exercises.

      liftlog template-create -u tom "Push Day" -e bench-press -e overhead-press
    """
    store = get_user_store(data_dir, user_id)
    _check_exercise_ids(store, user_id, exercise_ids or [])

    try:
        template = store.create_template(user_id, name, exercise_ids or [])
    except ValidationError as e:
        exit_with_error(e)

    views.print_success(f"Created template '{template.name}' (id {template.id})")


@app.command("template-update")
def template_update(
    user_id: UserOption,
    template_ref: Annotated[str, typer.Argument(help="Template id or name")],
    name: Annotated[
        Optional[str],
        typer.Option("--name", "-n", help="New template name"),
    ] = None,
    exercise_ids: ExerciseIdsOption = None,
    data_dir: DataDirOption = None,
) -> None:
    """
    Rename a template or replace its exercises.
    """
    store = get_user_store(data_dir, user_id)
    template_id = _owned_template_id(store, user_id, template_ref)
    if exercise_ids is not None:
        _check_exercise_ids(store, user_id, exercise_ids)

    try:
        template = store.update_template(template_id, name=name, exercise_ids=exercise_ids)
    except (KeyError, ValidationError) as e:
        exit_with_error(e)

    views.print_success(f"Updated template '{template.name}'")


@app.command("template-delete")
def template_delete(
    user_id: UserOption,
    template_ref: Annotated[str, typer.Argument(help="Template id or name")],
    force: Annotated[
        bool,
        typer.Option("--force", "-f", help="Skip confirmation prompt"),
    ] = False,
    data_dir: DataDirOption = None,
) -> None:
    """
    Delete a template. Workouts started from it are kept.
    """
    store = get_user_store(data_dir, user_id)
    template_id = _owned_template_id(store, user_id, template_ref)

    if not force and not views.confirm_action(f"Delete template '{template_ref}'?"):
        views.print_info("Cancelled.")
        raise typer.Exit(0)

    try:
        template = store.delete_template(template_id)
    except KeyError as e:
        exit_with_error(e)

    views.print_success(f"Deleted template '{template.name}'")


@app.command("users")
def users(
    json_out: JsonOption = False,
) -> None:
    """
    List the configured users.
    """
    configured = load_app_config().get("users", [])
    if json_out:
        print(json.dumps(configured, indent=2, ensure_ascii=False))
        return
    views.print_users(configured)
