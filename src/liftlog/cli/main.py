"""
CLI entry point using Typer.

Provides commands for logging workouts and reading personal bests:
- start / add-exercise / log-sets / log-set / complete / resume: log a workout
- show-workouts / show-workout / delete-workout: browse workouts
- pb / history / exercise / exercises: personal bests and recommendations
- templates / template-create / template-update / template-delete
- users: configured users
"""

import typer

from ..core.engine.config_loader import configured_user_ids, load_app_config
from . import views
from .app import app

# Importing the command modules registers their commands on the shared app
from .commands.exercises import exercises, history, pb
from .commands.templates import templates
from .commands.workouts import resume, show_workouts, start


def _prompt_user() -> str:
    """Ask which configured user is training."""
    ids = configured_user_ids(load_app_config())
    default = ids[0] if ids else ""
    while True:
        raw = views.console.input(f"User ({', '.join(ids)}) [{default}]: ").strip() or default
        if raw in ids:
            return raw
        views.print_error(f"Choose one of: {', '.join(ids)}")


@app.callback(invoke_without_command=True)
def main_callback(ctx: typer.Context) -> None:
    """
    Workout log with personal bests. Run without a command for interactive mode.
    """
    if ctx.invoked_subcommand is not None:
        return

    # ── Interactive main menu ───────────────────────────────────────────────
    views.console.print()
    views.console.print("[bold cyan]liftlog[/bold cyan]: workout log and personal bests")
    views.console.print()

    user_id = _prompt_user()
    views.console.print()

    menu = {
        "1": ("resume",        "Show the workout in progress"),
        "2": ("start",         "Start a new workout"),
        "3": ("show-workouts", "List workouts"),
        "4": ("pb",            "Personal bests and next weights"),
        "5": ("history",       "Exercise history"),
        "6": ("exercises",     "Exercise catalog"),
        "t": ("templates",     "Workout templates"),
        "0": ("quit",          "Quit"),
    }

    for key, (_, desc) in menu.items():
        views.console.print(f"  \\[{key}] {desc}")

    views.console.print()
    choice = views.console.input("Choose [1]: ").strip() or "1"

    if choice == "0":
        raise typer.Exit(0)

    cmd_map = {k: v[0] for k, v in menu.items()}
    chosen = cmd_map.get(choice)

    if chosen is None:
        views.print_error(f"Unknown choice: {choice}")
        raise typer.Exit(1)

    if chosen == "resume":
        ctx.invoke(resume, user_id=user_id)
    elif chosen == "start":
        ctx.invoke(start, user_id=user_id)
    elif chosen == "show-workouts":
        ctx.invoke(show_workouts, user_id=user_id)
    elif chosen == "pb":
        ctx.invoke(pb, user_id=user_id)
    elif chosen == "history":
        exercise_id = views.console.input("Exercise id (Enter for all): ").strip() or None
        ctx.invoke(history, user_id=user_id, exercise_id=exercise_id)
    elif chosen == "exercises":
        ctx.invoke(exercises, user_id=user_id)
    elif chosen == "templates":
        ctx.invoke(templates, user_id=user_id)


if __name__ == "__main__":
    app()
