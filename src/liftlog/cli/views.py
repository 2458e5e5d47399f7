"""
CLI view formatters using Rich for pretty console output.

Handles table formatting and display of workouts, personal bests and
exercise history.
"""

from typing import Sequence

from rich.console import Console
from rich.table import Table

from ..core.exercises.base import ExerciseDefinition
from ..core.exercises.registry import find_exercise
from ..core.metrics import highest_kg, is_completed, reps_at_highest
from ..core.models import (
    ExerciseHistoryEntry,
    PersonalBest,
    Workout,
    WorkoutSet,
    WorkoutTemplate,
)

console = Console()


# =============================================================================
# VALUE FORMATTING
# =============================================================================


def format_kg(kg: float | None) -> str:
    """Weight without a trailing '.0': 50.0 -> '50', 52.5 -> '52.5'."""
    if kg is None:
        return "-"
    if float(kg).is_integer():
        return str(int(kg))
    return str(kg)


def format_reps(reps: Sequence[int]) -> str:
    """Rep counts joined with '×', e.g. [10, 12, 10] -> '10×12×10'."""
    return "×".join(str(r) for r in reps)


def format_pb(kg: float | None, reps: Sequence[int]) -> str:
    """
    One-line PB summary.

    Args:
        kg: Weight of the record
        reps: Reps of each set at that weight

    Returns:
        e.g. '50kg: 10×12×10', or '-' without a weight
    """
    if kg is None:
        return "-"
    if not reps:
        return f"{format_kg(kg)}kg"
    return f"{format_kg(kg)}kg: {format_reps(reps)}"


def format_set(workout_set: WorkoutSet) -> str:
    """Single set as 'KGxREPS', with '-' for missing values."""
    reps = "-" if workout_set.reps is None else str(workout_set.reps)
    return f"{format_kg(workout_set.kg)}x{reps}"


def format_sets(sets: Sequence[WorkoutSet]) -> str:
    """All sets of an exercise, comma separated."""
    return ", ".join(format_set(s) for s in sets)


def exercise_name(exercise_id: str, custom: Sequence[ExerciseDefinition] = ()) -> str:
    """Display name of an exercise, falling back to its id."""
    ex = find_exercise(exercise_id, custom)
    return ex.name if ex is not None else exercise_id


# =============================================================================
# WORKOUTS
# =============================================================================


def format_workouts_table(workouts: list[Workout]) -> Table:
    """
    Create a Rich table listing workouts.

    Args:
        workouts: Workouts, most recent first

    Returns:
        Rich Table object
    """
    table = Table(title="Workouts")

    table.add_column("#", justify="right", style="dim", width=3)
    table.add_column("Date", style="cyan")
    table.add_column("Name", style="bold")
    table.add_column("Exercises", justify="right")
    table.add_column("Status")
    table.add_column("Id", style="dim")

    for i, workout in enumerate(workouts, 1):
        status = "[green]completed[/green]" if workout.is_completed else "[yellow]in progress[/yellow]"
        table.add_row(
            str(i),
            workout.date,
            workout.workout_name,
            str(len(workout.exercises)),
            status,
            workout.id,
        )

    return table


def print_workouts(workouts: list[Workout]) -> None:
    """Print the workout list."""
    if not workouts:
        console.print("[yellow]No workouts recorded yet.[/yellow]")
        return
    console.print(format_workouts_table(workouts))


def print_workout(
    workout: Workout,
    custom: Sequence[ExerciseDefinition] = (),
    pbs: dict[str, PersonalBest] | None = None,
) -> None:
    """
    Print one workout with its exercises and sets.

    Args:
        workout: Workout to display
        custom: User exercises, for names
        pbs: Personal bests by exercise id; shows the next weight when given
    """
    status = "completed" if workout.is_completed else "in progress"
    console.print(
        f"[bold]{workout.workout_name}[/bold]  [cyan]{workout.date}[/cyan]  [dim]({status}, id {workout.id})[/dim]"
    )

    if not workout.exercises:
        console.print("[yellow]No exercises yet. Use 'add-exercise' to add one.[/yellow]")
        return

    table = Table()
    table.add_column("#", justify="right", style="dim", width=3)
    table.add_column("Exercise", style="bold")
    table.add_column("Sets")
    table.add_column("Top", justify="right")
    table.add_column("Done", justify="center")
    if pbs is not None:
        table.add_column("Next kg", justify="right", style="green")
    table.add_column("Notes", style="dim")

    for i, exercise in enumerate(workout.exercises, 1):
        top = highest_kg(exercise.sets)
        row = [
            str(i),
            exercise_name(exercise.exercise_id, custom),
            format_sets(exercise.sets),
            format_pb(top, reps_at_highest(exercise.sets)) if top > 0 else "-",
            "✓" if is_completed(exercise.sets) else "",
        ]
        if pbs is not None:
            pb = pbs.get(exercise.exercise_id)
            row.append(format_kg(pb.recommended_kg) if pb is not None else "-")
        row.append(exercise.notes)
        table.add_row(*row)

    console.print(table)


# =============================================================================
# PERSONAL BESTS AND HISTORY
# =============================================================================


def format_pb_table(
    pbs: dict[str, PersonalBest],
    custom: Sequence[ExerciseDefinition] = (),
) -> Table:
    """
    Create a Rich table of personal bests.

    Args:
        pbs: {exercise_id: PersonalBest}
        custom: User exercises, for names

    Returns:
        Rich Table object
    """
    table = Table(title="Personal Bests")

    table.add_column("Exercise", style="bold")
    table.add_column("Completed", style="green")
    table.add_column("Date", style="cyan")
    table.add_column("Working", style="magenta")
    table.add_column("Date", style="cyan")
    table.add_column("Next kg", justify="right", style="bold green")

    rows = sorted(pbs.values(), key=lambda pb: exercise_name(pb.exercise_id, custom).lower())
    for pb in rows:
        table.add_row(
            exercise_name(pb.exercise_id, custom),
            format_pb(pb.completed_kg, pb.completed_reps),
            pb.completed_date or "-",
            format_pb(pb.current_kg, pb.current_reps),
            pb.current_date,
            format_kg(pb.recommended_kg),
        )

    return table


def print_personal_bests(
    pbs: dict[str, PersonalBest],
    custom: Sequence[ExerciseDefinition] = (),
) -> None:
    """Print the personal-best table."""
    if not pbs:
        console.print("[yellow]No weighted sets recorded yet.[/yellow]")
        return
    console.print(format_pb_table(pbs, custom))


def format_history_table(
    entries: list[ExerciseHistoryEntry],
    title: str = "History",
) -> Table:
    """
    Create a Rich table of exercise history entries.

    The PB entry is highlighted.
    """
    table = Table(title=title)

    table.add_column("Date", style="cyan")
    table.add_column("Top", justify="right")
    table.add_column("Sets")
    table.add_column("Done", justify="center")
    table.add_column("PB", justify="center")

    for entry in entries:
        top = highest_kg(entry.sets)
        table.add_row(
            entry.date,
            format_pb(top, reps_at_highest(entry.sets)) if top > 0 else "-",
            format_sets(entry.sets),
            "✓" if entry.is_completed else "",
            "[bold yellow]PB[/bold yellow]" if entry.is_pb else "",
            style="bold" if entry.is_pb else None,
        )

    return table


def print_history(entries: list[ExerciseHistoryEntry], title: str = "History") -> None:
    """
    Print exercise history to console.

    Args:
        entries: Entries to display, already ordered
        title: Table title
    """
    if not entries:
        console.print("[yellow]No history for this exercise yet.[/yellow]")
        return
    console.print(format_history_table(entries, title))


def print_exercise_detail(
    exercise: ExerciseDefinition,
    pb: PersonalBest | None,
    entries: list[ExerciseHistoryEntry],
) -> None:
    """Print catalog info, PB summary and history of one exercise."""
    console.print(f"[bold]{exercise.name}[/bold]  [dim]({exercise.exercise_id})[/dim]")
    console.print(f"Categories: {', '.join(exercise.categories) or '-'}")
    console.print()

    if pb is None:
        console.print("[yellow]No weighted sets recorded yet.[/yellow]")
    else:
        console.print(f"Completed PB:   [green]{format_pb(pb.completed_kg, pb.completed_reps)}[/green]"
                      + (f"  [cyan]{pb.completed_date}[/cyan]" if pb.completed_date else ""))
        console.print(f"Working weight: [magenta]{format_pb(pb.current_kg, pb.current_reps)}[/magenta]"
                      f"  [cyan]{pb.current_date}[/cyan]")
        console.print(f"Next session:   [bold green]{format_kg(pb.recommended_kg)} kg[/bold green]")
    console.print()

    print_history(entries, title=f"{exercise.name} history")


# =============================================================================
# CATALOG, TEMPLATES, USERS
# =============================================================================


def format_catalog_table(
    exercises: list[ExerciseDefinition],
    pbs: dict[str, PersonalBest] | None = None,
) -> Table:
    """
    Create a Rich table of catalog exercises.

    Args:
        exercises: Exercises to list
        pbs: Personal bests; adds a next-weight column when given

    Returns:
        Rich Table object
    """
    table = Table(title="Exercises")

    table.add_column("Id", style="dim")
    table.add_column("Name", style="bold")
    table.add_column("Categories", style="magenta")
    if pbs is not None:
        table.add_column("Next kg", justify="right", style="green")

    for ex in exercises:
        name = f"{ex.name} [dim](custom)[/dim]" if ex.is_custom else ex.name
        row = [ex.exercise_id, name, ", ".join(ex.categories)]
        if pbs is not None:
            pb = pbs.get(ex.exercise_id)
            row.append(format_kg(pb.recommended_kg) if pb is not None else "")
        table.add_row(*row)

    return table


def print_templates(
    templates: list[WorkoutTemplate],
    custom: Sequence[ExerciseDefinition] = (),
) -> None:
    """Print the user's workout templates."""
    if not templates:
        console.print("[yellow]No templates yet.[/yellow]")
        return

    table = Table(title="Templates")
    table.add_column("Name", style="bold")
    table.add_column("Exercises")
    table.add_column("Updated", style="cyan")
    table.add_column("Id", style="dim")

    for t in templates:
        table.add_row(
            t.name,
            ", ".join(exercise_name(e, custom) for e in t.exercise_ids) or "-",
            t.updated_at[:10],
            t.id,
        )

    console.print(table)


def print_users(users: list[dict]) -> None:
    """Print configured users."""
    table = Table(title="Users")
    table.add_column("Id", style="cyan")
    table.add_column("Name", style="bold")
    for u in users:
        table.add_row(str(u.get("id", "")), str(u.get("name", "")))
    console.print(table)


# =============================================================================
# MESSAGES
# =============================================================================


def print_success(message: str) -> None:
    """Print a success message."""
    console.print(f"[green]{message}[/green]")


def print_error(message: str) -> None:
    """Print an error message."""
    console.print(f"[red]Error: {message}[/red]")


def print_warning(message: str) -> None:
    """Print a warning message."""
    console.print(f"[yellow]Warning: {message}[/yellow]")


def print_info(message: str) -> None:
    """Print an info message."""
    console.print(f"[blue]{message}[/blue]")


def confirm_action(message: str) -> bool:
    """
    Prompt user for confirmation.

    Args:
        message: Confirmation message

    Returns:
        True if confirmed, False otherwise
    """
    response = console.input(f"{message} [y/N]: ")
    return response.lower() in ("y", "yes")
