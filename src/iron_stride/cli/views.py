"""
CLI view formatters using Rich for pretty console output.

Handles table formatting and display of profile, plan and history data.
"""

from rich.console import Console
from rich.table import Table

from ..core.equipment import describe_equipment
from ..core.metrics import (
    completed_sets_for_day,
    estimate_day_minutes,
    planned_sets_for_day,
    weekly_stats,
)
from ..core.models import CardioDay, Exercise, LiftDay, UserProfile, WorkoutDay
from ..core.progression import ExerciseWeekBest
from ..core.retention import parse_timestamp

console = Console()


def distance_unit(profile: UserProfile) -> str:
    return "mi" if profile.units == "imperial" else "km"


def weight_unit(profile: UserProfile) -> str:
    return "lb" if profile.units == "imperial" else "kg"


def format_completed_at(value: str | None) -> str:
    """Short local-agnostic rendering of an ISO completion stamp."""
    parsed = parse_timestamp(value)
    if parsed is None:
        return value or "-"
    return parsed.strftime("%Y-%m-%d %H:%M")


def format_duration(seconds: float) -> str:
    minutes, secs = divmod(int(round(seconds)), 60)
    return f"{minutes}:{secs:02d}"


def _day_status(day: WorkoutDay) -> str:
    if day.completed:
        return "[green]done[/green]"
    if isinstance(day, LiftDay) and completed_sets_for_day(day) > 0:
        return "[yellow]in progress[/yellow]"
    return "[dim]planned[/dim]"


def _day_summary(day: WorkoutDay, profile: UserProfile) -> str:
    if isinstance(day, CardioDay):
        if day.run_target is None:
            return "-"
        return f"{day.run_target.distance:g} {distance_unit(profile)}"
    return f"{completed_sets_for_day(day)}/{planned_sets_for_day(day)} sets"


def print_profile(profile: UserProfile) -> None:
    """
    Print the user profile.

    Args:
        profile: Profile to display
    """
    table = Table(show_header=False, box=None)
    table.add_column("Field", style="cyan")
    table.add_column("Value")

    table.add_row("Name", profile.name or "-")
    table.add_row("Goal", f"{profile.goal} ({profile.goal_type})")
    table.add_row("Units", profile.units)
    table.add_row("Height", f"{profile.height:g}")
    table.add_row("Weight", f"{profile.weight:g} {weight_unit(profile)}")
    table.add_row("Daily run target", f"{profile.daily_run_target:g} {distance_unit(profile)}")
    table.add_row("Nutrition", profile.nutrition_target or "-")
    table.add_row("Week starts on", str(profile.start_of_week))
    table.add_row("Equipment", describe_equipment(profile.equipment))
    table.add_row("Onboarded", "yes" if profile.onboarding_completed else "no")
    console.print(table)


def print_plan(plan: list[WorkoutDay], profile: UserProfile, today: WorkoutDay | None = None) -> None:
    """
    Print the weekly plan overview.

    Args:
        plan: Current plan
        profile: Profile (for units)
        today: Day scheduled for today, highlighted if given
    """
    table = Table(title="Weekly Plan", show_header=True, header_style="bold")
    table.add_column("#", justify="right")
    table.add_column("Id", style="cyan")
    table.add_column("Title")
    table.add_column("Type", style="magenta")
    table.add_column("Work", justify="right")
    table.add_column("Est. min", justify="right")
    table.add_column("Status")

    for day in plan:
        marker = " *" if today is not None and day.id == today.id else ""
        table.add_row(
            f"{day.day_number}{marker}",
            day.id,
            day.title,
            f"{day.type}/{day.day_type or '-'}",
            _day_summary(day, profile),
            str(estimate_day_minutes(day)),
            _day_status(day),
        )

    console.print(table)
    stats = weekly_stats(plan)
    console.print(
        f"[dim]{stats['completed_days']}/{len(plan)} days done, "
        f"{stats['completed_sets']}/{stats['planned_sets']} sets logged"
        f"{' (* = today)' if today is not None else ''}[/dim]"
    )


def _exercise_title(exercise: Exercise) -> str:
    title = f"[bold]{exercise.name}[/bold]"
    if exercise.muscle_group:
        title += f" [dim]({exercise.muscle_group})[/dim]"
    if exercise.primary is not None:
        reason = f": {exercise.swap_reason}" if exercise.swap_reason else ""
        title += f" [yellow]swapped from {exercise.primary.name}{reason}[/yellow]"
    return title


def print_day(day: WorkoutDay, profile: UserProfile) -> None:
    """
    Print one plan day with its exercises and sets.

    Args:
        day: Day to display
        profile: Profile (for units)
    """
    console.print()
    console.print(f"[bold cyan]Day {day.day_number}: {day.title}[/bold cyan] [dim]{day.id}[/dim]")
    if day.completed:
        console.print(f"[green]Completed {format_completed_at(day.date_completed)}[/green]")

    if isinstance(day, CardioDay):
        if day.run_target is not None:
            console.print(
                f"Target: {day.run_target.distance:g} {distance_unit(profile)}"
                f"  [dim]{day.run_target.description}[/dim]"
            )
    else:
        for exercise in day.exercises:
            console.print()
            console.print(f"{_exercise_title(exercise)}  [dim]{exercise.id}[/dim]")
            table = Table(show_header=True, header_style="dim")
            table.add_column("Set", style="cyan")
            table.add_column("Target", justify="right")
            table.add_column("Reps", justify="right")
            table.add_column(f"Weight ({weight_unit(profile)})", justify="right")
            table.add_column("Done")
            for s in exercise.sets:
                table.add_row(
                    s.id,
                    s.target_reps,
                    "-" if s.actual_reps is None else str(s.actual_reps),
                    "-" if s.weight is None else f"{s.weight:g}",
                    ("[green]✓[/green]" if s.completed else "") + (" [bold]PF[/bold]" if s.perfect_form else ""),
                )
            console.print(table)
            if exercise.notes:
                console.print(f"  [dim]Notes: {exercise.notes}[/dim]")
            if exercise.alternatives:
                names = ", ".join(f"{alt.name} [dim]({alt.id})[/dim]" for alt in exercise.alternatives)
                console.print(f"  Alternatives: {names}")

    if day.run_actual is not None:
        console.print(
            f"Run: {day.run_actual.distance:g} {distance_unit(profile)}"
            f" in {format_duration(day.run_actual.time_seconds)}"
        )
    if day.calves_stretched:
        console.print("Calves stretched")
    if day.notes:
        console.print(f"[dim]Notes: {day.notes}[/dim]")


def print_history(history: list[WorkoutDay], profile: UserProfile) -> None:
    """
    Print completed-workout history.

    Args:
        history: History entries in stored order
        profile: Profile (for units)
    """
    if not history:
        console.print("[yellow]No workouts completed yet.[/yellow]")
        return

    table = Table(title="History", show_header=True, header_style="bold")
    table.add_column("Completed", style="cyan")
    table.add_column("Day")
    table.add_column("Title")
    table.add_column("Work", justify="right")
    table.add_column("Notes")

    for day in history:
        work = _day_summary(day, profile)
        if day.run_actual is not None:
            work = f"{day.run_actual.distance:g} {distance_unit(profile)} / {format_duration(day.run_actual.time_seconds)}"
        table.add_row(
            format_completed_at(day.date_completed),
            day.id,
            day.title,
            work,
            day.notes or "",
        )
    console.print(table)


def print_progression(
    exercise_name: str,
    best: ExerciseWeekBest | None,
    last_weight: float | None,
    profile: UserProfile,
) -> None:
    """Print last week's best set and the last logged weight for an exercise."""
    unit = weight_unit(profile)
    console.print(f"[bold]{exercise_name}[/bold]")
    if best is not None:
        reps = "?" if best.reps is None else str(best.reps)
        console.print(f"  Last week best: {best.weight:g} {unit} x {reps} ({format_completed_at(best.date)})")
    else:
        console.print("  [dim]No weighted sets last week[/dim]")
    if last_weight is not None:
        console.print(f"  Last logged weight: {last_weight:g} {unit}")


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
