"""Session commands: log-set, quick-log, complete, undo, notes, run, history."""

from typing import Annotated, Optional

import typer

from ...core.models import RunActual
from ...core.progression import last_logged_weight, last_week_best_for_exercise
from .. import views
from ..app import DayArgument, ExerciseArgument, app, get_store, resolve_day, resolve_exercise


def parse_duration(value: str) -> float:
    """
    Parse a run duration.

    Accepts plain seconds ("1500"), "mm:ss" or "hh:mm:ss".

    Raises:
        typer.BadParameter: If the value cannot be parsed
    """
    parts = value.strip().split(":")
    try:
        numbers = [float(p) for p in parts]
    except ValueError:
        raise typer.BadParameter(f"Invalid duration: {value!r}")
    if len(numbers) > 3 or any(n < 0 for n in numbers):
        raise typer.BadParameter(f"Invalid duration: {value!r}")
    seconds = 0.0
    for n in numbers:
        seconds = seconds * 60 + n
    return seconds


@app.command("log-set")
def log_set(
    day: DayArgument,
    exercise: ExerciseArgument,
    set_id: Annotated[str, typer.Argument(help="Set id (e.g. s-2) or 1-based position")],
    reps: Annotated[Optional[int], typer.Option("--reps", "-r", help="Reps performed", min=0)] = None,
    weight: Annotated[Optional[float], typer.Option("--weight", "-w", help="Weight used", min=0)] = None,
    done: Annotated[
        Optional[bool],
        typer.Option("--done/--not-done", help="Mark the set completed or not"),
    ] = None,
    perfect_form: Annotated[
        Optional[bool],
        typer.Option("--perfect-form/--no-perfect-form", help="Flag the set as perfect form"),
    ] = None,
) -> None:
    """Edit one set of the current plan."""
    store = get_store()
    target_day = resolve_day(store, day)
    target = resolve_exercise(store, target_day, exercise)

    target_set = next((s for s in target.sets if s.id == set_id), None)
    if target_set is None and set_id.isdigit() and 1 <= int(set_id) <= len(target.sets):
        target_set = target.sets[int(set_id) - 1]
    if target_set is None:
        views.print_error(f"No set '{set_id}' on {target.name}")
        raise typer.Exit(1)

    changes = {"actual_reps": reps, "weight": weight, "completed": done, "perfect_form": perfect_form}
    changes = {k: v for k, v in changes.items() if v is not None}
    if not changes:
        views.print_warning("Nothing to log.")
        raise typer.Exit(0)

    store.log_set(target_day.id, target.id, target_set.id, **changes)
    views.print_success(f"Updated {target.name} {target_set.id}.")


@app.command("quick-log")
def quick_log(
    day: DayArgument,
    exercise: ExerciseArgument,
    weight: Annotated[Optional[float], typer.Option("--weight", "-w", help="Weight used", min=0)] = None,
    reps: Annotated[Optional[int], typer.Option("--reps", "-r", help="Reps performed", min=0)] = None,
) -> None:
    """
    Log the next unfinished set of an exercise.

    Without --weight, the weight last logged for the exercise is suggested.
    """
    store = get_store()
    target_day = resolve_day(store, day)
    target = resolve_exercise(store, target_day, exercise)

    if weight is None:
        suggestion = last_logged_weight(store.set_logs, target.name)
        if suggestion is not None:
            views.print_info(f"Last logged weight for {target.name}: {suggestion:g} {views.weight_unit(store.profile)}")

    next_set = next((s for s in target.sets if not s.completed), None)
    store.log_workout_set(target_day.id, target.id, weight=weight, reps=reps)

    if next_set is None:
        views.print_warning(f"All sets of {target.name} are already done; recorded in the log only.")
        return
    done = sum(1 for s in store.find_exercise(target_day.id, target.id).sets if s.completed)
    views.print_success(f"{target.name}: {next_set.id} done ({done}/{len(target.sets)}).")


@app.command()
def complete(
    day: DayArgument,
    notes: Annotated[Optional[str], typer.Option("--notes", "-n", help="Session notes")] = None,
    distance: Annotated[
        Optional[float],
        typer.Option("--distance", "-d", help="Distance run", min=0),
    ] = None,
    time: Annotated[
        Optional[str],
        typer.Option("--time", "-t", help="Run time: seconds, mm:ss or hh:mm:ss"),
    ] = None,
    calves: Annotated[
        Optional[bool],
        typer.Option("--calves/--no-calves", help="Calves stretched"),
    ] = None,
) -> None:
    """Mark a day completed and record it in history."""
    store = get_store()
    target_day = resolve_day(store, day)

    run_actual = None
    if distance is not None or time is not None:
        run_actual = RunActual(
            distance=distance or 0.0,
            time_seconds=parse_duration(time) if time is not None else 0.0,
        )

    was_completed = target_day.completed
    completed_at = store.complete_workout(target_day.id, notes=notes, run_actual=run_actual, calves_stretched=calves)
    if was_completed:
        views.print_success(f"Updated {target_day.title} (completed {views.format_completed_at(completed_at)}).")
    else:
        views.print_success(f"Completed {target_day.title}!")


@app.command()
def undo(
    day: DayArgument,
    completed_at: Annotated[
        Optional[str],
        typer.Option("--date", help="dateCompleted of the history entry to remove (default: most recent)"),
    ] = None,
) -> None:
    """Reopen a completed day and remove its history entry."""
    store = get_store()
    target_day = resolve_day(store, day)
    before = len(store.history)
    store.undo_complete_workout(target_day.id, completed_at)
    removed = before - len(store.history)
    if removed:
        views.print_success(f"Reopened {target_day.title}; removed {removed} history entry.")
    else:
        views.print_warning(f"Reopened {target_day.title}; no matching history entry.")


@app.command()
def notes(
    day: DayArgument,
    text: Annotated[str, typer.Argument(help="Note text (empty string clears)")],
    exercise: Annotated[
        Optional[str],
        typer.Option("--exercise", "-e", help="Attach the note to an exercise instead"),
    ] = None,
) -> None:
    """Set session or exercise notes on the current plan."""
    store = get_store()
    target_day = resolve_day(store, day)
    value = text or None
    if exercise is not None:
        target = resolve_exercise(store, target_day, exercise)
        store.update_exercise_notes(target_day.id, target.id, value)
        views.print_success(f"Notes saved for {target.name}.")
    else:
        store.update_workout_notes(target_day.id, value)
        views.print_success(f"Notes saved for {target_day.title}.")


@app.command()
def run(
    day: DayArgument,
    distance: Annotated[
        Optional[float],
        typer.Option("--distance", "-d", help="Distance so far", min=0),
    ] = None,
    time: Annotated[
        Optional[str],
        typer.Option("--time", "-t", help="Time so far: seconds, mm:ss or hh:mm:ss"),
    ] = None,
) -> None:
    """Record an in-progress run; zero distance and time clears it."""
    store = get_store()
    target_day = resolve_day(store, day)
    draft: dict = {}
    if distance is not None:
        draft["distance"] = distance
    if time is not None:
        draft["time_seconds"] = parse_duration(time)
    if not draft:
        views.print_error("Give --distance and/or --time")
        raise typer.Exit(1)

    store.update_run_draft(target_day.id, **draft)
    run_actual = store.find_day(target_day.id).run_actual
    if run_actual is None:
        views.print_info(f"Run cleared for {target_day.title}.")
    else:
        views.print_success(
            f"Run: {run_actual.distance:g} {views.distance_unit(store.profile)}"
            f" in {views.format_duration(run_actual.time_seconds)}"
        )


@app.command()
def history(
    exercise: Annotated[
        Optional[str],
        typer.Option("--exercise", "-e", help="Show last week's best set for an exercise name"),
    ] = None,
) -> None:
    """Show completed workouts from the last 30 days."""
    store = get_store()
    data = store.get_user_data()
    views.print_history(data.history, store.profile)
    if exercise is not None:
        views.console.print()
        views.print_progression(
            exercise,
            last_week_best_for_exercise(data.history, exercise, store.profile.start_of_week),
            last_logged_weight(store.set_logs, exercise),
            store.profile,
        )
