"""Planning commands: plan, reset-plan, swap, add-exercise, remove-exercise, set-targets."""

from datetime import date
from typing import Annotated, Optional

import typer

from ...core.equipment import exercise_id_for
from ...core.metrics import scheduled_day_for_date
from ...core.models import Exercise, ExerciseAlternative, LiftDay
from ...core.planner import build_sets
from .. import views
from ..app import DayArgument, ExerciseArgument, app, get_store, resolve_day, resolve_exercise


@app.command()
def plan(
    day: Annotated[
        Optional[str],
        typer.Option("--day", "-d", help="Show one day in detail (id or number)"),
    ] = None,
) -> None:
    """Show the current weekly plan, or one day in detail."""
    store = get_store()
    if day is not None:
        views.print_day(resolve_day(store, day), store.profile)
        return
    today = scheduled_day_for_date(store.current_plan, date.today())
    views.print_plan(store.current_plan, store.profile, today=today)


@app.command("reset-plan")
def reset_plan(
    force: Annotated[
        bool,
        typer.Option("--force", "-f", help="Reset without prompting"),
    ] = False,
) -> None:
    """
    Regenerate this week's plan from your profile.

    All progress logged in the current plan is discarded; history is kept.
    """
    store = get_store()
    if not force and not views.confirm_action("Discard this week's progress and regenerate the plan?"):
        views.print_info("Cancelled.")
        raise typer.Exit(0)
    store.reset_plan()
    views.print_success("Plan regenerated.")
    views.print_plan(store.current_plan, store.profile)


@app.command()
def swap(
    day: DayArgument,
    exercise: ExerciseArgument,
    choice: Annotated[
        str,
        typer.Argument(help="Alternative id or name; the original's name swaps back"),
    ],
) -> None:
    """Swap an exercise for one of its alternatives, or back to the original."""
    store = get_store()
    target_day = resolve_day(store, day)
    target = resolve_exercise(store, target_day, exercise)

    wanted = choice.strip().lower()
    if target.primary is not None and wanted in (target.primary.id.lower(), target.primary.name.lower()):
        candidate = target.primary
    else:
        candidate = next(
            (alt for alt in target.alternatives or [] if wanted in (alt.id.lower(), alt.name.lower())),
            None,
        )
    if candidate is None:
        # Free-form swap: no alternative listed for it
        candidate = ExerciseAlternative(id=exercise_id_for(choice), name=choice.strip())

    store.swap_exercise(target_day.id, target.id, candidate)
    updated = store.find_exercise(target_day.id, target.id)
    if updated.primary is None:
        views.print_success(f"Back to {updated.name}.")
    else:
        views.print_success(f"Swapped {updated.primary.name} → {updated.name}.")


@app.command("add-exercise")
def add_exercise(
    day: DayArgument,
    name: Annotated[str, typer.Argument(help="Exercise name")],
    sets: Annotated[int, typer.Option("--sets", "-s", help="Number of sets", min=1)] = 3,
    reps: Annotated[str, typer.Option("--reps", "-r", help="Target reps, e.g. 8-12 or 45s")] = "8-12",
    muscle_group: Annotated[
        Optional[str],
        typer.Option("--muscle-group", "-m", help="Muscle group label"),
    ] = None,
) -> None:
    """Append a custom exercise to a lift day."""
    store = get_store()
    target_day = resolve_day(store, day)
    if not isinstance(target_day, LiftDay):
        views.print_error(f"{target_day.title} is a {target_day.type} day; exercises go on lift days")
        raise typer.Exit(1)

    base_id = exercise_id_for(name, prefix=f"{target_day.id}-custom")
    taken = {e.id for e in target_day.exercises}
    exercise_id, n = base_id, 2
    while exercise_id in taken:
        exercise_id, n = f"{base_id}-{n}", n + 1

    store.add_exercise_to_day(
        target_day.id,
        Exercise(id=exercise_id, name=name, muscle_group=muscle_group, sets=build_sets(sets, reps)),
    )
    views.print_success(f"Added {name} ({exercise_id}) to {target_day.title}.")


@app.command("remove-exercise")
def remove_exercise(day: DayArgument, exercise: ExerciseArgument) -> None:
    """Remove an exercise from a lift day."""
    store = get_store()
    target_day = resolve_day(store, day)
    target = resolve_exercise(store, target_day, exercise)
    store.remove_exercise_from_day(target_day.id, target.id)
    views.print_success(f"Removed {target.name} from {target_day.title}.")


@app.command("set-targets")
def set_targets(
    day: DayArgument,
    exercise: ExerciseArgument,
    reps: Annotated[Optional[str], typer.Option("--reps", "-r", help="New target reps for every set")] = None,
    sets: Annotated[Optional[int], typer.Option("--sets", "-s", help="New number of sets", min=1)] = None,
) -> None:
    """Change an exercise's rep target and/or set count."""
    if reps is None and sets is None:
        views.print_error("Give --reps and/or --sets")
        raise typer.Exit(1)
    store = get_store()
    target_day = resolve_day(store, day)
    target = resolve_exercise(store, target_day, exercise)
    store.update_exercise_targets(target_day.id, target.id, target_reps=reps, set_count=sets)
    updated = store.find_exercise(target_day.id, target.id)
    views.print_success(
        f"{updated.name}: {len(updated.sets)} x {updated.sets[0].target_reps if updated.sets else '-'}"
    )
