"""Shared Typer app object, store construction, and id resolution helpers."""

from typing import Annotated

import typer

from ..core.models import Exercise, LiftDay, WorkoutDay
from ..core.settings import load_settings
from ..io.state_storage import LocalStateStorage
from ..store import WorkoutStore
from . import views

# Shared positional argument types
DayArgument = Annotated[str, typer.Argument(help="Day id (e.g. day-1) or day number")]
ExerciseArgument = Annotated[str, typer.Argument(help="Exercise id (e.g. d1-e2) or 1-based position")]

app = typer.Typer(
    name="iron-stride",
    help="Weekly lifting + running planner with set logging and history.",
    no_args_is_help=False,
    invoke_without_command=True,
)


def get_store(rehydrate: bool = True) -> WorkoutStore:
    """
    Build the store over the configured data directory.

    The local state file is namespaced to the configured user id.
    """
    settings = load_settings()
    storage = LocalStateStorage(settings.data_dir, active_identity=settings.user_id)
    store = WorkoutStore(storage=storage)
    if rehydrate:
        store.rehydrate()
    return store


def resolve_day(store: WorkoutStore, value: str) -> WorkoutDay:
    """Find a plan day by id or day number; exit with an error if missing."""
    day = store.find_day(value)
    if day is None and value.isdigit():
        day = next((d for d in store.current_plan if d.day_number == int(value)), None)
    if day is None:
        views.print_error(f"No day '{value}' in the current plan")
        raise typer.Exit(1)
    return day


def resolve_exercise(store: WorkoutStore, day: WorkoutDay, value: str) -> Exercise:
    """Find an exercise of a lift day by id or position; exit if missing."""
    if not isinstance(day, LiftDay):
        views.print_error(f"{day.title} is a {day.type} day and has no exercises")
        raise typer.Exit(1)
    exercise = store.find_exercise(day.id, value)
    if exercise is None and value.isdigit() and 1 <= int(value) <= len(day.exercises):
        exercise = day.exercises[int(value) - 1]
    if exercise is None:
        views.print_error(f"No exercise '{value}' on {day.title}")
        raise typer.Exit(1)
    return exercise


def parse_equipment(value: str | None) -> list[str] | None:
    """Comma-separated tags → list (None passes through)."""
    if value is None:
        return None
    return [tag.strip() for tag in value.split(",") if tag.strip()]
