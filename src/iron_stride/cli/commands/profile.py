"""Profile commands: onboard, profile, update-profile."""

from typing import Annotated, Optional

import typer

from ...core.equipment import EQUIPMENT_CATALOG
from ...core.models import UserProfile
from .. import views
from ..app import app, get_store, parse_equipment

EQUIPMENT_HELP = "Comma-separated equipment tags: " + ", ".join(EQUIPMENT_CATALOG)


@app.command()
def onboard(
    name: Annotated[str, typer.Option("--name", "-n", help="Your name")] = "",
    goal: Annotated[
        str,
        typer.Option("--goal", "-g", help="Free-text goal, e.g. 'Get stronger'"),
    ] = "Build Muscle & Endurance",
    goal_type: Annotated[
        Optional[str],
        typer.Option("--goal-type", help="strength|hypertrophy|endurance|fat_loss|balanced (default: from goal)"),
    ] = None,
    units: Annotated[str, typer.Option("--units", "-u", help="imperial or metric")] = "imperial",
    height: Annotated[float, typer.Option("--height", help="Height (in or cm)")] = 0.0,
    weight: Annotated[float, typer.Option("--weight", "-w", help="Bodyweight (lb or kg)")] = 0.0,
    run_target: Annotated[
        float,
        typer.Option("--run-target", "-r", help="Daily run baseline (mi or km)"),
    ] = 2.0,
    nutrition: Annotated[str, typer.Option("--nutrition", help="Nutrition target")] = "",
    start_of_week: Annotated[
        int,
        typer.Option("--start-of-week", help="0=Sunday .. 6=Saturday"),
    ] = 1,
    equipment: Annotated[
        Optional[str],
        typer.Option("--equipment", "-e", help=EQUIPMENT_HELP),
    ] = None,
    force: Annotated[
        bool,
        typer.Option("--force", "-f", help="Replace the current plan without prompting"),
    ] = False,
) -> None:
    """
    Set up your profile and generate a fresh weekly plan.

    Re-running onboarding replaces the current week's plan; history is kept.
    """
    store = get_store()

    if store.profile.onboarding_completed and not force:
        if not views.confirm_action("Already onboarded. Replace profile and regenerate the plan?"):
            views.print_info("Cancelled.")
            raise typer.Exit(0)

    try:
        profile = UserProfile(
            name=name,
            height=height,
            weight=weight,
            goal=goal,
            goal_type=goal_type,
            units=units,
            daily_run_target=run_target,
            nutrition_target=nutrition,
            start_of_week=start_of_week,
            equipment=parse_equipment(equipment) or ["bodyweight"],
        )
    except ValueError as e:
        views.print_error(str(e))
        raise typer.Exit(1)

    store.complete_onboarding(profile)
    views.print_success(f"Welcome{', ' + name if name else ''}! Your plan is ready.")
    views.print_plan(store.current_plan, store.profile)


@app.command("profile")
def show_profile() -> None:
    """Show the current profile."""
    store = get_store()
    views.print_profile(store.profile)


@app.command("update-profile")
def update_profile(
    name: Annotated[Optional[str], typer.Option("--name", "-n", help="Your name")] = None,
    goal: Annotated[
        Optional[str],
        typer.Option("--goal", "-g", help="Free-text goal (goal type is re-inferred unless --goal-type is given)"),
    ] = None,
    goal_type: Annotated[Optional[str], typer.Option("--goal-type", help="Goal type")] = None,
    units: Annotated[Optional[str], typer.Option("--units", "-u", help="imperial or metric")] = None,
    height: Annotated[Optional[float], typer.Option("--height", help="Height")] = None,
    weight: Annotated[Optional[float], typer.Option("--weight", "-w", help="Bodyweight")] = None,
    run_target: Annotated[
        Optional[float],
        typer.Option("--run-target", "-r", help="Daily run baseline"),
    ] = None,
    nutrition: Annotated[Optional[str], typer.Option("--nutrition", help="Nutrition target")] = None,
    start_of_week: Annotated[
        Optional[int],
        typer.Option("--start-of-week", help="0=Sunday .. 6=Saturday"),
    ] = None,
    equipment: Annotated[
        Optional[str],
        typer.Option("--equipment", "-e", help=EQUIPMENT_HELP),
    ] = None,
) -> None:
    """
    Change profile fields.

    The plan is not regenerated; run 'reset-plan' to rebuild it from the
    updated profile.
    """
    changes = {
        "name": name,
        "goal": goal,
        "goal_type": goal_type,
        "units": units,
        "height": height,
        "weight": weight,
        "daily_run_target": run_target,
        "nutrition_target": nutrition,
        "start_of_week": start_of_week,
        "equipment": parse_equipment(equipment),
    }
    changes = {k: v for k, v in changes.items() if v is not None}
    if goal is not None and goal_type is None:
        changes["goal_type"] = None

    if not changes:
        views.print_warning("Nothing to update.")
        raise typer.Exit(0)

    store = get_store()
    try:
        store.update_profile(**changes)
    except ValueError as e:
        views.print_error(str(e))
        raise typer.Exit(1)

    views.print_success("Profile updated.")
    views.print_profile(store.profile)
