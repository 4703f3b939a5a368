"""
CLI entry point using Typer.

Provides commands for the weekly workout plan:
- onboard / profile / update-profile: set up and edit the profile
- plan / reset-plan: view or regenerate the weekly plan
- log-set / quick-log / complete / undo / notes / run: train and record
- swap / add-exercise / remove-exercise / set-targets: customize the plan
- history: completed workouts and last week's bests
- export / import / reset-data / sync: move data around
"""

import logging
from typing import Annotated

import typer

from . import views
from .app import app, get_store

# Importing the command modules registers them on the shared app
from .commands import data, planning, profile, sessions  # noqa: F401


@app.callback(invoke_without_command=True)
def main_callback(
    ctx: typer.Context,
    verbose: Annotated[
        bool,
        typer.Option("--verbose", "-v", help="Show debug logging"),
    ] = False,
) -> None:
    """
    Weekly lifting + running planner. Run without a command to see the plan.
    """
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
    )
    if ctx.invoked_subcommand is not None:
        return

    store = get_store()
    if not store.profile.onboarding_completed:
        views.print_info("Run 'iron-stride onboard' to set up your profile.")
    ctx.invoke(planning.plan)


if __name__ == "__main__":
    app()
