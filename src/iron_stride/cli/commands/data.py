"""Data commands: export, import, reset-data, sync."""

import asyncio
from pathlib import Path
from typing import Annotated, Optional

import typer

from ...core.settings import load_settings
from ...store import WorkoutStore
from ...sync.coordinator import SyncCoordinator
from ...sync.remote import Identity, RemoteClient
from .. import views
from ..app import app, get_store


@app.command()
def export(
    output: Annotated[
        Optional[Path],
        typer.Option("--output", "-o", help="Write to this file instead of stdout"),
    ] = None,
) -> None:
    """Export profile, history and plan as one JSON document."""
    store = get_store()
    text = store.export_data()
    if output is None:
        typer.echo(text)
        return
    output.write_text(text + "\n", encoding="utf-8")
    views.print_success(f"Exported to {output}")


@app.command("import")
def import_cmd(
    source: Annotated[Path, typer.Argument(help="JSON file produced by 'export'")],
    force: Annotated[
        bool,
        typer.Option("--force", "-f", help="Replace without prompting"),
    ] = False,
) -> None:
    """
    Replace profile, history and plan from an exported file.

    An invalid file changes nothing.
    """
    try:
        text = source.read_text(encoding="utf-8")
    except OSError as e:
        views.print_error(f"Cannot read {source}: {e}")
        raise typer.Exit(1)

    store = get_store()
    if not force and not views.confirm_action("Replace your current profile, history and plan?"):
        views.print_info("Cancelled.")
        raise typer.Exit(0)

    if not store.import_data(text):
        views.print_error(f"{source} is not a valid iron-stride export; nothing was changed")
        raise typer.Exit(1)
    views.print_success(f"Imported {len(store.history)} history entries and a {len(store.current_plan)}-day plan.")


@app.command("reset-data")
def reset_data(
    force: Annotated[
        bool,
        typer.Option("--force", "-f", help="Reset without prompting"),
    ] = False,
) -> None:
    """Erase everything: profile, history, plan and set log."""
    store = get_store()
    if not force and not views.confirm_action("Erase ALL data and start over?"):
        views.print_info("Cancelled.")
        raise typer.Exit(0)
    store.reset_user_data()
    views.print_success("All data reset.")


async def run_sync(coordinator: SyncCoordinator, identity: Identity) -> None:
    """One bootstrap cycle, then push anything still pending."""
    try:
        await coordinator.start(identity)
        await coordinator.flush()
    finally:
        coordinator.stop()


@app.command()
def sync() -> None:
    """
    Sync with the remote user-data API.

    Needs IRON_STRIDE_API_URL, IRON_STRIDE_TOKEN and IRON_STRIDE_USER (or
    api_url/token/user_id in config.yaml).  A remote document replaces local
    data; without one, local data is uploaded.
    """
    settings = load_settings()
    missing = [
        name
        for name, value in (
            ("IRON_STRIDE_API_URL", settings.api_url),
            ("IRON_STRIDE_TOKEN", settings.token),
            ("IRON_STRIDE_USER", settings.user_id),
        )
        if not value
    ]
    if missing:
        views.print_error(f"Sync is not configured; set {', '.join(missing)}")
        raise typer.Exit(1)

    store: WorkoutStore = get_store(rehydrate=False)
    client = RemoteClient(settings.api_url, timeout=settings.timeout_seconds)
    coordinator = SyncCoordinator(store, client)
    asyncio.run(run_sync(coordinator, Identity.with_token(settings.user_id, settings.token)))

    if coordinator.outcome == "adopted":
        views.print_success("Downloaded your data from the server.")
    elif coordinator.outcome == "seeded":
        views.print_success("Uploaded local data to the server.")
    else:
        views.print_warning("Could not reach the server; local data is unchanged. Run with --verbose for details.")
        raise typer.Exit(1)
