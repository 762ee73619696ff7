"""Catalog and data management commands: add-exercise, delete-exercise, reset, export, import."""

import json
from pathlib import Path
from typing import Annotated, Optional

import typer

from ...core.errors import GeekfitError
from .. import views
from ..app import DataPathOption, JsonOption, app, get_engine


@app.command("add-exercise")
def add_exercise(
    name: Annotated[str, typer.Argument(help="Exercise name (must be unique)")],
    xp_per_rep: Annotated[
        int,
        typer.Option("--xp-per-rep", "-x", help="XP earned per rep"),
    ],
    icon: Annotated[
        Optional[str],
        typer.Option("--icon", "-i", help="Optional icon shown next to the name"),
    ] = None,
    data_path: DataPathOption = None,
    json_out: JsonOption = False,
) -> None:
    """
    Add a custom exercise to the catalog.
    """
    engine = get_engine(data_path)

    try:
        ex = engine.add_exercise(name, xp_per_rep, icon=icon)
    except GeekfitError as e:
        views.print_error(str(e))
        raise typer.Exit(1)

    if json_out:
        print(json.dumps(views.exercise_to_row(ex), indent=2))
        return

    views.print_success(f"Added exercise #{ex.exercise_id}: {ex.name} ({ex.xp_per_rep} XP/rep)")


@app.command("delete-exercise")
def delete_exercise(
    exercise: Annotated[str, typer.Argument(help="Exercise id or name")],
    force: Annotated[
        bool,
        typer.Option("--force", "-f", help="Skip confirmation prompt"),
    ] = False,
    data_path: DataPathOption = None,
) -> None:
    """
    Delete an exercise together with all of its logged reps.
    """
    engine = get_engine(data_path)

    try:
        target = engine.get_exercise(exercise)
    except GeekfitError as e:
        views.print_error(str(e))
        raise typer.Exit(1)

    views.console.print(
        f"Exercise to delete: [bold]{target.name}[/bold] (level {target.current_level}, {target.total_xp} XP)"
    )

    if not force and not views.confirm_action("Delete this exercise and its history?"):
        views.print_info("Cancelled.")
        raise typer.Exit(0)

    try:
        engine.delete_exercise(target.exercise_id)
    except GeekfitError as e:
        views.print_error(str(e))
        raise typer.Exit(1)

    views.print_success(f"Deleted exercise #{target.exercise_id}: {target.name}")


@app.command()
def reset(
    yes: Annotated[
        bool,
        typer.Option("--yes", "-y", help="Skip confirmation prompt"),
    ] = False,
    data_path: DataPathOption = None,
) -> None:
    """
    Reset all progress: logs, XP, streak and achievements.

    The previous data file is kept as progress.backup.json.
    """
    engine = get_engine(data_path)

    if not yes and not views.confirm_action("Reset ALL progress? This cannot be undone"):
        views.print_info("Cancelled.")
        raise typer.Exit(0)

    try:
        engine.reset_all()
    except GeekfitError as e:
        views.print_error(str(e))
        raise typer.Exit(1)

    views.print_success("All progress has been reset.")


@app.command("export")
def export_data(
    path: Annotated[Path, typer.Argument(help="File to write the snapshot to")],
    data_path: DataPathOption = None,
) -> None:
    """
    Export all progress to a JSON snapshot file.
    """
    engine = get_engine(data_path)

    try:
        target = engine.export_to(path)
    except GeekfitError as e:
        views.print_error(str(e))
        raise typer.Exit(1)

    views.print_success(f"Exported progress to {target}")


@app.command("import")
def import_data(
    path: Annotated[Path, typer.Argument(help="Snapshot file to import")],
    yes: Annotated[
        bool,
        typer.Option("--yes", "-y", help="Skip confirmation prompt"),
    ] = False,
    data_path: DataPathOption = None,
) -> None:
    """
    Replace all progress with a previously exported snapshot.

    The snapshot is fully validated first; nothing changes if it is rejected.
    """
    engine = get_engine(data_path)

    if not yes and not views.confirm_action("Replace ALL current progress with the snapshot?"):
        views.print_info("Cancelled.")
        raise typer.Exit(0)

    try:
        engine.import_from(path)
    except GeekfitError as e:
        views.print_error(f"Import rejected: {e}")
        raise typer.Exit(1)

    stats = engine.get_aggregate_stats()
    views.print_success(
        f"Imported {stats.exercise_count} exercises and {stats.log_count} log entries from {path}"
    )
