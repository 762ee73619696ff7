"""Shared Typer app object, shared option types, and engine utility."""

import logging
from pathlib import Path
from typing import Annotated, Optional

import typer

from ..core.engine import ProgressEngine
from ..core.errors import GeekfitError
from ..core.settings import Settings, load_settings
from ..io.progress_store import JsonProgressStore, get_default_data_path
from . import views

LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"

# Shared --data-path option type used across all commands
DataPathOption = Annotated[
    Optional[Path],
    typer.Option("--data-path", "-p", help="Path to progress JSON file"),
]

JsonOption = Annotated[
    bool,
    typer.Option("--json", "-j", help="Output as JSON for machine processing"),
]

app = typer.Typer(
    name="geekfit",
    help="Desk-friendly exercise tracker: earn XP, level up, keep your streak.",
    no_args_is_help=True,
)


def configure_logging(level: str) -> None:
    """Configure root logging once; later calls are no-ops."""
    logging.basicConfig(format=LOG_FORMAT, level=getattr(logging, level))


def get_settings() -> Settings:
    """Load settings, exiting with an error message if they are invalid."""
    try:
        settings = load_settings()
    except GeekfitError as e:
        views.print_error(f"Invalid settings: {e}")
        raise typer.Exit(1)
    configure_logging(settings.log_level)
    return settings


def get_engine(data_path: Path | None, settings: Settings | None = None) -> ProgressEngine:
    """
    Open the progress engine on the given file or the default location.

    Exits with code 1 if settings or the stored data cannot be loaded.
    """
    if settings is None:
        settings = get_settings()
    if data_path is None:
        data_path = get_default_data_path(settings.storage.data_dir)
    try:
        return ProgressEngine(JsonProgressStore(data_path), settings=settings)
    except GeekfitError as e:
        views.print_error(str(e))
        raise typer.Exit(1)
