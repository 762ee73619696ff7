"""
CLI entry point using Typer.

Provides commands for exercise progress tracking:
- log: Log reps and earn XP
- quick: Search exercises by name
- today: Today's XP against the daily goal
- stats / list / history / achievements: Progress views
- add-exercise / delete-exercise: Catalog maintenance
- reset / export / import: Data management
- remind: Foreground exercise reminders
"""

from typing import Annotated

import typer

from .app import app, configure_logging
from .commands import data, progress, remind, stats  # noqa: F401  (registers commands)


@app.callback()
def main_callback(
    verbose: Annotated[
        bool,
        typer.Option("--verbose", "-v", help="Show debug logging"),
    ] = False,
) -> None:
    """
    Geekfit: turn desk breaks into XP, levels, streaks and achievements.
    """
    if verbose:
        configure_logging("DEBUG")


if __name__ == "__main__":
    app()
