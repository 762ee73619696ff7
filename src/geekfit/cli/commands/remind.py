"""Reminder command: run the reminder scheduler in the foreground."""

import time
from datetime import datetime
from typing import Annotated

import typer

from ...scheduler import ReminderScheduler, format_duration, time_until_active
from .. import views
from ..app import DataPathOption, app, get_engine, get_settings


@app.command()
def remind(
    now: Annotated[
        bool,
        typer.Option("--now", "-n", help="Show one reminder immediately and exit"),
    ] = False,
    data_path: DataPathOption = None,
) -> None:
    """
    Suggest a random exercise every 60-120 minutes during work hours.

    Runs until interrupted with Ctrl+C. Intervals, work hours and active
    days come from the reminders section of settings.yaml.
    """
    settings = get_settings()
    engine = get_engine(data_path, settings)
    scheduler = ReminderScheduler(settings, engine, views.print_reminder)

    if now:
        scheduler.set_enabled(True)
        if scheduler.trigger_now() is None:
            views.print_warning("No exercises available for a reminder.")
            raise typer.Exit(1)
        return

    if not scheduler.is_enabled:
        views.print_warning("Reminders are disabled in settings (reminders.enabled).")
        raise typer.Exit(1)

    r = settings.reminders
    views.print_info(
        f"Reminders every {r.min_interval_minutes}-{r.max_interval_minutes} min, "
        f"{r.work_start_hour:02d}:00-{r.work_end_hour:02d}:00. Press Ctrl+C to stop."
    )
    wait = time_until_active(r, datetime.now())
    if wait is not None:
        views.print_info(f"Outside active hours; reminders resume in {format_duration(wait)}.")

    scheduler.start()
    try:
        while scheduler.is_running:
            time.sleep(1)
    except KeyboardInterrupt:
        views.console.print()
    finally:
        scheduler.stop()
    views.print_info("Reminders stopped.")
