"""Read-only commands: stats, list, history, achievements."""

import json
from typing import Annotated

import typer

from ...core.config import DEFAULT_HISTORY_DAYS
from ...core.errors import GeekfitError
from ...core.xp_curve import title_for_total_level
from ...io.serializers import format_timestamp
from .. import views
from ..app import DataPathOption, JsonOption, app, get_engine


@app.command()
def stats(
    data_path: DataPathOption = None,
    json_out: JsonOption = False,
) -> None:
    """
    Show total level, XP and streaks.
    """
    engine = get_engine(data_path)
    s = engine.get_aggregate_stats()

    if json_out:
        print(json.dumps({
            "title": title_for_total_level(s.total_level),
            "total_level": s.total_level,
            "total_xp": s.total_xp,
            "current_streak": s.current_streak,
            "longest_streak": s.longest_streak,
            "last_active_date": s.last_active_date.isoformat() if s.last_active_date else None,
            "exercise_count": s.exercise_count,
            "log_count": s.log_count,
        }, indent=2))
        return

    views.print_stats(s)


@app.command("list")
def list_exercises(
    data_path: DataPathOption = None,
    json_out: JsonOption = False,
) -> None:
    """
    List all exercises with their levels.
    """
    engine = get_engine(data_path)
    exercises = engine.list_exercises()

    if json_out:
        print(json.dumps([views.exercise_to_row(ex) for ex in exercises], indent=2))
        return

    views.print_exercises(exercises)


@app.command()
def history(
    days: Annotated[
        int,
        typer.Option("--days", "-d", help="Number of days to show"),
    ] = DEFAULT_HISTORY_DAYS,
    data_path: DataPathOption = None,
    json_out: JsonOption = False,
) -> None:
    """
    Show logged exercises from the last few days, newest first.
    """
    engine = get_engine(data_path)

    try:
        entries = engine.get_history(days)
    except GeekfitError as e:
        views.print_error(str(e))
        raise typer.Exit(1)

    names = engine.exercise_names()

    if json_out:
        print(json.dumps([
            {
                "logged_at": format_timestamp(e.logged_at),
                "exercise": names.get(e.exercise_id),
                "reps": e.reps,
                "xp": e.xp_earned,
            }
            for e in entries
        ], indent=2))
        return

    views.print_history(entries, names, days)


@app.command()
def achievements(
    data_path: DataPathOption = None,
    json_out: JsonOption = False,
) -> None:
    """
    Show achievements and progress towards the locked ones.
    """
    engine = get_engine(data_path)
    progress = engine.get_achievement_progress()

    if json_out:
        print(json.dumps([
            {
                "key": ach.key.value,
                "name": ach.name,
                "unlocked_at": format_timestamp(ach.unlocked_at) if ach.unlocked_at else None,
                "progress": current,
                "target": target,
            }
            for ach, current, target in progress
        ], indent=2))
        return

    views.print_achievements(progress)
