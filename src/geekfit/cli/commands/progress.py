"""Progress commands: log, quick, today."""

import json
from typing import Annotated

import typer

from ...core.errors import GeekfitError, NotFoundError
from .. import views
from ..app import DataPathOption, JsonOption, app, get_engine


@app.command()
def log(
    exercise: Annotated[str, typer.Argument(help="Exercise id, name, or part of the name")],
    reps: Annotated[int, typer.Argument(help="Number of reps completed")],
    data_path: DataPathOption = None,
    json_out: JsonOption = False,
) -> None:
    """
    Log completed reps and earn XP.

      geekfit log pushups 20
      geekfit log "wall sit" 3
    """
    engine = get_engine(data_path)

    try:
        result = engine.log_exercise(exercise, reps)
    except NotFoundError as e:
        views.print_error(str(e))
        views.print_info("Use 'geekfit list' to see available exercises.")
        raise typer.Exit(1)
    except GeekfitError as e:
        views.print_error(str(e))
        raise typer.Exit(1)

    if json_out:
        print(json.dumps(views.log_result_to_dict(result), indent=2))
        return

    views.print_log_result(result)


@app.command()
def quick(
    search: Annotated[str, typer.Argument(help="Part of an exercise name")],
    data_path: DataPathOption = None,
    json_out: JsonOption = False,
) -> None:
    """
    Search exercises by name, highest level first.
    """
    engine = get_engine(data_path)
    matches = engine.search_exercises(search)

    if json_out:
        print(json.dumps([views.exercise_to_row(ex) for ex in matches], indent=2))
        return

    views.print_search_results(search, matches)


@app.command()
def today(
    data_path: DataPathOption = None,
    json_out: JsonOption = False,
) -> None:
    """
    Show today's XP against the daily goal.
    """
    engine = get_engine(data_path)
    summary = engine.get_today_summary()

    if json_out:
        print(json.dumps({
            "date": summary.day.isoformat(),
            "total_xp": summary.total_xp,
            "daily_goal_xp": summary.daily_goal_xp,
            "goal_reached": summary.goal_reached,
            "exercises": [
                {"name": item.name, "reps": item.reps, "xp": item.xp}
                for item in summary.exercises
            ],
        }, indent=2))
        return

    views.print_today(summary)
