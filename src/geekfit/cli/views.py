"""
CLI view formatters using Rich for pretty console output.

Handles table formatting and display of progress data.
"""

from rich.console import Console
from rich.table import Table

from ..core.models import (
    Achievement,
    AggregateStats,
    ExerciseDefinition,
    ExerciseLogEntry,
    LogResult,
    TodaySummary,
)
from ..core.streak import is_streak_milestone
from ..core.xp_curve import (
    format_xp,
    level_tier,
    title_for_total_level,
    xp_progress_percent,
    xp_to_next_level,
)
from ..scheduler import Reminder

console = Console()

_TIER_STYLES = {
    "bronze": "dark_orange3",
    "silver": "grey70",
    "gold": "gold1",
    "platinum": "cyan",
    "diamond": "bright_blue",
    "master": "magenta",
}


def level_bar(total_xp: int, width: int = 20) -> str:
    """Progress bar towards the next level, e.g. ``[=====     ]  50%``."""
    percent = xp_progress_percent(total_xp)
    filled = percent * width // 100
    return f"\\[[green]{'=' * filled}[/green]{' ' * (width - filled)}] {percent:>3}%"


def _level_cell(level: int) -> str:
    style = _TIER_STYLES[level_tier(level)]
    return f"[{style}]{level}[/{style}]"


# ---------------------------------------------------------------------------
# Logging
# ---------------------------------------------------------------------------


def print_log_result(result: LogResult) -> None:
    """
    Print the outcome of a logged exercise.

    Args:
        result: Committed transaction summary
    """
    console.print()
    console.print(
        f"[bold green]+  Logged[/bold green] [bold]{result.exercise_name}[/bold] x [cyan]{result.reps}[/cyan]"
    )
    console.print(f"   [yellow]+[/yellow] [bold yellow]{result.xp_earned}[/bold yellow] XP")

    if result.leveled_up:
        console.print()
        console.print(
            f"   [bold magenta]LEVEL UP![/bold magenta] {result.exercise_name} is now level "
            f"[bold magenta]{result.new_level}[/bold magenta]!"
        )

    if is_streak_milestone(result.streak):
        console.print(f"   [bold red]{result.streak}-day streak![/bold red] Keep it going.")

    for ach in result.newly_unlocked:
        console.print(
            f"   [bold yellow]Achievement unlocked:[/bold yellow] {ach.name} [dim]- {ach.description}[/dim]"
        )
    console.print()


def log_result_to_dict(result: LogResult) -> dict:
    return {
        "exercise_id": result.exercise_id,
        "exercise": result.exercise_name,
        "reps": result.reps,
        "xp_earned": result.xp_earned,
        "old_level": result.old_level,
        "new_level": result.new_level,
        "leveled_up": result.leveled_up,
        "total_xp": result.total_xp,
        "streak": result.streak,
        "unlocked": [ach.key.value for ach in result.newly_unlocked],
    }


# ---------------------------------------------------------------------------
# Stats and exercises
# ---------------------------------------------------------------------------


def print_stats(stats: AggregateStats) -> None:
    """Print overall progress: title, total level, XP and streaks."""
    console.print()
    console.print("[bold white on blue] GEEKFIT STATS [/bold white on blue]")
    console.print()
    console.print(f"  [dim]Title:[/dim]         [bold cyan]{title_for_total_level(stats.total_level)}[/bold cyan]")
    console.print(f"  [dim]Total Level:[/dim]   [bold]{stats.total_level}[/bold]")
    console.print(f"  [dim]Total XP:[/dim]      [bold yellow]{format_xp(stats.total_xp)}[/bold yellow]")
    console.print(f"  [dim]Exercises:[/dim]     {stats.exercise_count} ({stats.log_count} logged)")
    console.print()
    console.print(f"  [dim]Current Streak:[/dim] [bold red]{stats.current_streak}[/bold red] days")
    console.print(f"  [dim]Longest Streak:[/dim] {stats.longest_streak} days")
    if stats.last_active_date is not None:
        console.print(f"  [dim]Last Active:[/dim]    {stats.last_active_date.isoformat()}")
    console.print()


def format_exercise_table(exercises: list[ExerciseDefinition], title: str = "Exercises") -> Table:
    """
    Create a Rich table of exercises with level progress.

    Args:
        exercises: Exercises to display (already ordered)
        title: Table title

    Returns:
        Rich Table object
    """
    table = Table(title=title)

    table.add_column("#", justify="right", style="dim")
    table.add_column("Exercise", style="bold")
    table.add_column("XP/rep", justify="right", style="yellow")
    table.add_column("Level", justify="right")
    table.add_column("Total XP", justify="right")
    table.add_column("Progress")

    for ex in exercises:
        table.add_row(
            str(ex.exercise_id),
            ex.name,
            str(ex.xp_per_rep),
            _level_cell(ex.current_level),
            format_xp(ex.total_xp),
            level_bar(ex.total_xp),
        )

    return table


def print_exercises(exercises: list[ExerciseDefinition]) -> None:
    if not exercises:
        console.print("[yellow]No exercises in the catalog.[/yellow]")
        return
    console.print(format_exercise_table(exercises))


def exercise_to_row(ex: ExerciseDefinition) -> dict:
    return {
        "id": ex.exercise_id,
        "name": ex.name,
        "xp_per_rep": ex.xp_per_rep,
        "level": ex.current_level,
        "total_xp": ex.total_xp,
        "xp_to_next_level": xp_to_next_level(ex.total_xp),
    }


def print_search_results(fragment: str, exercises: list[ExerciseDefinition]) -> None:
    """Print exercises matching a search, with a ready-to-run log command."""
    console.print()
    if not exercises:
        console.print(f"[yellow]![/yellow] No exercises found matching '{fragment}'")
        console.print()
        return

    console.print(f"[green]{len(exercises)}[/green] exercises matching '[cyan]{fragment}[/cyan]':")
    console.print()
    for i, ex in enumerate(exercises, 1):
        console.print(
            f"  [dim]{i}.[/dim] [bold]{ex.name}[/bold] "
            f"(Lv[cyan]{ex.current_level}[/cyan], [yellow]{ex.xp_per_rep}[/yellow] XP/rep)"
        )
    console.print()
    console.print(f"Log with: [cyan]geekfit log \"{exercises[0].name}\" <reps>[/cyan]")
    console.print()


# ---------------------------------------------------------------------------
# History and today
# ---------------------------------------------------------------------------


def format_history_table(entries: list[ExerciseLogEntry], names: dict[int, str], days: int) -> Table:
    table = Table(title=f"History (last {days} days)")

    table.add_column("When", style="cyan")
    table.add_column("Exercise", style="bold")
    table.add_column("Reps", justify="right")
    table.add_column("XP", justify="right", style="yellow")

    for entry in entries:
        table.add_row(
            entry.logged_at.strftime("%Y-%m-%d %H:%M"),
            names.get(entry.exercise_id, f"#{entry.exercise_id}"),
            str(entry.reps),
            str(entry.xp_earned),
        )

    return table


def print_history(entries: list[ExerciseLogEntry], names: dict[int, str], days: int) -> None:
    """
    Print recent log entries, newest first.

    Args:
        entries: Log entries to display
        names: Exercise id -> name
        days: Window size used for the title
    """
    if not entries:
        console.print(f"[yellow]No exercises logged in the last {days} days.[/yellow]")
        return

    console.print(format_history_table(entries, names, days))
    total_xp = sum(e.xp_earned for e in entries)
    total_reps = sum(e.reps for e in entries)
    console.print(f"  [dim]Total:[/dim] {total_reps} reps, [yellow]{format_xp(total_xp)}[/yellow] XP")


def print_today(summary: TodaySummary, width: int = 30) -> None:
    """Print today's XP against the daily goal and per-exercise totals."""
    ratio = min(summary.total_xp / summary.daily_goal_xp, 1.0)
    filled = int(ratio * width)
    color = "green" if summary.goal_reached else "yellow"

    console.print()
    console.print("[bold black on cyan] TODAY'S PROGRESS [/bold black on cyan]")
    console.print()
    console.print(
        f"  \\[[{color}]{'=' * filled}[/{color}]{' ' * (width - filled)}] "
        f"[bold yellow]{format_xp(summary.total_xp)}[/bold yellow] / {format_xp(summary.daily_goal_xp)} XP"
    )
    if summary.goal_reached:
        console.print("  [bold green]***[/bold green] Daily goal achieved!")
    else:
        console.print(f"  [dim]->[/dim] {format_xp(summary.xp_remaining)} XP to go")

    console.print()
    if summary.exercises:
        console.print("  [dim]Today's activities:[/dim]")
        for item in summary.exercises:
            console.print(
                f"    [green]+[/green] {item.name} x [cyan]{item.reps}[/cyan] ([yellow]{item.xp}[/yellow] XP)"
            )
    else:
        console.print("  [yellow]![/yellow] No exercises logged today yet.")
    console.print()


# ---------------------------------------------------------------------------
# Achievements and reminders
# ---------------------------------------------------------------------------


def print_achievements(progress: list[tuple[Achievement, int, int]]) -> None:
    """
    Print all achievements with unlock state or progress.

    Args:
        progress: (achievement, current, target) triples
    """
    unlocked = sum(1 for ach, _, _ in progress if ach.is_unlocked)

    console.print()
    console.print("[bold white on magenta] ACHIEVEMENTS [/bold white on magenta]")
    console.print()
    console.print(f"  [bold]{unlocked}[/bold] / {len(progress)} unlocked")
    console.print()

    for ach, current, target in progress:
        if ach.is_unlocked:
            when = ach.unlocked_at.strftime("%Y-%m-%d")
            console.print(
                f"  [green]*[/green] [bold yellow]{ach.name}[/bold yellow] - {ach.description} [dim]({when})[/dim]"
            )
        else:
            console.print(
                f"  [dim]o {ach.name} - {ach.description} ({current}/{target})[/dim]"
            )
    console.print()


def print_reminder(reminder: Reminder) -> None:
    console.print()
    console.print(
        f"[bold cyan]Time to move![/bold cyan] Do [bold]{reminder.reps}[/bold] {reminder.exercise_name}."
    )
    if reminder.streak > 0:
        console.print(f"  [dim]Current streak: {reminder.streak} days[/dim]")
    console.print(f"  [dim]geekfit log \"{reminder.exercise_name}\" {reminder.reps}[/dim]")


# ---------------------------------------------------------------------------
# Messages
# ---------------------------------------------------------------------------


def print_success(message: str) -> None:
    """Print a success message."""
    console.print(f"[green]{message}[/green]")


def print_error(message: str) -> None:
    """Print an error message."""
    console.print(f"[red]Error: {message}[/red]")


def print_warning(message: str) -> None:
    """Print a warning message."""
    console.print(f"[yellow]Warning: {message}[/yellow]")


def print_info(message: str) -> None:
    """Print an info message."""
    console.print(f"[blue]{message}[/blue]")


def confirm_action(message: str) -> bool:
    """
    Prompt user for confirmation.

    Args:
        message: Confirmation message

    Returns:
        True if confirmed, False otherwise
    """
    response = console.input(f"{message} [y/N]: ")
    return response.lower() in ("y", "yes")
