"""
Progress engine: the one place where progress state changes.

ProgressEngine owns the committed ProgressState and the store it is
persisted to. Every write (logging an exercise, adding or deleting an
exercise, reset, import) runs as a transaction:

1. take the engine lock (one writer at a time),
2. deep-copy the committed state into a working copy,
3. apply all changes to the working copy,
4. save the working copy through the store,
5. publish it as the new committed state.

An exception in steps 3 or 4 discards the working copy, so the committed
state and the stored file stay exactly as they were. Readers never take
the lock: they read the committed state reference, which always points at
a fully applied state.
"""

import copy
import json
import logging
import threading
from collections.abc import Callable, Iterable, Iterator
from contextlib import contextmanager
from datetime import date, datetime, timedelta
from pathlib import Path
from typing import Any

from .achievements import (
    achievement_progress,
    build_context,
    default_achievements,
    evaluate_achievements,
)
from .catalog import ExerciseCatalog, seed_exercises
from .errors import InvalidInputError, PersistenceError
from .exercises import ExerciseSeed, get_default_seeds
from .models import (
    Achievement,
    AggregateStats,
    DailyExerciseTotal,
    ExerciseDefinition,
    ExerciseLogEntry,
    LogResult,
    ProgressState,
    TodaySummary,
)
from .settings import Settings
from .streak import advance_streak
from ..io.progress_store import ProgressStore
from ..io.serializers import ValidationError, dict_to_state, state_to_dict

logger = logging.getLogger(__name__)


class ProgressEngine:
    """
    Facade over the progress state for all front ends.

    Args:
        store: Persistence port (JsonProgressStore, InMemoryProgressStore, ...)
        settings: Settings; only goals and achievements sections are used here
        clock: Returns the current local time; injectable for tests
        seeds: Default catalog used for first start and reset
    """

    def __init__(
        self,
        store: ProgressStore,
        settings: Settings | None = None,
        clock: Callable[[], datetime] | None = None,
        seeds: Iterable[ExerciseSeed] | None = None,
    ):
        self._store = store
        self._settings = settings if settings is not None else Settings()
        self._clock = clock if clock is not None else datetime.now
        self._seeds = tuple(seeds) if seeds is not None else None
        self._lock = threading.Lock()

        state = store.load()
        if state is None:
            state = self._fresh_state(self._now())
            store.save(state)
            logger.info("Initialized new progress store with %d exercises", len(state.exercises))
        self._state = state

    # ── Internals ───────────────────────────────────────────────────────────

    def _now(self) -> datetime:
        return self._clock().replace(microsecond=0)

    def _fresh_state(self, now: datetime) -> ProgressState:
        seeds = self._seeds if self._seeds is not None else get_default_seeds()
        exercises = seed_exercises(seeds, created_at=now)
        return ProgressState(
            exercises=exercises,
            achievements=default_achievements(),
            next_exercise_id=len(exercises) + 1,
        )

    @contextmanager
    def _transaction(self) -> Iterator[ProgressState]:
        """Yield a working copy; persist and publish it if the block succeeds."""
        with self._lock:
            working = copy.deepcopy(self._state)
            yield working
            self._publish(working)

    def _replace_state(self, new_state: ProgressState) -> None:
        with self._lock:
            self._publish(new_state)

    def _publish(self, state: ProgressState) -> None:
        # Caller holds the lock.
        try:
            self._store.save(state)
        except PersistenceError:
            logger.warning("Transaction rolled back: progress store write failed")
            raise
        self._state = state

    @property
    def settings(self) -> Settings:
        return self._settings

    # ── Progress Transaction ────────────────────────────────────────────────

    def log_exercise(self, ref: str | int, reps: int) -> LogResult:
        """
        Log one exercise event and apply all its consequences atomically.

        Charges XP to the exercise, appends the log entry, advances the daily
        streak and unlocks any achievements that now hold. "Now" is read once
        at the start so a midnight crossing cannot split the update.

        Args:
            ref: Exercise id, name, or name fragment
            reps: Number of repetitions (must be positive)

        Returns:
            LogResult summary (xp earned, levels, streak, new achievements)

        Raises:
            NotFoundError: If ref does not resolve
            InvalidInputError: If reps is not a positive integer
            PersistenceError: If the store write fails (nothing is applied)
        """
        now = self._now()
        today = now.date()
        flagship = self._settings.achievements.flagship_exercise

        with self._transaction() as state:
            catalog = ExerciseCatalog(state.exercises)
            exercise = catalog.lookup(ref)
            if isinstance(reps, bool) or not isinstance(reps, int) or reps <= 0:
                raise InvalidInputError(f"reps must be a positive integer, got {reps!r}")

            xp_earned = exercise.xp_per_rep * reps
            state.logs.append(
                ExerciseLogEntry(
                    log_id=state.next_log_id,
                    exercise_id=exercise.exercise_id,
                    reps=reps,
                    xp_earned=xp_earned,
                    logged_at=now,
                )
            )
            state.next_log_id += 1
            old_level, new_level = catalog.apply_xp(exercise.exercise_id, xp_earned)

            state.streak = advance_streak(state.streak, today)

            ctx = build_context(state, new_level, today, flagship)
            unlocked = evaluate_achievements(state.achievements, ctx, now)

            result = LogResult(
                exercise_id=exercise.exercise_id,
                exercise_name=exercise.name,
                reps=reps,
                xp_earned=xp_earned,
                old_level=old_level,
                new_level=new_level,
                total_xp=exercise.total_xp,
                streak=state.streak.current_streak,
                newly_unlocked=tuple(copy.deepcopy(unlocked)),
            )

        logger.info(
            "Logged %s x %d (+%d XP, level %d, streak %d)",
            result.exercise_name, reps, xp_earned, new_level, result.streak,
        )
        return result

    # ── Catalog maintenance ─────────────────────────────────────────────────

    def add_exercise(self, name: str, xp_per_rep: int, icon: str | None = None) -> ExerciseDefinition:
        """
        Add a custom exercise with zero XP.

        Raises:
            InvalidInputError: If the name is empty/taken or xp_per_rep <= 0
            PersistenceError: If the store write fails
        """
        now = self._now()
        with self._transaction() as state:
            ex = ExerciseCatalog(state.exercises).add(
                state.next_exercise_id, name, xp_per_rep, icon=icon, created_at=now
            )
            state.next_exercise_id += 1
            added = copy.deepcopy(ex)
        logger.info("Added exercise %s (%d XP/rep)", added.name, added.xp_per_rep)
        return added

    def delete_exercise(self, ref: str | int) -> ExerciseDefinition:
        """
        Delete an exercise together with all of its log entries.

        Streak and achievements are left as they are.

        Raises:
            NotFoundError: If ref does not resolve
            PersistenceError: If the store write fails
        """
        with self._transaction() as state:
            catalog = ExerciseCatalog(state.exercises)
            removed = catalog.remove(catalog.lookup(ref).exercise_id)
            state.logs = [log for log in state.logs if log.exercise_id != removed.exercise_id]
        logger.info("Deleted exercise %s and its log entries", removed.name)
        return removed

    def reset_all(self) -> None:
        """
        Clear logs, XP, streak and achievement unlocks; reseed the default catalog.

        Raises:
            PersistenceError: If the store write fails (nothing is reset)
        """
        self._replace_state(self._fresh_state(self._now()))
        logger.info("Progress has been reset")

    # ── Snapshots ───────────────────────────────────────────────────────────

    def export_snapshot(self) -> dict[str, Any]:
        """Full state as a JSON-compatible dict, stamped with the export time."""
        return state_to_dict(self._state, exported_at=self._now())

    def import_snapshot(self, data: Any) -> None:
        """
        Replace all live state with a validated snapshot.

        The payload is fully validated before anything is replaced; the first
        violation rejects the whole import.

        Raises:
            InvalidInputError: If the snapshot fails validation
            PersistenceError: If the store write fails
        """
        new_state = dict_to_state(data)
        self._replace_state(new_state)
        logger.info(
            "Imported snapshot: %d exercises, %d log entries",
            len(new_state.exercises), len(new_state.logs),
        )

    def export_to(self, path: str | Path) -> Path:
        """
        Write an exported snapshot to a file.

        Raises:
            PersistenceError: If the file cannot be written
        """
        target = Path(path)
        text = json.dumps(self.export_snapshot(), indent=2)
        try:
            target.parent.mkdir(parents=True, exist_ok=True)
            target.write_text(text, encoding="utf-8")
        except OSError as e:
            raise PersistenceError(f"Failed to export to {target}: {e}") from e
        logger.info("Exported progress to %s", target)
        return target

    def import_from(self, path: str | Path) -> None:
        """
        Read and import a snapshot file.

        Raises:
            PersistenceError: If the file cannot be read
            InvalidInputError: If it is not UTF-8 JSON or fails validation
        """
        source = Path(path)
        try:
            text = source.read_text(encoding="utf-8")
        except UnicodeDecodeError as e:
            raise ValidationError(f"Import file {source} is not UTF-8 text: {e}") from e
        except OSError as e:
            raise PersistenceError(f"Failed to read import file {source}: {e}") from e
        try:
            data = json.loads(text)
        except json.JSONDecodeError as e:
            raise ValidationError(f"Invalid JSON in {source}: {e}") from e
        self.import_snapshot(data)

    # ── Read API ────────────────────────────────────────────────────────────

    def get_aggregate_stats(self) -> AggregateStats:
        """Totals across all exercises plus streak information."""
        state = self._state
        catalog = ExerciseCatalog(state.exercises)
        return AggregateStats(
            total_xp=catalog.total_xp,
            total_level=catalog.total_level,
            current_streak=state.streak.current_streak,
            longest_streak=state.streak.longest_streak,
            last_active_date=state.streak.last_active_date,
            exercise_count=len(catalog),
            log_count=len(state.logs),
        )

    def get_achievements(self) -> list[Achievement]:
        """All achievements in definition order (copies)."""
        return copy.deepcopy(self._state.achievements)

    def get_achievement_progress(self) -> list[tuple[Achievement, int, int]]:
        """
        Each achievement with (current, target) progress towards it.

        Skill rules are measured against the highest-level exercise.
        """
        state = self._state
        today = self._now().date()
        best_level = max((ex.current_level for ex in state.exercises), default=1)
        ctx = build_context(
            state, best_level, today, self._settings.achievements.flagship_exercise
        )
        return [
            (copy.deepcopy(ach), *achievement_progress(ach.key, ctx))
            for ach in state.achievements
        ]

    def list_exercises(self) -> list[ExerciseDefinition]:
        """All exercises, highest level first (copies)."""
        return copy.deepcopy(ExerciseCatalog(self._state.exercises).ranked())

    def search_exercises(self, fragment: str) -> list[ExerciseDefinition]:
        """Exercises whose name contains fragment, highest level first (copies)."""
        return copy.deepcopy(ExerciseCatalog(self._state.exercises).search(fragment))

    def get_exercise(self, ref: str | int) -> ExerciseDefinition:
        """
        Resolve a reference to an exercise (copy).

        Raises:
            NotFoundError: If ref does not resolve
        """
        return copy.deepcopy(ExerciseCatalog(self._state.exercises).lookup(ref))

    def get_history(self, days: int) -> list[ExerciseLogEntry]:
        """
        Log entries from the last *days* days, newest first.

        Raises:
            InvalidInputError: If days < 1
        """
        if isinstance(days, bool) or not isinstance(days, int) or days < 1:
            raise InvalidInputError(f"days must be a positive integer, got {days!r}")
        cutoff = self._now() - timedelta(days=days)
        recent = [log for log in self._state.logs if log.logged_at >= cutoff]
        recent.sort(key=lambda log: (log.logged_at, log.log_id), reverse=True)
        return recent

    def get_today_summary(self, day: date | None = None) -> TodaySummary:
        """XP logged on *day* (default today) against the daily goal."""
        state = self._state
        day = day if day is not None else self._now().date()
        names = {ex.exercise_id: ex.name for ex in state.exercises}

        reps: dict[int, int] = {}
        xp: dict[int, int] = {}
        for log in state.logs:
            if log.logged_at.date() != day:
                continue
            reps[log.exercise_id] = reps.get(log.exercise_id, 0) + log.reps
            xp[log.exercise_id] = xp.get(log.exercise_id, 0) + log.xp_earned

        totals = sorted(
            (
                DailyExerciseTotal(
                    exercise_id=ex_id,
                    name=names.get(ex_id, f"#{ex_id}"),
                    reps=reps[ex_id],
                    xp=xp[ex_id],
                )
                for ex_id in reps
            ),
            key=lambda t: t.xp,
            reverse=True,
        )
        return TodaySummary(
            day=day,
            total_xp=sum(xp.values()),
            daily_goal_xp=self._settings.goals.daily_goal_xp,
            exercises=tuple(totals),
        )

    def exercise_names(self) -> dict[int, str]:
        """Map of exercise id to name, for rendering log entries."""
        return {ex.exercise_id: ex.name for ex in self._state.exercises}
