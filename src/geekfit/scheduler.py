"""
Background exercise reminders.

ReminderScheduler runs a daemon thread that wakes up every half second,
and once the next reminder is due (a random 60-120 minutes by default)
picks a random exercise from the catalog and hands a Reminder to the
caller's callback. Reminders are only delivered on active weekdays within
work hours; outside that window the slot is skipped and a new interval is
drawn. The scheduler only uses the engine's read API.
"""

import logging
import random
import threading
import time
from collections.abc import Callable
from dataclasses import dataclass
from datetime import datetime, timedelta

from .core.engine import ProgressEngine
from .core.settings import ReminderSettings, Settings

logger = logging.getLogger(__name__)

POLL_SECONDS = 0.5
DISABLED_RECHECK_SECONDS = 60


@dataclass(frozen=True)
class Reminder:
    """A suggestion to do some reps now."""

    exercise_name: str
    reps: int
    streak: int


def _sunday_based_weekday(moment: datetime) -> int:
    # isoweekday: Monday=1 .. Sunday=7; settings use Sunday=0 .. Saturday=6
    return moment.isoweekday() % 7


def is_active_time(reminders: ReminderSettings, now: datetime) -> bool:
    """True on an active weekday between work_start_hour and work_end_hour."""
    if _sunday_based_weekday(now) not in reminders.active_days:
        return False
    return reminders.work_start_hour <= now.hour < reminders.work_end_hour


def time_until_active(reminders: ReminderSettings, now: datetime) -> timedelta | None:
    """
    Time until the next active window opens.

    Returns:
        None if *now* is already inside an active window, or if no weekday
        is active at all; otherwise the wait until the next work_start_hour
        on an active day.
    """
    if is_active_time(reminders, now) or not reminders.active_days:
        return None
    for offset in range(8):
        day = now.date() + timedelta(days=offset)
        opens = datetime.combine(day, datetime.min.time()).replace(
            hour=reminders.work_start_hour
        )
        if opens > now and _sunday_based_weekday(opens) in reminders.active_days:
            return opens - now
    return None


def format_duration(seconds: float | timedelta) -> str:
    """Format a duration as "1h 5m" or "12m"."""
    if isinstance(seconds, timedelta):
        seconds = seconds.total_seconds()
    total = int(seconds)
    hours, minutes = total // 3600, (total % 3600) // 60
    if hours > 0:
        return f"{hours}h {minutes}m"
    return f"{minutes}m"


class ReminderScheduler:
    """
    Periodic reminder thread.

    Args:
        settings: Settings (the reminders section is used)
        engine: Engine to pick exercises and the current streak from
        on_reminder: Called with a Reminder from the scheduler thread
        rng: Random source for intervals and exercise choice
        clock: Returns local time for the work-hours check
    """

    def __init__(
        self,
        settings: Settings,
        engine: ProgressEngine,
        on_reminder: Callable[[Reminder], None],
        rng: random.Random | None = None,
        clock: Callable[[], datetime] | None = None,
    ):
        self._reminders = settings.reminders
        self._engine = engine
        self._on_reminder = on_reminder
        self._rng = rng if rng is not None else random.Random()
        self._clock = clock if clock is not None else datetime.now

        self._enabled = threading.Event()
        if self._reminders.enabled:
            self._enabled.set()
        self._stopping = threading.Event()
        self._thread: threading.Thread | None = None

    # ── State ───────────────────────────────────────────────────────────────

    @property
    def is_running(self) -> bool:
        return self._thread is not None and self._thread.is_alive()

    @property
    def is_enabled(self) -> bool:
        return self._enabled.is_set()

    def set_enabled(self, value: bool) -> None:
        if value:
            self._enabled.set()
        else:
            self._enabled.clear()
        logger.info("Reminders %s", "enabled" if value else "disabled")

    def toggle_enabled(self) -> bool:
        """Flip the enabled flag and return the new value."""
        value = not self.is_enabled
        self.set_enabled(value)
        return value

    def next_interval_seconds(self) -> int:
        """Seconds until the next reminder slot."""
        r = self._reminders
        if r.use_random_intervals:
            minutes = self._rng.randint(r.min_interval_minutes, r.max_interval_minutes)
        else:
            minutes = r.min_interval_minutes
        return minutes * 60

    def is_active_time(self, now: datetime | None = None) -> bool:
        return is_active_time(self._reminders, now if now is not None else self._clock())

    # ── Reminders ───────────────────────────────────────────────────────────

    def pick_reminder(self) -> Reminder | None:
        """Choose a random exercise; None if the catalog is empty."""
        exercises = self._engine.list_exercises()
        if not exercises:
            return None
        exercise = self._rng.choice(exercises)
        return Reminder(
            exercise_name=exercise.name,
            reps=self._reminders.default_reps,
            streak=self._engine.get_aggregate_stats().current_streak,
        )

    def trigger_now(self) -> Reminder | None:
        """
        Deliver a reminder immediately, ignoring work hours.

        Returns:
            The delivered Reminder, or None when reminders are disabled or
            there is nothing to suggest
        """
        if not self.is_enabled:
            logger.warning("Cannot trigger reminder: reminders are disabled")
            return None
        reminder = self.pick_reminder()
        if reminder is None:
            logger.warning("No exercises available for a reminder")
            return None
        logger.info("Sending reminder: %s x %d", reminder.exercise_name, reminder.reps)
        self._on_reminder(reminder)
        return reminder

    # ── Thread ──────────────────────────────────────────────────────────────

    def start(self) -> None:
        if self.is_running:
            logger.warning("Reminder scheduler already running")
            return
        self._stopping.clear()
        self._thread = threading.Thread(
            target=self._run, name="geekfit-reminders", daemon=True
        )
        self._thread.start()
        logger.info("Reminder scheduler started")

    def stop(self, timeout: float | None = 5.0) -> None:
        self._stopping.set()
        thread, self._thread = self._thread, None
        if thread is not None:
            thread.join(timeout)
            logger.info("Reminder scheduler stopped")

    def _run(self) -> None:
        next_due = time.monotonic() + self.next_interval_seconds()
        while not self._stopping.wait(POLL_SECONDS):
            if time.monotonic() < next_due:
                continue
            if not self.is_enabled:
                next_due = time.monotonic() + DISABLED_RECHECK_SECONDS
                continue
            if self.is_active_time():
                try:
                    self.trigger_now()
                except Exception:
                    logger.exception("Reminder delivery failed")
            else:
                logger.debug("Outside active hours, skipping reminder")
            interval = self.next_interval_seconds()
            next_due = time.monotonic() + interval
            logger.debug("Next reminder in %s", format_duration(interval))
