"""
Integration tests for ProgressEngine: the Progress Transaction and the
read/maintenance API, using an in-memory store and a fake clock.
"""

import json
import threading
from datetime import date, datetime

import pytest

from geekfit.core.engine import ProgressEngine
from geekfit.core.errors import InvalidInputError, NotFoundError, PersistenceError
from geekfit.core.exercises import ExerciseSeed
from geekfit.core.models import AchievementKey
from geekfit.core.settings import AchievementSettings, GoalSettings, Settings
from geekfit.io.progress_store import InMemoryProgressStore
from geekfit.io.serializers import ValidationError


SEEDS = (
    ExerciseSeed("Pushups", 10),
    ExerciseSeed("Squats", 8),
    ExerciseSeed("Burpees", 15),
    ExerciseSeed("Lunges", 10),
    ExerciseSeed("Crunches", 6),
    ExerciseSeed("Wall Sit (10 sec)", 4),
)


class FailingStore(InMemoryProgressStore):
    """In-memory store whose writes can be made to fail."""

    def __init__(self):
        super().__init__()
        self.fail = False

    def save(self, state):
        if self.fail:
            raise PersistenceError("disk full")
        super().save(state)


def _engine(clock, store=None, **settings_kwargs) -> ProgressEngine:
    return ProgressEngine(
        store if store is not None else InMemoryProgressStore(),
        settings=Settings(**settings_kwargs),
        clock=clock,
        seeds=SEEDS,
    )


def _unlocked(engine) -> set[AchievementKey]:
    return {a.key for a in engine.get_achievements() if a.is_unlocked}


class TestStartup:
    def test_empty_store_is_seeded_and_saved(self, clock):
        store = InMemoryProgressStore()
        engine = _engine(clock, store)
        assert store.save_count == 1
        assert [ex.name for ex in engine.list_exercises()][0] == "Pushups"
        stats = engine.get_aggregate_stats()
        assert stats.exercise_count == len(SEEDS)
        assert stats.total_xp == 0
        assert stats.total_level == len(SEEDS)

    def test_existing_state_is_loaded(self, clock):
        store = InMemoryProgressStore()
        _engine(clock, store).log_exercise("Pushups", 5)
        reopened = _engine(clock, store)
        assert reopened.get_exercise("Pushups").total_xp == 50

    def test_default_catalog_without_explicit_seeds(self, clock):
        engine = ProgressEngine(InMemoryProgressStore(), clock=clock)
        assert engine.get_aggregate_stats().exercise_count == 28


class TestLogExercise:
    def test_first_pushups(self, clock):
        engine = _engine(clock)
        result = engine.log_exercise("pushups", 20)

        assert result.exercise_name == "Pushups"
        assert result.xp_earned == 200
        assert result.total_xp == 200
        assert (result.old_level, result.new_level) == (1, 3)
        assert result.leveled_up
        assert result.streak == 1
        assert [a.key for a in result.newly_unlocked] == [AchievementKey.FIRST_EXERCISE]
        assert result.newly_unlocked[0].unlocked_at == clock.now

        ex = engine.get_exercise("Pushups")
        assert ex.total_xp == 200
        assert ex.current_level == 3

    def test_log_entry_recorded(self, clock):
        engine = _engine(clock)
        engine.log_exercise("squats", 12)
        [entry] = engine.get_history(1)
        assert entry.reps == 12
        assert entry.xp_earned == 96
        assert entry.logged_at == clock.now
        assert engine.exercise_names()[entry.exercise_id] == "Squats"

    def test_first_exercise_only_once(self, clock):
        engine = _engine(clock)
        engine.log_exercise("Pushups", 1)
        assert engine.log_exercise("Pushups", 1).newly_unlocked == ()

    def test_resolves_by_fragment_and_id(self, clock):
        engine = _engine(clock)
        assert engine.log_exercise("wall", 3).exercise_name == "Wall Sit (10 sec)"
        burpees_id = engine.get_exercise("Burpees").exercise_id
        assert engine.log_exercise(burpees_id, 2).xp_earned == 30

    def test_digit_fragment_resolves_by_name(self, clock):
        engine = _engine(clock)
        assert engine.log_exercise("10", 1).exercise_name == "Wall Sit (10 sec)"

    @pytest.mark.parametrize("reps", [0, -3, True, 2.5])
    def test_invalid_reps_rejected_without_changes(self, clock, reps):
        store = InMemoryProgressStore()
        engine = _engine(clock, store)
        saves = store.save_count
        with pytest.raises(InvalidInputError):
            engine.log_exercise("Pushups", reps)
        assert store.save_count == saves
        assert engine.get_aggregate_stats().log_count == 0
        assert engine.get_aggregate_stats().current_streak == 0

    def test_unknown_exercise_rejected_without_changes(self, clock):
        engine = _engine(clock)
        with pytest.raises(NotFoundError):
            engine.log_exercise("yoga", 10)
        assert engine.get_aggregate_stats().log_count == 0
        assert _unlocked(engine) == set()

    def test_each_log_is_persisted(self, clock):
        store = InMemoryProgressStore()
        engine = _engine(clock, store)
        engine.log_exercise("Pushups", 3)
        assert store.load().logs[-1].reps == 3


class TestCentury:
    def test_ninety_nine_is_not_enough(self, clock):
        engine = _engine(clock)
        engine.log_exercise("Pushups", 99)
        assert AchievementKey.CENTURY not in _unlocked(engine)

    def test_hundredth_rep_same_day_unlocks(self, clock):
        engine = _engine(clock)
        engine.log_exercise("Pushups", 60)
        clock.advance(hours=2)
        engine.log_exercise("Pushups", 39)
        clock.advance(hours=1)
        result = engine.log_exercise("Pushups", 1)
        assert AchievementKey.CENTURY in {a.key for a in result.newly_unlocked}

    def test_reps_on_previous_day_do_not_count(self, clock):
        engine = _engine(clock)
        engine.log_exercise("Pushups", 60)
        clock.advance(days=1)
        engine.log_exercise("Pushups", 60)
        assert AchievementKey.CENTURY not in _unlocked(engine)

    def test_other_exercises_do_not_count(self, clock):
        engine = _engine(clock)
        engine.log_exercise("Squats", 150)
        assert AchievementKey.CENTURY not in _unlocked(engine)

    def test_flagship_is_configurable(self, clock):
        engine = _engine(clock, achievements=AchievementSettings(flagship_exercise="Squats"))
        engine.log_exercise("Squats", 100)
        assert AchievementKey.CENTURY in _unlocked(engine)


class TestStreaks:
    def test_week_streak_on_day_seven(self, clock):
        engine = _engine(clock)
        for day in range(1, 7):
            engine.log_exercise("Crunches", 5)
            assert engine.get_aggregate_stats().current_streak == day
            clock.advance(days=1)
        assert AchievementKey.WEEK_STREAK not in _unlocked(engine)

        result = engine.log_exercise("Crunches", 5)
        assert result.streak == 7
        assert AchievementKey.WEEK_STREAK in {a.key for a in result.newly_unlocked}

    def test_same_day_logs_do_not_extend_streak(self, clock):
        engine = _engine(clock)
        engine.log_exercise("Pushups", 1)
        clock.advance(hours=3)
        engine.log_exercise("Squats", 1)
        assert engine.get_aggregate_stats().current_streak == 1

    def test_gap_resets_streak_but_keeps_longest(self, clock):
        engine = _engine(clock)
        for _ in range(3):
            engine.log_exercise("Pushups", 1)
            clock.advance(days=1)
        clock.advance(days=2)
        engine.log_exercise("Pushups", 1)
        stats = engine.get_aggregate_stats()
        assert stats.current_streak == 1
        assert stats.longest_streak == 3

    def test_midnight_log_uses_single_timestamp(self, clock):
        clock.now = datetime(2026, 3, 4, 23, 59, 59)
        engine = _engine(clock)
        engine.log_exercise("Pushups", 1)
        assert engine.get_aggregate_stats().last_active_date == date(2026, 3, 4)


class TestOtherAchievements:
    def test_variety_after_five_distinct(self, clock):
        engine = _engine(clock)
        for name in ("Pushups", "Squats", "Burpees", "Lunges"):
            engine.log_exercise(name, 1)
        assert AchievementKey.VARIETY not in _unlocked(engine)
        result = engine.log_exercise("Crunches", 1)
        assert AchievementKey.VARIETY in {a.key for a in result.newly_unlocked}

    def test_skill_10_on_level_ten(self, clock):
        engine = _engine(clock)
        # 1154 XP reaches level 10; 116 burpees = 1740 XP
        result = engine.log_exercise("Burpees", 116)
        assert result.new_level >= 10
        assert AchievementKey.SKILL_10 in {a.key for a in result.newly_unlocked}
        assert AchievementKey.SKILL_25 not in _unlocked(engine)


class TestAtomicity:
    def test_failed_save_leaves_state_untouched(self, clock):
        store = FailingStore()
        engine = _engine(clock, store)
        engine.log_exercise("Pushups", 10)
        before = engine.export_snapshot()

        store.fail = True
        with pytest.raises(PersistenceError):
            engine.log_exercise("Pushups", 100)

        assert engine.export_snapshot() == before
        assert engine.get_exercise("Pushups").total_xp == 100
        assert AchievementKey.CENTURY not in _unlocked(engine)
        assert store.load().logs[-1].reps == 10

    def test_engine_usable_after_failure(self, clock):
        store = FailingStore()
        engine = _engine(clock, store)
        store.fail = True
        with pytest.raises(PersistenceError):
            engine.log_exercise("Pushups", 5)
        store.fail = False
        result = engine.log_exercise("Pushups", 5)
        assert result.total_xp == 50
        assert [a.key for a in result.newly_unlocked] == [AchievementKey.FIRST_EXERCISE]

    def test_concurrent_logs_are_serialized(self, clock):
        engine = _engine(clock)

        def worker():
            for _ in range(25):
                engine.log_exercise("Pushups", 1)

        threads = [threading.Thread(target=worker) for _ in range(4)]
        for t in threads:
            t.start()
        for t in threads:
            t.join()

        assert engine.get_exercise("Pushups").total_xp == 1000
        assert engine.get_aggregate_stats().log_count == 100
        first = [a for a in engine.get_achievements() if a.key == AchievementKey.FIRST_EXERCISE]
        assert first[0].is_unlocked

    def test_returned_objects_are_copies(self, clock):
        engine = _engine(clock)
        engine.get_exercise("Pushups").total_xp = 999
        engine.list_exercises()[0].total_xp = 999
        assert engine.get_exercise("Pushups").total_xp == 0


class TestReadApi:
    def test_history_window_and_order(self, clock):
        engine = _engine(clock)
        engine.log_exercise("Pushups", 1)
        clock.advance(days=3)
        engine.log_exercise("Squats", 2)
        clock.advance(hours=1)
        engine.log_exercise("Lunges", 3)

        names = engine.exercise_names()
        assert [names[e.exercise_id] for e in engine.get_history(7)] == ["Lunges", "Squats", "Pushups"]
        assert [names[e.exercise_id] for e in engine.get_history(1)] == ["Lunges", "Squats"]

    @pytest.mark.parametrize("days", [0, -1])
    def test_history_rejects_non_positive_days(self, clock, days):
        with pytest.raises(InvalidInputError):
            _engine(clock).get_history(days)

    def test_today_summary(self, clock):
        engine = _engine(clock, goals=GoalSettings(daily_goal_xp=300))
        engine.log_exercise("Squats", 10)
        engine.log_exercise("Pushups", 15)
        engine.log_exercise("Squats", 5)

        summary = engine.get_today_summary()
        assert summary.total_xp == 270
        assert summary.daily_goal_xp == 300
        assert not summary.goal_reached
        assert summary.xp_remaining == 30
        assert [(e.name, e.reps, e.xp) for e in summary.exercises] == [
            ("Pushups", 15, 150),
            ("Squats", 15, 120),
        ]

    def test_today_summary_ignores_yesterday(self, clock):
        engine = _engine(clock)
        engine.log_exercise("Pushups", 50)
        clock.advance(days=1)
        summary = engine.get_today_summary()
        assert summary.total_xp == 0
        assert summary.exercises == ()

    def test_achievement_progress(self, clock):
        engine = _engine(clock)
        engine.log_exercise("Pushups", 40)
        progress = {ach.key: (cur, target) for ach, cur, target in engine.get_achievement_progress()}
        assert progress[AchievementKey.CENTURY] == (40, 100)
        assert progress[AchievementKey.WEEK_STREAK] == (1, 7)
        assert progress[AchievementKey.VARIETY] == (1, 5)

    def test_search_exercises(self, clock):
        engine = _engine(clock)
        assert [ex.name for ex in engine.search_exercises("UNGE")] == ["Lunges"]
        assert engine.search_exercises("yoga") == []


class TestCatalogMaintenance:
    def test_add_exercise(self, clock):
        engine = _engine(clock)
        ex = engine.add_exercise("Desk Dips", 7)
        assert ex.exercise_id == len(SEEDS) + 1
        assert engine.log_exercise("desk dips", 3).xp_earned == 21

    def test_add_duplicate_rejected(self, clock):
        engine = _engine(clock)
        with pytest.raises(InvalidInputError):
            engine.add_exercise("squats", 5)

    def test_delete_removes_logs(self, clock):
        engine = _engine(clock)
        engine.log_exercise("Squats", 10)
        engine.log_exercise("Pushups", 10)
        removed = engine.delete_exercise("Squats")
        assert removed.name == "Squats"
        with pytest.raises(NotFoundError):
            engine.get_exercise("Squats")
        assert engine.get_aggregate_stats().log_count == 1
        # streak and achievements stay as they were
        assert engine.get_aggregate_stats().current_streak == 1
        assert AchievementKey.FIRST_EXERCISE in _unlocked(engine)

    def test_ids_are_not_reused(self, clock):
        engine = _engine(clock)
        first = engine.add_exercise("Desk Dips", 7)
        engine.delete_exercise(first.exercise_id)
        second = engine.add_exercise("Chair Squats", 6)
        assert second.exercise_id == first.exercise_id + 1


class TestResetAndSnapshots:
    def test_reset_all(self, clock):
        engine = _engine(clock)
        engine.add_exercise("Desk Dips", 7)
        engine.log_exercise("Pushups", 100)
        engine.reset_all()

        stats = engine.get_aggregate_stats()
        assert stats.total_xp == 0
        assert stats.log_count == 0
        assert stats.current_streak == 0
        assert stats.longest_streak == 0
        assert stats.exercise_count == len(SEEDS)
        assert _unlocked(engine) == set()

    def test_export_import_round_trip(self, clock):
        source = _engine(clock)
        source.log_exercise("Pushups", 100)
        clock.advance(days=1)
        source.log_exercise("Squats", 20)
        snapshot = source.export_snapshot()

        target = _engine(clock)
        target.import_snapshot(json.loads(json.dumps(snapshot)))
        assert target.get_aggregate_stats() == source.get_aggregate_stats()
        assert _unlocked(target) == _unlocked(source)
        # logging continues with fresh ids
        target.log_exercise("Lunges", 1)
        ids = [e.log_id for e in target.get_history(7)]
        assert len(set(ids)) == 3

    def test_import_rejects_dangling_log_reference(self, clock):
        source = _engine(clock)
        source.log_exercise("Pushups", 10)
        snapshot = source.export_snapshot()
        snapshot["exercise_logs"][0]["exercise_id"] = 999

        target = _engine(clock)
        target.log_exercise("Squats", 5)
        before = target.export_snapshot()
        with pytest.raises(ValidationError):
            target.import_snapshot(snapshot)
        assert target.export_snapshot() == before

    def test_import_rejects_xp_mismatch(self, clock):
        source = _engine(clock)
        source.log_exercise("Pushups", 10)
        snapshot = source.export_snapshot()
        snapshot["exercises"][0]["total_xp"] = 5000

        target = _engine(clock)
        with pytest.raises(InvalidInputError):
            target.import_snapshot(snapshot)
        assert target.get_aggregate_stats().total_xp == 0

    def test_import_rejects_zero_streak_with_activity_date(self, clock):
        source = _engine(clock)
        source.log_exercise("Pushups", 1)
        snapshot = source.export_snapshot()
        snapshot["streak"].update(current_streak=0, longest_streak=0)

        target = _engine(clock)
        with pytest.raises(InvalidInputError):
            target.import_snapshot(snapshot)
        assert target.log_exercise("Pushups", 1).streak == 1

    def test_import_rejects_garbage(self, clock):
        with pytest.raises(InvalidInputError):
            _engine(clock).import_snapshot(["not", "a", "snapshot"])

    def test_export_to_and_import_from_files(self, clock, tmp_path):
        source = _engine(clock)
        source.log_exercise("Burpees", 4)
        path = source.export_to(tmp_path / "out" / "snapshot.json")
        assert path.exists()

        target = _engine(clock)
        target.import_from(path)
        assert target.get_exercise("Burpees").total_xp == 60

    def test_import_from_invalid_json(self, clock, tmp_path):
        bad = tmp_path / "bad.json"
        bad.write_text("{not json", encoding="utf-8")
        with pytest.raises(ValidationError):
            _engine(clock).import_from(bad)

    def test_import_from_binary_file(self, clock, tmp_path):
        bad = tmp_path / "bad.json"
        bad.write_bytes(b"\xff\xfe")
        engine = _engine(clock)
        with pytest.raises(InvalidInputError):
            engine.import_from(bad)
        assert engine.get_aggregate_stats().log_count == 0

    def test_import_from_missing_file(self, clock, tmp_path):
        with pytest.raises(PersistenceError):
            _engine(clock).import_from(tmp_path / "missing.json")
