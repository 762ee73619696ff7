"""Tests for YAML settings and the exercise catalog loader."""

from pathlib import Path

import pytest

from geekfit.core.errors import InvalidInputError
from geekfit.core.exercises import get_default_seeds
from geekfit.core.exercises.loader import load_seeds_from_yaml, seed_from_dict
from geekfit.core.settings import (
    Settings,
    get_bundled_settings_path,
    geekfit_home,
    load_settings,
    settings_from_dict,
)


def _write(path: Path, text: str) -> Path:
    path.write_text(text, encoding="utf-8")
    return path


class TestBundledSettings:
    def test_bundled_file_exists(self):
        assert get_bundled_settings_path().is_file()

    def test_defaults(self):
        s = load_settings()
        assert s == Settings()
        assert s.reminders.min_interval_minutes == 60
        assert s.reminders.max_interval_minutes == 120
        assert s.reminders.active_days == (1, 2, 3, 4, 5)
        assert s.goals.daily_goal_xp == 500
        assert s.achievements.flagship_exercise == "Pushups"
        assert s.storage.data_dir is None
        assert s.log_level == "WARNING"

    def test_home_follows_environment(self, isolated_home):
        assert geekfit_home() == isolated_home


class TestUserOverrides:
    def test_user_file_is_deep_merged(self, isolated_home):
        _write(isolated_home / "settings.yaml", "goals:\n  daily_goal_xp: 800\nreminders:\n  work_end_hour: 18\n")
        s = load_settings()
        assert s.goals.daily_goal_xp == 800
        assert s.reminders.work_end_hour == 18
        assert s.reminders.work_start_hour == 9

    def test_explicit_user_path(self, tmp_path):
        user = _write(tmp_path / "custom.yaml", "achievements:\n  flagship_exercise: Squats\n")
        assert load_settings(user).achievements.flagship_exercise == "Squats"

    def test_data_dir_and_log_level(self, tmp_path):
        user = _write(tmp_path / "s.yaml", f"storage:\n  data_dir: {tmp_path}\nlogging:\n  level: debug\n")
        s = load_settings(user)
        assert s.storage.data_dir == tmp_path
        assert s.log_level == "DEBUG"

    def test_unreadable_user_file_warns_and_is_ignored(self, isolated_home):
        _write(isolated_home / "settings.yaml", "goals: [unclosed\n")
        with pytest.warns(UserWarning):
            s = load_settings()
        assert s.goals.daily_goal_xp == 500

    def test_invalid_value_raises(self, isolated_home):
        _write(isolated_home / "settings.yaml", "goals:\n  daily_goal_xp: 0\n")
        with pytest.raises(InvalidInputError, match="daily_goal_xp"):
            load_settings()


class TestSettingsValidation:
    def _base(self) -> dict:
        return {
            "reminders": {
                "enabled": True,
                "min_interval_minutes": 60,
                "max_interval_minutes": 120,
                "use_random_intervals": True,
                "work_start_hour": 9,
                "work_end_hour": 17,
                "active_days": [1, 2, 3, 4, 5],
                "default_reps": 10,
            },
            "goals": {"daily_goal_xp": 500},
            "achievements": {"flagship_exercise": "Pushups"},
        }

    def test_valid(self):
        assert settings_from_dict(self._base()) == Settings()

    @pytest.mark.parametrize(
        "section, key, value",
        [
            ("reminders", "max_interval_minutes", 30),
            ("reminders", "work_end_hour", 8),
            ("reminders", "active_days", [7]),
            ("reminders", "active_days", "weekdays"),
            ("reminders", "enabled", "yes"),
            ("reminders", "default_reps", 0),
            ("goals", "daily_goal_xp", "lots"),
            ("achievements", "flagship_exercise", ""),
        ],
    )
    def test_invalid(self, section, key, value):
        data = self._base()
        data[section][key] = value
        with pytest.raises(InvalidInputError):
            settings_from_dict(data)


class TestExerciseLoader:
    def test_bundled_catalog(self):
        seeds = load_seeds_from_yaml()
        assert len(seeds) == 28
        assert {s.name for s in seeds} >= {"Pushups", "Burpees", "Quad Stretch"}

    def test_user_file_overrides_and_extends(self, isolated_home):
        _write(
            isolated_home / "exercises.yaml",
            "exercises:\n"
            "  - {name: pushups, xp_per_rep: 12}\n"
            "  - {name: Desk Dips, xp_per_rep: 7}\n",
        )
        seeds = get_default_seeds()
        assert len(seeds) == 29
        assert seeds[0].name == "Pushups"
        assert seeds[0].xp_per_rep == 12
        assert seeds[-1].name == "Desk Dips"

    def test_bad_user_entry_is_skipped_with_warning(self, isolated_home):
        _write(
            isolated_home / "exercises.yaml",
            "exercises:\n"
            "  - {name: Desk Dips, xp_per_rep: -1}\n",
        )
        with pytest.warns(UserWarning):
            seeds = load_seeds_from_yaml()
        assert len(seeds) == 28

    def test_seed_from_dict_requires_fields(self):
        with pytest.raises(ValueError):
            seed_from_dict({"name": "Pushups"})
        with pytest.raises(ValueError):
            seed_from_dict({"name": "Pushups", "xp_per_rep": "ten"})
