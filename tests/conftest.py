"""Shared fixtures: isolated GEEKFIT_HOME and a controllable clock."""

from datetime import datetime, timedelta

import pytest


class FakeClock:
    """Callable clock whose time only moves when told to."""

    def __init__(self, start: datetime):
        self.now = start

    def __call__(self) -> datetime:
        return self.now

    def advance(self, **kwargs) -> None:
        self.now += timedelta(**kwargs)


@pytest.fixture(autouse=True)
def isolated_home(tmp_path, monkeypatch):
    """Point GEEKFIT_HOME at an empty directory so user files never leak in."""
    home = tmp_path / "geekfit-home"
    home.mkdir()
    monkeypatch.setenv("GEEKFIT_HOME", str(home))
    return home


@pytest.fixture
def clock():
    # Wednesday, inside default work hours
    return FakeClock(datetime(2026, 3, 4, 10, 30, 0))
