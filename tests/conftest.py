"""Shared fixtures: a controllable clock and an engine over a memory-only store."""

from datetime import datetime, timedelta

import pytest

from liftlog.core.session_engine import WorkoutEngine
from liftlog.io.store import WorkoutStore


class FakeClock:
    """Callable clock that only moves when told to."""

    def __init__(self, start: datetime = datetime(2026, 3, 2, 9, 0)):  # a Monday
        self.now = start

    def __call__(self) -> datetime:
        return self.now

    def advance(self, **kwargs) -> datetime:
        self.now += timedelta(**kwargs)
        return self.now


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def store():
    return WorkoutStore(None)


@pytest.fixture
def engine(store, clock):
    return WorkoutEngine(store, clock=clock)
