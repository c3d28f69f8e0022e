"""
Shared fixtures for StudyVerse tests.

Provides in-memory stores, a controllable clock, and a manual timer
factory so focus sessions can be ticked deterministically.
"""

from datetime import datetime

import pytest

from studyverse.classroom import LessonGraph, MemoryRecordStore, ProgressStore, ProgressTracker
from studyverse.schemas import Lesson, LessonStatus, User


class FakeClock:
    """Callable returning a settable 'now'."""

    def __init__(self, now: datetime):
        self.now = now

    def __call__(self) -> datetime:
        return self.now


class ManualTimer:
    """Timer handle that only fires when the test says so."""

    def __init__(self, interval: float, callback):
        self.interval = interval
        self.callback = callback
        self.cancelled = False

    @property
    def active(self) -> bool:
        return not self.cancelled

    def cancel(self):
        self.cancelled = True

    def fire(self, times: int = 1):
        for _ in range(times):
            if self.cancelled:
                return
            self.callback()


class ManualTimerFactory:
    """Records every timer a session creates."""

    def __init__(self):
        self.timers: list[ManualTimer] = []

    def __call__(self, interval, callback) -> ManualTimer:
        timer = ManualTimer(interval, callback)
        self.timers.append(timer)
        return timer

    @property
    def live(self) -> list[ManualTimer]:
        return [t for t in self.timers if not t.cancelled]

    @property
    def current(self) -> ManualTimer:
        return self.timers[-1]


def make_lessons(count: int, prefix: str = "l") -> list[Lesson]:
    """Fresh map: first lesson OPEN, the rest LOCKED."""
    return [
        Lesson(
            id=f"{prefix}{i + 1}",
            title=f"Level {i + 1}",
            description=f"Description {i + 1}",
            status=LessonStatus.OPEN if i == 0 else LessonStatus.LOCKED,
            order=i,
            subject="Biology",
        )
        for i in range(count)
    ]


@pytest.fixture
def store() -> ProgressStore:
    return ProgressStore(MemoryRecordStore())


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock(datetime(2024, 3, 10, 9, 0))


@pytest.fixture
def lessons(store) -> LessonGraph:
    return LessonGraph(store)


@pytest.fixture
def tracker(store, clock) -> ProgressTracker:
    return ProgressTracker(store, clock=clock)


@pytest.fixture
def user(store, clock) -> User:
    user = User(id="user-1", last_study_date=clock.now, daily_goal_hours=1.5)
    store.save_user(user)
    return user


@pytest.fixture
def timers() -> ManualTimerFactory:
    return ManualTimerFactory()
