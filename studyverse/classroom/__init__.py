"""
StudyVerse Classroom - Runtime components for the lesson map and focus sessions.

This module provides:
- ProgressStore: Persist the user profile and lesson map
- LessonGraph: Lesson unlocking and completion
- ProgressTracker: XP, streaks and the profile
- FocusSession: Timed study sessions with completion rewards
- AppNavigator: Page selection and setup
"""

from .store import (
    ProgressStore,
    RecordStore,
    MemoryRecordStore,
    SQLiteRecordStore,
    USER_KEY,
    LESSONS_KEY,
)

from .lessons import LessonGraph

from .progress import ProgressTracker

from .timer import (
    RepeatingTimer,
    TimerHandle,
    TimerFactory,
)

from .session import (
    FocusSession,
    open_session,
    session_duration_seconds,
    format_time,
    XP_REWARD,
    FALLBACK_DURATION_SECONDS,
)

from .navigator import (
    AppNavigator,
    Page,
)

__all__ = [
    # Store
    "ProgressStore",
    "RecordStore",
    "MemoryRecordStore",
    "SQLiteRecordStore",
    "USER_KEY",
    "LESSONS_KEY",
    # Lessons
    "LessonGraph",
    # Progress
    "ProgressTracker",
    # Timer
    "RepeatingTimer",
    "TimerHandle",
    "TimerFactory",
    # Session
    "FocusSession",
    "open_session",
    "session_duration_seconds",
    "format_time",
    "XP_REWARD",
    "FALLBACK_DURATION_SECONDS",
    # Navigator
    "AppNavigator",
    "Page",
]
