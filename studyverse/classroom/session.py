"""
FocusSession - Timed study session for one lesson.

Provides:
- Session length derived from the daily study goal
- Countdown state machine (ready / running / paused / finished / aborted)
- Exactly-once completion rewards: lesson done + next unlocked, then XP

The countdown is driven by an owned timer handle that is cancelled on
pause, finish, abort and close.
"""

import logging
import math
import threading
from typing import Callable, Optional

from studyverse.schemas import SessionResult, SessionState, TERMINAL_STATES
from studyverse.errors import InvalidTransitionError, NoProfileError, NotFoundError

from .lessons import LessonGraph
from .progress import ProgressTracker
from .timer import TICK_SECONDS, RepeatingTimer, TimerFactory, TimerHandle


logger = logging.getLogger(__name__)

XP_REWARD = 50
FALLBACK_DURATION_SECONDS = 25 * 60
SESSIONS_PER_DAY = 3
MIN_SESSION_MINUTES = 10
MAX_SESSION_MINUTES = 60
URGENT_SECONDS = 60


def session_duration_seconds(daily_goal_hours: Optional[float]) -> int:
    """
    Split the daily goal into three sessions of 10 to 60 minutes.

    Args:
        daily_goal_hours: User's daily goal, or None without a profile

    Returns:
        Session length in seconds (25 minutes without a profile)
    """
    if daily_goal_hours is None:
        return FALLBACK_DURATION_SECONDS

    daily_minutes = daily_goal_hours * 60
    minutes = math.floor(daily_minutes / SESSIONS_PER_DAY)
    minutes = max(MIN_SESSION_MINUTES, min(MAX_SESSION_MINUTES, minutes))
    return minutes * 60


def format_time(seconds: int) -> str:
    """Format seconds as MM:SS."""
    minutes, secs = divmod(max(0, int(seconds)), 60)
    return f"{minutes:02d}:{secs:02d}"


class FocusSession:
    """
    Countdown for one lesson.

    READY --start--> RUNNING --pause--> PAUSED --resume--> RUNNING
    RUNNING --tick--> RUNNING, or FINISHED when the last second elapses
    READY | RUNNING | PAUSED --finish--> FINISHED
    READY | RUNNING | PAUSED --abort--> ABORTED

    Timer callbacks and public calls are serialized by one lock, so a
    session is rewarded at most once however FINISHED is reached.
    """

    def __init__(
        self,
        lesson_id: str,
        lessons: LessonGraph,
        tracker: ProgressTracker,
        duration_seconds: int,
        timer_factory: Optional[TimerFactory] = None,
        on_finished: Optional[Callable[[SessionResult], None]] = None,
        xp_reward: int = XP_REWARD,
    ):
        """
        Args:
            lesson_id: Lesson studied in this session
            lessons: LessonGraph updated on completion
            tracker: ProgressTracker credited on completion
            duration_seconds: Countdown length
            timer_factory: Creates the tick source (default: RepeatingTimer)
            on_finished: Called with the result once the session finishes
            xp_reward: XP granted on completion
        """
        if duration_seconds < 1:
            raise ValueError(f"duration_seconds must be >= 1, got {duration_seconds}")

        self.lesson_id = lesson_id
        self.lessons = lessons
        self.tracker = tracker
        self.initial_duration_seconds = int(duration_seconds)
        self.remaining_seconds = int(duration_seconds)
        self.state = SessionState.READY
        self.result: Optional[SessionResult] = None
        self.xp_reward = xp_reward
        self.on_finished = on_finished

        self._timer_factory = timer_factory or RepeatingTimer.start_new
        self._timer: Optional[TimerHandle] = None
        self._generation = 0
        self._lock = threading.RLock()

    def __enter__(self) -> "FocusSession":
        return self

    def __exit__(self, exc_type, exc, tb):
        self.close()

    # -------------------------------------------------------------------------
    # Derived state
    # -------------------------------------------------------------------------

    @property
    def is_active(self) -> bool:
        return self.state == SessionState.RUNNING

    @property
    def is_terminal(self) -> bool:
        return self.state in TERMINAL_STATES

    @property
    def progress_percent(self) -> float:
        elapsed = self.initial_duration_seconds - self.remaining_seconds
        return elapsed / self.initial_duration_seconds * 100

    @property
    def is_urgent(self) -> bool:
        return self.is_active and self.remaining_seconds < URGENT_SECONDS

    @property
    def time_left(self) -> str:
        return format_time(self.remaining_seconds)

    # -------------------------------------------------------------------------
    # Transitions
    # -------------------------------------------------------------------------

    def start(self):
        """Begin the countdown."""
        with self._lock:
            self._require(SessionState.READY, "start")
            self.state = SessionState.RUNNING
            self._start_timer()
        logger.info(f"Focus session started for {self.lesson_id} ({self.time_left})")

    def pause(self):
        """Stop ticking, keeping the remaining time."""
        with self._lock:
            self._require(SessionState.RUNNING, "pause")
            self.state = SessionState.PAUSED
            handle = self._detach_timer()
        self._cancel(handle)
        logger.debug(f"Focus session paused at {self.time_left}")

    def resume(self):
        """Continue a paused countdown."""
        with self._lock:
            self._require(SessionState.PAUSED, "resume")
            self.state = SessionState.RUNNING
            self._start_timer()
        logger.debug(f"Focus session resumed at {self.time_left}")

    def toggle(self):
        """
        Start, pause or resume depending on the current state.

        The state is read and changed under one lock hold, so a countdown
        expiring at the same moment cannot slip in between.
        """
        handle = None
        with self._lock:
            state = self.state
            if state == SessionState.READY:
                self.start()
            elif state == SessionState.RUNNING:
                self.state = SessionState.PAUSED
                handle = self._detach_timer()
            elif state == SessionState.PAUSED:
                self.resume()
            else:
                raise InvalidTransitionError(f"Cannot toggle a {state.value} session")
        self._cancel(handle)
        if handle is not None:
            logger.debug(f"Focus session paused at {self.time_left}")

    def tick(self):
        """
        Advance the countdown by one second.

        The last tick finishes the session and applies rewards.

        Raises:
            InvalidTransitionError: If the session is not running
        """
        with self._lock:
            self._require(SessionState.RUNNING, "tick")
            finished = self._advance()
        if finished:
            self._after_finish(finished)

    def finish(self) -> Optional[SessionResult]:
        """
        Finish now, rewarding the session.

        Finishing a session that already ended returns the earlier result
        (None for an aborted session) without rewarding again.
        """
        with self._lock:
            if self.is_terminal:
                return self.result
            finished = self._finish()
        self._after_finish(finished)
        return self.result

    def abort(self):
        """Discard the session without any reward."""
        with self._lock:
            if self.is_terminal:
                return
            self.state = SessionState.ABORTED
            handle = self._detach_timer()
        self._cancel(handle)
        logger.info(f"Focus session aborted for {self.lesson_id} at {self.time_left}")

    def close(self):
        """Tear down the session; aborts it unless it already ended."""
        self.abort()
        with self._lock:
            handle = self._detach_timer()
        self._cancel(handle)

    # -------------------------------------------------------------------------
    # Internals (call with the lock held unless noted)
    # -------------------------------------------------------------------------

    def _require(self, expected: SessionState, action: str):
        if self.state != expected:
            raise InvalidTransitionError(
                f"Cannot {action} a {self.state.value} session (expected {expected.value})"
            )

    def _start_timer(self):
        stale = self._detach_timer()
        self._cancel(stale)
        self._generation += 1
        generation = self._generation
        self._timer = self._timer_factory(TICK_SECONDS, lambda: self._on_timer(generation))

    def _detach_timer(self) -> Optional[TimerHandle]:
        """Invalidate the live timer and hand it back for cancelling."""
        handle = self._timer
        self._timer = None
        self._generation += 1
        return handle

    @staticmethod
    def _cancel(handle: Optional[TimerHandle]):
        if handle is not None:
            handle.cancel()

    def _on_timer(self, generation: int):
        """Timer callback; runs on the timer's thread without the lock."""
        with self._lock:
            if generation != self._generation or self.state != SessionState.RUNNING:
                return
            finished = self._advance()
        if finished:
            self._after_finish(finished)

    def _advance(self) -> Optional[tuple]:
        if self.remaining_seconds <= 1:
            self.remaining_seconds = 0
            return self._finish()
        self.remaining_seconds -= 1
        return None

    def _finish(self) -> tuple:
        self.state = SessionState.FINISHED
        handle = self._detach_timer()
        try:
            self.result = self._apply_rewards()
        except Exception:
            # Session stays FINISHED with no result; it is never rewarded twice.
            self._cancel(handle)
            raise
        return (handle, self.result)

    def _after_finish(self, finished: tuple):
        """Cancel the old timer and notify listeners; runs without the lock."""
        handle, result = finished
        self._cancel(handle)
        if self.on_finished is not None:
            self.on_finished(result)

    def _apply_rewards(self) -> SessionResult:
        next_lesson_id = None
        try:
            self.lessons.complete_lesson(self.lesson_id)
            next_lesson_id = self.lessons.get_next_lesson_id(self.lesson_id)
        except NotFoundError:
            logger.error(f"Session finished for unknown lesson {self.lesson_id}; lesson map unchanged")

        user = None
        xp_awarded = 0
        try:
            user = self.tracker.add_xp(self.xp_reward)
            xp_awarded = self.xp_reward
        except NoProfileError:
            logger.warning("Session finished without a profile; no XP awarded")

        logger.info(f"Focus session finished for {self.lesson_id} (+{xp_awarded} XP)")
        return SessionResult(
            lesson_id=self.lesson_id,
            xp_awarded=xp_awarded,
            next_lesson_id=next_lesson_id,
            user=user,
        )


def open_session(
    lesson_id: str,
    lessons: LessonGraph,
    tracker: ProgressTracker,
    timer_factory: Optional[TimerFactory] = None,
    on_finished: Optional[Callable[[SessionResult], None]] = None,
) -> FocusSession:
    """
    Create a session for a lesson, sized from the user's daily goal.

    Raises:
        NotFoundError: If the lesson is not in the collection
    """
    if lessons.get_lesson(lesson_id) is None:
        raise NotFoundError(lesson_id)

    user = tracker.get_user()
    duration = session_duration_seconds(user.daily_goal_hours if user else None)
    return FocusSession(
        lesson_id,
        lessons,
        tracker,
        duration_seconds=duration,
        timer_factory=timer_factory,
        on_finished=on_finished,
    )
