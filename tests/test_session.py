"""
Tests for FocusSession: duration, countdown and completion rewards.
"""

import random
import sqlite3
import threading
import time
from datetime import timedelta
from unittest.mock import Mock

import pytest

from studyverse.classroom import (
    FALLBACK_DURATION_SECONDS,
    FocusSession,
    RepeatingTimer,
    format_time,
    open_session,
    session_duration_seconds,
)
from studyverse.errors import InvalidTransitionError, NotFoundError
from studyverse.schemas import LessonStatus, SessionState

from conftest import make_lessons


@pytest.fixture
def seeded(lessons, user):
    lessons.replace_lessons(make_lessons(3))
    return lessons


def make_session(lessons, tracker, timers, duration=5, **kwargs):
    return FocusSession("l1", lessons, tracker, duration_seconds=duration, timer_factory=timers, **kwargs)


class TestSessionDuration:
    """Test the daily goal to session length rule."""

    @pytest.mark.parametrize("hours, expected", [
        (0.1, 600),
        (0.5, 600),
        (1.0, 1200),
        (1.5, 1800),
        (2.0, 2400),
        (3.0, 3600),
        (10.0, 3600),
    ])
    def test_duration_from_goal(self, hours, expected):
        assert session_duration_seconds(hours) == expected

    def test_duration_without_profile(self):
        assert session_duration_seconds(None) == FALLBACK_DURATION_SECONDS == 1500

    def test_format_time(self):
        assert format_time(1500) == "25:00"
        assert format_time(61) == "01:01"
        assert format_time(0) == "00:00"

    def test_rejects_empty_duration(self, lessons, tracker, timers):
        with pytest.raises(ValueError):
            make_session(lessons, tracker, timers, duration=0)


class TestSessionTransitions:
    """Test the countdown state machine."""

    def test_initial_state(self, seeded, tracker, timers):
        session = make_session(seeded, tracker, timers)
        assert session.state == SessionState.READY
        assert session.remaining_seconds == 5
        assert session.progress_percent == 0
        assert not session.is_active
        assert timers.timers == []

    def test_start_creates_one_timer(self, seeded, tracker, timers):
        session = make_session(seeded, tracker, timers)
        session.start()
        assert session.is_active
        assert len(timers.live) == 1
        assert timers.current.interval == 1.0

    def test_tick_counts_down(self, seeded, tracker, timers):
        session = make_session(seeded, tracker, timers)
        session.start()
        timers.current.fire(2)
        assert session.remaining_seconds == 3
        assert session.time_left == "00:03"
        assert session.progress_percent == pytest.approx(40.0)

    def test_pause_cancels_timer_and_keeps_time(self, seeded, tracker, timers):
        session = make_session(seeded, tracker, timers)
        session.start()
        timers.current.fire()
        session.pause()
        assert session.state == SessionState.PAUSED
        assert session.remaining_seconds == 4
        assert timers.live == []

    def test_resume_uses_fresh_timer(self, seeded, tracker, timers):
        session = make_session(seeded, tracker, timers)
        session.start()
        session.pause()
        session.resume()
        assert len(timers.timers) == 2
        assert timers.live == [timers.current]

    def test_toggle(self, seeded, tracker, timers):
        session = make_session(seeded, tracker, timers)
        session.toggle()
        assert session.state == SessionState.RUNNING
        session.toggle()
        assert session.state == SessionState.PAUSED
        session.toggle()
        assert session.state == SessionState.RUNNING

    def test_invalid_transitions(self, seeded, tracker, timers):
        session = make_session(seeded, tracker, timers)
        with pytest.raises(InvalidTransitionError):
            session.pause()
        with pytest.raises(InvalidTransitionError):
            session.resume()
        with pytest.raises(InvalidTransitionError):
            session.tick()
        session.start()
        with pytest.raises(InvalidTransitionError):
            session.start()

    def test_stale_tick_is_ignored(self, seeded, tracker, timers):
        session = make_session(seeded, tracker, timers)
        session.start()
        stale = timers.current
        session.pause()
        session.resume()
        stale.callback()
        assert session.remaining_seconds == 5

    def test_urgent_under_a_minute(self, seeded, tracker, timers):
        session = make_session(seeded, tracker, timers, duration=61)
        session.start()
        assert not session.is_urgent
        timers.current.fire()
        assert not session.is_urgent
        timers.current.fire()
        assert session.is_urgent
        session.pause()
        assert not session.is_urgent


class TestSessionCompletion:
    """Test rewards when a session finishes."""

    def test_countdown_to_zero_rewards_once(self, seeded, tracker, timers):
        tracker.add_xp = Mock(wraps=tracker.add_xp)
        seeded.complete_lesson = Mock(wraps=seeded.complete_lesson)
        session = make_session(seeded, tracker, timers, duration=3)

        session.start()
        timers.current.fire(10)

        assert session.state == SessionState.FINISHED
        assert session.remaining_seconds == 0
        assert session.progress_percent == 100
        assert timers.live == []
        assert tracker.add_xp.call_count == 1
        assert seeded.complete_lesson.call_count == 1

    def test_manual_finish_then_finish_again(self, seeded, tracker, timers):
        tracker.add_xp = Mock(wraps=tracker.add_xp)
        session = make_session(seeded, tracker, timers)
        session.start()

        first = session.finish()
        second = session.finish()

        assert first is second
        assert first.xp_awarded == 50
        assert tracker.add_xp.call_count == 1
        assert timers.live == []

    def test_finish_after_countdown_does_not_reward_again(self, seeded, tracker, timers):
        tracker.add_xp = Mock(wraps=tracker.add_xp)
        session = make_session(seeded, tracker, timers, duration=1)
        session.start()
        timers.current.fire()
        session.finish()
        assert tracker.add_xp.call_count == 1

    def test_finish_from_paused(self, seeded, tracker, timers):
        session = make_session(seeded, tracker, timers)
        session.start()
        session.pause()
        result = session.finish()
        assert result.xp_awarded == 50
        assert session.state == SessionState.FINISHED

    def test_finish_from_ready(self, seeded, tracker, timers):
        result = make_session(seeded, tracker, timers).finish()
        assert result.next_lesson_id == "l2"

    def test_rewards_unlock_next_lesson(self, seeded, tracker, timers, store):
        session = make_session(seeded, tracker, timers, duration=2)
        session.start()
        timers.current.fire(2)

        result = session.result
        assert result.lesson_id == "l1"
        assert result.next_lesson_id == "l2"
        assert result.user.xp == 50
        assert [lesson.status for lesson in seeded.list_lessons()] == [
            LessonStatus.DONE, LessonStatus.OPEN, LessonStatus.LOCKED,
        ]
        assert store.load_user().xp == 50

    def test_on_finished_called_once(self, seeded, tracker, timers):
        listener = Mock()
        session = make_session(seeded, tracker, timers, duration=1, on_finished=listener)
        session.start()
        timers.current.fire()
        session.finish()
        listener.assert_called_once_with(session.result)

    def test_unknown_lesson_still_awards_xp(self, seeded, tracker, timers):
        session = FocusSession("ghost", seeded, tracker, duration_seconds=1, timer_factory=timers)
        result = session.finish()
        assert result.xp_awarded == 50
        assert result.next_lesson_id is None
        assert seeded.list_lessons()[0].status == LessonStatus.OPEN

    def test_missing_profile_awards_nothing(self, lessons, tracker, timers):
        lessons.replace_lessons(make_lessons(2))
        result = make_session(lessons, tracker, timers).finish()
        assert result.xp_awarded == 0
        assert result.user is None
        assert lessons.list_lessons()[0].status == LessonStatus.DONE

    def test_next_day_session_extends_streak(self, seeded, tracker, timers, clock):
        clock.now += timedelta(days=1)
        result = make_session(seeded, tracker, timers).finish()
        assert result.user.streak == 1


class TestSessionTeardown:
    """Test abort, close and context manager use."""

    def test_abort_discards_without_reward(self, seeded, tracker, timers, store):
        session = make_session(seeded, tracker, timers)
        session.start()
        session.abort()

        assert session.state == SessionState.ABORTED
        assert timers.live == []
        assert session.finish() is None
        assert store.load_user().xp == 0
        assert seeded.list_lessons()[0].status == LessonStatus.OPEN

    def test_cannot_toggle_after_abort(self, seeded, tracker, timers):
        session = make_session(seeded, tracker, timers)
        session.abort()
        with pytest.raises(InvalidTransitionError):
            session.toggle()

    def test_close_is_idempotent(self, seeded, tracker, timers):
        session = make_session(seeded, tracker, timers)
        session.start()
        session.close()
        session.close()
        assert timers.live == []

    def test_close_keeps_finished_result(self, seeded, tracker, timers):
        session = make_session(seeded, tracker, timers)
        result = session.finish()
        session.close()
        assert session.state == SessionState.FINISHED
        assert session.result is result

    def test_context_manager_cancels_timer(self, seeded, tracker, timers):
        with make_session(seeded, tracker, timers) as session:
            session.start()
        assert timers.live == []
        assert session.state == SessionState.ABORTED


class TestOpenSession:
    """Test session creation for a lesson."""

    def test_uses_daily_goal(self, seeded, tracker, timers):
        session = open_session("l1", seeded, tracker, timer_factory=timers)
        assert session.initial_duration_seconds == 1800

    def test_fallback_without_profile(self, lessons, tracker, timers):
        lessons.replace_lessons(make_lessons(2))
        session = open_session("l1", lessons, tracker, timer_factory=timers)
        assert session.initial_duration_seconds == 1500

    def test_unknown_lesson(self, seeded, tracker, timers):
        with pytest.raises(NotFoundError):
            open_session("ghost", seeded, tracker, timer_factory=timers)

    def test_full_session_scenario(self, lessons, store, clock, timers):
        """Goal 0.5h -> 600s session; 600 ticks complete the lesson."""
        from studyverse.classroom import ProgressTracker
        from studyverse.schemas import User

        store.save_user(User(id="u", last_study_date=clock.now, daily_goal_hours=0.5))
        lessons.replace_lessons(make_lessons(3))
        tracker = ProgressTracker(store, clock=clock)

        session = open_session("l1", lessons, tracker, timer_factory=timers)
        assert session.initial_duration_seconds == 600
        session.start()
        timers.current.fire(600)

        assert session.state == SessionState.FINISHED
        assert store.load_user().xp == 50
        assert lessons.get_open_lesson_id() == "l2"


class TestRewardFailure:
    """Test timer cleanup when the store fails while rewarding."""

    @pytest.fixture
    def broken_store(self, seeded, monkeypatch):
        def fail(lessons):
            raise sqlite3.OperationalError("disk I/O error")

        monkeypatch.setattr(seeded.store, "save_lessons", fail)
        return seeded.store

    def test_manual_finish_cancels_timer(self, seeded, tracker, timers, broken_store):
        session = make_session(seeded, tracker, timers)
        session.start()

        with pytest.raises(sqlite3.OperationalError):
            session.finish()

        assert timers.live == []
        assert session.state == SessionState.FINISHED
        assert session.result is None
        session.close()
        assert session.finish() is None
        assert broken_store.load_user().xp == 0

    def test_countdown_expiry_cancels_timer(self, seeded, tracker, timers, broken_store):
        session = make_session(seeded, tracker, timers, duration=1)
        session.start()

        with pytest.raises(sqlite3.OperationalError):
            timers.current.fire()

        assert timers.live == []
        assert session.state == SessionState.FINISHED


class TestConcurrentFinish:
    """Test countdown expiry racing manual finish on real timer threads."""

    def test_single_reward_under_race(self, lessons, tracker, store, user):
        rng = random.Random(7)

        def fast_timer(interval, callback):
            return RepeatingTimer.start_new(0.001, callback)

        for _ in range(15):
            lessons.replace_lessons(make_lessons(3))
            xp_before = store.load_user().xp
            listener = Mock()
            session = FocusSession(
                "l1", lessons, tracker,
                duration_seconds=5,
                timer_factory=fast_timer,
                on_finished=listener,
            )
            barrier = threading.Barrier(3)
            results = []

            def finisher():
                barrier.wait()
                time.sleep(rng.uniform(0, 0.008))
                results.append(session.finish())

            threads = [threading.Thread(target=finisher) for _ in range(3)]
            session.start()
            for thread in threads:
                thread.start()
            for thread in threads:
                thread.join(5.0)
            session.close()

            assert session.state == SessionState.FINISHED
            assert store.load_user().xp == xp_before + 50
            listener.assert_called_once_with(session.result)
            assert all(result is session.result for result in results)
            assert session.result.xp_awarded == 50


class TestToggle:
    """Test toggle against timer-driven state changes."""

    def test_toggle_pause_cancels_timer(self, seeded, tracker, timers):
        session = make_session(seeded, tracker, timers)
        session.toggle()
        timers.current.fire()
        session.toggle()
        assert session.state == SessionState.PAUSED
        assert session.remaining_seconds == 4
        assert timers.live == []

    def test_toggle_after_expiry(self, seeded, tracker, timers):
        session = make_session(seeded, tracker, timers, duration=1)
        session.toggle()
        timers.current.fire()
        with pytest.raises(InvalidTransitionError):
            session.toggle()
        assert session.result.xp_awarded == 50

