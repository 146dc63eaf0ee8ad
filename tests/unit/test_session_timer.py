"""Unit tests for SessionTimer, PositionTracker and wait_for_data."""

import threading

import pytest
from unittest.mock import Mock

from ringcapture.models.session import CaptureSession, StopReason
from ringcapture.exceptions import SessionStateError
from ringcapture.services.session_timer import PositionTracker, SessionTimer, wait_for_data


class FakeClock:
    """Clock that advances only when sleep() is called."""

    def __init__(self):
        self.now = 0.0
        self.sleeps = []

    def __call__(self):
        return self.now

    def sleep(self, seconds):
        self.sleeps.append(seconds)
        self.now += seconds


@pytest.mark.unit
class TestSessionTimer:
    """Test cases for session stop conditions."""

    def test_fixed_duration(self):
        clock = FakeClock()
        timer = SessionTimer(duration_seconds=1.0, max_duration_seconds=5.0,
                             poll_interval_seconds=0.1, clock=clock, sleep=clock.sleep)

        result = timer.run()

        assert result.reason is StopReason.DURATION
        assert result.elapsed_seconds == pytest.approx(1.0)
        assert sum(clock.sleeps) == pytest.approx(1.0)

    def test_max_duration_caps_fixed_duration(self):
        clock = FakeClock()
        timer = SessionTimer(duration_seconds=30.0, max_duration_seconds=2.0,
                             poll_interval_seconds=0.5, clock=clock, sleep=clock.sleep)

        result = timer.run()

        assert result.reason is StopReason.MAX_DURATION
        assert result.elapsed_seconds == pytest.approx(2.0)

    def test_open_ended_session_stops_at_max(self):
        clock = FakeClock()
        timer = SessionTimer(max_duration_seconds=0.3, poll_interval_seconds=0.1,
                             clock=clock, sleep=clock.sleep)

        assert timer.run().reason is StopReason.MAX_DURATION

    def test_last_sleep_does_not_overshoot(self):
        """The final poll sleeps only for the time left."""
        clock = FakeClock()
        timer = SessionTimer(duration_seconds=0.25, poll_interval_seconds=0.1,
                             clock=clock, sleep=clock.sleep)

        timer.run()

        assert max(clock.sleeps) <= 0.1
        assert sum(clock.sleeps) == pytest.approx(0.25)

    def test_user_stop_from_tick(self):
        """A stop request ends the session with the elapsed time so far."""
        clock = FakeClock()
        timer = SessionTimer(max_duration_seconds=10.0, poll_interval_seconds=0.1,
                             clock=clock, sleep=clock.sleep)

        def tick(elapsed):
            if elapsed >= 0.5 - 1e-9:
                timer.request_stop()

        result = timer.run(on_tick=tick)

        assert result.reason is StopReason.USER
        assert result.elapsed_seconds == pytest.approx(0.5)

    def test_user_stop_from_other_thread(self):
        timer = SessionTimer(max_duration_seconds=5.0, poll_interval_seconds=0.005)
        threading.Timer(0.05, timer.request_stop).start()

        result = timer.run()

        assert result.reason is StopReason.USER
        assert 0.0 < result.elapsed_seconds < 5.0

    def test_on_tick_receives_elapsed(self):
        clock = FakeClock()
        ticks = []
        timer = SessionTimer(duration_seconds=0.3, poll_interval_seconds=0.1,
                             clock=clock, sleep=clock.sleep)

        timer.run(on_tick=ticks.append)

        assert ticks[0] == pytest.approx(0.0)
        assert ticks[-1] == pytest.approx(0.3)
        assert ticks == sorted(ticks)

    @pytest.mark.parametrize("kwargs", [
        {"max_duration_seconds": 0},
        {"duration_seconds": -1.0},
        {"duration_seconds": 0.0},
    ])
    def test_rejects_bad_limits(self, kwargs):
        with pytest.raises(ValueError):
            SessionTimer(**kwargs)


@pytest.mark.unit
class TestPositionTracker:
    """Test cases for write position sampling."""

    def test_counts_wraps(self):
        tracker = PositionTracker(capacity_frames=100)

        for t, position in enumerate([0, 40, 90, 10, 60, 5]):
            tracker.record(float(t), position)

        assert tracker.wraps == 2
        assert tracker.latest == 5
        assert tracker.frames_observed == 205

    def test_empty_tracker(self):
        tracker = PositionTracker(capacity_frames=100)

        assert tracker.latest is None
        assert tracker.frames_observed == 0

    def test_zero_positions_observe_no_frames(self):
        tracker = PositionTracker(capacity_frames=100)
        tracker.record(0.0, 0)
        tracker.record(1.0, 0)

        assert tracker.frames_observed == 0

    def test_trace_is_bounded(self):
        tracker = PositionTracker(capacity_frames=100, max_samples=3)

        for t in range(10):
            tracker.record(float(t), t)

        assert list(tracker.samples) == [(7.0, 7), (8.0, 8), (9.0, 9)]


@pytest.mark.unit
class TestWaitForData:
    """Test cases for waiting on the first captured frames."""

    def test_returns_once_data_arrives(self):
        clock = FakeClock()
        source = Mock()
        source.has_any_data.side_effect = [False, False, True]
        source.current_write_position.return_value = 512

        assert wait_for_data(source, 1.0, 0.01, clock=clock, sleep=clock.sleep) is True
        assert len(clock.sleeps) == 2

    def test_times_out(self):
        clock = FakeClock()
        source = Mock()
        source.has_any_data.return_value = False

        assert wait_for_data(source, 0.1, 0.02, clock=clock, sleep=clock.sleep) is False


@pytest.mark.unit
class TestCaptureSession:
    """Test cases for the session lifecycle value."""

    def test_finish_once(self):
        session = CaptureSession(session_id="s1", sample_rate=8000, channels=1, capacity_frames=800)

        session.finish(1.5, StopReason.USER)

        assert session.finished is True
        assert session.elapsed_seconds == 1.5
        assert session.stop_reason is StopReason.USER

    def test_finish_twice_raises(self):
        session = CaptureSession(session_id="s1", sample_rate=8000, channels=1, capacity_frames=800)
        session.finish(1.0, StopReason.DURATION)

        with pytest.raises(SessionStateError):
            session.finish(2.0, StopReason.DURATION)
