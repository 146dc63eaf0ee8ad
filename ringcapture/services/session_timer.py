"""Session timing and write-position sampling.

The timer decides when a recording ends: after a fixed duration, after the
maximum allowed duration, or when another thread asks it to stop. While it
waits it calls back into the caller on every poll, which the recording
service uses to sample the capture source's write position.
"""

import time
import logging
import threading
from collections import deque
from typing import Callable, Deque, NamedTuple, Optional, Tuple

from ..audio.source import CaptureSource
from ..models.session import StopReason

logger = logging.getLogger(__name__)


class TimerResult(NamedTuple):
    elapsed_seconds: float
    reason: StopReason


class SessionTimer:
    """Blocks until a session should stop and reports the elapsed time."""

    def __init__(
        self,
        duration_seconds: Optional[float] = None,
        max_duration_seconds: float = 10.0,
        poll_interval_seconds: float = 0.02,
        clock: Callable[[], float] = time.monotonic,
        sleep: Callable[[float], None] = time.sleep,
    ):
        """Initialize session timer.

        Args:
            duration_seconds: Fixed session length, None to record until stopped
            max_duration_seconds: Hard upper bound on the session length
            poll_interval_seconds: How often to check for a stop condition
            clock: Monotonic clock, injectable for tests
            sleep: Sleep function, injectable for tests
        """
        if max_duration_seconds <= 0:
            raise ValueError(f"Max duration must be positive, got {max_duration_seconds}")
        if duration_seconds is not None and duration_seconds <= 0:
            raise ValueError(f"Duration must be positive, got {duration_seconds}")

        self.duration_seconds = duration_seconds
        self.max_duration_seconds = max_duration_seconds
        self.poll_interval_seconds = poll_interval_seconds
        self._clock = clock
        self._sleep = sleep
        self._stop_requested = threading.Event()

    @property
    def limit_seconds(self) -> float:
        if self.duration_seconds is None:
            return self.max_duration_seconds
        return min(self.duration_seconds, self.max_duration_seconds)

    @property
    def limit_reason(self) -> StopReason:
        if self.duration_seconds is not None and self.duration_seconds <= self.max_duration_seconds:
            return StopReason.DURATION
        return StopReason.MAX_DURATION

    def request_stop(self) -> None:
        """Ask a running timer to end the session now. Safe from any thread."""
        self._stop_requested.set()

    def run(self, on_tick: Optional[Callable[[float], None]] = None) -> TimerResult:
        """Wait for a stop condition.

        Args:
            on_tick: Called with the elapsed seconds on every poll

        Returns:
            Elapsed seconds and the reason the session ended
        """
        limit = self.limit_seconds
        started = self._clock()
        logger.info(f"Session timer started: limit {limit:.2f}s ({self.limit_reason.value})")

        while True:
            elapsed = self._clock() - started
            if on_tick is not None:
                on_tick(elapsed)

            if self._stop_requested.is_set():
                reason = StopReason.USER
                break
            if elapsed >= limit:
                reason = self.limit_reason
                elapsed = limit
                break

            self._sleep(min(self.poll_interval_seconds, limit - elapsed))

        logger.info(f"Session timer stopped after {elapsed:.3f}s ({reason.value})")
        return TimerResult(elapsed, reason)


class PositionTracker:
    """Keeps a bounded trace of (timestamp, position) samples of a write cursor."""

    def __init__(self, capacity_frames: int, max_samples: int = 1024):
        self.capacity_frames = capacity_frames
        self.samples: Deque[Tuple[float, int]] = deque(maxlen=max_samples)
        self.wraps = 0

    def record(self, timestamp: float, position: int) -> None:
        if self.samples and position < self.samples[-1][1]:
            self.wraps += 1
            logger.debug(f"Write cursor wrapped ({self.wraps} wraps so far)")
        self.samples.append((timestamp, position))

    @property
    def latest(self) -> Optional[int]:
        return self.samples[-1][1] if self.samples else None

    @property
    def frames_observed(self) -> int:
        """Frames written as seen by the samples, assuming at most one wrap between samples."""
        if not self.samples:
            return 0
        return self.wraps * self.capacity_frames + self.samples[-1][1]


def wait_for_data(
    source: CaptureSource,
    timeout_seconds: float,
    poll_interval_seconds: float = 0.01,
    clock: Callable[[], float] = time.monotonic,
    sleep: Callable[[float], None] = time.sleep,
) -> bool:
    """Poll until the source reports written frames or the timeout expires.

    Returns:
        True if data arrived in time, False otherwise
    """
    deadline = clock() + timeout_seconds
    while not source.has_any_data():
        if clock() >= deadline:
            logger.error(f"No audio data after {timeout_seconds:.2f}s")
            return False
        sleep(poll_interval_seconds)
    logger.info(f"Audio data flowing, write position {source.current_write_position()}")
    return True
