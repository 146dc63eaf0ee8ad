"""Services layer: session timing, orchestration and event publishing."""

from .recording_service import RecordingService, RecordingResult
from .session_timer import SessionTimer, PositionTracker, TimerResult, wait_for_data
from .event_publisher import SessionEventPublisher

__all__ = [
    "RecordingService",
    "RecordingResult",
    "SessionTimer",
    "PositionTracker",
    "TimerResult",
    "wait_for_data",
    "SessionEventPublisher",
]
