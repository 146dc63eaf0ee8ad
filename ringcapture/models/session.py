"""Session-related data models."""

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Optional

from ..exceptions import SessionStateError


class StopReason(str, Enum):
    """Why the session timer ended a recording."""
    DURATION = "duration"
    MAX_DURATION = "max_duration"
    USER = "user"


@dataclass
class CaptureSession:
    """One recording session, created at capture start and finished exactly once."""
    session_id: str
    sample_rate: int
    channels: int
    capacity_frames: int
    started_at: datetime = field(default_factory=datetime.now)
    stop_reason: Optional[StopReason] = None
    elapsed_seconds: Optional[float] = None
    finished: bool = False

    def finish(self, elapsed_seconds: float, reason: StopReason) -> None:
        """Mark the session as stopped.

        Raises:
            SessionStateError: if the session was already finished
        """
        if self.finished:
            raise SessionStateError(f"Session {self.session_id} already finished")
        self.finished = True
        self.elapsed_seconds = elapsed_seconds
        self.stop_reason = reason


@dataclass
class SessionInfo:
    """Information about a saved recording session."""
    session_id: str
    start_time: datetime
    requested_duration_seconds: float
    duration_seconds: float
    audio_file: str
    file_size_bytes: int
    sample_rate: int
    channels: int
    frame_count: int
    truncated: bool = False
    stop_reason: Optional[str] = None
