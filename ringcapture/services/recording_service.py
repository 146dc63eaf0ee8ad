"""Recording service that runs one capture session end to end."""

import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Optional

from ..audio.encoder import PcmEncoder
from ..audio.extractor import RingCaptureExtractor
from ..audio.source import CaptureSource
from ..config import RingCaptureConfig
from ..exceptions import EncodeError, ExtractError, NoDataObserved, SessionStateError
from ..models.audio import ExtractedSamples, SessionRequest
from ..models.session import CaptureSession, SessionInfo
from ..storage.file_manager import FileManager
from .event_publisher import SessionEventPublisher
from .session_timer import PositionTracker, SessionTimer, wait_for_data

logger = logging.getLogger(__name__)


@dataclass
class RecordingResult:
    """Outcome of a saved recording session."""
    session: CaptureSession
    info: SessionInfo
    audio_path: str

    @property
    def truncated(self) -> bool:
        return self.info.truncated


class RecordingService:
    """Runs capture → snapshot → extract → encode → save for one session at a time."""

    def __init__(
        self,
        config: RingCaptureConfig,
        source: CaptureSource,
        file_manager: Optional[FileManager] = None,
        publisher: Optional[SessionEventPublisher] = None,
    ):
        """Initialize recording service.

        Args:
            config: Application configuration
            source: Capture source that fills the ring buffer
            file_manager: Sink for encoded files, built from config if None
            publisher: Session event publisher, built from config if None
        """
        self.config = config
        self.source = source
        self.file_manager = file_manager or FileManager(config.get_data_directory())
        self.publisher = publisher or SessionEventPublisher(
            config.get('events.topic', 'recording.session')
        )
        self.extractor = RingCaptureExtractor()
        self.encoder = PcmEncoder()

        self.sample_rate = int(config.get('audio.sample_rate', 44100))
        self.channels = int(config.get('audio.channels', 1))
        self.capacity_frames = config.get_capacity_frames()
        self.max_duration_seconds = float(config.get('session.max_duration_seconds', 10.0))
        self.poll_interval_seconds = float(config.get('session.poll_interval_seconds', 0.02))
        self.start_timeout_seconds = float(config.get('session.start_timeout_seconds', 3.0))

        self.timer: Optional[SessionTimer] = None
        self.tracker: Optional[PositionTracker] = None

        logger.info(
            f"RecordingService ready: {self.sample_rate}Hz, {self.channels}ch, "
            f"ring {self.capacity_frames} frames, max {self.max_duration_seconds}s"
        )

    def request_stop(self) -> None:
        """Stop the running session early; the audio recorded so far is kept."""
        if self.timer is None:
            raise SessionStateError("No session is running")
        logger.info("Stop requested")
        self.timer.request_stop()

    def record(self, duration_seconds: Optional[float] = None) -> RecordingResult:
        """Record one session and save it as a WAV file.

        Args:
            duration_seconds: Fixed session length. None records until
                request_stop() or the configured maximum duration.

        Returns:
            RecordingResult describing the saved file

        Raises:
            NoDataObserved: the source produced no frames before the start timeout
            ExtractError: the session window could not be extracted
            EncodeError: the samples could not be encoded
        """
        if self.timer is not None:
            raise SessionStateError("A session is already running")

        session_id = self.file_manager.new_session_id()
        self.timer = SessionTimer(
            duration_seconds=duration_seconds,
            max_duration_seconds=self.max_duration_seconds,
            poll_interval_seconds=self.poll_interval_seconds,
        )
        try:
            return self._run_session(session_id)
        finally:
            self.timer = None

    def _run_session(self, session_id: str) -> RecordingResult:
        ring = self.source.start(self.sample_rate, self.channels, self.capacity_frames)
        session = CaptureSession(
            session_id=session_id,
            sample_rate=ring.sample_rate,
            channels=ring.channels,
            capacity_frames=ring.capacity_frames,
        )

        if not wait_for_data(self.source, self.start_timeout_seconds):
            self.source.stop()
            self.publisher.publish(session_id, "failed", error="no_data")
            raise NoDataObserved(f"No audio data within {self.start_timeout_seconds}s of starting capture")

        self.publisher.publish(session_id, "started", sample_rate=session.sample_rate, channels=session.channels)

        self.tracker = PositionTracker(session.capacity_frames)
        try:
            timing = self.timer.run(on_tick=self._sample_position)
            # Snapshot before stopping so the cursor and contents belong together
            snapshot = self.source.snapshot()
        finally:
            self.source.stop()

        session.finish(timing.elapsed_seconds, timing.reason)
        logger.debug(
            f"Write cursor at {self.tracker.latest} after {self.tracker.wraps} wraps, "
            f"{self.tracker.frames_observed} frames observed while polling"
        )
        self.publisher.publish(
            session_id,
            "stopped",
            elapsed_seconds=timing.elapsed_seconds,
            reason=timing.reason.value,
            wraps=self.tracker.wraps,
            frames_observed=self.tracker.frames_observed,
        )

        request = SessionRequest(
            sample_rate=session.sample_rate,
            channels=session.channels,
            target_duration_seconds=timing.elapsed_seconds,
            buffer_capacity_frames=session.capacity_frames,
        )

        try:
            samples = self.extractor.extract_snapshot(snapshot, request)
            wav_bytes = self.encoder.encode(samples)
        except (ExtractError, EncodeError) as e:
            logger.error(f"Session {session_id} failed: {e}")
            self.publisher.publish(session_id, "failed", error=type(e).__name__, message=str(e))
            raise

        return self._save(session, samples, wav_bytes)

    def _sample_position(self, elapsed: float) -> None:
        self.tracker.record(elapsed, self.source.current_write_position())

    def _save(self, session: CaptureSession, samples: ExtractedSamples, wav_bytes: bytes) -> RecordingResult:
        # Only a successful session gets a directory
        self.file_manager.create_session_directory(session.session_id)
        audio_path = self.file_manager.save_audio_file(wav_bytes, session.session_id)
        info = SessionInfo(
            session_id=session.session_id,
            start_time=session.started_at,
            requested_duration_seconds=session.elapsed_seconds,
            duration_seconds=samples.duration_seconds,
            audio_file=Path(audio_path).name,
            file_size_bytes=len(wav_bytes),
            sample_rate=samples.sample_rate,
            channels=samples.channels,
            frame_count=samples.frame_count,
            truncated=samples.truncated,
            stop_reason=session.stop_reason.value,
        )
        self.file_manager.save_session_info(info)

        if samples.truncated:
            logger.warning(
                f"Session {session.session_id} truncated: {samples.frame_count} of "
                f"{samples.requested_frames} requested frames"
            )
        self.publisher.publish(
            session.session_id,
            "saved",
            audio_path=audio_path,
            frame_count=samples.frame_count,
            truncated=samples.truncated,
        )
        return RecordingResult(session=session, info=info, audio_path=audio_path)
