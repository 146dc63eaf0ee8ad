"""Real hardware tests for microphone sessions.

These tests require an actual microphone and are skipped by default.

Run with: pytest tests/hardware/ -v -s --run-hardware
"""

import wave

import pytest

from ringcapture.audio.capture import PyAudioCaptureSource
from ringcapture.config import RingCaptureConfig
from ringcapture.services.recording_service import RecordingService


@pytest.mark.hardware
class TestRealAudioHardware:
    """Tests that require real audio hardware to run."""

    def test_real_microphone_session_3s(self, config_file):
        """Record 3 seconds into a 2-second ring and check the saved WAV.

        The ring wraps during the session, so the output must hold exactly
        the ring capacity and be flagged as truncated.
        """
        config = RingCaptureConfig(config_file(
            audio={"sample_rate": 16000, "buffer_seconds": 2.0, "chunk_size": 1024},
            session={"max_duration_seconds": 10.0, "start_timeout_seconds": 3.0},
        ))
        service = RecordingService(config, PyAudioCaptureSource(chunk_size=1024))

        result = service.record(duration_seconds=3.0)

        with wave.open(result.audio_path, 'rb') as wf:
            assert wf.getsampwidth() == 2
            assert wf.getnframes() == result.info.frame_count
            assert wf.getnframes() == config.get_capacity_frames()
        assert result.truncated is True

    def test_real_microphone_session_within_capacity(self, config_file):
        config = RingCaptureConfig(config_file(
            audio={"sample_rate": 16000, "buffer_seconds": 5.0, "chunk_size": 1024},
            session={"max_duration_seconds": 10.0, "start_timeout_seconds": 3.0},
        ))
        service = RecordingService(config, PyAudioCaptureSource(chunk_size=1024))

        result = service.record(duration_seconds=1.0)

        assert result.info.frame_count == result.info.sample_rate
        assert result.truncated is False
