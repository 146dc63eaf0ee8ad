"""Pytest configuration and fixtures for ringcapture tests."""

import pytest
import tempfile
import logging
from pathlib import Path
from unittest.mock import Mock, patch

import numpy as np
import yaml

from ringcapture.audio.ring_buffer import RingBuffer
from ringcapture.audio.source import CaptureSource
from ringcapture.models.audio import RingBufferView


# Configure logging for tests
logging.basicConfig(level=logging.INFO)


def pytest_addoption(parser):
    parser.addoption(
        "--run-hardware",
        action="store_true",
        default=False,
        help="Run tests that need a real microphone",
    )


def pytest_configure(config):
    config.addinivalue_line("markers", "unit: fast tests without I/O")
    config.addinivalue_line("markers", "integration: end-to-end session tests")
    config.addinivalue_line("markers", "hardware: tests that need a real microphone")


def pytest_collection_modifyitems(config, items):
    if config.getoption("--run-hardware"):
        return
    skip_hardware = pytest.mark.skip(reason="needs --run-hardware")
    for item in items:
        if "hardware" in item.keywords:
            item.add_marker(skip_hardware)


@pytest.fixture
def temp_data_dir():
    """Create temporary directory for test data."""
    with tempfile.TemporaryDirectory() as temp_dir:
        yield temp_dir


@pytest.fixture
def ramp_view():
    """Build a ring view whose frame i holds value i on every channel."""
    def build(capacity: int = 100, channels: int = 1) -> RingBufferView:
        ramp = np.arange(capacity, dtype=np.float64)
        return RingBufferView(np.repeat(ramp[:, None], channels, axis=1))

    return build


@pytest.fixture
def sine_samples():
    """Generate a float sine wave in [-1, 1]."""
    def generate(frames: int = 1600, sample_rate: int = 16000, channels: int = 1, freq: float = 440.0):
        t = np.arange(frames) / sample_rate
        wave_data = 0.8 * np.sin(2 * np.pi * freq * t)
        return np.repeat(wave_data[:, None], channels, axis=1).astype(np.float32)

    return generate


class SimulatedCaptureSource(CaptureSource):
    """Capture source that writes a fixed block of frames when started."""

    def __init__(self, frames: np.ndarray):
        super().__init__()
        self.frames = frames
        self.started = False
        self.stopped = False
        self.snapshot_taken_while_running = None

    def start(self, sample_rate, channels, capacity_frames):
        self.ring = RingBuffer(capacity_frames, channels=channels, sample_rate=sample_rate)
        self.ring.write(self.frames)
        self.started = True
        return self.ring

    def snapshot(self):
        self.snapshot_taken_while_running = not self.stopped
        return super().snapshot()

    def stop(self):
        self.stopped = True


@pytest.fixture
def simulated_source():
    """Factory for an in-memory capture source."""
    return SimulatedCaptureSource


@pytest.fixture
def config_file(temp_data_dir):
    """Write a small ringcapture.yaml into the temp directory and return its path."""
    def write(**overrides):
        config = {
            "audio": {"sample_rate": 8000, "channels": 1, "buffer_seconds": 0.25, "chunk_size": 256},
            "session": {
                "max_duration_seconds": 2.0,
                "poll_interval_seconds": 0.005,
                "start_timeout_seconds": 0.05,
            },
            "storage": {"data_directory": "data"},
            "logging": {"level": "DEBUG", "file_path": "data/logs/ringcapture.log"},
            "events": {"topic": "test.recording.session"},
        }
        for section, values in overrides.items():
            config.setdefault(section, {}).update(values)

        path = Path(temp_data_dir) / "ringcapture.yaml"
        with open(path, "w", encoding="utf-8") as f:
            yaml.safe_dump(config, f)
        return str(path)

    return write


@pytest.fixture
def mock_pyaudio():
    """Mock PyAudio for testing without actual audio hardware."""
    with patch('pyaudio.PyAudio') as mock_pyaudio_class:
        mock_pyaudio_instance = Mock()
        mock_stream = Mock()

        # Half-scale silence-free chunk: 256 frames of 16384
        mock_stream.read.return_value = np.full(256, 16384, dtype='<i2').tobytes()

        mock_pyaudio_instance.open.return_value = mock_stream
        mock_pyaudio_instance.get_device_count.return_value = 1
        mock_pyaudio_instance.get_default_input_device_info.return_value = {
            "index": 0,
            "name": "Mock Microphone",
            "maxInputChannels": 2,
            "defaultSampleRate": 48000.0,
        }
        mock_pyaudio_instance.is_format_supported.return_value = True

        mock_pyaudio_class.return_value = mock_pyaudio_instance

        yield {
            'class': mock_pyaudio_class,
            'instance': mock_pyaudio_instance,
            'stream': mock_stream
        }
