"""PyAudio capture source writing microphone input into a ring buffer."""

import logging
from threading import Thread, Event
from typing import Optional

import numpy as np
import pyaudio

from ..exceptions import CaptureDeviceError
from .ring_buffer import RingBuffer
from .source import CaptureSource

logger = logging.getLogger(__name__)


class PyAudioCaptureSource(CaptureSource):
    """Continuous microphone capture into a circular buffer on a background thread."""

    def __init__(self, chunk_size: int = 1024, device_index: Optional[int] = None):
        """Initialize capture source.

        Args:
            chunk_size: Frames read from the stream per iteration
            device_index: PyAudio input device, None for the default device
        """
        super().__init__()
        self.chunk_size = chunk_size
        self.device_index = device_index

        self.sample_rate: Optional[int] = None
        self.channels: Optional[int] = None

        self.capture_thread: Optional[Thread] = None
        self.stop_event = Event()
        self.is_recording = False
        self.total_chunks = 0

        self.pyaudio_instance: Optional[pyaudio.PyAudio] = None
        self.stream = None

    def start(self, sample_rate: int, channels: int, capacity_frames: int) -> RingBuffer:
        """Open the input stream and start filling a new ring buffer.

        Raises:
            CaptureDeviceError: no input device is available
        """
        if self.is_recording:
            raise RuntimeError("Capture already in progress")

        self.pyaudio_instance = pyaudio.PyAudio()
        try:
            device = self._input_device_info()
            self.sample_rate = self._resolve_sample_rate(device, sample_rate, channels)
            self.channels = channels

            # Raw int16 frames reach the encoder unscaled
            self.ring = RingBuffer(
                capacity_frames, channels=channels, sample_rate=self.sample_rate, dtype=np.int16
            )
            self.stream = self.pyaudio_instance.open(
                format=pyaudio.paInt16,
                channels=channels,
                rate=self.sample_rate,
                input=True,
                input_device_index=self.device_index,
                frames_per_buffer=self.chunk_size,
            )
        except Exception:
            self._release()
            raise

        logger.info(
            f"Audio stream opened on '{device.get('name')}': {self.sample_rate}Hz, "
            f"{channels}ch, {self.chunk_size} frames/chunk"
        )

        self.stop_event.clear()
        self.total_chunks = 0
        self.capture_thread = Thread(target=self._capture_continuously, daemon=True)
        self.capture_thread.name = "RingCaptureThread"
        self.capture_thread.start()
        self.is_recording = True
        return self.ring

    def stop(self) -> None:
        """Stop the capture thread and release the device."""
        if not self.is_recording:
            logger.warning("No capture in progress")
            return

        logger.info("Stopping audio capture")
        self.stop_event.set()
        if self.capture_thread and self.capture_thread.is_alive():
            self.capture_thread.join(timeout=2.0)
            if self.capture_thread.is_alive():
                logger.warning("Capture thread did not stop cleanly")

        self.is_recording = False
        self._release()
        logger.info(f"Capture stopped. Total chunks: {self.total_chunks}")

    def _input_device_info(self) -> dict:
        pa = self.pyaudio_instance
        if pa.get_device_count() == 0:
            raise CaptureDeviceError("No audio devices found")
        try:
            if self.device_index is None:
                info = pa.get_default_input_device_info()
            else:
                info = pa.get_device_info_by_index(self.device_index)
        except (IOError, OSError) as e:
            raise CaptureDeviceError(f"No usable input device: {e}") from e
        if info.get("maxInputChannels", 0) <= 0:
            raise CaptureDeviceError(f"Device '{info.get('name')}' has no input channels")
        return info

    def _resolve_sample_rate(self, device: dict, desired: int, channels: int) -> int:
        """Return ``desired`` if the device supports it, else its default rate."""
        try:
            self.pyaudio_instance.is_format_supported(
                desired,
                input_device=device["index"],
                input_channels=channels,
                input_format=pyaudio.paInt16,
            )
            return desired
        except ValueError:
            fallback = int(device["defaultSampleRate"])
            logger.warning(
                f"Device '{device.get('name')}' does not support {desired}Hz; using {fallback}Hz instead"
            )
            return fallback

    def _capture_continuously(self) -> None:
        """Internal method: read chunks into the ring until stopped."""
        try:
            while not self.stop_event.is_set():
                chunk = self.stream.read(self.chunk_size, exception_on_overflow=False)
                samples = np.frombuffer(chunk, dtype="<i2")
                self.ring.write(samples)
                self.total_chunks += 1
        except (IOError, OSError) as e:
            logger.error(f"Audio capture failed: {e}")
            self.stop_event.set()

    def _release(self) -> None:
        if self.stream is not None:
            self.stream.stop_stream()
            self.stream.close()
            self.stream = None
        if self.pyaudio_instance is not None:
            self.pyaudio_instance.terminate()
            self.pyaudio_instance = None

    def __del__(self):
        """Ensure resources are cleaned up on deletion."""
        if self.is_recording:
            self.stop()
