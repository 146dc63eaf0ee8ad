"""Fixed-capacity circular buffer fed by the capture thread."""

import logging
import threading

import numpy as np

from ..models.audio import RingBufferView, RingSnapshot, validate_format

logger = logging.getLogger(__name__)


class RingBuffer:
    """Circular frame buffer with a single writer and atomic snapshots.

    Writes past the end continue from index 0 and overwrite the oldest frames.
    """

    def __init__(self, capacity_frames: int, channels: int = 1, sample_rate: int = 16000, dtype=np.float32):
        """Initialize ring buffer.

        Args:
            capacity_frames: Number of frames the ring holds before wrapping
            channels: Number of interleaved channels per frame
            sample_rate: Sample rate of the frames, kept for reporting
            dtype: Sample type stored in the ring, float32 or int16
        """
        validate_format(sample_rate, channels)
        if capacity_frames <= 0:
            raise ValueError(f"Ring capacity must be greater than zero, got {capacity_frames}")

        self.capacity_frames = capacity_frames
        self.channels = channels
        self.sample_rate = sample_rate

        self._frames = np.zeros((capacity_frames, channels), dtype=dtype)
        self._write_pos = 0
        self._frames_written = 0
        self._lock = threading.Lock()

        logger.info(
            f"RingBuffer initialized: {capacity_frames} frames "
            f"({capacity_frames / sample_rate:.2f}s, {channels}ch @ {sample_rate}Hz)"
        )

    @property
    def write_position(self) -> int:
        """Wrapped cursor: slot the next frame will be written to."""
        with self._lock:
            return self._write_pos

    @property
    def frames_written(self) -> int:
        """Total frames written since creation or the last reset."""
        with self._lock:
            return self._frames_written

    @property
    def has_any_data(self) -> bool:
        with self._lock:
            return self._frames_written > 0

    def write(self, samples: np.ndarray) -> None:
        """Append frames, given as a flat interleaved or a (n, channels) array."""
        samples = np.asarray(samples, dtype=self._frames.dtype)
        if samples.size == 0:
            return
        if samples.ndim == 1:
            if samples.size % self.channels != 0:
                raise ValueError(
                    f"{samples.size} samples do not split into {self.channels}-channel frames"
                )
            samples = samples.reshape(-1, self.channels)

        n = samples.shape[0]
        capacity = self.capacity_frames

        with self._lock:
            self._frames_written += n
            if n >= capacity:
                # Only the newest `capacity` frames survive; they end at the new cursor
                end_pos = (self._write_pos + n) % capacity
                newest = samples[n - capacity:]
                self._frames[end_pos:] = newest[:capacity - end_pos]
                self._frames[:end_pos] = newest[capacity - end_pos:]
                self._write_pos = end_pos
                return

            end = self._write_pos + n
            if end <= capacity:
                self._frames[self._write_pos:end] = samples
            else:
                first = capacity - self._write_pos
                self._frames[self._write_pos:] = samples[:first]
                self._frames[:end - capacity] = samples[first:]
            self._write_pos = end % capacity

    def snapshot(self) -> RingSnapshot:
        """Copy the ring and read its cursor under one lock."""
        with self._lock:
            frames = self._frames.copy()
            write_head = self._write_pos
            frames_written = self._frames_written

        return RingSnapshot(
            view=RingBufferView(frames),
            write_head=write_head,
            has_any_data=frames_written > 0,
            frames_written=frames_written,
        )

    def reset(self) -> None:
        """Clear the ring for a new session."""
        with self._lock:
            self._frames.fill(0)
            self._write_pos = 0
            self._frames_written = 0
        logger.debug("Ring buffer reset")
