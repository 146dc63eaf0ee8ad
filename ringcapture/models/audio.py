"""Audio-related data models."""

import math
from dataclasses import dataclass
from typing import NamedTuple

import numpy as np

from ..exceptions import InvalidFormat

SUPPORTED_CHANNELS = (1, 2)


def validate_format(sample_rate: int, channels: int) -> None:
    """Raise InvalidFormat unless sample_rate/channels describe a supported stream."""
    if not isinstance(sample_rate, (int, np.integer)) or sample_rate <= 0:
        raise InvalidFormat(f"Sample rate must be a positive integer, got {sample_rate!r}")
    if channels not in SUPPORTED_CHANNELS:
        raise InvalidFormat(f"Channels must be 1 or 2, got {channels!r}")


@dataclass(frozen=True, eq=False)
class RingBufferView:
    """Read-only view over the frames of a ring buffer.

    ``frames`` has shape ``(capacity, channels)``; one row is one frame. The
    view aliases the caller's array without copying it and leaves that
    array writable.
    """
    frames: np.ndarray

    def __post_init__(self):
        if self.frames.ndim != 2:
            raise InvalidFormat(f"Ring frames must be 2-D (capacity, channels), got shape {self.frames.shape}")
        if self.frames.shape[0] == 0:
            raise InvalidFormat("Ring buffer capacity must be greater than zero")
        if self.frames.shape[1] not in SUPPORTED_CHANNELS:
            raise InvalidFormat(f"Channels must be 1 or 2, got {self.frames.shape[1]}")
        frozen = self.frames.view()
        frozen.flags.writeable = False
        object.__setattr__(self, "frames", frozen)

    @classmethod
    def from_interleaved(cls, samples: np.ndarray, channels: int) -> "RingBufferView":
        """Build a view from a flat interleaved sample array."""
        samples = np.asarray(samples)
        if channels not in SUPPORTED_CHANNELS:
            raise InvalidFormat(f"Channels must be 1 or 2, got {channels!r}")
        if samples.ndim != 1 or samples.size % channels != 0:
            raise InvalidFormat(
                f"Interleaved buffer of {samples.size} samples does not split into {channels}-channel frames"
            )
        return cls(samples.reshape(-1, channels).copy())

    @property
    def capacity(self) -> int:
        return self.frames.shape[0]

    @property
    def channels(self) -> int:
        return self.frames.shape[1]


class RingSnapshot(NamedTuple):
    """Ring contents and producer cursor captured together."""
    view: RingBufferView
    write_head: int
    has_any_data: bool
    frames_written: int


@dataclass(frozen=True)
class SessionRequest:
    """Format and duration of the session to pull out of the ring."""
    sample_rate: int
    channels: int
    target_duration_seconds: float
    buffer_capacity_frames: int

    def __post_init__(self):
        validate_format(self.sample_rate, self.channels)
        if self.buffer_capacity_frames <= 0:
            raise InvalidFormat(
                f"Buffer capacity must be greater than zero, got {self.buffer_capacity_frames}"
            )

    @property
    def target_frames(self) -> int:
        """Requested frame count, rounded half away from zero."""
        return int(math.floor(self.target_duration_seconds * self.sample_rate + 0.5))


@dataclass(eq=False)
class ExtractedSamples:
    """Linear, chronologically ordered frames of one session.

    Attributes:
        sample_rate: Sample rate in Hz
        channels: Number of interleaved channels
        frames: Array of shape (frame_count, channels), float in [-1, 1] or int16
        requested_frames: Frame count the caller asked for before clamping
        truncated: True when the output is shorter than requested
    """
    sample_rate: int
    channels: int
    frames: np.ndarray
    requested_frames: int = 0
    truncated: bool = False

    def __post_init__(self):
        validate_format(self.sample_rate, self.channels)
        if self.frames.ndim == 1:
            if self.frames.size % self.channels != 0:
                raise InvalidFormat(
                    f"{self.frames.size} samples do not split into {self.channels}-channel frames"
                )
            self.frames = self.frames.reshape(-1, self.channels)
        if self.frames.ndim != 2 or self.frames.shape[1] != self.channels:
            raise InvalidFormat(
                f"Frames of shape {self.frames.shape} do not match {self.channels} channel(s)"
            )
        if not self.requested_frames:
            self.requested_frames = self.frame_count

    @property
    def frame_count(self) -> int:
        return self.frames.shape[0]

    @property
    def duration_seconds(self) -> float:
        return self.frame_count / self.sample_rate

    def interleaved(self) -> np.ndarray:
        """Return the samples as a flat interleaved array."""
        return self.frames.reshape(-1)
