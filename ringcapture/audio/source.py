"""Abstract capture source feeding a ring buffer."""

from abc import ABC, abstractmethod
from typing import Optional

from ..models.audio import RingSnapshot
from .ring_buffer import RingBuffer


class CaptureSource(ABC):
    """A producer that writes captured frames into a ring buffer.

    Subclasses own the device side; the ring buffer bookkeeping lives here.
    """

    def __init__(self):
        self.ring: Optional[RingBuffer] = None

    @abstractmethod
    def start(self, sample_rate: int, channels: int, capacity_frames: int) -> RingBuffer:
        """Start capturing into a fresh ring buffer and return it."""
        pass

    @abstractmethod
    def stop(self) -> None:
        """Stop capturing. The ring stays readable afterwards."""
        pass

    def current_write_position(self) -> int:
        """Wrapped write cursor of the ring, 0 before capture starts."""
        if self.ring is None:
            return 0
        return self.ring.write_position

    def has_any_data(self) -> bool:
        return self.ring is not None and self.ring.has_any_data

    def snapshot(self) -> RingSnapshot:
        """Copy of the ring contents together with its cursor."""
        if self.ring is None:
            raise RuntimeError("Capture source was never started")
        return self.ring.snapshot()
