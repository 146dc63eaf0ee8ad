"""Session window extraction from a circular capture buffer.

The producer keeps writing into a fixed-capacity ring and wraps to index 0
when it reaches the end. At the end of a session the caller hands over a
snapshot of the ring, the producer's write head and the elapsed session time;
this module works out which frames belong to the session and copies them, in
chronological order, into a linear buffer.

The write head is the slot immediately after the newest frame. The window
therefore ends at ``write_head`` and starts ``target_frames`` slots earlier,
modulo the capacity.
"""

import math
import logging
from typing import Optional

import numpy as np

from ..exceptions import (
    EmptyCapture,
    FormatMismatch,
    InvalidDuration,
    InvalidWriteHead,
    NoDataObserved,
)
from ..models.audio import ExtractedSamples, RingBufferView, RingSnapshot, SessionRequest

logger = logging.getLogger(__name__)


class RingCaptureExtractor:
    """Copies the frames of one recording session out of a ring buffer.

    Stateless: one instance can serve any number of sessions, from any thread,
    as long as each call gets its own snapshot.
    """

    def extract(
        self,
        view: RingBufferView,
        write_head: int,
        request: SessionRequest,
        *,
        has_any_data: bool,
        frames_available: Optional[int] = None,
    ) -> ExtractedSamples:
        """Extract the session window ending at ``write_head``.

        Args:
            view: Ring buffer contents, shape (capacity, channels)
            write_head: Producer cursor, either absolute or already wrapped
            request: Session format and elapsed duration
            has_any_data: Whether the producer ever reported a written frame.
                Tells "never started" apart from "wrapped exactly to 0".
            frames_available: Total frames the producer has written, if known.
                The window never reaches back past the first written frame.

        Returns:
            ExtractedSamples with ``truncated`` set when the window was clamped

        Raises:
            FormatMismatch: request channels/capacity disagree with the view
            InvalidDuration: duration is not a positive finite number
            InvalidWriteHead: write head is negative
            NoDataObserved: write head is 0 and nothing was ever written
            EmptyCapture: no frames remain after clamping
        """
        self._check_request(view, request)

        try:
            duration = float(request.target_duration_seconds)
        except (TypeError, ValueError):
            raise InvalidDuration(f"Session duration must be a number, got {request.target_duration_seconds!r}")
        if not math.isfinite(duration) or duration <= 0:
            raise InvalidDuration(f"Session duration must be positive, got {duration!r}")

        if write_head < 0:
            raise InvalidWriteHead(f"Write head must not be negative, got {write_head}")

        if write_head == 0 and not has_any_data:
            raise NoDataObserved("Capture source never reported any written frames")

        capacity = view.capacity
        head = write_head % capacity

        requested_frames = request.target_frames
        target_frames = requested_frames
        truncated = False

        if target_frames > capacity:
            logger.warning(
                f"Requested {target_frames} frames ({duration:.3f}s) but ring holds {capacity}; "
                f"truncating to {capacity}"
            )
            target_frames = capacity
            truncated = True

        if frames_available is not None and target_frames > frames_available:
            logger.warning(
                f"Requested {target_frames} frames but producer only wrote {frames_available}; "
                f"truncating to {max(frames_available, 0)}"
            )
            target_frames = max(frames_available, 0)
            truncated = True

        if target_frames == 0:
            raise EmptyCapture(
                f"No frames to extract for {duration:.6f}s at {request.sample_rate}Hz"
            )

        start = (head - target_frames) % capacity
        frames = self._copy_window(view.frames, start, target_frames)

        logger.debug(
            f"Extracted {target_frames} frames: start={start}, head={head}, "
            f"capacity={capacity}, wrapped={start + target_frames > capacity}"
        )

        return ExtractedSamples(
            sample_rate=request.sample_rate,
            channels=request.channels,
            frames=frames,
            requested_frames=requested_frames,
            truncated=truncated,
        )

    def extract_snapshot(self, snapshot: RingSnapshot, request: SessionRequest) -> ExtractedSamples:
        """Extract from a snapshot taken by ``RingBuffer.snapshot()``."""
        return self.extract(
            snapshot.view,
            snapshot.write_head,
            request,
            has_any_data=snapshot.has_any_data,
            frames_available=snapshot.frames_written,
        )

    @staticmethod
    def _check_request(view: RingBufferView, request: SessionRequest) -> None:
        if request.channels != view.channels:
            raise FormatMismatch(
                f"Request is {request.channels}-channel but ring holds {view.channels}-channel frames"
            )
        if request.buffer_capacity_frames != view.capacity:
            raise FormatMismatch(
                f"Request capacity {request.buffer_capacity_frames} does not match ring capacity {view.capacity}"
            )

    @staticmethod
    def _copy_window(frames: np.ndarray, start: int, count: int) -> np.ndarray:
        """Copy ``count`` frames starting at ``start``, wrapping past the end."""
        capacity = frames.shape[0]
        if start + count <= capacity:
            return frames[start:start + count].copy()

        # Tail holds the older frames, head the ones written after the wrap
        tail = frames[start:capacity]
        head = frames[0:count - (capacity - start)]
        return np.concatenate([tail, head])
