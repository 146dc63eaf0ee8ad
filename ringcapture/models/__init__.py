"""Data models for the ringcapture package."""

from .audio import (
    RingBufferView,
    RingSnapshot,
    SessionRequest,
    ExtractedSamples,
    validate_format,
)
from .session import CaptureSession, SessionInfo, StopReason
from .events import SessionEvent

__all__ = [
    "RingBufferView",
    "RingSnapshot",
    "SessionRequest",
    "ExtractedSamples",
    "validate_format",
    "CaptureSession",
    "SessionInfo",
    "StopReason",
    "SessionEvent",
]
