"""Ring-buffer audio session capture and 16-bit PCM WAV encoding."""

from .audio import PcmEncoder, RingBuffer, RingCaptureExtractor
from .models import ExtractedSamples, RingBufferView, SessionRequest

__version__ = "0.1.0"

__all__ = [
    "PcmEncoder",
    "RingBuffer",
    "RingCaptureExtractor",
    "ExtractedSamples",
    "RingBufferView",
    "SessionRequest",
]
