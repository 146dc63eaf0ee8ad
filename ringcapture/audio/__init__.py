"""Ring buffer capture, session extraction and PCM encoding."""

from .ring_buffer import RingBuffer
from .extractor import RingCaptureExtractor
from .encoder import PcmEncoder
from .source import CaptureSource

__all__ = [
    'RingBuffer',
    'RingCaptureExtractor',
    'PcmEncoder',
    'CaptureSource',
]
