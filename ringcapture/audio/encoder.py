"""16-bit PCM RIFF/WAVE encoder."""

import struct
import logging

import numpy as np

from ..exceptions import ContainerTooLarge, EmptyInput, UnsupportedSampleType
from ..models.audio import ExtractedSamples, validate_format

logger = logging.getLogger(__name__)

HEADER_SIZE = 44
BITS_PER_SAMPLE = 16
BYTES_PER_SAMPLE = BITS_PER_SAMPLE // 8
PCM_FORMAT = 1
RESCALE_FACTOR = 32767
MAX_RIFF_SIZE = 0xFFFFFFFF

# RIFF header, fmt chunk, data chunk header
_HEADER = struct.Struct("<4sI4s4sIHHIIHH4sI")


class PcmEncoder:
    """Serializes extracted samples as a canonical 44-byte-header WAV file."""

    def encode(self, samples: ExtractedSamples) -> bytes:
        """Encode samples as header plus little-endian int16 data.

        Float samples are clamped to [-1.0, 1.0], scaled by 32767 and
        truncated toward zero, so 1.5 encodes as 32767 and -2.0 as -32767.
        int16 samples are written unchanged.

        Args:
            samples: Frames produced by the extractor

        Returns:
            Complete WAV file bytes

        Raises:
            EmptyInput: samples hold zero frames
            UnsupportedSampleType: sample dtype is not float or int16
            ContainerTooLarge: data does not fit 32-bit RIFF sizes
        """
        if samples.frame_count == 0:
            raise EmptyInput("Refusing to encode a session with zero frames")

        pcm = self.to_int16(samples.interleaved())
        body = pcm.astype("<i2", copy=False).tobytes()

        header = self.header(samples.sample_rate, samples.channels, len(body))
        logger.debug(
            f"Encoded {samples.frame_count} frames ({samples.channels}ch @ {samples.sample_rate}Hz): "
            f"{HEADER_SIZE + len(body)} bytes"
        )
        return header + body

    @staticmethod
    def to_int16(samples: np.ndarray) -> np.ndarray:
        """Convert float or int16 samples to int16 without wrapping."""
        if samples.dtype == np.int16:
            return samples
        if not np.issubdtype(samples.dtype, np.floating):
            raise UnsupportedSampleType(f"Cannot encode samples of dtype {samples.dtype}")

        # NaN carries no signal; infinities clamp like any other overshoot
        cleaned = np.nan_to_num(samples.astype(np.float64), nan=0.0, posinf=1.0, neginf=-1.0)
        scaled = np.clip(cleaned, -1.0, 1.0) * RESCALE_FACTOR
        return np.trunc(scaled).astype(np.int16)

    @staticmethod
    def header(sample_rate: int, channels: int, data_bytes: int) -> bytes:
        """Build the 44-byte RIFF/WAVE header for ``data_bytes`` of PCM data."""
        validate_format(sample_rate, channels)
        if data_bytes < 0:
            raise ValueError(f"Data size must not be negative, got {data_bytes}")
        chunk_size = 36 + data_bytes
        if chunk_size > MAX_RIFF_SIZE:
            raise ContainerTooLarge(f"{data_bytes} bytes of PCM data exceed the 4 GiB RIFF limit")

        block_align = channels * BYTES_PER_SAMPLE
        return _HEADER.pack(
            b"RIFF",
            chunk_size,
            b"WAVE",
            b"fmt ",
            16,
            PCM_FORMAT,
            channels,
            sample_rate,
            sample_rate * block_align,
            block_align,
            BITS_PER_SAMPLE,
            b"data",
            data_bytes,
        )
