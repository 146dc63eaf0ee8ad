"""Error types raised by ring capture, extraction and encoding."""


class RingCaptureError(RuntimeError):
    """Base class for all ringcapture errors."""


class InvalidFormat(RingCaptureError, ValueError):
    """Raised when a sample rate or channel count is outside the supported range."""


class ExtractError(RingCaptureError):
    """Raised when a session window cannot be extracted from the ring buffer."""


class InvalidDuration(ExtractError, ValueError):
    """Requested session duration is not a positive finite number."""


class InvalidWriteHead(ExtractError, ValueError):
    """Write head reported by the producer is negative."""


class FormatMismatch(ExtractError, ValueError):
    """Session request disagrees with the ring buffer it is applied to."""


class NoDataObserved(ExtractError):
    """The capture source never produced a single frame."""


class EmptyCapture(ExtractError):
    """The session window holds zero frames after clamping."""


class EncodeError(RingCaptureError):
    """Raised when samples cannot be serialized into a PCM container."""


class EmptyInput(EncodeError):
    """Encoder received zero frames. Upstream validation should make this unreachable."""


class UnsupportedSampleType(EncodeError):
    """Sample array dtype is neither floating point nor int16."""


class ContainerTooLarge(EncodeError):
    """Data chunk does not fit the 32-bit RIFF size fields."""


class CaptureDeviceError(RingCaptureError):
    """No usable audio input device."""


class SessionStateError(RingCaptureError):
    """Capture session used outside of its start/finish lifecycle."""
