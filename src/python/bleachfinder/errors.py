"""Exception types raised by the bleachfinder pipeline."""


class BleachfinderError(Exception):
    """Base class for all bleachfinder errors."""


class PreconditionError(BleachfinderError, ValueError):
    """Input image or ROI is unusable; raised before any computation."""


class ConfigError(BleachfinderError, ValueError):
    """A configuration value is out of range."""


class UnsupportedPixelTypeError(BleachfinderError, TypeError):
    """Pixel element type is not uint8, uint16 or float32."""


class AlignmentError(BleachfinderError):
    """Aligned frames share no valid overlapping region."""


class TooManyRegionsError(BleachfinderError):
    """More bleached regions than the 8-bit label map can hold."""

    def __init__(self, count: int):
        super().__init__(f"Too many bleached regions: {count}")
        self.count = count


class AnalysisCancelled(BleachfinderError):
    """Analysis was cancelled; ``partial`` holds the output completed so far."""

    def __init__(self, message: str = "Analysis cancelled", partial=None):
        super().__init__(message)
        self.partial = partial
