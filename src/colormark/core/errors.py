class WatermarkError(Exception):
    """Base class for every error raised by colormark."""


class DimensionMismatch(WatermarkError, ValueError):
    """Input image does not have the configured fixed size."""


class InvalidBlockGrid(WatermarkError, ValueError):
    """Image or watermark dimensions do not tile into the block grid."""


class InvalidParameter(WatermarkError, ValueError):
    """Key, step size or configuration value is out of range."""


class DecodeFailure(WatermarkError, OSError):
    """An image file or buffer could not be decoded."""
