"""
Exception taxonomy for image processing operations.

Every condition is local and recoverable: callers catch
``ImageProcessingError`` per image and carry on with the rest of a batch.
"""


class ImageProcessingError(Exception):
    """Base class for all processing failures."""

    code = "processing_error"

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message

    def to_dict(self):
        return {"error": self.code, "detail": self.message}


class InvalidDimensionError(ImageProcessingError):
    """Target or buffer dimensions are not positive / consistent."""

    code = "invalid_dimension"


class EmptyRegionError(ImageProcessingError):
    """Crop rectangle is empty after clamping."""

    code = "empty_region"


class UnsupportedAngleError(ImageProcessingError):
    """Rotation angle is not a multiple of 90 degrees."""

    code = "unsupported_angle"


class ContextUnavailableError(ImageProcessingError):
    """Pixel surface or drawing primitive could not be acquired."""

    code = "context_unavailable"


class NoMarkedRegionError(ImageProcessingError):
    """Inpainting mask has no marked pixels."""

    code = "no_marked_region"


class EncodingFailedError(ImageProcessingError):
    """No encoding attempt produced any bytes."""

    code = "encoding_failed"
