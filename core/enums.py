"""
Centralized enums for the Image Toolkit.
"""

from enum import Enum


class CompressionMode(str, Enum):
    """Quality profile for adaptive compression."""

    BALANCED = "balanced"
    MAXIMUM = "maximum"
    QUALITY = "quality"


class ImageFormat(str, Enum):
    """Encoded output formats understood by the encoder."""

    JPEG = "jpeg"
    PNG = "png"
    WEBP = "webp"

    @property
    def mime_type(self) -> str:
        return f"image/{self.value}"

    @property
    def extension(self) -> str:
        return ".jpg" if self is ImageFormat.JPEG else f".{self.value}"

    @property
    def supports_alpha(self) -> bool:
        return self is not ImageFormat.JPEG

    @classmethod
    def from_mime_type(cls, mime_type: str) -> "ImageFormat":
        """Map a MIME type (``image/png``, ``image/jpg``...) to a format."""
        subtype = mime_type.lower().split("/")[-1]
        if subtype == "jpg":
            subtype = "jpeg"
        return cls(subtype)


class Operation(str, Enum):
    """Operations the processing service can run over a batch."""

    RESIZE = "resize"
    CROP = "crop"
    ROTATE = "rotate"
    REMOVE_BACKGROUND = "remove_background"
    INPAINT = "inpaint"
    COMPRESS = "compress"
    CONVERT_TO_JPEG = "convert_to_jpeg"
