"""
Image format conversion utilities.

Handles conversions between different image representations:
- PixelBuffer (RGBA NumPy arrays)
- PIL Images
- Base64 data URLs (previews handed to a host UI)
"""

import base64
import logging

import numpy as np
from PIL import Image

from core.pixel_buffer import PixelBuffer

logger = logging.getLogger(__name__)


class ImageConverters:
    """Utilities for converting between image formats."""

    @staticmethod
    def buffer_to_pil(buffer: PixelBuffer) -> Image.Image:
        """
        Convert PixelBuffer to PIL Image.

        Args:
            buffer: RGBA pixel buffer

        Returns:
            PIL Image in RGBA mode
        """
        return Image.fromarray(buffer.data)

    @staticmethod
    def pil_to_buffer(image: Image.Image) -> PixelBuffer:
        """
        Convert PIL Image of any mode to PixelBuffer.

        Palette images with a transparency key and LA images keep their
        alpha; everything else becomes opaque RGBA.

        Args:
            image: PIL Image

        Returns:
            RGBA PixelBuffer
        """
        if image.mode != "RGBA":
            image = image.convert("RGBA")
        return PixelBuffer(data=np.array(image, dtype=np.uint8))

    @staticmethod
    def to_data_url(data: bytes, mime_type: str) -> str:
        """
        Encode already-encoded image bytes as a ``data:`` URL.

        Args:
            data: Encoded image bytes (PNG, JPEG, WEBP)
            mime_type: MIME type of the bytes

        Returns:
            Data URL string
        """
        encoded = base64.b64encode(data).decode("utf-8")
        return f"data:{mime_type};base64,{encoded}"
