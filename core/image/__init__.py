"""
Image processing utilities - modular architecture.

This package provides focused image processing utilities:
- converters: Format conversions (PixelBuffer, PIL, data URLs)
- codec: Pillow-backed encoder and decoder
- processors: Small pixel operations (fit, flatten, premultiply)
"""

from core.image.codec import Encoder, PillowEncoder, decode_image, detect_mime_type
from core.image.converters import ImageConverters

__all__ = ["ImageConverters", "Encoder", "PillowEncoder", "decode_image", "detect_mime_type"]
