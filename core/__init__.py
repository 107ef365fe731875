"""
Core modules for the Image Toolkit
"""

from .exceptions import ImageProcessingError
from .mask_canvas import MaskCanvas
from .pixel_buffer import PixelBuffer

__all__ = [
    "PixelBuffer",
    "MaskCanvas",
    "ImageProcessingError",
]
