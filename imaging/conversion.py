"""
Format conversion: flatten onto white and encode as JPEG.
"""

import logging
from typing import Optional, Tuple

from core.constants import Colors, ErrorMessages, OutputConstants
from core.enums import ImageFormat
from core.exceptions import EncodingFailedError
from core.image.codec import Encoder, PillowEncoder
from core.image.processors import flatten_onto
from core.pixel_buffer import PixelBuffer

logger = logging.getLogger(__name__)


def convert_to_jpeg(
    buffer: PixelBuffer,
    encoder: Optional[Encoder] = None,
    quality: float = OutputConstants.DEFAULT_JPEG_QUALITY,
) -> Tuple[PixelBuffer, bytes]:
    """
    Composite buffer over white and encode it as JPEG.

    Args:
        buffer: Input buffer (may be transparent)
        encoder: Encode capability (defaults to PillowEncoder)
        quality: JPEG quality in 0..1

    Returns:
        Tuple of (opaque buffer, JPEG bytes)

    Raises:
        EncodingFailedError: If the encoder produced no bytes
    """
    encoder = encoder or PillowEncoder()
    flattened = flatten_onto(buffer, Colors.WHITE)

    data = encoder.encode(flattened, ImageFormat.JPEG, quality)
    if not data:
        raise EncodingFailedError(ErrorMessages.ENCODING_FAILED.format(error="jpeg encoder"))

    logger.info(f"Converted {buffer.width}x{buffer.height} to JPEG ({len(data)} bytes)")
    return flattened, data
