"""
Geometric transforms: resize, crop and quarter-turn rotation.

All operations return a freshly allocated PixelBuffer and are
deterministic. Interpolated samples are rounded half away from zero.
"""

import logging
from typing import Dict, Union

import cv2
import numpy as np

from core.constants import ErrorMessages, GeometryConstants
from core.exceptions import EmptyRegionError, InvalidDimensionError, UnsupportedAngleError
from core.image.processors import premultiply, unpremultiply
from core.pixel_buffer import PixelBuffer
from schemas.common import Rect

logger = logging.getLogger(__name__)


def resize(buffer: PixelBuffer, target_width: int, target_height: int) -> PixelBuffer:
    """
    Resample buffer to target_width x target_height.

    Shrinking uses area averaging (``cv2.INTER_AREA``), enlarging uses
    bicubic interpolation. Color is interpolated alpha-premultiplied so
    transparent pixels do not bleed into their neighbours.

    Args:
        buffer: Source buffer
        target_width: Output width (> 0)
        target_height: Output height (> 0)

    Returns:
        Resized buffer

    Raises:
        InvalidDimensionError: If either target dimension is below one pixel
    """
    if (
        target_width < GeometryConstants.MIN_DIMENSION
        or target_height < GeometryConstants.MIN_DIMENSION
    ):
        raise InvalidDimensionError(
            ErrorMessages.INVALID_DIMENSION.format(width=target_width, height=target_height)
        )

    target_width = int(target_width)
    target_height = int(target_height)

    if (target_width, target_height) == buffer.size:
        return buffer.copy()

    shrinking = target_width <= buffer.width and target_height <= buffer.height
    interpolation = cv2.INTER_AREA if shrinking else cv2.INTER_CUBIC

    resampled = cv2.resize(
        premultiply(buffer), (target_width, target_height), interpolation=interpolation
    )
    # Bicubic overshoot: keep color within what alpha allows
    resampled[:, :, 3] = np.clip(resampled[:, :, 3], 0.0, 255.0)
    resampled[:, :, :3] = np.clip(resampled[:, :, :3], 0.0, resampled[:, :, 3:4])

    logger.debug(
        f"Resized {buffer.width}x{buffer.height} -> {target_width}x{target_height} "
        f"({'area' if shrinking else 'cubic'})"
    )
    return unpremultiply(resampled)


def crop(buffer: PixelBuffer, rect: Union[Rect, Dict]) -> PixelBuffer:
    """
    Copy a rectangular region into a new buffer.

    The rectangle is first rounded and clamped to the image (see
    ``Rect.clamp``).

    Args:
        buffer: Source buffer
        rect: Region to extract (Rect or dict with x, y, width, height)

    Returns:
        Buffer of size clamped width x clamped height

    Raises:
        EmptyRegionError: If the clamped width or height is <= 0
    """
    if isinstance(rect, dict):
        rect = Rect.from_dict(rect)

    clamped = rect.clamp(buffer.width, buffer.height)
    if clamped.width <= 0 or clamped.height <= 0:
        raise EmptyRegionError(
            ErrorMessages.EMPTY_REGION.format(width=clamped.width, height=clamped.height)
        )

    region = buffer.data[clamped.y : clamped.y2, clamped.x : clamped.x2]
    return PixelBuffer(data=region.copy())


def normalize_angle(degrees: Union[int, float]) -> int:
    """
    Normalize a quarter-turn angle into {0, 90, 180, 270}.

    Raises:
        UnsupportedAngleError: If the angle is not a multiple of 90
    """
    if isinstance(degrees, float):
        if not degrees.is_integer():
            raise UnsupportedAngleError(ErrorMessages.UNSUPPORTED_ANGLE.format(degrees=degrees))
        degrees = int(degrees)

    normalized = degrees % GeometryConstants.FULL_TURN
    if normalized not in GeometryConstants.SUPPORTED_ANGLES:
        raise UnsupportedAngleError(ErrorMessages.UNSUPPORTED_ANGLE.format(degrees=degrees))
    return normalized


def rotate(buffer: PixelBuffer, degrees: Union[int, float]) -> PixelBuffer:
    """
    Rotate clockwise by a multiple of 90 degrees.

    Quarter turns swap width and height. Rotation is lossless.

    Args:
        buffer: Source buffer
        degrees: One of 0, 90, 180, 270 (negative multiples are normalized)

    Returns:
        Rotated buffer

    Raises:
        UnsupportedAngleError: For any other angle
    """
    normalized = normalize_angle(degrees)
    if normalized == 0:
        return buffer.copy()

    # np.rot90 turns counter-clockwise for positive k
    quarter_turns = normalized // 90
    rotated = np.rot90(buffer.data, k=-quarter_turns)
    return PixelBuffer(data=np.ascontiguousarray(rotated))


class GeometryTransformer:
    """Groups resize / crop / rotate with operation logging."""

    def resize(self, buffer: PixelBuffer, width: int, height: int) -> PixelBuffer:
        result = resize(buffer, width, height)
        logger.info(f"Resize: {buffer.width}x{buffer.height} -> {result.width}x{result.height}")
        return result

    def crop(self, buffer: PixelBuffer, rect: Union[Rect, Dict]) -> PixelBuffer:
        result = crop(buffer, rect)
        logger.info(f"Crop: {buffer.width}x{buffer.height} -> {result.width}x{result.height}")
        return result

    def rotate(self, buffer: PixelBuffer, degrees: Union[int, float]) -> PixelBuffer:
        result = rotate(buffer, degrees)
        logger.info(
            f"Rotate {degrees}: {buffer.width}x{buffer.height} -> {result.width}x{result.height}"
        )
        return result
