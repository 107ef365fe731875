"""
Image processing operations shared by several algorithms.

Handles small pixel-level tasks:
- Fitting dimensions within a maximum
- Flattening transparency onto an opaque color
- Alpha premultiplication for interpolation
"""

import logging
from typing import Optional, Sequence, Tuple

import numpy as np

from core.constants import Colors
from core.pixel_buffer import PixelBuffer, to_uint8

logger = logging.getLogger(__name__)


def fit_within(width: int, height: int, max_dimension: Optional[int]) -> Tuple[int, int]:
    """
    Scale dimensions so the longer side is at most ``max_dimension``.

    Args:
        width: Source width
        height: Source height
        max_dimension: Maximum dimension (width or height), or None

    Returns:
        Tuple of (width, height); unchanged when already within bounds
    """
    if not max_dimension or max(width, height) <= max_dimension:
        return width, height

    scale = max_dimension / max(width, height)
    new_width = max(1, int(width * scale + 0.5))
    new_height = max(1, int(height * scale + 0.5))
    return new_width, new_height


def has_transparency(buffer: PixelBuffer, probes: int = 50) -> bool:
    """
    Detect transparency by sampling a coarse grid of the alpha channel.

    Args:
        buffer: Input buffer
        probes: Approximate number of probe points per axis

    Returns:
        True if any sampled alpha is below 255
    """
    step_x = max(1, buffer.width // probes)
    step_y = max(1, buffer.height // probes)
    sampled = buffer.alpha[::step_y, ::step_x]
    return bool((sampled < 255).any())


def flatten_onto(buffer: PixelBuffer, color: Sequence[int] = Colors.WHITE) -> PixelBuffer:
    """
    Composite buffer over an opaque background color.

    Args:
        buffer: Input buffer (may be transparent)
        color: RGB background color

    Returns:
        New fully opaque buffer
    """
    alpha = buffer.alpha.astype(np.float64)[:, :, None] / 255.0
    background = np.asarray(color[:3], dtype=np.float64)
    rgb = buffer.rgb.astype(np.float64) * alpha + background * (1.0 - alpha)

    out = np.empty_like(buffer.data)
    out[:, :, :3] = to_uint8(rgb)
    out[:, :, 3] = 255
    return PixelBuffer(data=out)


def premultiply(buffer: PixelBuffer) -> np.ndarray:
    """Return float32 RGBA samples with color scaled by alpha."""
    data = buffer.data.astype(np.float32)
    data[:, :, :3] *= data[:, :, 3:4] / 255.0
    return data


def unpremultiply(data: np.ndarray) -> PixelBuffer:
    """Inverse of ``premultiply``; fully transparent pixels get black color."""
    alpha = np.clip(data[:, :, 3:4], 0.0, 255.0)
    safe_alpha = np.where(alpha > 0, alpha, 1.0)
    rgb = np.where(alpha > 0, data[:, :, :3] * 255.0 / safe_alpha, 0.0)

    out = np.empty(data.shape[:2] + (4,), dtype=np.uint8)
    out[:, :, :3] = to_uint8(rgb)
    out[:, :, 3] = to_uint8(alpha[:, :, 0])
    return PixelBuffer(data=out)
