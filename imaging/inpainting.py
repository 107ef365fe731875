"""
Mask-guided watermark inpainting by iterative neighbour averaging.

Marked pixels are re-estimated from the mean color of the unmarked pixels
in a square window around them. A marked pixel is never a source, in any
pass, so pixels farther than one radius from the hole boundary keep their
color. Alpha is never touched.
"""

import logging
from typing import Callable, Optional, Union

import cv2
import numpy as np
from pydantic import Field

from core.constants import ErrorMessages, InpaintDefaults
from core.exceptions import ContextUnavailableError, NoMarkedRegionError
from core.pixel_buffer import PixelBuffer
from core.utils.params_processor import prepare_params
from schemas.base import BaseProcessingParams

logger = logging.getLogger(__name__)

ProgressCallback = Callable[[float], None]
MaskLike = Union[PixelBuffer, np.ndarray]


class InpaintParams(BaseProcessingParams):
    """Watermark inpainting parameters."""

    iterations: int = Field(
        default=InpaintDefaults.ITERATIONS, ge=1, description="Number of averaging passes"
    )
    radius: int = Field(
        default=InpaintDefaults.RADIUS, ge=1, description="Neighbourhood radius in pixels"
    )


def scale_mask(mask: MaskLike, width: int, height: int) -> np.ndarray:
    """
    Extract the marker channel and resample it to width x height.

    A PixelBuffer mask contributes its alpha channel; a 2D array is used
    as-is (any non-zero value marks the pixel). Nearest-neighbour
    resampling keeps the mask binary-equivalent.

    Returns:
        uint8 array of shape (height, width)
    """
    if isinstance(mask, PixelBuffer):
        channel = mask.alpha
    else:
        array = np.asarray(mask)
        if array.ndim == 3:
            channel = array[:, :, -1]
        elif array.ndim == 2:
            channel = array
        else:
            raise ContextUnavailableError(
                ErrorMessages.CONTEXT_UNAVAILABLE.format(error=f"mask shape {array.shape}")
            )
        channel = (channel != 0).astype(np.uint8) * 255 if channel.dtype == bool else channel
        channel = np.clip(channel, 0, 255).astype(np.uint8)

    if channel.shape == (height, width):
        return channel.copy()
    return cv2.resize(channel, (width, height), interpolation=cv2.INTER_NEAREST)


def _window_sum(values: np.ndarray, radius: int) -> np.ndarray:
    """Sum over the (2r+1)x(2r+1) window around each pixel; zero outside the image."""
    height, width = values.shape[:2]
    size = 2 * radius + 1
    pad = ((radius + 1, radius), (radius + 1, radius)) + ((0, 0),) * (values.ndim - 2)
    integral = np.pad(values, pad).cumsum(axis=0).cumsum(axis=1)
    return (
        integral[size : size + height, size : size + width]
        - integral[:height, size : size + width]
        - integral[size : size + height, :width]
        + integral[:height, :width]
    )


class WatermarkInpainter:
    """Reconstructs pixels under a painted mask from their neighbours."""

    def __init__(self, params: Optional[InpaintParams] = None):
        self.params = prepare_params(params, InpaintParams)

    def inpaint(
        self,
        buffer: PixelBuffer,
        mask: MaskLike,
        on_progress: Optional[ProgressCallback] = None,
    ) -> PixelBuffer:
        """
        Fill marked pixels with the average of their unmarked neighbours.

        Args:
            buffer: Input buffer (not modified)
            mask: Marker mask, any size; rescaled to the buffer
            on_progress: Optional percent sink called at coarse milestones

        Returns:
            Working copy with marked RGB values replaced

        Raises:
            NoMarkedRegionError: If the scaled mask marks no pixel
        """
        report = on_progress or (lambda _percent: None)
        report(InpaintDefaults.PROGRESS_LOADED)

        working = buffer.data.copy()
        report(InpaintDefaults.PROGRESS_COPIED)

        marker = scale_mask(mask, buffer.width, buffer.height)
        report(InpaintDefaults.PROGRESS_MASK_SCALED)

        marked = marker > 0
        marked_count = int(np.count_nonzero(marked))
        if marked_count == 0:
            raise NoMarkedRegionError(ErrorMessages.NO_MARKED_REGION)
        report(InpaintDefaults.PROGRESS_COLLECTED)

        radius = self.params.radius
        filled = np.zeros_like(marked)
        # Only unmarked pixels are sources, so visiting order is irrelevant
        weight = (~marked).astype(np.int64)
        counts = _window_sum(weight, radius) - weight

        for iteration in range(self.params.iterations):
            rgb = working[:, :, :3].astype(np.int64) * weight[:, :, None]
            sums = _window_sum(rgb, radius) - rgb

            update = marked & (counts > 0)
            divisor = 2 * np.maximum(counts, 1)[:, :, None]
            # Integer round-half-up of sums / counts
            averages = (2 * sums + divisor // 2) // divisor

            working[update, :3] = averages[update].astype(np.uint8)
            filled |= update

            logger.debug(
                f"Inpaint pass {iteration + 1}/{self.params.iterations}: "
                f"{int(np.count_nonzero(update))}/{marked_count} pixels estimated"
            )
            report(
                min(
                    InpaintDefaults.PROGRESS_COLLECTED
                    + (iteration + 1) * InpaintDefaults.PROGRESS_PER_PASS,
                    InpaintDefaults.PROGRESS_PASSES_CAP,
                )
            )

        unreachable = marked_count - int(np.count_nonzero(filled))
        if unreachable:
            logger.warning(f"Inpaint: {unreachable} marked pixels had no unmarked neighbours")

        report(InpaintDefaults.PROGRESS_DONE)
        logger.info(
            f"Inpainted {marked_count} pixels in {self.params.iterations} passes "
            f"(radius {radius}) on {buffer.width}x{buffer.height}"
        )
        return PixelBuffer(data=working)


def inpaint_mask(
    buffer: PixelBuffer,
    mask: MaskLike,
    on_progress: Optional[ProgressCallback] = None,
    params: Optional[InpaintParams] = None,
) -> PixelBuffer:
    """Convenience wrapper around ``WatermarkInpainter.inpaint``."""
    return WatermarkInpainter(params).inpaint(buffer, mask, on_progress)
