"""
Mask Canvas - brush-painted inpainting mask with a single undo snapshot
"""

import logging
from collections import deque
from threading import RLock
from typing import Optional

import cv2
import numpy as np

from core.constants import MaskConstants
from core.exceptions import InvalidDimensionError
from core.pixel_buffer import PixelBuffer

logger = logging.getLogger(__name__)


class MaskCanvas:
    """Mask editor: circular brush strokes, undo and reset"""

    def __init__(
        self,
        width: int,
        height: int,
        brush_size: int = MaskConstants.DEFAULT_BRUSH_SIZE,
        history_size: int = MaskConstants.HISTORY_SIZE,
    ):
        """
        Initialize Mask Canvas

        Args:
            width: Canvas width (may differ from the image it will be applied to)
            height: Canvas height
            brush_size: Brush diameter in pixels, clamped to 5..100
            history_size: Number of previous-mask snapshots kept for undo
        """
        if width <= 0 or height <= 0:
            raise InvalidDimensionError(f"Invalid mask canvas size: {width}x{height}")

        self.width = width
        self.height = height
        self.mask = np.zeros((height, width, 4), dtype=np.uint8)
        self.history: deque = deque(maxlen=history_size)
        self._brush_size = MaskConstants.DEFAULT_BRUSH_SIZE
        self.brush_size = brush_size

        # Thread safety (a host UI may paint from an event thread)
        self.lock = RLock()

        logger.debug(f"Mask canvas initialized: {width}x{height}, brush {self.brush_size}px")

    @property
    def brush_size(self) -> int:
        return self._brush_size

    @brush_size.setter
    def brush_size(self, value: int):
        self._brush_size = int(
            max(MaskConstants.MIN_BRUSH_SIZE, min(MaskConstants.MAX_BRUSH_SIZE, value))
        )

    def grow_brush(self) -> int:
        self.brush_size = self.brush_size + MaskConstants.BRUSH_STEP
        return self.brush_size

    def shrink_brush(self) -> int:
        self.brush_size = self.brush_size - MaskConstants.BRUSH_STEP
        return self.brush_size

    def begin_stroke(self, x: float, y: float) -> None:
        """Snapshot the current mask, then paint the first dab of a stroke."""
        with self.lock:
            self.history.append(self.mask.copy())
            self.paint(x, y)

    def paint(self, x: float, y: float) -> None:
        """Paint a filled circle of radius ``brush_size / 2`` centered at (x, y)."""
        with self.lock:
            center = (int(x + 0.5), int(y + 0.5))
            radius = max(1, int(self.brush_size / 2 + 0.5))
            cv2.circle(
                self.mask,
                center,
                radius,
                MaskConstants.MARKER_COLOR,
                thickness=-1,
                lineType=cv2.LINE_8,
            )

    def undo(self) -> bool:
        """
        Restore the previous-mask snapshot

        Returns:
            False when there is nothing to undo
        """
        with self.lock:
            if not self.history:
                return False
            self.mask = self.history.pop()
            return True

    def reset(self) -> None:
        """Clear the mask and drop the snapshot"""
        with self.lock:
            self.mask[:] = 0
            self.history.clear()

    def has_marked_region(self) -> bool:
        with self.lock:
            return bool((self.mask[:, :, 3] > 0).any())

    def marked_count(self) -> int:
        with self.lock:
            return int(np.count_nonzero(self.mask[:, :, 3]))

    def to_mask(self) -> PixelBuffer:
        """Return a copy of the mask as a PixelBuffer"""
        with self.lock:
            return PixelBuffer(data=self.mask.copy())

    @property
    def can_undo(self) -> bool:
        return len(self.history) > 0

    def snapshot(self) -> Optional[PixelBuffer]:
        """The stored previous mask, if any"""
        with self.lock:
            if not self.history:
                return None
            return PixelBuffer(data=self.history[-1].copy())
