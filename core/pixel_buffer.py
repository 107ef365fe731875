"""
PixelBuffer - in-memory RGBA raster shared by every processing stage.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Sequence

import numpy as np

from core.constants import ErrorMessages
from core.exceptions import InvalidDimensionError


@dataclass
class PixelBuffer:
    """
    Simple data object: RGBA pixels, row-major, 4 bytes per pixel.

    Stages never mutate a buffer they received; they return a new owner.
    """

    data: np.ndarray  # Shape (H, W, 4), dtype uint8, RGBA order.

    def __post_init__(self):
        if self.data.dtype != np.uint8 or self.data.ndim != 3 or self.data.shape[2] != 4:
            raise InvalidDimensionError(
                ErrorMessages.INVALID_BUFFER_SHAPE.format(shape=self.data.shape)
            )
        if self.data.shape[0] <= 0 or self.data.shape[1] <= 0:
            raise InvalidDimensionError(
                ErrorMessages.INVALID_DIMENSION.format(
                    width=self.data.shape[1], height=self.data.shape[0]
                )
            )
        self.data = np.ascontiguousarray(self.data)

    @classmethod
    def from_array(cls, array: np.ndarray) -> "PixelBuffer":
        """
        Build a buffer from a grayscale, RGB or RGBA uint8 array.

        Missing alpha is filled with 255. The array is always copied.
        """
        array = np.asarray(array)
        if array.dtype != np.uint8:
            array = np.clip(array, 0, 255).astype(np.uint8)

        if array.ndim == 2:
            array = np.stack([array, array, array], axis=-1)

        if array.ndim != 3 or array.shape[2] not in (3, 4):
            raise InvalidDimensionError(
                ErrorMessages.INVALID_BUFFER_SHAPE.format(shape=array.shape)
            )

        if array.shape[2] == 3:
            alpha = np.full(array.shape[:2] + (1,), 255, dtype=np.uint8)
            array = np.concatenate([array, alpha], axis=-1)

        return cls(data=array.copy())

    @classmethod
    def from_bytes(cls, raw: bytes, width: int, height: int) -> "PixelBuffer":
        """Wrap raw interleaved RGBA bytes. ``len(raw)`` must equal W*H*4."""
        if width <= 0 or height <= 0:
            raise InvalidDimensionError(
                ErrorMessages.INVALID_DIMENSION.format(width=width, height=height)
            )
        if len(raw) != width * height * 4:
            raise InvalidDimensionError(
                ErrorMessages.INVALID_BUFFER_LENGTH.format(
                    length=len(raw), width=width, height=height
                )
            )
        array = np.frombuffer(raw, dtype=np.uint8).reshape(height, width, 4)
        return cls(data=array.copy())

    @classmethod
    def blank(
        cls, width: int, height: int, color: Sequence[int] = (0, 0, 0, 0)
    ) -> "PixelBuffer":
        """Create a buffer filled with a single RGBA (or RGB, opaque) color."""
        if width <= 0 or height <= 0:
            raise InvalidDimensionError(
                ErrorMessages.INVALID_DIMENSION.format(width=width, height=height)
            )
        rgba = tuple(color) if len(color) == 4 else tuple(color) + (255,)
        array = np.empty((height, width, 4), dtype=np.uint8)
        array[:, :] = rgba
        return cls(data=array)

    @property
    def width(self) -> int:
        return int(self.data.shape[1])

    @property
    def height(self) -> int:
        return int(self.data.shape[0])

    @property
    def size(self) -> tuple[int, int]:
        """(width, height)"""
        return self.width, self.height

    @property
    def rgb(self) -> np.ndarray:
        """View of the color channels, shape (H, W, 3)."""
        return self.data[:, :, :3]

    @property
    def alpha(self) -> np.ndarray:
        """View of the alpha channel, shape (H, W)."""
        return self.data[:, :, 3]

    def copy(self) -> "PixelBuffer":
        return PixelBuffer(data=self.data.copy())

    def tobytes(self) -> bytes:
        return self.data.tobytes()

    def __len__(self) -> int:
        return int(self.data.size)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, PixelBuffer):
            return NotImplemented
        return self.data.shape == other.data.shape and bool(np.array_equal(self.data, other.data))


def round_half_up(values: np.ndarray) -> np.ndarray:
    """
    Round non-negative samples half away from zero.

    Used everywhere a float sample is turned back into a byte so that
    results do not depend on numpy's round-half-to-even policy.
    """
    return np.floor(np.asarray(values, dtype=np.float64) + 0.5)


def to_uint8(values: np.ndarray) -> np.ndarray:
    """Round half up and clip to the 0..255 byte range."""
    return np.clip(round_half_up(values), 0, 255).astype(np.uint8)
