"""
Common data structures shared across the toolkit.
"""

import math
from typing import Any, Dict, Union

from pydantic import BaseModel, Field

Number = Union[int, float]


def _round_half_up(value: Number) -> int:
    return int(math.floor(value + 0.5))


class Rect(BaseModel):
    """
    Rectangle in image pixel coordinates.

    Coordinates may be fractional (e.g. straight from a UI drag); ``clamp``
    turns them into an integer rectangle that fits the image.
    """

    x: Number = Field(0, description="Left edge")
    y: Number = Field(0, description="Top edge")
    width: Number = Field(..., description="Width")
    height: Number = Field(..., description="Height")

    def to_dict(self) -> Dict[str, Number]:
        return {"x": self.x, "y": self.y, "width": self.width, "height": self.height}

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Rect":
        return cls(
            x=data.get("x", 0),
            y=data.get("y", 0),
            width=data.get("width", 0),
            height=data.get("height", 0),
        )

    @property
    def x2(self) -> Number:
        return self.x + self.width

    @property
    def y2(self) -> Number:
        return self.y + self.height

    def clamp(self, image_width: int, image_height: int) -> "Rect":
        """
        Round and clamp to image bounds.

        Every field is rounded half up; width/height are capped at the image
        size; x is clamped to [0, W - width] and y to [0, H - height].
        The result may have a non-positive width or height, which callers
        treat as an empty region.

        Args:
            image_width: Image width
            image_height: Image height

        Returns:
            Integer Rect
        """
        width = min(_round_half_up(self.width), image_width)
        height = min(_round_half_up(self.height), image_height)
        x = max(0, min(_round_half_up(self.x), image_width - max(width, 0)))
        y = max(0, min(_round_half_up(self.y), image_height - max(height, 0)))
        return Rect(x=x, y=y, width=width, height=height)


class Size(BaseModel):
    """Image size"""

    width: int = Field(..., gt=0)
    height: int = Field(..., gt=0)
