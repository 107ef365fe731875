"""
Tests for geometric transforms
"""

import numpy as np
import pytest

from core.exceptions import EmptyRegionError, InvalidDimensionError, UnsupportedAngleError
from core.pixel_buffer import PixelBuffer
from imaging.geometry import GeometryTransformer, crop, normalize_angle, resize, rotate
from schemas import Rect


class TestResize:
    """Test resize"""

    def test_same_size_is_identity(self, test_buffer):
        """Test resize to identical dimensions returns an equal copy"""
        result = resize(test_buffer, test_buffer.width, test_buffer.height)

        assert result == test_buffer
        assert result.data is not test_buffer.data

    @pytest.mark.parametrize("size", [(40, 30), (160, 120), (80, 1), (1, 1)])
    def test_output_dimensions(self, test_buffer, size):
        result = resize(test_buffer, *size)
        assert result.size == size

    @pytest.mark.parametrize("size", [(0, 10), (10, 0), (-5, 5), (0.5, 10)])
    def test_invalid_dimensions(self, test_buffer, size):
        with pytest.raises(InvalidDimensionError):
            resize(test_buffer, *size)

    def test_solid_color_is_preserved(self, solid_buffer):
        """Test interpolation of a uniform buffer keeps its color"""
        buffer = solid_buffer(color=(90, 160, 30, 255))

        for size in [(5, 7), (64, 48)]:
            result = resize(buffer, *size)
            assert (result.data == (90, 160, 30, 255)).all()

    def test_transparent_neighbours_do_not_bleed(self):
        """Test color of transparent pixels does not leak into opaque ones"""
        image = np.zeros((8, 8, 4), dtype=np.uint8)
        image[:, :4] = (255, 0, 0, 255)
        image[:, 4:] = (0, 255, 0, 0)

        result = resize(PixelBuffer(data=image), 3, 3)
        opaque = result.alpha > 0
        assert (result.rgb[opaque][:, 1] == 0).all()


class TestCrop:
    """Test crop"""

    def test_crop_region(self, test_buffer):
        result = crop(test_buffer, Rect(x=10, y=10, width=31, height=31))

        assert result.size == (31, 31)
        assert (result.rgb == 255).all()

    def test_crop_accepts_dict(self, test_buffer):
        result = crop(test_buffer, {"x": 0, "y": 0, "width": 5, "height": 6})
        assert result.size == (5, 6)

    def test_crop_is_clamped(self, test_buffer):
        """Test oversize rects are clamped instead of failing"""
        result = crop(test_buffer, Rect(x=70, y=-10, width=30, height=100))

        assert result.size == (30, 60)
        assert result == crop(test_buffer, Rect(x=50, y=0, width=30, height=60))

    def test_full_crop_twice_is_identity(self, test_buffer):
        """Test cropping the full rect of a crop result returns the same pixels"""
        first = crop(test_buffer, Rect(x=5.4, y=7.6, width=33.3, height=20.5))
        again = crop(first, Rect(x=0, y=0, width=first.width, height=first.height))

        assert again == first

    @pytest.mark.parametrize("width,height", [(0, 10), (10, 0), (-4, 5), (0.4, 3)])
    def test_empty_region(self, test_buffer, width, height):
        with pytest.raises(EmptyRegionError):
            crop(test_buffer, Rect(x=0, y=0, width=width, height=height))


class TestRotate:
    """Test quarter-turn rotation"""

    def test_rotate_90_is_clockwise(self):
        """Test the top-left pixel moves to the top-right corner"""
        image = np.zeros((2, 3, 4), dtype=np.uint8)
        image[0, 0] = (255, 0, 0, 255)

        result = rotate(PixelBuffer(data=image), 90)
        assert result.size == (2, 3)
        assert tuple(result.data[0, 1]) == (255, 0, 0, 255)

    def test_rotate_180(self, test_buffer):
        result = rotate(test_buffer, 180)
        assert (result.data == test_buffer.data[::-1, ::-1]).all()

    def test_four_quarter_turns_is_identity(self, test_buffer):
        result = test_buffer
        for _ in range(4):
            result = rotate(result, 90)
        assert result == test_buffer

    def test_rotate_270_equals_minus_90(self, test_buffer):
        assert rotate(test_buffer, 270) == rotate(test_buffer, -90)

    def test_rotate_zero_copies(self, test_buffer):
        result = rotate(test_buffer, 0)
        assert result == test_buffer
        assert result.data is not test_buffer.data

    @pytest.mark.parametrize("degrees", [45, 91, 90.5, -30])
    def test_unsupported_angles(self, test_buffer, degrees):
        with pytest.raises(UnsupportedAngleError):
            rotate(test_buffer, degrees)

    @pytest.mark.parametrize("degrees,expected", [(360, 0), (-90, 270), (450, 90), (180.0, 180)])
    def test_normalize_angle(self, degrees, expected):
        assert normalize_angle(degrees) == expected


class TestGeometryTransformer:
    """Test the logging wrapper"""

    def test_delegates(self, test_buffer):
        transformer = GeometryTransformer()

        assert transformer.resize(test_buffer, 8, 6).size == (8, 6)
        assert transformer.crop(test_buffer, Rect(x=0, y=0, width=4, height=4)).size == (4, 4)
        assert transformer.rotate(test_buffer, 90).size == (60, 80)
