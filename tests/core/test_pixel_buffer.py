"""
Tests for PixelBuffer module
"""

import numpy as np
import pytest

from core.exceptions import InvalidDimensionError
from core.pixel_buffer import PixelBuffer, round_half_up, to_uint8


class TestPixelBuffer:
    """Test PixelBuffer construction and accessors"""

    def test_from_array_rgb_adds_opaque_alpha(self):
        """Test RGB arrays are promoted to RGBA"""
        rgb = np.full((3, 5, 3), 7, dtype=np.uint8)
        buffer = PixelBuffer.from_array(rgb)

        assert buffer.size == (5, 3)
        assert (buffer.alpha == 255).all()
        assert (buffer.rgb == 7).all()

    def test_from_array_gray(self):
        """Test grayscale arrays are expanded to three channels"""
        gray = np.arange(6, dtype=np.uint8).reshape(2, 3)
        buffer = PixelBuffer.from_array(gray)

        assert buffer.data.shape == (2, 3, 4)
        assert (buffer.data[:, :, 0] == gray).all()
        assert (buffer.data[:, :, 2] == gray).all()

    def test_from_array_copies(self, test_image):
        """Test the source array is not shared"""
        buffer = PixelBuffer.from_array(test_image)
        test_image[0, 0] = (1, 2, 3, 4)

        assert tuple(buffer.data[0, 0]) != (1, 2, 3, 4)

    def test_from_bytes(self):
        """Test raw RGBA bytes are wrapped row-major"""
        raw = bytes(range(2 * 3 * 4))
        buffer = PixelBuffer.from_bytes(raw, width=3, height=2)

        assert buffer.width == 3
        assert buffer.height == 2
        assert tuple(buffer.data[0, 1]) == (4, 5, 6, 7)
        assert buffer.tobytes() == raw
        assert len(buffer) == 24

    def test_from_bytes_length_mismatch(self):
        """Test length invariant W*H*4"""
        with pytest.raises(InvalidDimensionError):
            PixelBuffer.from_bytes(b"\x00" * 10, width=2, height=2)

    @pytest.mark.parametrize("width,height", [(0, 4), (4, 0), (-1, 3)])
    def test_blank_invalid_dimensions(self, width, height):
        """Test non-positive dimensions are rejected"""
        with pytest.raises(InvalidDimensionError):
            PixelBuffer.blank(width, height)

    def test_blank_rgb_color_is_opaque(self):
        """Test RGB fill colors get full alpha"""
        buffer = PixelBuffer.blank(2, 2, (10, 20, 30))
        assert tuple(buffer.data[1, 1]) == (10, 20, 30, 255)

    def test_invalid_shape(self):
        """Test arrays without four channels are rejected"""
        with pytest.raises(InvalidDimensionError):
            PixelBuffer(data=np.zeros((2, 2, 3), dtype=np.uint8))

    def test_equality_and_copy(self, test_buffer):
        """Test copies are equal but independent"""
        clone = test_buffer.copy()
        assert clone == test_buffer

        clone.data[0, 0, 0] ^= 0xFF
        assert clone != test_buffer


class TestRounding:
    """Test byte rounding helpers"""

    def test_round_half_up(self):
        """Test halves round away from zero, not to even"""
        values = np.array([0.5, 1.5, 2.5, 2.49])
        assert round_half_up(values).tolist() == [1.0, 2.0, 3.0, 2.0]

    def test_to_uint8_clips(self):
        """Test values are clipped to the byte range"""
        assert to_uint8(np.array([-3.0, 254.5, 300.0])).tolist() == [0, 255, 255]
