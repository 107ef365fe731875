"""
Tests for the adaptive compression search
"""

from unittest.mock import MagicMock

import pytest

from core.enums import CompressionMode, ImageFormat
from core.exceptions import EncodingFailedError
from core.pixel_buffer import PixelBuffer
from imaging.compression import CompressionParams, CompressionSearch, compress_adaptive


class TestCompressionParams:
    """Test compression parameters"""

    @pytest.mark.parametrize(
        "mode,expected",
        [
            (CompressionMode.MAXIMUM, 0.65),
            (CompressionMode.BALANCED, 0.80),
            (CompressionMode.QUALITY, 0.95),
        ],
    )
    def test_start_quality(self, mode, expected):
        assert CompressionParams(mode=mode).start_quality == expected

    def test_mode_from_string(self):
        assert CompressionParams(mode="maximum").mode is CompressionMode.MAXIMUM


class TestCompressionSearch:
    """Test CompressionSearch with a fake encoder"""

    def test_stops_at_first_quality_below_original(self, mock_encoder, solid_buffer):
        """Test the search lowers quality until the size beats the original"""
        search = CompressionSearch(mock_encoder)
        # Fake JPEG sizes are quality * 1000 bytes
        result = search.compress(solid_buffer(), original_size=700)

        assert result.format is ImageFormat.JPEG
        assert result.quality == pytest.approx(0.65)
        assert result.size == 650
        assert result.attempts == 4
        assert result.compression_ratio == pytest.approx((700 - 650) / 700 * 100)

    def test_quality_floor(self, mock_encoder, solid_buffer):
        """Test the search settles at the floor when nothing beats the original"""
        result = CompressionSearch(mock_encoder).compress(solid_buffer(), original_size=100)

        assert result.quality == pytest.approx(0.45)
        assert result.size == 450
        assert result.compression_ratio < 0

    def test_webp_tried_first(self, solid_buffer):
        encoder = MagicMock()
        encoder.supports.return_value = True
        encoder.encode.return_value = b"x" * 10

        result = CompressionSearch(encoder).compress(solid_buffer(), original_size=1000)

        assert result.format is ImageFormat.WEBP
        assert result.attempts == 1
        first_call = encoder.encode.call_args_list[0]
        assert first_call.args[1] is ImageFormat.WEBP
        assert first_call.args[2] == pytest.approx(0.80)

    def test_opaque_png_goes_to_jpeg_over_white(self, mock_encoder, solid_buffer):
        result = CompressionSearch(mock_encoder).compress(
            solid_buffer(), original_size=5000, source_format=ImageFormat.PNG
        )

        assert result.format is ImageFormat.JPEG
        assert (result.buffer.alpha == 255).all()

    def test_transparent_png_stays_png(self, mock_encoder, solid_buffer):
        buffer = solid_buffer(color=(10, 10, 10, 100))

        result = CompressionSearch(mock_encoder).compress(
            buffer, original_size=10_000, source_format=ImageFormat.PNG
        )

        assert result.format is ImageFormat.PNG
        assert result.buffer == buffer
        # PNG is lossless: quality is passed as None
        png_calls = [c for c in mock_encoder.encode.call_args_list if c.args[1] is ImageFormat.PNG]
        assert all(c.args[2] is None for c in png_calls)

    def test_transparent_jpeg_source_is_flattened(self, mock_encoder, solid_buffer):
        buffer = solid_buffer(color=(0, 0, 0, 0))

        result = CompressionSearch(mock_encoder).compress(
            buffer, original_size=10_000, source_format=ImageFormat.JPEG
        )

        assert result.format is ImageFormat.JPEG
        assert tuple(result.buffer.data[0, 0]) == (255, 255, 255, 255)

    def test_maximum_mode_downscales(self, mock_encoder):
        buffer = PixelBuffer.blank(300, 100, (1, 2, 3, 255))
        search = CompressionSearch(mock_encoder, CompressionParams(max_dimension=150))

        result = search.compress(buffer, original_size=10_000, mode=CompressionMode.MAXIMUM)

        assert result.buffer.size == (150, 50)
        assert result.quality == pytest.approx(0.65)

    def test_balanced_mode_keeps_dimensions(self, mock_encoder):
        buffer = PixelBuffer.blank(300, 100, (1, 2, 3, 255))
        search = CompressionSearch(mock_encoder, CompressionParams(max_dimension=150))

        result = search.compress(buffer, original_size=10_000)
        assert result.buffer.size == (300, 100)

    def test_nothing_encodes(self, solid_buffer):
        encoder = MagicMock()
        encoder.supports.return_value = True
        encoder.encode.return_value = None

        with pytest.raises(EncodingFailedError):
            CompressionSearch(encoder).compress(solid_buffer(), original_size=1000)

    @pytest.mark.parametrize("size", [0, -10])
    def test_invalid_original_size(self, mock_encoder, solid_buffer, size):
        with pytest.raises(ValueError):
            CompressionSearch(mock_encoder).compress(solid_buffer(), original_size=size)

    def test_progress(self, mock_encoder, solid_buffer):
        reported = []
        CompressionSearch(mock_encoder).compress(
            solid_buffer(), original_size=1000, on_progress=reported.append
        )
        assert reported == [10, 20, 30, 60, 80, 100]


class TestCompressAdaptive:
    """Test compress_adaptive with the real Pillow encoder"""

    def test_tiny_solid_buffer_quality_mode(self, solid_buffer):
        buffer = solid_buffer(4, 4)
        result = compress_adaptive(buffer, original_size=50, mode=CompressionMode.QUALITY)

        assert result.buffer.size == (4, 4)
        assert result.size > 0

    def test_photo_balanced_mode(self, photo_buffer):
        """Test a large opaque buffer always produces a result, whatever the ratio"""
        result = compress_adaptive(photo_buffer, original_size=500_000)

        assert result.buffer.size == (800, 600)
        assert result.size > 0
        assert result.format in (ImageFormat.WEBP, ImageFormat.JPEG)

    def test_input_not_modified(self, photo_buffer):
        before = photo_buffer.copy()
        compress_adaptive(photo_buffer, original_size=500_000, mode=CompressionMode.MAXIMUM)
        assert photo_buffer == before
