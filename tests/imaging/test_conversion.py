"""
Tests for JPEG conversion
"""

from unittest.mock import MagicMock

import pytest

from core.exceptions import EncodingFailedError
from core.image.codec import decode_image, detect_mime_type
from imaging.conversion import convert_to_jpeg


class TestConvertToJpeg:
    """Test convert_to_jpeg"""

    def test_transparent_becomes_white(self, solid_buffer):
        buffer = solid_buffer(8, 8, (0, 0, 0, 0))

        flattened, data = convert_to_jpeg(buffer)

        assert detect_mime_type(data) == "image/jpeg"
        assert (flattened.data == 255).all()
        decoded = decode_image(data)
        assert decoded.size == (8, 8)
        assert (decoded.rgb >= 250).all()

    def test_uses_default_quality(self, test_buffer):
        encoder = MagicMock()
        encoder.encode.return_value = b"jpeg"

        convert_to_jpeg(test_buffer, encoder)

        assert encoder.encode.call_args.args[2] == pytest.approx(0.92)

    def test_encoder_failure(self, test_buffer):
        encoder = MagicMock()
        encoder.encode.return_value = None

        with pytest.raises(EncodingFailedError):
            convert_to_jpeg(test_buffer, encoder)
