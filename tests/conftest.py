"""
Pytest configuration and fixtures for Image Toolkit tests
"""

from unittest.mock import MagicMock

import cv2
import numpy as np
import pytest

from config import Settings
from core.enums import ImageFormat
from core.image.codec import PillowEncoder
from core.pixel_buffer import PixelBuffer
from services.processing_service import ProcessingService, SourceImage


@pytest.fixture
def test_image():
    """Create an opaque RGBA test image (80x60) with some content"""
    image = np.zeros((60, 80, 4), dtype=np.uint8)
    image[:, :, 3] = 255
    cv2.rectangle(image, (10, 10), (40, 40), (255, 255, 255, 255), -1)
    cv2.circle(image, (60, 30), 12, (200, 40, 40, 255), -1)
    return image


@pytest.fixture
def test_buffer(test_image):
    """PixelBuffer wrapping test_image"""
    return PixelBuffer.from_array(test_image)


@pytest.fixture
def solid_buffer():
    """Factory for single-color buffers"""

    def _make(width=16, height=12, color=(120, 130, 140, 255)):
        return PixelBuffer.blank(width, height, color)

    return _make


@pytest.fixture
def object_on_background():
    """Red square on a uniform light-gray background (64x64)"""
    image = np.full((64, 64, 4), 255, dtype=np.uint8)
    image[:, :, :3] = (230, 230, 230)
    cv2.rectangle(image, (20, 20), (43, 43), (200, 20, 20, 255), -1)
    return PixelBuffer.from_array(image)


@pytest.fixture
def photo_buffer():
    """800x600 opaque photo-like buffer: gradients plus seeded noise"""
    rng = np.random.default_rng(1234)
    y, x = np.mgrid[0:600, 0:800]
    image = np.empty((600, 800, 4), dtype=np.uint8)
    image[:, :, 0] = (x * 255 // 799).astype(np.uint8)
    image[:, :, 1] = (y * 255 // 599).astype(np.uint8)
    image[:, :, 2] = ((x + y) % 256).astype(np.uint8)
    noise = rng.integers(-20, 21, size=(600, 800, 3))
    image[:, :, :3] = np.clip(image[:, :, :3].astype(np.int32) + noise, 0, 255).astype(np.uint8)
    image[:, :, 3] = 255
    return PixelBuffer(data=image)


@pytest.fixture
def pillow_encoder():
    """Real Pillow-backed encoder"""
    return PillowEncoder()


@pytest.fixture
def mock_encoder():
    """
    Fake encoder for unit testing: JPEG and PNG only, output size grows
    with quality (1000 bytes at q=1.0, 5000 bytes for PNG).
    """
    mock = MagicMock()
    mock.supports.side_effect = lambda fmt: fmt in (ImageFormat.JPEG, ImageFormat.PNG)

    def _encode(buffer, fmt, quality=None):
        if fmt is ImageFormat.PNG:
            return b"\x89PNG" + b"\x00" * 4996
        return b"\xff" * int((quality or 1.0) * 1000)

    mock.encode.side_effect = _encode
    return mock


@pytest.fixture
def test_settings():
    """Default settings, independent of the environment"""
    return Settings()


@pytest.fixture
def processing_service(pillow_encoder, test_settings):
    """Create ProcessingService instance for testing"""
    return ProcessingService(encoder=pillow_encoder, settings=test_settings)


@pytest.fixture
def png_source(test_buffer):
    """SourceImage for a PNG upload"""
    return SourceImage(name="photo.png", buffer=test_buffer, size=10_000, mime_type="image/png")


@pytest.fixture
def jpeg_source(test_buffer):
    """SourceImage for a JPEG upload"""
    return SourceImage(name="photo.jpg", buffer=test_buffer, size=10_000, mime_type="image/jpeg")
