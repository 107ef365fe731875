"""
Pixel decode / encode capabilities backed by Pillow.

The algorithms only depend on the ``Encoder`` protocol; ``PillowEncoder``
is the default implementation and ``decode_image`` the default loader.
"""

import io
import logging
from pathlib import Path
from typing import Optional, Protocol, Union

from PIL import Image, UnidentifiedImageError, features

from core.enums import ImageFormat
from core.image.converters import ImageConverters
from core.pixel_buffer import PixelBuffer

logger = logging.getLogger(__name__)


class Encoder(Protocol):
    """Encode capability consumed by compression and output encoding."""

    def supports(self, fmt: ImageFormat) -> bool:
        ...

    def encode(
        self, buffer: PixelBuffer, fmt: ImageFormat, quality: Optional[float] = None
    ) -> Optional[bytes]:
        ...


class PillowEncoder:
    """Encoder writing JPEG, PNG and (when Pillow was built with it) WEBP."""

    def __init__(self, optimize: bool = True):
        self.optimize = optimize
        self._webp_supported = features.check("webp")

    def supports(self, fmt: ImageFormat) -> bool:
        if fmt is ImageFormat.WEBP:
            return self._webp_supported
        return fmt in (ImageFormat.JPEG, ImageFormat.PNG)

    @staticmethod
    def quality_to_percent(quality: float) -> int:
        """Map a 0..1 quality to Pillow's 1..100 scale."""
        return max(1, min(100, int(quality * 100 + 0.5)))

    def encode(
        self, buffer: PixelBuffer, fmt: ImageFormat, quality: Optional[float] = None
    ) -> Optional[bytes]:
        """
        Encode buffer to bytes.

        Args:
            buffer: RGBA pixel buffer
            fmt: Target format
            quality: 0..1 quality for lossy formats (ignored for PNG)

        Returns:
            Encoded bytes, or None when the format is unsupported
        """
        if not self.supports(fmt):
            logger.debug(f"Encoder does not support {fmt.value}")
            return None

        image = ImageConverters.buffer_to_pil(buffer)
        save_kwargs = {"format": fmt.value.upper()}

        if fmt is ImageFormat.JPEG:
            # JPEG has no alpha channel
            image = image.convert("RGB")
            save_kwargs["optimize"] = self.optimize
            if quality is not None:
                save_kwargs["quality"] = self.quality_to_percent(quality)
        elif fmt is ImageFormat.WEBP:
            if quality is not None:
                save_kwargs["quality"] = self.quality_to_percent(quality)
        else:
            save_kwargs["optimize"] = self.optimize

        output = io.BytesIO()
        try:
            image.save(output, **save_kwargs)
        except (OSError, ValueError, KeyError) as e:
            logger.warning(f"Pillow failed to encode {fmt.value}: {e}")
            return None
        return output.getvalue()


def decode_image(source: Union[bytes, str, Path]) -> PixelBuffer:
    """
    Decode encoded image bytes or a file path into a PixelBuffer.

    Raises:
        ValueError: If the data is not a recognizable or complete image
    """
    try:
        if isinstance(source, (bytes, bytearray)):
            with Image.open(io.BytesIO(source)) as image:
                image.load()
                return ImageConverters.pil_to_buffer(image)
        with Image.open(source) as image:
            image.load()
            return ImageConverters.pil_to_buffer(image)
    # UnidentifiedImageError and truncated data are both OSError
    except OSError as e:
        logger.error(f"Failed to decode image: {e}")
        raise ValueError(f"Unrecognized image data: {e}") from e


def detect_mime_type(data: bytes) -> Optional[str]:
    """Return the MIME type Pillow identifies for encoded bytes, if any."""
    try:
        with Image.open(io.BytesIO(data)) as image:
            return Image.MIME.get(image.format)
    except UnidentifiedImageError:
        return None
