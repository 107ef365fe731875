"""
Adaptive compression search.

Encoders expose no target-size -> quality inverse, so the search greedily
lowers quality until the encoded size drops below the original or a
quality floor is reached, probing several formats in turn:

1. WEBP (lossy with alpha) when the encoder supports it
2. JPEG over white, when the source is an opaque PNG
3. The best remaining format for the buffer: PNG for transparent PNG
   sources, JPEG otherwise
"""

import logging
from dataclasses import dataclass
from typing import Callable, Optional

from pydantic import Field

from core.constants import CompressionDefaults, ErrorMessages
from core.enums import CompressionMode, ImageFormat
from core.exceptions import EncodingFailedError
from core.image.codec import Encoder, PillowEncoder
from core.image.processors import fit_within, flatten_onto, has_transparency
from core.pixel_buffer import PixelBuffer
from core.utils.params_processor import prepare_params
from imaging.geometry import resize
from schemas.base import BaseProcessingParams

logger = logging.getLogger(__name__)

ProgressCallback = Callable[[float], None]


class CompressionParams(BaseProcessingParams):
    """Adaptive compression parameters."""

    mode: CompressionMode = Field(
        default=CompressionMode.BALANCED, description="Quality profile (balanced/maximum/quality)"
    )
    min_quality: float = Field(
        default=CompressionDefaults.MIN_QUALITY, gt=0, le=1, description="Quality floor"
    )
    quality_step: float = Field(
        default=CompressionDefaults.QUALITY_STEP, gt=0, le=1, description="Quality decrement"
    )
    max_dimension: int = Field(
        default=CompressionDefaults.MAX_DIMENSION,
        ge=1,
        description="Longest side after downscaling (maximum mode only)",
    )
    max_attempts: int = Field(
        default=CompressionDefaults.MAX_ATTEMPTS, ge=1, description="Encode attempts per format"
    )
    source_format: Optional[ImageFormat] = Field(
        default=None, description="Format of the original file, if known"
    )

    @property
    def start_quality(self) -> float:
        return CompressionDefaults.START_QUALITY[self.mode.value]


@dataclass
class CompressionAttempt:
    """One encode attempt; logged and discarded"""

    format: ImageFormat
    quality: float
    size: Optional[int]


@dataclass
class CompressionResult:
    """Outcome of the compression search"""

    buffer: PixelBuffer
    data: bytes
    format: ImageFormat
    quality: float
    original_size: int
    attempts: int

    @property
    def size(self) -> int:
        return len(self.data)

    @property
    def compression_ratio(self) -> float:
        """Percent saved; negative when the result grew."""
        return (self.original_size - self.size) / self.original_size * 100


class CompressionSearch:
    """Finds a format/quality that encodes smaller than the original."""

    def __init__(
        self, encoder: Optional[Encoder] = None, params: Optional[CompressionParams] = None
    ):
        """
        Initialize compression search.

        Args:
            encoder: Encode capability (defaults to PillowEncoder)
            params: Default parameters
        """
        self.encoder = encoder or PillowEncoder()
        self.params = prepare_params(params, CompressionParams)

    def _encode(self, buffer: PixelBuffer, fmt: ImageFormat, quality: float) -> Optional[bytes]:
        data = self.encoder.encode(buffer, fmt, None if fmt is ImageFormat.PNG else quality)
        attempt = CompressionAttempt(format=fmt, quality=quality, size=len(data) if data else None)
        logger.debug(f"Compression attempt: {attempt}")
        return data or None

    def _try_quality(
        self,
        buffer: PixelBuffer,
        original_size: int,
        fmt: ImageFormat,
        start_quality: float,
        params: CompressionParams,
    ) -> Optional[tuple]:
        """
        Lower quality step by step until the encoding beats original_size.

        Returns:
            (data, quality, attempts) or None if nothing could be encoded
        """
        quality = min(
            CompressionDefaults.QUALITY_CLAMP_HIGH,
            max(CompressionDefaults.QUALITY_CLAMP_LOW, start_quality),
        )
        attempts = 0

        for _ in range(params.max_attempts):
            if quality < params.min_quality:
                break
            data = self._encode(buffer, fmt, quality)
            attempts += 1
            if data is None:
                quality = round(quality - params.quality_step, 3)
                continue
            if len(data) < original_size or quality <= params.min_quality:
                return data, quality, attempts
            quality = round(quality - params.quality_step, 3)

        # Last fallback: one final lowest-quality attempt
        data = self._encode(buffer, fmt, params.min_quality)
        attempts += 1
        if data is None:
            return None
        return data, params.min_quality, attempts

    def compress(
        self,
        buffer: PixelBuffer,
        original_size: int,
        mode: Optional[CompressionMode] = None,
        source_format: Optional[ImageFormat] = None,
        on_progress: Optional[ProgressCallback] = None,
    ) -> CompressionResult:
        """
        Search for an encoding smaller than ``original_size``.

        Args:
            buffer: Decoded source buffer (not modified)
            original_size: Byte size of the original file
            mode: Quality profile; None keeps the configured mode
            source_format: Format of the original file; None keeps the configured one
            on_progress: Optional percent sink

        Returns:
            CompressionResult (the ratio may be negative)

        Raises:
            ValueError: If original_size is not positive
            EncodingFailedError: If no format produced any bytes
        """
        if original_size <= 0:
            raise ValueError(ErrorMessages.INVALID_ORIGINAL_SIZE.format(size=original_size))

        params = prepare_params(
            self.params, CompressionParams, mode=mode, source_format=source_format
        )
        report = on_progress or (lambda _percent: None)
        report(CompressionDefaults.PROGRESS_LOADED)

        working = buffer
        if params.mode is CompressionMode.MAXIMUM:
            width, height = fit_within(buffer.width, buffer.height, params.max_dimension)
            if (width, height) != buffer.size:
                working = resize(buffer, width, height)
                logger.info(
                    f"Downscaled {buffer.width}x{buffer.height} -> {width}x{height} before encoding"
                )
        report(CompressionDefaults.PROGRESS_SCALED)

        transparent = has_transparency(working, CompressionDefaults.TRANSPARENCY_PROBES)
        start_quality = params.start_quality
        report(CompressionDefaults.PROGRESS_PROBED)

        outcome = None
        encoded_buffer = working
        fmt = ImageFormat.WEBP

        if self.encoder.supports(ImageFormat.WEBP):
            outcome = self._try_quality(working, original_size, fmt, start_quality, params)
        report(CompressionDefaults.PROGRESS_LOSSY_ALPHA)

        if outcome is None and params.source_format is ImageFormat.PNG and not transparent:
            # Opaque PNG: JPEG over white is usually far smaller
            fmt = ImageFormat.JPEG
            encoded_buffer = flatten_onto(working)
            outcome = self._try_quality(encoded_buffer, original_size, fmt, start_quality, params)
        report(CompressionDefaults.PROGRESS_OPAQUE)

        if outcome is None:
            if params.source_format is ImageFormat.PNG and transparent:
                fmt = ImageFormat.PNG
                encoded_buffer = working
            else:
                fmt = ImageFormat.JPEG
                encoded_buffer = flatten_onto(working) if transparent else working
            outcome = self._try_quality(encoded_buffer, original_size, fmt, start_quality, params)

        if outcome is None:
            raise EncodingFailedError(
                ErrorMessages.ENCODING_FAILED.format(error="no format produced any bytes")
            )

        data, quality, attempts = outcome
        result = CompressionResult(
            buffer=encoded_buffer,
            data=data,
            format=fmt,
            quality=quality,
            original_size=original_size,
            attempts=attempts,
        )
        report(CompressionDefaults.PROGRESS_DONE)

        logger.info(
            f"Compressed {buffer.width}x{buffer.height} ({params.mode.value}): "
            f"{original_size} -> {result.size} bytes as {fmt.value} q={quality:.2f} "
            f"({result.compression_ratio:.1f}%)"
        )
        return result


def compress_adaptive(
    buffer: PixelBuffer,
    original_size: int,
    mode: CompressionMode = CompressionMode.BALANCED,
    encoder: Optional[Encoder] = None,
    source_format: Optional[ImageFormat] = None,
) -> CompressionResult:
    """Convenience wrapper around ``CompressionSearch.compress``."""
    return CompressionSearch(encoder).compress(
        buffer, original_size, mode=mode, source_format=source_format
    )
