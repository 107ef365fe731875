"""
Processing Service - Batch orchestration of pixel transformations.

This service runs one operation over a list of decoded images, encodes
each result according to the output policy and reports progress. A
failing image is recorded and skipped; it never aborts the batch.
"""

import logging
from dataclasses import dataclass
from typing import Callable, Dict, Iterable, Iterator, Optional, Union

from config import Settings, get_settings
from core.constants import BackgroundDefaults, Colors, ErrorMessages, OutputConstants
from core.enums import CompressionMode, ImageFormat, Operation
from core.exceptions import EncodingFailedError, ImageProcessingError
from core.image.codec import Encoder, PillowEncoder
from core.image.converters import ImageConverters
from core.image.processors import flatten_onto
from core.pixel_buffer import PixelBuffer
from core.utils.decorators import timer
from core.utils.enum_converter import parse_enum
from imaging.background import BackgroundRemovalParams, get_background_remover
from imaging.compression import CompressionParams, CompressionSearch
from imaging.conversion import convert_to_jpeg
from imaging.geometry import GeometryTransformer
from imaging.inpainting import InpaintParams, MaskLike, WatermarkInpainter
from schemas import ProcessedImage, Rect

logger = logging.getLogger(__name__)

ProgressCallback = Callable[[float], None]


@dataclass
class SourceImage:
    """A decoded source image plus what is known about its file."""

    name: str
    buffer: PixelBuffer
    size: int
    mime_type: str = "image/png"

    @property
    def format(self) -> Optional[ImageFormat]:
        try:
            return ImageFormat.from_mime_type(self.mime_type)
        except ValueError:
            return None


@dataclass
class ImageResult:
    """Processed buffer, its encoded bytes and their metadata."""

    metadata: ProcessedImage
    buffer: PixelBuffer
    data: bytes

    def to_data_url(self) -> str:
        """Encoded bytes as a ``data:`` URL for previews."""
        return ImageConverters.to_data_url(self.data, self.metadata.mime_type)


@dataclass
class BatchItem:
    """Outcome for one source image: a result or the error it raised."""

    source: SourceImage
    result: Optional[ImageResult] = None
    error: Optional[ImageProcessingError] = None

    @property
    def ok(self) -> bool:
        return self.error is None


@dataclass
class BatchProgress:
    """
    Progress event.

    ``percent`` is the progress of the current image, ``overall`` the
    progress of the whole batch; ``overall`` never decreases.
    """

    index: int
    total: int
    percent: float
    overall: float


def format_file_size(size: int) -> str:
    """
    Human-readable byte size.

    Example:
        >>> format_file_size(1536)
        '1.5 KB'
    """
    if size <= 0:
        return f"0 {OutputConstants.SIZE_UNITS[0]}"

    value = float(size)
    exponent = 0
    while value >= OutputConstants.SIZE_BASE and exponent < len(OutputConstants.SIZE_UNITS) - 1:
        value /= OutputConstants.SIZE_BASE
        exponent += 1
    text = f"{value:.2f}".rstrip("0").rstrip(".")
    return f"{text} {OutputConstants.SIZE_UNITS[exponent]}"


def is_valid_image_type(mime_type: str) -> bool:
    """Whether the MIME type is accepted as a source image."""
    return mime_type in OutputConstants.ALLOWED_SOURCE_TYPES


def output_name(source_name: str, fmt: ImageFormat) -> str:
    """``photo.png`` -> ``photo_processed.png`` with the extension of ``fmt``."""
    stem, dot, _ = source_name.rpartition(".")
    base = stem if dot and stem else source_name
    return f"{base}{OutputConstants.PROCESSED_SUFFIX}{fmt.extension}"


class ProcessingService:
    """
    Service for image processing operations.

    Wraps the imaging algorithms with output encoding, metadata and
    batch progress reporting.
    """

    # Operation -> method name
    _HANDLERS: Dict[Operation, str] = {
        Operation.RESIZE: "resize",
        Operation.CROP: "crop",
        Operation.ROTATE: "rotate",
        Operation.REMOVE_BACKGROUND: "remove_background",
        Operation.INPAINT: "inpaint_mask",
        Operation.COMPRESS: "compress",
        Operation.CONVERT_TO_JPEG: "convert_to_jpeg",
    }

    def __init__(self, encoder: Optional[Encoder] = None, settings: Optional[Settings] = None):
        """
        Initialize processing service.

        Args:
            encoder: Encode capability (defaults to PillowEncoder)
            settings: Application settings (defaults to ``get_settings()``)
        """
        self.settings = settings or get_settings()
        self.encoder = encoder or PillowEncoder()
        self.geometry = GeometryTransformer()

        background = self.settings.background
        remover_kwargs = {}
        if background.strategy.lower() == BackgroundDefaults.STRATEGY:
            remover_kwargs["params"] = BackgroundRemovalParams(
                strength=background.strength,
                sample_step=background.sample_step,
                base_threshold=background.base_threshold,
                max_threshold=background.max_threshold,
                blur_max=background.blur_max,
            )
        self.background_remover = get_background_remover(background.strategy, **remover_kwargs)

        self.inpainter = WatermarkInpainter(
            InpaintParams(
                iterations=self.settings.inpaint.iterations,
                radius=self.settings.inpaint.radius,
            )
        )

        compression = self.settings.compression
        self.compressor = CompressionSearch(
            self.encoder,
            CompressionParams(
                mode=compression.default_mode,
                min_quality=compression.min_quality,
                quality_step=compression.quality_step,
                max_dimension=compression.max_dimension,
                max_attempts=compression.max_attempts,
            ),
        )

    def _encode_result(
        self,
        source: SourceImage,
        buffer: PixelBuffer,
        fmt: ImageFormat,
        quality: float = OutputConstants.DEFAULT_JPEG_QUALITY,
    ) -> ImageResult:
        """Encode a processed buffer and attach its metadata."""
        if not fmt.supports_alpha:
            buffer = flatten_onto(buffer, Colors.WHITE)
        data = self.encoder.encode(buffer, fmt, None if fmt is ImageFormat.PNG else quality)
        if not data:
            raise EncodingFailedError(ErrorMessages.ENCODING_FAILED.format(error=fmt.value))
        return self._build_result(source, buffer, fmt, data)

    @staticmethod
    def _build_result(
        source: SourceImage,
        buffer: PixelBuffer,
        fmt: ImageFormat,
        data: bytes,
        compression_ratio: Optional[float] = None,
    ) -> ImageResult:
        metadata = ProcessedImage(
            source_name=source.name,
            output_name=output_name(source.name, fmt),
            format=fmt.value,
            mime_type=fmt.mime_type,
            width=buffer.width,
            height=buffer.height,
            size=len(data),
            original_size=source.size,
            compression_ratio=compression_ratio,
        )
        return ImageResult(metadata=metadata, buffer=buffer, data=data)

    @staticmethod
    def _policy_format(source: SourceImage) -> ImageFormat:
        """PNG sources stay PNG; everything else becomes JPEG."""
        return ImageFormat.PNG if source.format is ImageFormat.PNG else ImageFormat.JPEG

    def resize(
        self,
        source: SourceImage,
        width: int,
        height: int,
        on_progress: Optional[ProgressCallback] = None,
    ) -> ImageResult:
        with timer() as t:
            buffer = self.geometry.resize(source.buffer, width, height)
            result = self._encode_result(source, buffer, self._policy_format(source))
        logger.debug(f"resize({source.name}) took {t['ms']} ms")
        if on_progress:
            on_progress(100)
        return result

    def crop(
        self,
        source: SourceImage,
        rect: Union[Rect, Dict],
        on_progress: Optional[ProgressCallback] = None,
    ) -> ImageResult:
        with timer() as t:
            buffer = self.geometry.crop(source.buffer, rect)
            result = self._encode_result(source, buffer, self._policy_format(source))
        logger.debug(f"crop({source.name}) took {t['ms']} ms")
        if on_progress:
            on_progress(100)
        return result

    def rotate(
        self,
        source: SourceImage,
        degrees: Union[int, float],
        on_progress: Optional[ProgressCallback] = None,
    ) -> ImageResult:
        """Rotate by a quarter turn; the result is always PNG."""
        with timer() as t:
            buffer = self.geometry.rotate(source.buffer, degrees)
            result = self._encode_result(source, buffer, ImageFormat.PNG)
        logger.debug(f"rotate({source.name}) took {t['ms']} ms")
        if on_progress:
            on_progress(100)
        return result

    def remove_background(
        self,
        source: SourceImage,
        strength: Optional[float] = None,
        on_progress: Optional[ProgressCallback] = None,
    ) -> ImageResult:
        """Remove the background with the configured strategy; the result is always PNG."""
        if strength is None:
            strength = self.settings.background.strength
        with timer() as t:
            buffer = self.background_remover.remove_background(
                source.buffer, strength, on_progress=on_progress
            )
            result = self._encode_result(source, buffer, ImageFormat.PNG)
        logger.debug(f"remove_background({source.name}) took {t['ms']} ms")
        return result

    def inpaint_mask(
        self,
        source: SourceImage,
        mask: MaskLike,
        on_progress: Optional[ProgressCallback] = None,
    ) -> ImageResult:
        with timer() as t:
            buffer = self.inpainter.inpaint(source.buffer, mask, on_progress=on_progress)
            result = self._encode_result(source, buffer, self._policy_format(source))
        logger.debug(f"inpaint_mask({source.name}) took {t['ms']} ms")
        return result

    def compress(
        self,
        source: SourceImage,
        mode: Optional[Union[CompressionMode, str]] = None,
        on_progress: Optional[ProgressCallback] = None,
    ) -> ImageResult:
        """Adaptive compression; the output format is whatever the search settled on."""
        if mode is not None:
            mode = parse_enum(mode, CompressionMode)
        with timer() as t:
            outcome = self.compressor.compress(
                source.buffer,
                source.size,
                mode=mode,
                source_format=source.format,
                on_progress=on_progress,
            )
            result = self._build_result(
                source,
                outcome.buffer,
                outcome.format,
                outcome.data,
                compression_ratio=outcome.compression_ratio,
            )
        logger.debug(f"compress({source.name}) took {t['ms']} ms")
        return result

    def convert_to_jpeg(
        self,
        source: SourceImage,
        on_progress: Optional[ProgressCallback] = None,
    ) -> ImageResult:
        with timer() as t:
            buffer, data = convert_to_jpeg(source.buffer, self.encoder)
            result = self._build_result(source, buffer, ImageFormat.JPEG, data)
        logger.debug(f"convert_to_jpeg({source.name}) took {t['ms']} ms")
        if on_progress:
            on_progress(100)
        return result

    def process_batch(
        self,
        images: Iterable[SourceImage],
        operation: Union[Operation, str],
        on_progress: Optional[Callable[[BatchProgress], None]] = None,
        **params,
    ) -> Iterator[BatchItem]:
        """
        Run one operation over every image, in order.

        Args:
            images: Source images
            operation: Operation (or its name) to run
            on_progress: Optional sink receiving ``BatchProgress`` events
            **params: Operation arguments (e.g. ``width``/``height`` for
                resize, ``mask`` for inpaint, ``mode`` for compress)

        Yields:
            One BatchItem per source image

        Raises:
            ValueError: If the operation is unknown
        """
        try:
            operation = parse_enum(operation, Operation)
        except ValueError as e:
            raise ValueError(ErrorMessages.UNKNOWN_OPERATION.format(operation=operation)) from e
        handler = getattr(self, self._HANDLERS[operation])

        images = list(images)
        total = len(images)
        overall = 0.0

        def report(index: int, percent: float) -> None:
            nonlocal overall
            overall = max(overall, (index + percent / 100) / total * 100)
            if on_progress:
                on_progress(BatchProgress(index, total, percent, overall))

        logger.info(f"Starting batch: {operation.value} over {total} images")
        failed = 0

        for index, source in enumerate(images):
            try:
                result = handler(
                    source, on_progress=lambda percent, i=index: report(i, percent), **params
                )
                item = BatchItem(source=source, result=result)
            except ImageProcessingError as e:
                failed += 1
                logger.error(f"{operation.value} failed for {source.name}: {e.code}: {e.message}")
                item = BatchItem(source=source, error=e)

            report(index, 100)
            yield item

        logger.info(f"Batch finished: {total - failed}/{total} images processed")
