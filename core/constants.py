"""
Constants and configuration values for the Image Toolkit.
Centralizes all magic numbers and default parameters.
"""


# Geometry Constants
class GeometryConstants:
    """Constants related to resize, crop and rotate."""

    # Rotation
    SUPPORTED_ANGLES = (0, 90, 180, 270)
    FULL_TURN = 360

    # Resize
    MIN_DIMENSION = 1


# Background Removal Default Parameters
class BackgroundDefaults:
    """Default parameters for heuristic background removal."""

    STRATEGY = "heuristic"

    # 0 = conservative, 1 = very aggressive
    STRENGTH = 0.6
    MIN_STRENGTH = 0.0
    MAX_STRENGTH = 1.0

    # Border sampling
    SAMPLE_STEP = 8
    FALLBACK_COLOR = (255, 255, 255)

    # Distance thresholds in RGB units
    BASE_THRESHOLD = 32.0
    MAX_THRESHOLD = 180.0

    # Maximum feather radius in pixels (scaled by strength)
    BLUR_MAX = 18

    # Progress milestones
    PROGRESS_SAMPLED = 10
    PROGRESS_CLASSIFIED = 40
    PROGRESS_FEATHERED = 70
    PROGRESS_DONE = 100


# Inpainting Default Parameters
class InpaintDefaults:
    """Default parameters for mask-guided watermark inpainting."""

    ITERATIONS = 5
    RADIUS = 3

    # Progress milestones
    PROGRESS_LOADED = 10
    PROGRESS_COPIED = 20
    PROGRESS_MASK_SCALED = 30
    PROGRESS_COLLECTED = 40
    PROGRESS_PER_PASS = 10
    PROGRESS_PASSES_CAP = 90
    PROGRESS_DONE = 100


# Compression Default Parameters
class CompressionDefaults:
    """Default parameters for the adaptive compression search."""

    DEFAULT_MODE = "balanced"

    # Start quality per mode
    START_QUALITY = {
        "maximum": 0.65,
        "balanced": 0.80,
        "quality": 0.95,
    }

    # Quality loop
    MIN_QUALITY = 0.45
    QUALITY_STEP = 0.05
    QUALITY_CLAMP_LOW = 0.05
    QUALITY_CLAMP_HIGH = 0.99
    MAX_ATTEMPTS = 12

    # Downscale (maximum mode only)
    MAX_DIMENSION = 2000

    # Transparency probe grid (points per axis)
    TRANSPARENCY_PROBES = 50

    # Progress milestones
    PROGRESS_LOADED = 10
    PROGRESS_SCALED = 20
    PROGRESS_PROBED = 30
    PROGRESS_LOSSY_ALPHA = 60
    PROGRESS_OPAQUE = 80
    PROGRESS_DONE = 100


# Output Constants
class OutputConstants:
    """Constants for encoding processed results."""

    DEFAULT_JPEG_QUALITY = 0.92
    PROCESSED_SUFFIX = "_processed"
    ALLOWED_SOURCE_TYPES = ["image/jpeg", "image/png", "image/jpg"]
    SIZE_UNITS = ["Bytes", "KB", "MB", "GB"]
    SIZE_BASE = 1024


# Mask Canvas Constants
class MaskConstants:
    """Constants for the brush-driven mask canvas."""

    DEFAULT_BRUSH_SIZE = 20
    MIN_BRUSH_SIZE = 5
    MAX_BRUSH_SIZE = 100
    BRUSH_STEP = 5

    # rgba(255, 100, 100, 0.5), alpha 0.5 * 255 rounded half up
    MARKER_COLOR = (255, 100, 100, 128)

    HISTORY_SIZE = 1


# System Constants
class SystemConstants:
    """Constants for system operations."""

    # Logging
    LOG_LEVEL_DEFAULT = "INFO"
    LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"

    # Environment overrides
    ENV_PREFIX = "IMAGE_TOOLKIT_"
    DEFAULT_ENVIRONMENT = "development"


# Color Constants (RGB format)
class Colors:
    """Standard colors used when flattening or filling buffers."""

    WHITE = (255, 255, 255)


# Error Messages
class ErrorMessages:
    """Standard error messages."""

    # Buffer errors
    INVALID_BUFFER_LENGTH = "Buffer length {length} does not match {width}x{height}x4"
    INVALID_BUFFER_SHAPE = "Unsupported pixel array shape: {shape}"

    # Geometry errors
    INVALID_DIMENSION = "Invalid target dimensions: {width}x{height}"
    EMPTY_REGION = "Crop region is empty after clamping: {width}x{height}"
    UNSUPPORTED_ANGLE = "Unsupported rotation angle: {degrees} (expected one of 0, 90, 180, 270)"

    # Segmentation errors
    CONTEXT_UNAVAILABLE = "Pixel surface unavailable: {error}"
    UNKNOWN_STRATEGY = "Unknown background removal strategy: {name}"

    # Inpainting errors
    NO_MARKED_REGION = "Mask has no marked pixels"

    # Encoding errors
    ENCODING_FAILED = "Failed to encode image: {error}"
    INVALID_ORIGINAL_SIZE = "Original byte size must be positive, got {size}"
    UNKNOWN_OPERATION = "Unknown operation: {operation}"
