"""
Heuristic background removal without a trained model.

Estimates a background color from border samples, classifies pixels by
RGB distance to it and feathers the resulting mask into the alpha
channel. Trades accuracy for instant local computation.

Learned-model removers implement the same ``BackgroundRemover`` protocol
and are plugged in through ``register_background_strategy``.
"""

import logging
from typing import Callable, Dict, Optional, Protocol, Tuple

import cv2
import numpy as np
from pydantic import Field, field_validator

from core.constants import BackgroundDefaults, ErrorMessages
from core.exceptions import ContextUnavailableError
from core.pixel_buffer import PixelBuffer, round_half_up
from core.utils.params_processor import prepare_params
from schemas.base import BaseProcessingParams

logger = logging.getLogger(__name__)

ProgressCallback = Callable[[float], None]


class BackgroundRemovalParams(BaseProcessingParams):
    """
    Heuristic background removal parameters.

    ``strength`` interpolates the distance threshold between
    ``base_threshold`` (conservative) and ``max_threshold`` (aggressive)
    and scales the feather radius.
    """

    strength: float = Field(
        default=BackgroundDefaults.STRENGTH,
        description="0 = conservative, 1 = very aggressive (clamped to [0, 1])",
    )
    sample_step: int = Field(
        default=BackgroundDefaults.SAMPLE_STEP,
        ge=1,
        description="Sample every n-th border pixel",
    )
    base_threshold: float = Field(
        default=BackgroundDefaults.BASE_THRESHOLD,
        ge=0,
        description="RGB distance threshold at strength 0",
    )
    max_threshold: float = Field(
        default=BackgroundDefaults.MAX_THRESHOLD,
        ge=0,
        description="RGB distance threshold at strength 1",
    )
    blur_max: float = Field(
        default=BackgroundDefaults.BLUR_MAX,
        ge=0,
        description="Feather radius in pixels at strength 1",
    )

    @field_validator("strength", mode="before")
    @classmethod
    def clamp_strength(cls, value):
        value = float(value)
        return max(BackgroundDefaults.MIN_STRENGTH, min(BackgroundDefaults.MAX_STRENGTH, value))

    @property
    def threshold(self) -> float:
        return self.base_threshold + (self.max_threshold - self.base_threshold) * self.strength

    @property
    def feather_radius(self) -> int:
        return int(round_half_up(self.blur_max * self.strength))


class BackgroundRemover(Protocol):
    """Capability shared by every background removal strategy."""

    def remove_background(
        self,
        buffer: PixelBuffer,
        strength: float,
        on_progress: Optional[ProgressCallback] = None,
    ) -> PixelBuffer:
        ...


def estimate_background_color(
    buffer: PixelBuffer, step: int = BackgroundDefaults.SAMPLE_STEP
) -> Tuple[int, int, int]:
    """
    Mean RGB of pixels sampled along the four borders.

    Top and bottom rows are sampled every ``step`` columns, left and right
    columns every ``step`` rows (corners may be counted more than once).

    Args:
        buffer: Input buffer
        step: Sampling step in pixels

    Returns:
        (r, g, b) rounded half up
    """
    rgb = buffer.rgb
    samples = [
        rgb[0, ::step],
        rgb[-1, ::step],
        rgb[::step, 0],
        rgb[::step, -1],
    ]
    border = np.concatenate(samples, axis=0).astype(np.float64)
    if border.size == 0:
        return BackgroundDefaults.FALLBACK_COLOR

    mean = round_half_up(border.mean(axis=0))
    return int(mean[0]), int(mean[1]), int(mean[2])


def build_foreground_mask(
    buffer: PixelBuffer, background: Tuple[int, int, int], threshold: float
) -> np.ndarray:
    """
    Binary mask: 255 where squared RGB distance exceeds threshold squared.

    Returns:
        uint8 array of shape (H, W)
    """
    diff = buffer.rgb.astype(np.int32) - np.asarray(background, dtype=np.int32)
    distance_sq = np.einsum("ijk,ijk->ij", diff, diff)
    return np.where(distance_sq > threshold * threshold, 255, 0).astype(np.uint8)


def feather_mask(mask: np.ndarray, radius: int) -> np.ndarray:
    """
    Gaussian-blur a mask channel with standard deviation ``radius`` pixels.

    A radius of 0 returns the mask unchanged.
    """
    if radius <= 0:
        return mask
    return cv2.GaussianBlur(
        mask, (0, 0), sigmaX=radius, sigmaY=radius, borderType=cv2.BORDER_REPLICATE
    )


class HeuristicBackgroundRemover:
    """Border-sampling background remover."""

    def __init__(self, params: Optional[BackgroundRemovalParams] = None):
        """
        Initialize remover.

        Args:
            params: Default parameters; ``strength`` is overridden per call
        """
        self.params = prepare_params(params, BackgroundRemovalParams)

    def remove_background(
        self,
        buffer: PixelBuffer,
        strength: Optional[float] = None,
        on_progress: Optional[ProgressCallback] = None,
    ) -> PixelBuffer:
        """
        Remove a roughly uniform background.

        Args:
            buffer: Input buffer (not modified)
            strength: 0..1, clamped; None keeps the configured strength
            on_progress: Optional percent sink called at coarse milestones

        Returns:
            New buffer with unchanged RGB and alpha from the feathered mask

        Raises:
            ContextUnavailableError: If the pixel surface cannot be read
                or the blur primitive fails
        """
        params = prepare_params(self.params, BackgroundRemovalParams, strength=strength)
        report = on_progress or (lambda _percent: None)

        if not isinstance(buffer, PixelBuffer):
            raise ContextUnavailableError(
                ErrorMessages.CONTEXT_UNAVAILABLE.format(
                    error=f"expected PixelBuffer, got {type(buffer).__name__}"
                )
            )

        background = estimate_background_color(buffer, params.sample_step)
        report(BackgroundDefaults.PROGRESS_SAMPLED)

        mask = build_foreground_mask(buffer, background, params.threshold)
        report(BackgroundDefaults.PROGRESS_CLASSIFIED)

        try:
            feathered = feather_mask(mask, params.feather_radius)
        except cv2.error as e:
            raise ContextUnavailableError(ErrorMessages.CONTEXT_UNAVAILABLE.format(error=e)) from e
        report(BackgroundDefaults.PROGRESS_FEATHERED)

        output = buffer.data.copy()
        output[:, :, 3] = feathered
        report(BackgroundDefaults.PROGRESS_DONE)

        foreground_ratio = float(np.count_nonzero(mask)) / mask.size
        logger.info(
            f"Background removed: bg={background}, threshold={params.threshold:.1f}, "
            f"feather={params.feather_radius}px, foreground={foreground_ratio:.1%}"
        )
        return PixelBuffer(data=output)


# Strategy registry: name -> factory returning a BackgroundRemover
_STRATEGIES: Dict[str, Callable[..., BackgroundRemover]] = {
    BackgroundDefaults.STRATEGY: HeuristicBackgroundRemover,
}


def register_background_strategy(name: str, factory: Callable[..., BackgroundRemover]) -> None:
    """
    Register an alternate background removal strategy.

    Args:
        name: Strategy name used in configuration
        factory: Callable returning an object implementing ``BackgroundRemover``
    """
    _STRATEGIES[name.lower()] = factory
    logger.info(f"Registered background removal strategy: {name}")


def available_background_strategies() -> list:
    return sorted(_STRATEGIES)


def get_background_remover(name: str = BackgroundDefaults.STRATEGY, **kwargs) -> BackgroundRemover:
    """
    Instantiate the strategy registered under ``name``.

    Raises:
        ValueError: If no strategy has that name
    """
    try:
        factory = _STRATEGIES[name.lower()]
    except KeyError:
        raise ValueError(ErrorMessages.UNKNOWN_STRATEGY.format(name=name))
    return factory(**kwargs)


def remove_background(
    buffer: PixelBuffer,
    strength: float = BackgroundDefaults.STRENGTH,
    on_progress: Optional[ProgressCallback] = None,
    strategy: str = BackgroundDefaults.STRATEGY,
) -> PixelBuffer:
    """Convenience wrapper: remove the background with the named strategy."""
    return get_background_remover(strategy).remove_background(
        buffer, strength, on_progress=on_progress
    )
