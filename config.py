"""
Configuration for the Image Toolkit.

Settings are grouped into pydantic sections. Defaults come from
``core.constants``; any field listed in ``ENV_OVERRIDES`` can be
overridden through an ``IMAGE_TOOLKIT_*`` environment variable.
"""

import logging
import os
from functools import lru_cache
from typing import Any, Dict

from pydantic import BaseModel, Field, field_validator

from core.constants import (
    BackgroundDefaults,
    CompressionDefaults,
    InpaintDefaults,
    SystemConstants,
)
from core.enums import CompressionMode

logger = logging.getLogger(__name__)


class SystemSettings(BaseModel):
    """System configuration"""

    log_level: str = SystemConstants.LOG_LEVEL_DEFAULT
    debug: bool = False

    @field_validator("log_level")
    @classmethod
    def validate_log_level(cls, value: str) -> str:
        value = value.upper()
        if value not in ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"):
            raise ValueError(f"Invalid log level: {value}")
        return value


class BackgroundSettings(BaseModel):
    """Background removal configuration"""

    strategy: str = BackgroundDefaults.STRATEGY
    strength: float = Field(default=BackgroundDefaults.STRENGTH, ge=0, le=1)
    sample_step: int = Field(default=BackgroundDefaults.SAMPLE_STEP, ge=1)
    base_threshold: float = Field(default=BackgroundDefaults.BASE_THRESHOLD, ge=0)
    max_threshold: float = Field(default=BackgroundDefaults.MAX_THRESHOLD, ge=0)
    blur_max: float = Field(default=BackgroundDefaults.BLUR_MAX, ge=0)


class InpaintSettings(BaseModel):
    """Watermark inpainting configuration"""

    iterations: int = Field(default=InpaintDefaults.ITERATIONS, ge=1)
    radius: int = Field(default=InpaintDefaults.RADIUS, ge=1)


class CompressionSettings(BaseModel):
    """Adaptive compression configuration"""

    default_mode: CompressionMode = CompressionMode(CompressionDefaults.DEFAULT_MODE)
    min_quality: float = Field(default=CompressionDefaults.MIN_QUALITY, gt=0, le=1)
    quality_step: float = Field(default=CompressionDefaults.QUALITY_STEP, gt=0, le=1)
    max_dimension: int = Field(default=CompressionDefaults.MAX_DIMENSION, ge=1)
    max_attempts: int = Field(default=CompressionDefaults.MAX_ATTEMPTS, ge=1)


class Settings(BaseModel):
    """Aggregated application settings"""

    environment: str = SystemConstants.DEFAULT_ENVIRONMENT
    system: SystemSettings = Field(default_factory=SystemSettings)
    background: BackgroundSettings = Field(default_factory=BackgroundSettings)
    inpaint: InpaintSettings = Field(default_factory=InpaintSettings)
    compression: CompressionSettings = Field(default_factory=CompressionSettings)

    def to_dict(self) -> Dict[str, Any]:
        return self.model_dump(mode="json")


# Environment variable suffix -> (section, field)
ENV_OVERRIDES = {
    "LOG_LEVEL": ("system", "log_level"),
    "DEBUG": ("system", "debug"),
    "BACKGROUND_STRATEGY": ("background", "strategy"),
    "BACKGROUND_STRENGTH": ("background", "strength"),
    "BACKGROUND_SAMPLE_STEP": ("background", "sample_step"),
    "INPAINT_ITERATIONS": ("inpaint", "iterations"),
    "INPAINT_RADIUS": ("inpaint", "radius"),
    "COMPRESSION_MODE": ("compression", "default_mode"),
    "COMPRESSION_MIN_QUALITY": ("compression", "min_quality"),
    "COMPRESSION_MAX_DIMENSION": ("compression", "max_dimension"),
}


def load_settings(environ=None) -> Settings:
    """
    Build settings from defaults plus ``IMAGE_TOOLKIT_*`` overrides.

    Args:
        environ: Mapping to read variables from (defaults to ``os.environ``)

    Raises:
        pydantic.ValidationError: If an override has an invalid value
    """
    environ = os.environ if environ is None else environ
    prefix = SystemConstants.ENV_PREFIX

    data: Dict[str, Any] = {
        "environment": environ.get(f"{prefix}ENV", SystemConstants.DEFAULT_ENVIRONMENT)
    }
    for suffix, (section, field) in ENV_OVERRIDES.items():
        value = environ.get(prefix + suffix)
        if value is None:
            continue
        if field == "debug":
            value = value.strip().lower() in ("1", "true", "yes", "on")
        data.setdefault(section, {})[field] = value

    settings = Settings(**data)
    overridden = len(data) - 1
    if overridden:
        logger.debug(f"Applied environment overrides to {overridden} settings sections")
    return settings


@lru_cache
def get_settings() -> Settings:
    """Process-wide settings, read once."""
    return load_settings()
