"""
Schemas Package

Pydantic models for data validation and serialization, shared across:
- Services (batch orchestration)
- Core (infrastructure)
- Imaging (processing algorithms)

Algorithm parameter models live next to their processors in ``imaging``
and derive from ``BaseProcessingParams``.
"""

# Re-export enums from centralized location for convenience
from core.enums import CompressionMode, ImageFormat, Operation

# Base schemas
from .base import BaseProcessingParams

# Common models (core data structures)
from .common import Rect, Size

# Result models
from .results import ProcessedImage

__all__ = [
    # Common models
    "Rect",
    "Size",
    # Result models
    "ProcessedImage",
    # Base schemas
    "BaseProcessingParams",
    # Enums (re-exported from core.enums)
    "CompressionMode",
    "ImageFormat",
    "Operation",
]
