"""
Result metadata models.

This module contains models describing processed images:
- ProcessedImage: what a host needs to show and download a result
"""

import uuid
from typing import Optional

from pydantic import BaseModel, Field


class ProcessedImage(BaseModel):
    """Metadata of one processed image"""

    id: str = Field(default_factory=lambda: str(uuid.uuid4()))
    source_name: str = Field(..., description="Name of the source file")
    output_name: str = Field(..., description="Suggested download name")
    format: str = Field(..., description="Encoded format (jpeg, png, webp)")
    mime_type: str
    width: int = Field(..., gt=0, description="New width in pixels")
    height: int = Field(..., gt=0, description="New height in pixels")
    size: int = Field(..., ge=0, description="Encoded size in bytes")
    original_size: Optional[int] = Field(None, ge=0, description="Source size in bytes")
    compression_ratio: Optional[float] = Field(
        None, description="Percent saved; negative when the result grew"
    )
