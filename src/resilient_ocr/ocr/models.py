"""
OCR request options and results.
"""

from typing import Any, Optional
from pydantic import BaseModel, ConfigDict, Field


class OCROptions(BaseModel):
    """Options forwarded to the OCR engine."""
    model_config = ConfigDict(frozen=True)
    
    detect_orientation: bool = Field(default=False, description="Auto-rotate the image before OCR")
    is_table: bool = Field(default=False, description="Preserve line layout for tabular content")
    language: Optional[str] = Field(default=None, description="OCR language code (default from settings)")
    engine: Optional[int] = Field(default=None, ge=1, le=3, description="OCR.space engine (default from settings)")
    scale: bool = Field(default=True, description="Upscale low-resolution images")


class OCRResult(BaseModel):
    """Text extracted from an image."""
    model_config = ConfigDict(frozen=True)
    
    text: str = Field(..., description="Extracted text, trimmed")
    raw: Optional[Any] = Field(default=None, description="Raw provider payload, if retained")
