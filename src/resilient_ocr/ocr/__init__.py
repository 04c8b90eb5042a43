"""
OCR client layer.

Components:
- OCRSpaceClient: OCR.space client running on ResilientExecutor
- image_to_base64: image file -> base64 payload
- OCROptions / OCRResult: request options and extracted text
- exceptions: domain errors (ExternalServiceError, ConfigurationError, ...)
"""

from resilient_ocr.ocr.client import OCRSpaceClient
from resilient_ocr.ocr.exceptions import (
    ConfigurationError,
    ExternalServiceError,
    ImageProcessingError,
    OCRError,
)
from resilient_ocr.ocr.images import image_to_base64
from resilient_ocr.ocr.models import OCROptions, OCRResult

__all__ = [
    "OCRSpaceClient",
    "image_to_base64",
    "OCROptions",
    "OCRResult",
    "OCRError",
    "ExternalServiceError",
    "ConfigurationError",
    "ImageProcessingError",
]
