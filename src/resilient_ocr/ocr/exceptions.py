"""
Domain exceptions for the OCR layer.

Typed executor failures are re-wrapped into ExternalServiceError so that
callers of the OCR client only deal with OCR-level errors.
"""


class OCRError(Exception):
    """
    Base exception for all OCR layer errors.
    
    All OCR-specific exceptions inherit from this to allow catching
    any OCR-related error with a single except clause.
    """
    def __init__(self, message: str, details: dict | None = None):
        super().__init__(message)
        self.message = message
        self.details = details or {}


class ExternalServiceError(OCRError):
    """
    Raised when the remote OCR service fails or answers unexpectedly.
    
    Attributes:
        service: Name of the remote service (e.g. "ocr.space")
        original: Underlying failure or offending response payload
    """
    def __init__(self, service: str, message: str, original: object = None):
        super().__init__(message, details={"service": service})
        self.service = service
        self.original = original


class ConfigurationError(OCRError):
    """Raised when required configuration (API key, ...) is missing."""
    pass


class ImageProcessingError(OCRError):
    """Raised when an image file cannot be read or encoded."""
    pass
