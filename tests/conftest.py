"""Shared test fixtures and configuration for all tests.

This conftest.py provides common fixtures used across unit and integration tests.
"""

import base64
import pytest
from pathlib import Path

from resilient_ocr.config import Settings


@pytest.fixture
def test_settings() -> Settings:
    """Test settings with safe defaults for local testing.
    
    Override specific settings in individual tests via model_copy:
        def test_something(test_settings):
            settings = test_settings.model_copy(update={"OCR_API_KEY": None})
    """
    return Settings(
        # === Application ===
        APP_NAME="Resilient OCR (Test)",
        ENVIRONMENT="development",
        LOG_LEVEL="DEBUG",
        
        # === Generic HTTP ===
        HTTP_TIMEOUT=1.0,
        HTTP_MAX_RETRIES=2,
        HTTP_RETRY_BACKOFF_BASE=0.5,
        
        # === OCR.space ===
        OCR_API_URL="https://ocr.test/parse/image",
        OCR_API_KEY="test-api-key",
        OCR_TIMEOUT=1.0,
        OCR_MAX_RETRIES=3,
        OCR_RETRY_BACKOFF_BASE=0.7,
    )


@pytest.fixture
def sample_image_bytes() -> bytes:
    """Smallest valid JPEG-ish payload; content is irrelevant to the client."""
    return b"\xff\xd8\xff\xe0fake-jpeg-data\xff\xd9"


@pytest.fixture
def sample_image_path(tmp_path: Path, sample_image_bytes: bytes) -> Path:
    """Image file on disk for image_to_base64 / extract_text_from_image."""
    path = tmp_path / "receipt.jpg"
    path.write_bytes(sample_image_bytes)
    return path


@pytest.fixture
def sample_image_base64(sample_image_bytes: bytes) -> str:
    return base64.b64encode(sample_image_bytes).decode("ascii")
