"""Integration test fixtures (service checks and prerequisites).

Integration tests are skipped if the OCR.space credentials are not configured.
"""

import os

import pytest

from resilient_ocr.config import Settings


@pytest.fixture(scope="session")
def live_settings() -> Settings:
    """Settings for the live OCR.space API.
    
    Skips tests unless OCR_API_KEY is set in the environment.
    """
    if not os.environ.get("OCR_API_KEY"):
        pytest.skip("OCR_API_KEY not set, skipping live OCR tests")
    return Settings()
