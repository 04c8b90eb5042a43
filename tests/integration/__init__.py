"""
Integration tests for the resilient OCR layer.

Tests against real services:
- OCR.space API (real calls, marked with @pytest.mark.integration)

Skipped automatically when OCR_API_KEY is not configured.
"""
