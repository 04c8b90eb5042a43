"""
Unit tests for the resilient OCR layer.

Tests individual components in isolation with fakes:
- Cancellation tokens and composition
- Resilient executor (scripted sender, recording sleep)
- httpx sender (httpx.MockTransport)
- OCR.space client (mocked transport)
"""
