"""
Resilient OCR HTTP layer.

Issues requests against unreliable remote endpoints with:
- Per-attempt deadlines
- Exponential backoff retries for transient failures
- Typed failure classification (timeout, transport, HTTP, cancellation)
- Composable cooperative cancellation

Architecture: httpx async transport + resilient executor + OCR.space client
"""

__version__ = "0.1.0"
