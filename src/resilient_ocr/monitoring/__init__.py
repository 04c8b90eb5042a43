"""Monitoring and metrics instrumentation for the resilient OCR layer.

Exports custom Prometheus metrics for operational monitoring and alerting.
"""

from resilient_ocr.monitoring.metrics import (
    http_attempts_total,
    http_request_duration_seconds,
    http_retries_total,
)

__all__ = [
    "http_attempts_total",
    "http_retries_total",
    "http_request_duration_seconds",
]
