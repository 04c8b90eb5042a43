"""Custom Prometheus metrics for the resilient OCR layer.

Exposed through the host application's Prometheus registry.
Alert rules should be configured for:
- http_attempts_total (high timeout/transport share indicates an unhealthy upstream)
- http_retries_total (high retry rate indicates upstream instability)
"""

from prometheus_client import Counter, Histogram

# === Attempt Metrics ===

http_attempts_total = Counter(
    "http_attempts_total",
    "Total physical request attempts by classified outcome",
    ["outcome"],
)
"""
Attempt counter by outcome.

Labels:
- outcome: success, http_error, timeout, transport_error, cancelled
"""

http_retries_total = Counter(
    "http_retries_total",
    "Total retries scheduled by failure reason",
    ["reason"],
)
"""
Retries counter by the failure that caused the retry.

Labels:
- reason: http_error, timeout, transport_error

Alert thresholds:
- WARN: retry rate > 10% of total attempts
- CRITICAL: retry rate > 30% of total attempts
"""

# === Latency Metrics ===

http_request_duration_seconds = Histogram(
    "http_request_duration_seconds",
    "Logical call duration including retries and backoff",
    ["result"],
    buckets=(0.1, 0.5, 1.0, 2.0, 5.0, 10.0, 20.0, 30.0, 60.0, 120.0),
)
"""
Logical call latency histogram.

Labels:
- result: success, or the failure class name (TimeoutFailure, HTTPFailure, ...)
"""
