"""
OCR.space client built on the resilient executor.

API Endpoint:
- POST /parse/image (form fields, ``apikey`` header)

Features:
- Per-attempt deadline, retries on 429 / 5xx with exponential backoff
- Response shape validation and domain error mapping
- Optional caller cancellation forwarded to the executor
"""

from pathlib import Path
from typing import Any, Dict, Optional

from resilient_ocr.config import Settings
from resilient_ocr.http.cancellation import CancellationToken
from resilient_ocr.http.exceptions import HTTPFailure, TimeoutFailure
from resilient_ocr.http.executor import ResilientExecutor
from resilient_ocr.http.models import RequestSpec, RetryPolicy, default_retryable_status
from resilient_ocr.http.transport import HttpxSender
from resilient_ocr.logging_config import build_logger
from resilient_ocr.ocr.exceptions import ConfigurationError, ExternalServiceError
from resilient_ocr.ocr.images import image_to_base64
from resilient_ocr.ocr.models import OCROptions, OCRResult


SERVICE_NAME = "ocr.space"


def _flag(value: bool) -> str:
    return "true" if value else "false"


class OCRSpaceClient:
    """
    OCR.space client.

    Request form:
    {
        "base64Image": "data:image/jpeg;base64,...",
        "language": "eng",
        "OCREngine": "2",
        "detectOrientation": "false",
        "scale": "true",
        "isTable": "false"
    }

    Response:
    {
        "OCRExitCode": 1,
        "ParsedResults": [{"ParsedText": "..."}],
        "ErrorMessage": ["..."]
    }
    """

    def __init__(
        self,
        settings: Settings,
        executor: Optional[ResilientExecutor] = None,
        logger: Optional[Any] = None,
    ):
        """
        Initialize OCR client.

        Args:
            settings: Application settings (API URL/key, retry tuning)
            executor: Resilient executor (default: one with its own httpx sender,
                pooled per HTTP_MAX_CONNECTIONS)
            logger: Injected logger (default: built from LOG_LEVEL and ENVIRONMENT)
        """
        self.settings = settings
        if logger is None:
            logger = build_logger(__name__, settings.LOG_LEVEL, settings.ENVIRONMENT)
        self.logger = logger

        if executor is None:
            sender = HttpxSender(connection_limits=settings.connection_limits())
            executor = ResilientExecutor(sender=sender, logger=self.logger)
        self.executor = executor

    def _api_key(self) -> str:
        api_key = self.settings.OCR_API_KEY
        if not api_key:
            raise ConfigurationError("OCR API key is not configured (OCR_API_KEY).")
        return api_key

    def retry_policy(
        self, api_key: str, cancellation: Optional[CancellationToken] = None
    ) -> RetryPolicy:
        """Retry policy for OCR calls: longer deadline, more retries than generic calls."""
        return RetryPolicy(
            timeout=self.settings.OCR_TIMEOUT,
            max_retries=self.settings.OCR_MAX_RETRIES,
            base_backoff=self.settings.OCR_RETRY_BACKOFF_BASE,
            retryable_predicate=default_retryable_status,
            extra_headers={"apikey": api_key},
            external_cancellation=cancellation,
        )

    def build_form(self, base64_image: str, options: OCROptions) -> Dict[str, str]:
        return {
            "base64Image": f"data:image/jpeg;base64,{base64_image}",
            "language": options.language or self.settings.OCR_LANGUAGE,
            "OCREngine": str(options.engine or self.settings.OCR_ENGINE),
            "detectOrientation": _flag(options.detect_orientation),
            "scale": _flag(options.scale),
            "isTable": _flag(options.is_table),
        }

    async def perform_ocr(
        self,
        base64_image: str,
        options: Optional[OCROptions] = None,
        cancellation: Optional[CancellationToken] = None,
    ) -> str:
        """
        Run OCR on a base64-encoded image.

        Returns:
            Extracted text, trimmed

        Raises:
            ConfigurationError: OCR_API_KEY not set
            ExternalServiceError: Timeout, HTTP error, or unusable response
            TransportFailure / CancelledFailure: propagated from the executor
        """
        options = options or OCROptions()
        api_key = self._api_key()

        self.logger.debug(
            "Calling OCR.space API",
            engine=options.engine or self.settings.OCR_ENGINE,
            is_table=options.is_table,
        )

        request = RequestSpec(
            method="POST",
            url=self.settings.OCR_API_URL,
            data=self.build_form(base64_image, options),
        )

        try:
            response = await self.executor.execute(
                request, self.retry_policy(api_key, cancellation)
            )
        except TimeoutFailure as e:
            self.logger.error("OCR request timed out", attempts=e.attempts, timeout=e.timeout)
            raise ExternalServiceError(SERVICE_NAME, "OCR request timed out", e) from e
        except HTTPFailure as e:
            self.logger.error("OCR HTTP error", status=e.status, status_text=e.status_text)
            raise ExternalServiceError(SERVICE_NAME, "OCR HTTP error", e) from e

        try:
            payload = response.json()
        except (ValueError, RecursionError) as e:
            raise ExternalServiceError(
                SERVICE_NAME, "Invalid JSON response from OCR API", response.text
            ) from e

        self.logger.debug("OCR.space API raw response", payload=payload)
        return self._extract_text(payload)

    @staticmethod
    def _extract_text(payload: Any) -> str:
        """Validate the OCR.space response shape and pull out the parsed text."""
        if not isinstance(payload, dict) or payload.get("OCRExitCode") is None:
            raise ExternalServiceError(SERVICE_NAME, "Unexpected OCR API response shape", payload)

        if payload["OCRExitCode"] != 1:
            messages = payload.get("ErrorMessage")
            if isinstance(messages, list):
                message = "; ".join(str(m) for m in messages)
            else:
                message = messages or "Unknown OCR failure"
            raise ExternalServiceError(SERVICE_NAME, f"OCR failed: {message}", payload)

        results = payload.get("ParsedResults")
        parsed = results[0] if isinstance(results, list) and results else None
        text = ""
        if isinstance(parsed, dict) and parsed.get("ParsedText"):
            text = str(parsed["ParsedText"]).strip()

        if not text:
            raise ExternalServiceError(SERVICE_NAME, "No readable text found", payload)
        return text

    async def extract_text_from_image(
        self,
        image_path: str | Path,
        options: Optional[OCROptions] = None,
        cancellation: Optional[CancellationToken] = None,
    ) -> OCRResult:
        """
        Read an image file and OCR it.

        Raises:
            ValueError: Empty image path
            ImageProcessingError: Image file could not be read
            ExternalServiceError: See perform_ocr
        """
        if not image_path:
            raise ValueError("image_path is required")

        self.logger.info("Starting OCR for image", image_path=str(image_path))
        try:
            base64_image = await image_to_base64(image_path)
            text = await self.perform_ocr(base64_image, options, cancellation)
        except Exception as e:
            self.logger.error("Failed to extract text", error_type=type(e).__name__, error=str(e))
            raise
        return OCRResult(text=text)

    async def close(self):
        """Close the executor's HTTP sender if it supports closing."""
        close = getattr(self.executor.sender, "close", None)
        if close is not None:
            await close()

    async def __aenter__(self):
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb):
        await self.close()
