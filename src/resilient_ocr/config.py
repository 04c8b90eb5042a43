"""
Configuration settings for the resilient OCR layer.

All settings are loaded from environment variables with sensible defaults.
Use .env file for local development.
"""

import httpx
from pydantic_settings import BaseSettings, SettingsConfigDict
from typing import Optional

from resilient_ocr.http.models import RetryPolicy


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""
    
    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )
    
    # === Application ===
    APP_NAME: str = "Resilient OCR"
    APP_VERSION: str = "0.1.0"
    ENVIRONMENT: str = "development"
    LOG_LEVEL: str = "INFO"
    
    # === Generic HTTP calls ===
    HTTP_TIMEOUT: float = 15.0  # seconds, per attempt
    HTTP_MAX_RETRIES: int = 2  # attempts beyond the first
    HTTP_RETRY_BACKOFF_BASE: float = 0.5  # seconds, doubled per retry
    HTTP_MAX_CONNECTIONS: int = 10
    
    # === OCR.space ===
    OCR_API_URL: str = "https://api.ocr.space/parse/image"
    OCR_API_KEY: Optional[str] = None  # Required, no demo key fallback
    OCR_TIMEOUT: float = 20.0
    OCR_MAX_RETRIES: int = 3
    OCR_RETRY_BACKOFF_BASE: float = 0.7
    OCR_LANGUAGE: str = "eng"
    OCR_ENGINE: int = 2

    def default_retry_policy(self) -> RetryPolicy:
        """Retry policy for generic HTTP calls."""
        return RetryPolicy(
            timeout=self.HTTP_TIMEOUT,
            max_retries=self.HTTP_MAX_RETRIES,
            base_backoff=self.HTTP_RETRY_BACKOFF_BASE,
        )

    def connection_limits(self) -> httpx.Limits:
        """Connection pool limits for the default httpx sender."""
        return httpx.Limits(
            max_keepalive_connections=min(5, self.HTTP_MAX_CONNECTIONS),
            max_connections=self.HTTP_MAX_CONNECTIONS,
            keepalive_expiry=30.0,
        )


# Global settings instance
settings = Settings()
