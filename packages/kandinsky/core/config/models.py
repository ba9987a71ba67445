"""Configuration models for the Kandinsky client."""

from __future__ import annotations

from pathlib import Path

import httpx
from pydantic import BaseModel, ConfigDict, Field

from kandinsky.core.api.http.config import HttpClientConfig
from kandinsky.core.api.http.retry import RetryPolicy

DEFAULT_BASE_URL = "https://api-key.fusionbrain.ai"


class LoggingConfig(BaseModel):
    """Logging configuration."""

    model_config = ConfigDict(extra="forbid")

    level: str = Field(
        default="INFO",
        pattern="^(DEBUG|INFO|WARNING|ERROR|CRITICAL)$",
        description="Root log level",
    )
    format: str = Field(
        default="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        description="Format string for text logs",
    )
    structured: bool = Field(default=False, description="Emit JSON log lines instead of text")


class KandinskySettings(BaseModel):
    """Client settings: credentials, endpoints, polling and generation defaults.

    Credentials may be left empty here and supplied through the environment
    (see ``kandinsky.core.config.loader.load_settings``).
    """

    model_config = ConfigDict(extra="ignore")

    api_key: str = Field(default="", repr=False, description="FusionBrain API key")
    api_secret: str = Field(default="", repr=False, description="FusionBrain API secret")

    base_url: str = Field(default=DEFAULT_BASE_URL, description="API host")
    models_path: str = "/key/api/v1/models"
    run_path: str = "/key/api/v1/text2image/run"
    status_path: str = "/key/api/v1/text2image/status/"

    model_id: int | None = Field(
        default=None, gt=0, description="Model to select from the models list (first if None)"
    )

    poll_interval_s: float = Field(default=10.0, ge=0.0, description="Wait between status checks")
    poll_timeout_s: float | None = Field(
        default=None, gt=0.0, description="Overall polling deadline (poll forever if None)"
    )
    request_timeout_s: float = Field(default=30.0, gt=0.0, description="Per-request timeout")
    retry_attempts: int = Field(
        default=1, ge=1, description="Attempts per GET request on HTTP 500 (1 = no retries)"
    )
    reject_censored: bool = Field(
        default=False, description="Raise CensoredImageError for censored results"
    )

    default_style: str = "DEFAULT"
    default_width: int = 1024
    default_height: int = 1024
    default_negative_prompt: str | None = None

    logging: LoggingConfig = LoggingConfig()

    @classmethod
    def default_path(cls) -> Path:
        """Default path for the settings file."""
        return Path("kandinsky.yaml")

    def http_config(self) -> HttpClientConfig:
        return HttpClientConfig(
            base_url=self.base_url,
            timeout=httpx.Timeout(self.request_timeout_s, connect=5.0),
        )

    def retry_policy(self) -> RetryPolicy:
        return RetryPolicy(max_attempts=self.retry_attempts)
