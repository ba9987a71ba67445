from __future__ import annotations

import httpx
from pydantic import BaseModel, Field, field_validator


class HttpClientConfig(BaseModel):
    """Transport settings shared by ApiClient and AsyncApiClient.

    Args:
        base_url: FusionBrain host, e.g. "https://api-key.fusionbrain.ai"
        timeout: Per-request HTTPX timeout
        headers: Extra headers sent with every request
        verify: TLS verification (True, False, or a CA bundle path)
        user_agent: User-Agent header value
        redact_headers: Header names masked in debug logs (case-insensitive)
        max_error_body: Bytes of a failed response kept on the raised error
    """

    model_config = {"frozen": True, "arbitrary_types_allowed": True}

    base_url: str
    timeout: httpx.Timeout = Field(default_factory=lambda: httpx.Timeout(30.0, connect=5.0))
    headers: dict[str, str] = Field(default_factory=dict)
    verify: bool | str = True
    user_agent: str = "kandinsky-client/0.1"
    redact_headers: tuple[str, ...] = ("x-key", "x-secret", "authorization", "cookie")
    max_error_body: int = Field(default=4096, ge=0)

    @field_validator("base_url")
    @classmethod
    def validate_base_url(cls, v: str) -> str:
        """Require an absolute http(s) URL; a trailing slash is dropped."""
        if not v.startswith(("http://", "https://")):
            raise ValueError(f"base_url must be an http(s) URL, got {v!r}")
        return v.rstrip("/")
