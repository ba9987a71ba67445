"""Debug logging of FusionBrain requests with the credential headers masked."""

from __future__ import annotations

import logging
import time
from collections.abc import Iterable, Mapping

logger = logging.getLogger("kandinsky.core.api.http")

MASK = "***REDACTED***"


def redact_headers(headers: Mapping[str, str], sensitive: Iterable[str]) -> dict[str, str]:
    """Copy headers, masking the values of the sensitive ones (case-insensitive)."""
    names = {name.lower() for name in sensitive}
    return {k: MASK if k.lower() in names else v for k, v in headers.items()}


def log_request(
    method: str,
    url: str,
    *,
    attempt: int,
    request_id: str,
    headers: Mapping[str, str],
    sensitive: Iterable[str],
) -> float:
    """Log an outgoing request and return its start time."""
    logger.debug(
        "HTTP request",
        extra={
            "method": method,
            "url": url,
            "attempt": attempt,
            "request_id": request_id,
            "headers": redact_headers(headers, sensitive),
        },
    )
    return time.perf_counter()


def log_response(
    method: str, url: str, *, attempt: int, request_id: str, status_code: int, started: float
) -> None:
    logger.debug(
        "HTTP response",
        extra={
            "method": method,
            "url": url,
            "attempt": attempt,
            "request_id": request_id,
            "status_code": status_code,
            "elapsed_ms": int((time.perf_counter() - started) * 1000),
        },
    )
