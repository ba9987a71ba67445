from __future__ import annotations

import random

from pydantic import BaseModel, Field


class RetryPolicy(BaseModel):
    """Retries for idempotent FusionBrain requests.

    A single attempt is the default, so a mapped protocol error aborts the call
    (and with it any poll loop) instead of being retried. Only GET requests are
    eligible: a retried job submission would start a second generation job.

    Args:
        max_attempts: Attempts per request, including the first one
        backoff_s: Delay before the first retry; doubles on each further retry
        max_backoff_s: Upper bound for a single delay
        jitter: Random spread as a fraction of the delay (0.1 = +/-10%)
        retry_on_status: Status codes worth another attempt
    """

    model_config = {"frozen": True}

    max_attempts: int = Field(default=1, ge=1)
    backoff_s: float = Field(default=1.0, ge=0.0)
    max_backoff_s: float = Field(default=8.0, ge=0.0)
    jitter: float = Field(default=0.1, ge=0.0, le=1.0)
    retry_on_status: tuple[int, ...] = (500,)

    def allows(self, method: str, attempt: int) -> bool:
        """Whether a failed ``attempt`` (1-indexed) of ``method`` may be repeated."""
        return method.upper() == "GET" and attempt < self.max_attempts

    def retries_status(self, method: str, status_code: int | None, attempt: int) -> bool:
        return status_code in self.retry_on_status and self.allows(method, attempt)

    def delay_after(self, attempt: int) -> float:
        """Seconds to wait after the failed ``attempt`` (1-indexed)."""
        delay = min(self.max_backoff_s, self.backoff_s * 2 ** (attempt - 1))
        if self.jitter:
            delay += random.uniform(-1.0, 1.0) * delay * self.jitter
        return max(0.0, delay)
