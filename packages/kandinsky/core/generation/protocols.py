"""Protocol for generation clients.

The production KandinskyClient and the FakeGenerationClient test double both
satisfy this interface.
"""

from __future__ import annotations

import threading
from typing import Protocol

from kandinsky.core.generation.models import GenerationParams, TaskHandle, TaskResult


class GenerationClient(Protocol):
    """Resolve a model, submit a job and wait for its result."""

    model_id: int | None

    def resolve_model(self) -> int:
        """Fetch available models and cache the selected id on the client."""
        ...

    def submit(self, params: GenerationParams) -> TaskHandle:
        """Submit one generation job and return its handle."""
        ...

    def check_status(self, uuid: str) -> TaskResult:
        """Query the task status once."""
        ...

    def await_completion(
        self,
        handle: TaskHandle,
        *,
        timeout: float | None = None,
        cancel_event: threading.Event | None = None,
    ) -> TaskResult:
        """Poll until the task reaches a terminal state."""
        ...
