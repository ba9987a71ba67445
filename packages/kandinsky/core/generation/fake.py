"""In-memory GenerationClient for tests and offline development.

Replays scripted status results without network access or real waiting, while
going through the same PollLoop state machine as KandinskyClient.
"""

from __future__ import annotations

import threading
from collections.abc import Iterable

from kandinsky.core.generation.errors import EmptyTaskIdentifierError
from kandinsky.core.generation.models import (
    DEFAULT_MODEL_ID,
    GenerationParams,
    TaskHandle,
    TaskResult,
)
from kandinsky.core.generation.polling import PollLoop
from kandinsky.core.generation.wire import prepare_params


class FakeGenerationClient:
    """Scripted generation client.

    Args:
        statuses: Results returned by successive status checks; the last one
            repeats once the script is exhausted
        model_id: Id returned by resolve_model
        uuid: Task identifier assigned on submit
        reject_censored: Mirror of KandinskySettings.reject_censored

    Example:
        >>> fake = FakeGenerationClient(
        ...     [TaskResult(status="PROCESSING"), TaskResult(status="DONE", images=[b64])]
        ... )
        >>> result = fake.await_completion(fake.submit(GenerationParams(query="x")))
        >>> fake.status_checks
        2
    """

    def __init__(
        self,
        statuses: Iterable[TaskResult],
        *,
        model_id: int = DEFAULT_MODEL_ID,
        uuid: str = "fake-task",
        reject_censored: bool = False,
    ) -> None:
        self._statuses = list(statuses)
        if not self._statuses:
            raise ValueError("FakeGenerationClient needs at least one scripted status")
        self._resolved_id = model_id
        self._uuid = uuid
        self._reject_censored = reject_censored
        self.model_id: int | None = None
        self.submitted: list[GenerationParams] = []
        self.status_checks = 0
        self.waits: list[float] = []

    def resolve_model(self) -> int:
        self.model_id = self._resolved_id
        return self.model_id

    def submit(self, params: GenerationParams) -> TaskHandle:
        params = prepare_params(params)
        if self.model_id is None:
            self.model_id = DEFAULT_MODEL_ID
        self.submitted.append(params)
        return TaskHandle(uuid=self._uuid, status="INITIAL")

    def check_status(self, uuid: str) -> TaskResult:
        if not uuid:
            raise EmptyTaskIdentifierError()
        index = min(self.status_checks, len(self._statuses) - 1)
        self.status_checks += 1
        return self._statuses[index].model_copy(update={"uuid": uuid})

    def await_completion(
        self,
        handle: TaskHandle,
        *,
        timeout: float | None = None,
        cancel_event: threading.Event | None = None,
    ) -> TaskResult:
        if not handle.uuid:
            raise EmptyTaskIdentifierError()

        # Virtual clock: each recorded wait advances time instead of sleeping.
        elapsed = [0.0]
        loop = PollLoop(
            uuid=handle.uuid,
            interval_s=10.0,
            timeout_s=timeout,
            clock=lambda: elapsed[0],
            reject_censored=self._reject_censored,
        )
        while True:
            if cancel_event is not None and cancel_event.is_set():
                raise loop.cancelled()
            result = loop.observe(self.check_status(handle.uuid))
            if result is not None:
                return result
            delay = loop.next_delay()
            self.waits.append(delay)
            elapsed[0] += delay
