"""Tests for FakeGenerationClient and code written against GenerationClient."""

from __future__ import annotations

import threading

import pytest

from kandinsky.core.generation.errors import (
    DeadlineExceededError,
    EmptyPromptError,
    PollCancelledError,
    TaskNotCompletedError,
)
from kandinsky.core.generation.fake import FakeGenerationClient
from kandinsky.core.generation.image import to_bytes
from kandinsky.core.generation.models import GenerationParams, TaskResult
from kandinsky.core.generation.protocols import GenerationClient


def _run(client: GenerationClient, prompt: str, timeout: float | None = None) -> TaskResult:
    client.resolve_model()
    handle = client.submit(GenerationParams(query=prompt))
    return client.await_completion(handle, timeout=timeout)


def test_requires_scripted_status() -> None:
    with pytest.raises(ValueError):
        FakeGenerationClient([])


def test_replays_statuses_until_done(png_b64, png_bytes) -> None:
    fake = FakeGenerationClient(
        [
            TaskResult(status="INITIAL"),
            TaskResult(status="PROCESSING"),
            TaskResult(status="DONE", images=[png_b64]),
        ]
    )
    result = _run(fake, "Red fox at dawn")

    assert result.uuid == "fake-task"
    assert to_bytes(result) == png_bytes
    assert fake.status_checks == 3
    assert fake.waits == [10.0, 10.0]
    assert fake.submitted[0].query == "Red fox at dawn"
    assert fake.model_id == 4


def test_submit_applies_defaults() -> None:
    fake = FakeGenerationClient([TaskResult(status="DONE", images=["aGk="])])
    fake.submit(GenerationParams(query="x", width=0, height=0, num_images=0))

    submitted = fake.submitted[0]
    assert (submitted.width, submitted.height, submitted.num_images) == (128, 128, 1)


def test_empty_prompt() -> None:
    fake = FakeGenerationClient([TaskResult(status="DONE")])
    with pytest.raises(EmptyPromptError):
        fake.submit(GenerationParams(query=""))
    assert fake.submitted == []


def test_failed_task() -> None:
    fake = FakeGenerationClient([TaskResult(status="FAIL")])
    with pytest.raises(TaskNotCompletedError):
        _run(fake, "anything")


def test_last_status_repeats_until_deadline() -> None:
    fake = FakeGenerationClient([TaskResult(status="PROCESSING")])
    with pytest.raises(DeadlineExceededError):
        _run(fake, "anything", timeout=30)
    assert fake.waits == [10.0, 10.0, 10.0]
    assert fake.status_checks == 4


def test_cancelled() -> None:
    fake = FakeGenerationClient([TaskResult(status="PROCESSING")])
    cancel = threading.Event()
    cancel.set()
    handle = fake.submit(GenerationParams(query="x"))
    with pytest.raises(PollCancelledError):
        fake.await_completion(handle, cancel_event=cancel)
    assert fake.status_checks == 0
