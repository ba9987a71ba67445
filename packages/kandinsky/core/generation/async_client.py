"""Asynchronous FusionBrain text-to-image client.

Same workflow as KandinskyClient; the wait between status checks is an
awaitable delay, so other tasks on the event loop keep running while a job
is pending.
"""

from __future__ import annotations

import asyncio
import logging
import time
from collections.abc import Awaitable, Callable

import httpx

from kandinsky.core.api.http.auth import KeySecretAuth
from kandinsky.core.api.http.client import AsyncApiClient
from kandinsky.core.config.models import KandinskySettings
from kandinsky.core.generation.errors import (
    EmptyKeyError,
    EmptySecretError,
    EmptyTaskIdentifierError,
)
from kandinsky.core.generation.models import (
    DEFAULT_MODEL_ID,
    MODEL_LIST,
    GenerationParams,
    ModelInfo,
    TaskHandle,
    TaskResult,
)
from kandinsky.core.generation.polling import PollLoop
from kandinsky.core.generation.wire import (
    build_submit_form,
    parse_submit_response,
    prepare_params,
    select_model,
)

logger = logging.getLogger(__name__)


class AsyncKandinskyClient:
    """Async client for one generation workflow at a time.

    Args:
        key: FusionBrain API key
        secret: FusionBrain API secret
        settings: Endpoints, polling and retry settings (defaults if None)
        transport: Optional httpx async transport (useful for testing)
        sleep: Awaitable wait used between status checks
        clock: Monotonic clock used for poll deadlines

    Example:
        >>> async with AsyncKandinskyClient(key, secret) as client:
        ...     result = await client.generate(GenerationParams(query="Lighthouse in fog"))
    """

    def __init__(
        self,
        key: str,
        secret: str,
        *,
        settings: KandinskySettings | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
        sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        if not key:
            raise EmptyKeyError()
        if not secret:
            raise EmptySecretError()

        self.settings = settings or KandinskySettings()
        self.model_id: int | None = None
        self._sleep = sleep
        self._clock = clock
        self._http = AsyncApiClient(
            self.settings.http_config(),
            auth=KeySecretAuth(key=key, secret=secret),
            retry_policy=self.settings.retry_policy(),
            transport=transport,
        )

    async def aclose(self) -> None:
        await self._http.aclose()

    async def __aenter__(self) -> AsyncKandinskyClient:
        return self

    async def __aexit__(self, exc_type, exc, tb) -> None:
        await self.aclose()

    async def list_models(self) -> list[ModelInfo]:
        response = await self._http.get(self.settings.models_path)
        return self._http.parse_pydantic(response, MODEL_LIST)

    async def resolve_model(self) -> int:
        """Select a model and cache its id for subsequent submissions."""
        model = select_model(await self.list_models(), self.settings.model_id)
        self.model_id = model.id
        logger.info("Resolved model %s (id=%d, version=%s)", model.name, model.id, model.version)
        return model.id

    async def submit(self, params: GenerationParams) -> TaskHandle:
        """Submit one generation job; see KandinskyClient.submit."""
        params = prepare_params(params)
        if self.model_id is None:
            logger.warning(
                "Model was not resolved; using default model id %d", DEFAULT_MODEL_ID
            )
            self.model_id = DEFAULT_MODEL_ID
        data, files = build_submit_form(params, self.model_id)
        response = await self._http.post(self.settings.run_path, data=data, files=files)
        return parse_submit_response(self._http.json(response))

    async def check_status(self, uuid: str) -> TaskResult:
        if not uuid:
            raise EmptyTaskIdentifierError()
        response = await self._http.get(f"{self.settings.status_path}{uuid}")
        return self._http.parse_pydantic(response, TaskResult)

    async def _wait(self, delay: float, cancel_event: asyncio.Event | None) -> bool:
        """Wait for delay seconds; return True if cancel_event was set meanwhile."""
        if cancel_event is None:
            await self._sleep(delay)
            return False
        try:
            await asyncio.wait_for(cancel_event.wait(), timeout=delay)
        except asyncio.TimeoutError:
            return False
        return True

    async def await_completion(
        self,
        handle: TaskHandle,
        *,
        timeout: float | None = None,
        cancel_event: asyncio.Event | None = None,
    ) -> TaskResult:
        """Poll the task until DONE, FAIL, an error, the deadline, or cancellation.

        Raises:
            EmptyTaskIdentifierError: If the handle has no identifier
            TaskNotCompletedError: If the service reported FAIL
            CensoredImageError: If the result is censored and reject_censored is set
            DeadlineExceededError: If the deadline passed before a terminal state
            PollCancelledError: If cancel_event was set
            ApiError: On HTTP or transport failure
        """
        if not handle.uuid:
            raise EmptyTaskIdentifierError()

        loop = PollLoop(
            uuid=handle.uuid,
            interval_s=self.settings.poll_interval_s,
            timeout_s=timeout if timeout is not None else self.settings.poll_timeout_s,
            clock=self._clock,
            reject_censored=self.settings.reject_censored,
        )

        while True:
            if cancel_event is not None and cancel_event.is_set():
                raise loop.cancelled()

            result = loop.observe(await self.check_status(handle.uuid))
            if result is not None:
                return result

            if await self._wait(loop.next_delay(), cancel_event):
                raise loop.cancelled()

    async def generate(
        self,
        params: GenerationParams,
        *,
        timeout: float | None = None,
        cancel_event: asyncio.Event | None = None,
    ) -> TaskResult:
        """Resolve the model if needed, submit, and wait for the result."""
        if self.model_id is None:
            await self.resolve_model()
        handle = await self.submit(params)
        return await self.await_completion(handle, timeout=timeout, cancel_event=cancel_event)
