"""Synchronous FusionBrain text-to-image client.

Flow:
    1. resolve_model()    GET  /key/api/v1/models            (once per client)
    2. submit(params)     POST /key/api/v1/text2image/run     (multipart)
    3. await_completion() GET  /key/api/v1/text2image/status/{uuid}, every
                          poll_interval_s until DONE or FAIL
    4. decode with kandinsky.core.generation.image

The client is not thread-safe: the resolved model id is cached on the
instance without synchronization. Use one client per task at a time.
"""

from __future__ import annotations

import logging
import threading
import time
from collections.abc import Callable

import httpx

from kandinsky.core.api.http.auth import KeySecretAuth
from kandinsky.core.api.http.client import ApiClient
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


class KandinskyClient:
    """Blocking client for one generation workflow at a time.

    Args:
        key: FusionBrain API key
        secret: FusionBrain API secret
        settings: Endpoints, polling and retry settings (defaults if None)
        transport: Optional httpx transport (useful for testing)
        sleep: Blocking wait used between status checks
        clock: Monotonic clock used for poll deadlines

    Raises:
        EmptyKeyError: If key is empty
        EmptySecretError: If secret is empty

    Example:
        >>> with KandinskyClient(key, secret) as client:
        ...     client.resolve_model()
        ...     handle = client.submit(GenerationParams(query="A fluffy cat in glasses"))
        ...     result = client.await_completion(handle, timeout=300)
        ...     save_as(result, "cat", "out/")
    """

    def __init__(
        self,
        key: str,
        secret: str,
        *,
        settings: KandinskySettings | None = None,
        transport: httpx.BaseTransport | None = None,
        sleep: Callable[[float], None] = time.sleep,
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
        self._http = ApiClient(
            self.settings.http_config(),
            auth=KeySecretAuth(key=key, secret=secret),
            retry_policy=self.settings.retry_policy(),
            transport=transport,
        )

    @classmethod
    def from_settings(
        cls, settings: KandinskySettings, *, transport: httpx.BaseTransport | None = None
    ) -> KandinskyClient:
        """Build a client from settings carrying the credentials."""
        return cls(settings.api_key, settings.api_secret, settings=settings, transport=transport)

    def close(self) -> None:
        self._http.close()

    def __enter__(self) -> KandinskyClient:
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.close()

    def list_models(self) -> list[ModelInfo]:
        """Fetch the models offered to these credentials.

        Raises:
            AuthError: On HTTP 401
            NotFoundError: On HTTP 404
            DecodeError: If the body is not a JSON list of models
        """
        response = self._http.get(self.settings.models_path)
        return self._http.parse_pydantic(response, MODEL_LIST)

    def resolve_model(self) -> int:
        """Select a model and cache its id for subsequent submissions.

        The id is never re-resolved automatically; call again if it may be stale.

        Raises:
            ModelResolutionError: If the service offers no usable model
            ApiError: On HTTP or transport failure
        """
        model = select_model(self.list_models(), self.settings.model_id)
        self.model_id = model.id
        logger.info("Resolved model %s (id=%d, version=%s)", model.name, model.id, model.version)
        return model.id

    def _submission_model_id(self) -> int:
        if self.model_id is None:
            logger.warning(
                "Model was not resolved; using default model id %d", DEFAULT_MODEL_ID
            )
            self.model_id = DEFAULT_MODEL_ID
        return self.model_id

    def submit(self, params: GenerationParams) -> TaskHandle:
        """Submit one generation job.

        Zero width/height default to 128, zero num_images to 1, and type is
        forced to "GENERATE". The prompt is checked before any request is sent.

        Raises:
            EmptyPromptError: If the query is empty
            BadRequestError: If the service rejects the parameters (HTTP 400)
            SubmissionError: If the body is an error body or carries no task id
        """
        params = prepare_params(params)
        data, files = build_submit_form(params, self._submission_model_id())
        response = self._http.post(self.settings.run_path, data=data, files=files)
        return parse_submit_response(self._http.json(response))

    def check_status(self, uuid: str) -> TaskResult:
        """Query the task status once.

        Raises:
            EmptyTaskIdentifierError: If uuid is empty
            ApiError: On HTTP or transport failure
        """
        if not uuid:
            raise EmptyTaskIdentifierError()
        response = self._http.get(f"{self.settings.status_path}{uuid}")
        return self._http.parse_pydantic(response, TaskResult)

    def await_completion(
        self,
        handle: TaskHandle,
        *,
        timeout: float | None = None,
        cancel_event: threading.Event | None = None,
    ) -> TaskResult:
        """Poll the task until DONE, FAIL, an error, the deadline, or cancellation.

        Without a timeout (argument or settings.poll_timeout_s) the loop polls
        until a terminal state or an HTTP/transport error.

        Args:
            handle: Task handle returned by submit()
            timeout: Overall deadline in seconds
            cancel_event: Event that aborts polling when set

        Raises:
            EmptyTaskIdentifierError: If the handle has no identifier
            TaskNotCompletedError: If the service reported FAIL
            CensoredImageError: If the result is censored and reject_censored is set
            DeadlineExceededError: If the deadline passed before a terminal state
            PollCancelledError: If cancel_event was set
            ApiError: On HTTP or transport failure (never retried by the loop)
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

            result = loop.observe(self.check_status(handle.uuid))
            if result is not None:
                return result

            delay = loop.next_delay()
            if cancel_event is not None:
                if cancel_event.wait(delay):
                    raise loop.cancelled()
            else:
                self._sleep(delay)

    def generate(
        self,
        params: GenerationParams,
        *,
        timeout: float | None = None,
        cancel_event: threading.Event | None = None,
    ) -> TaskResult:
        """Resolve the model if needed, submit, and wait for the result."""
        if self.model_id is None:
            self.resolve_model()
        handle = self.submit(params)
        return self.await_completion(handle, timeout=timeout, cancel_event=cancel_event)


def generate_image(
    key: str,
    secret: str,
    params: GenerationParams,
    *,
    settings: KandinskySettings | None = None,
    timeout: float | None = None,
    transport: httpx.BaseTransport | None = None,
) -> TaskResult:
    """Run the whole workflow with a short-lived client.

    Example:
        >>> result = generate_image(key, secret, GenerationParams(query="Red fox at dawn"))
        >>> image_bytes = to_bytes(result)
    """
    with KandinskyClient(key, secret, settings=settings, transport=transport) as client:
        return client.generate(params, timeout=timeout)
