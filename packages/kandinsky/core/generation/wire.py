"""Request building and response parsing shared by the sync and async clients."""

from __future__ import annotations

import json
import logging
from typing import Any

from pydantic import ValidationError

from kandinsky.core.api.http.errors import ErrorBody
from kandinsky.core.generation.errors import (
    EmptyPromptError,
    ModelResolutionError,
    SubmissionError,
)
from kandinsky.core.generation.models import GenerationParams, ModelInfo, TaskHandle

logger = logging.getLogger(__name__)


def select_model(models: list[ModelInfo], model_id: int | None = None) -> ModelInfo:
    """Pick the configured model, or the first one offered.

    Raises:
        ModelResolutionError: If no usable model is available
    """
    if not models:
        raise ModelResolutionError(
            "Models endpoint returned an empty list; check the API key and secret"
        )

    if model_id is not None:
        for model in models:
            if model.id == model_id:
                return model
        offered = ", ".join(str(m.id) for m in models)
        raise ModelResolutionError(f"Model {model_id} is not offered (available: {offered})")

    model = models[0]
    if model.id <= 0:
        raise ModelResolutionError("Models endpoint returned a model without an id")
    return model


def prepare_params(params: GenerationParams) -> GenerationParams:
    """Apply submission defaults and check the prompt.

    Raises:
        EmptyPromptError: If the query is empty
    """
    params = params.with_defaults()
    if not params.query.strip():
        raise EmptyPromptError()
    return params


def build_submit_form(
    params: GenerationParams, model_id: int
) -> tuple[dict[str, str], dict[str, Any]]:
    """Build multipart form fields: ``model_id`` and a JSON ``params`` part.

    Returns:
        (data, files) ready for httpx
    """
    data = {"model_id": str(model_id)}
    files = {"params": (None, json.dumps(params.to_payload()), "application/json")}
    return data, files


def parse_submit_response(payload: Any) -> TaskHandle:
    """Turn a decoded submission response into a TaskHandle.

    Raises:
        SubmissionError: If the body is an error body or carries no task identifier
    """
    if not isinstance(payload, dict):
        raise SubmissionError(f"Unexpected submission response: {payload!r}")

    if "error" in payload:
        try:
            body = ErrorBody.model_validate(payload)
        except ValidationError as e:
            raise SubmissionError(f"Unreadable error response: {payload!r}") from e
        raise SubmissionError.from_error_body(body)

    try:
        handle = TaskHandle.model_validate(payload)
    except ValidationError as e:
        raise SubmissionError(f"Malformed submission response: {e}") from e

    if not handle.uuid:
        raise SubmissionError("Submission response carried no task identifier")

    logger.info("Submitted task %s (status=%s)", handle.uuid, handle.status)
    return handle
