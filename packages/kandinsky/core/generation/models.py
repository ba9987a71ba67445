"""Wire models for the FusionBrain text-to-image API."""

from __future__ import annotations

from enum import Enum
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, TypeAdapter

GENERATE_TYPE = "GENERATE"
MIN_SIDE_PX = 128
DEFAULT_SIDE_PX = 1024
DEFAULT_MODEL_ID = 4


class ModelInfo(BaseModel):
    """Generation backend offered by the service.

    Example:
        {"id": 4, "name": "Kandinsky", "version": 3.0, "type": "TEXT2IMAGE"}
    """

    model_config = ConfigDict(frozen=True, extra="ignore")

    id: int = 0
    name: str = ""
    version: float = 0.0
    type: str = ""


MODEL_LIST = TypeAdapter(list[ModelInfo])


class GenerationParams(BaseModel):
    """Parameters of one generation request.

    Serialized to the vendor shape by ``to_payload``:

        {
            "type": "GENERATE",
            "style": "DEFAULT",
            "width": 1024,
            "height": 1024,
            "num_images": 1,
            "negativePromptUnclip": "bright colors, acidity",
            "generateParams": {"query": "A fluffy cat wearing glasses"}
        }

    Width/height below 128 are rejected by the service, not here.
    """

    model_config = ConfigDict(frozen=True)

    query: str = ""
    width: int = DEFAULT_SIDE_PX
    height: int = DEFAULT_SIDE_PX
    num_images: int = Field(default=1, ge=0, le=1)
    type: str = GENERATE_TYPE
    style: str = "DEFAULT"
    negative_prompt: str | None = None

    def with_defaults(self) -> GenerationParams:
        """Replace zero-valued fields with the submission defaults."""
        return self.model_copy(
            update={
                "width": self.width or MIN_SIDE_PX,
                "height": self.height or MIN_SIDE_PX,
                "num_images": self.num_images or 1,
                "type": GENERATE_TYPE,
            }
        )

    def to_payload(self) -> dict[str, Any]:
        payload: dict[str, Any] = {
            "type": self.type,
            "style": self.style,
            "width": self.width,
            "height": self.height,
            "num_images": self.num_images,
            "generateParams": {"query": self.query},
        }
        if self.negative_prompt:
            payload["negativePromptUnclip"] = self.negative_prompt
        return payload


class TaskHandle(BaseModel):
    """Identifier and initial status of a submitted task.

    Example:
        {"uuid": "3c7e...", "status": "INITIAL"}
    """

    model_config = ConfigDict(frozen=True, extra="ignore")

    uuid: str = ""
    status: str = ""


class TaskState(str, Enum):
    """Poll loop state derived from the service's status string."""

    PENDING = "PENDING"
    DONE = "DONE"
    FAILED = "FAILED"

    @classmethod
    def from_status(cls, status: str) -> TaskState:
        if status == "DONE":
            return cls.DONE
        if status == "FAIL":
            return cls.FAILED
        return cls.PENDING


class TaskResult(BaseModel):
    """Status record of a task; carries the images once the task is DONE.

    Example:
        {"uuid": "3c7e...", "status": "DONE", "images": ["iVBORw0..."], "censored": false}
    """

    model_config = ConfigDict(frozen=True, extra="ignore")

    uuid: str = ""
    status: str = ""
    images: list[str] = Field(default_factory=list)
    censored: bool = False

    @property
    def state(self) -> TaskState:
        return TaskState.from_status(self.status)
