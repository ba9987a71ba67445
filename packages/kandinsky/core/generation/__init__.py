"""Text-to-image generation workflow: resolve model, submit, poll, decode."""

from kandinsky.core.generation.async_client import AsyncKandinskyClient
from kandinsky.core.generation.client import KandinskyClient, generate_image
from kandinsky.core.generation.errors import (
    CensoredImageError,
    DeadlineExceededError,
    EmptyBase64Error,
    EmptyImageError,
    EmptyKeyError,
    EmptyNameError,
    EmptyPathError,
    EmptyPromptError,
    EmptySecretError,
    EmptyTaskIdentifierError,
    ImageDecodeError,
    ImageWriteError,
    InvalidBase64Error,
    KandinskyError,
    ModelResolutionError,
    PollCancelledError,
    SubmissionError,
    TaskNotCompletedError,
    UnsupportedFormatError,
)
from kandinsky.core.generation.fake import FakeGenerationClient
from kandinsky.core.generation.image import (
    ImageFormat,
    save_as,
    to_bytes,
    to_file,
    with_image,
)
from kandinsky.core.generation.models import (
    DEFAULT_MODEL_ID,
    GenerationParams,
    ModelInfo,
    TaskHandle,
    TaskResult,
    TaskState,
)
from kandinsky.core.generation.protocols import GenerationClient

__all__ = [
    # Clients
    "KandinskyClient",
    "AsyncKandinskyClient",
    "FakeGenerationClient",
    "GenerationClient",
    "generate_image",
    # Models
    "DEFAULT_MODEL_ID",
    "GenerationParams",
    "ModelInfo",
    "TaskHandle",
    "TaskResult",
    "TaskState",
    # Decoding
    "ImageFormat",
    "save_as",
    "to_bytes",
    "to_file",
    "with_image",
    # Errors
    "KandinskyError",
    "EmptyKeyError",
    "EmptySecretError",
    "EmptyPromptError",
    "EmptyTaskIdentifierError",
    "EmptyImageError",
    "EmptyNameError",
    "EmptyPathError",
    "EmptyBase64Error",
    "InvalidBase64Error",
    "UnsupportedFormatError",
    "ModelResolutionError",
    "SubmissionError",
    "TaskNotCompletedError",
    "CensoredImageError",
    "PollCancelledError",
    "DeadlineExceededError",
    "ImageDecodeError",
    "ImageWriteError",
]
