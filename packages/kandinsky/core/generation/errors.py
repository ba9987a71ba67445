"""Library-level errors for the generation workflow.

HTTP and transport failures are raised from ``kandinsky.core.api.http.errors``;
everything detected by the library itself derives from KandinskyError.
"""

from __future__ import annotations

from kandinsky.core.api.http.errors import ErrorBody


class KandinskyError(Exception):
    """Base class for library-level errors."""


# Input validation (raised before any network call)


class EmptyKeyError(KandinskyError, ValueError):
    """API key is empty."""

    def __init__(self) -> None:
        super().__init__("Kandinsky API key is empty; set it in config or KAND_API_KEY")


class EmptySecretError(KandinskyError, ValueError):
    """API secret is empty."""

    def __init__(self) -> None:
        super().__init__("Kandinsky API secret is empty; set it in config or KAND_API_SECRET")


class EmptyPromptError(KandinskyError, ValueError):
    """Generation query is empty after defaults were applied."""

    def __init__(self) -> None:
        super().__init__("Generation prompt is empty")


class EmptyTaskIdentifierError(KandinskyError, ValueError):
    """Task handle carries no identifier."""

    def __init__(self) -> None:
        super().__init__("Task identifier is empty")


class EmptyImageError(KandinskyError, ValueError):
    """Result carries no image payload."""

    def __init__(self) -> None:
        super().__init__("Result contains no image")


class EmptyNameError(KandinskyError, ValueError):
    """Output file name is empty."""

    def __init__(self) -> None:
        super().__init__("File name is empty")


class EmptyPathError(KandinskyError, ValueError):
    """Output directory is empty."""

    def __init__(self) -> None:
        super().__init__("File path is empty")


class EmptyBase64Error(KandinskyError, ValueError):
    """Base64 payload is empty."""

    def __init__(self) -> None:
        super().__init__("Base64 payload is empty")


class InvalidBase64Error(KandinskyError, ValueError):
    """Payload is not valid standard base64."""

    def __init__(self) -> None:
        super().__init__("Payload is not valid base64")


class UnsupportedFormatError(KandinskyError, ValueError):
    """Requested image format is not supported."""

    def __init__(self, fmt: str) -> None:
        self.format = fmt
        super().__init__(f"Unsupported image format: {fmt!r} (expected 'png' or 'jpg')")


# Protocol and data errors


class ModelResolutionError(KandinskyError):
    """The models endpoint returned no usable model.

    Raised when the list is empty, the first model has no id, or the configured
    model id is not offered by the service.
    """


class SubmissionError(KandinskyError):
    """Job submission was rejected or returned a malformed response.

    Attributes:
        error_body: Vendor error body, when the response carried one
    """

    def __init__(self, message: str, error_body: ErrorBody | None = None) -> None:
        self.error_body = error_body
        super().__init__(message)

    @classmethod
    def from_error_body(cls, body: ErrorBody) -> SubmissionError:
        return cls(f"error from Kandinsky API: {body.describe()}", error_body=body)


# Task outcome


class TaskNotCompletedError(KandinskyError):
    """The service reported the task as failed."""

    def __init__(self, uuid: str) -> None:
        self.uuid = uuid
        super().__init__(f"Task {uuid} could not be completed")


class CensoredImageError(KandinskyError):
    """The service completed the task but flagged the result as censored."""

    def __init__(self, uuid: str) -> None:
        self.uuid = uuid
        super().__init__(f"Task {uuid} result was censored")


# Poll loop control


class PollCancelledError(KandinskyError):
    """Polling was cancelled by the caller before a terminal state."""

    def __init__(self, uuid: str, attempts: int) -> None:
        self.uuid = uuid
        self.attempts = attempts
        super().__init__(f"Polling task {uuid} cancelled after {attempts} status checks")


class DeadlineExceededError(KandinskyError):
    """No terminal state was reached before the caller's deadline."""

    def __init__(self, uuid: str, timeout_s: float, attempts: int) -> None:
        self.uuid = uuid
        self.timeout_s = timeout_s
        self.attempts = attempts
        super().__init__(
            f"Task {uuid} not finished after {timeout_s:g}s ({attempts} status checks)"
        )


# Decode / IO


class ImageDecodeError(KandinskyError):
    """Image payload could not be decoded."""


class ImageWriteError(KandinskyError):
    """Decoded image could not be written to disk."""
