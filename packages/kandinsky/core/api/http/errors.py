from __future__ import annotations

from typing import Any

from pydantic import BaseModel, ConfigDict, Field


class ErrorBody(BaseModel):
    """Structured error body returned by the FusionBrain API.

    Example:
        {
            "timestamp": "2024-03-04T13:46:55.473+00:00",
            "status": 400,
            "error": "Bad Request",
            "message": "Failed to convert value of type 'java.lang.String' ...",
            "path": "/key/api/v1/text2image/run"
        }
    """

    model_config = ConfigDict(frozen=True, extra="ignore")

    timestamp: str = ""
    status: int = 0
    error: str = ""
    message: str = ""
    path: str = ""

    def describe(self) -> str:
        """Compose a one-line description: status, short label and message."""
        return f"status {self.status} {self.error} > {self.message}"


class ApiErrorData(BaseModel):
    """Context captured for a failed FusionBrain request.

    ``error_body`` is the parsed vendor error body when the response had one;
    ``response_body_snippet`` keeps the raw text either way.
    """

    model_config = ConfigDict(arbitrary_types_allowed=True)

    message: str
    method: str
    url: str
    status_code: int | None = None
    request_id: str | None = None
    response_headers: dict[str, str] | None = None
    response_body_snippet: str | None = None
    error_body: ErrorBody | None = None
    cause: BaseException | None = Field(default=None, repr=False)


class ApiError(Exception):
    """Base exception for HTTP and transport failures.

    Fields of ``data`` (ApiErrorData) are readable as attributes, e.g.
    ``err.status_code`` or ``err.error_body``.
    """

    def __init__(self, **fields: Any) -> None:
        self.data = ApiErrorData(**fields)
        super().__init__(str(self))

    def __getattr__(self, name: str) -> Any:
        # Only reached for names not set on the instance itself.
        data = self.__dict__.get("data")
        if data is not None and name in ApiErrorData.model_fields:
            return getattr(data, name)
        raise AttributeError(name)

    def __str__(self) -> str:
        parts = [self.data.message, f"{self.data.method} {self.data.url}"]
        if self.data.status_code is not None:
            parts.append(f"status={self.data.status_code}")
        if self.data.error_body is not None:
            parts.append(self.data.error_body.describe())
        if self.data.request_id:
            parts.append(f"request_id={self.data.request_id}")
        return " | ".join(parts)


class NetworkError(ApiError):
    """Network-level error (DNS, connection reset, etc.)."""


class TimeoutError(ApiError):
    """Request timed out."""


class DecodeError(ApiError):
    """Failed to decode response body (JSON/schema)."""


class ClientError(ApiError):
    """HTTP 4xx client error."""


class BadRequestError(ClientError):
    """HTTP 400: wrong request parameters or prompt too long."""


class AuthError(ClientError):
    """HTTP 401: credentials rejected, check key and secret."""


class NotFoundError(ClientError):
    """HTTP 404: resource not found."""


class UnsupportedMediaTypeError(ClientError):
    """HTTP 415: request format not supported."""


class ServerError(ApiError):
    """HTTP 5xx server error."""


class InternalServerError(ServerError):
    """HTTP 500: vendor-side failure."""


# Status codes the vendor documents; anything else falls through to body parsing.
STATUS_ERRORS: dict[int, type[ApiError]] = {
    400: BadRequestError,
    401: AuthError,
    404: NotFoundError,
    415: UnsupportedMediaTypeError,
    500: InternalServerError,
}
