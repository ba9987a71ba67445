"""HTTPX wrapper for the FusionBrain API.

Exposes a small, ergonomic surface:
- ApiClient / AsyncApiClient: high-level clients
- HttpClientConfig: configuration
- RetryPolicy: optional retry behaviour
- Exceptions: ApiError and subclasses, one per documented vendor status code
- Auth helper: KeySecretAuth
"""

from kandinsky.core.api.http.auth import KeySecretAuth
from kandinsky.core.api.http.client import ApiClient, AsyncApiClient
from kandinsky.core.api.http.config import HttpClientConfig
from kandinsky.core.api.http.errors import (
    STATUS_ERRORS,
    ApiError,
    AuthError,
    BadRequestError,
    ClientError,
    DecodeError,
    ErrorBody,
    InternalServerError,
    NetworkError,
    NotFoundError,
    ServerError,
    TimeoutError,
    UnsupportedMediaTypeError,
)
from kandinsky.core.api.http.retry import RetryPolicy

__all__ = [
    "ApiClient",
    "AsyncApiClient",
    "HttpClientConfig",
    "KeySecretAuth",
    "RetryPolicy",
    "STATUS_ERRORS",
    "ErrorBody",
    "ApiError",
    "NetworkError",
    "TimeoutError",
    "DecodeError",
    "ClientError",
    "BadRequestError",
    "AuthError",
    "NotFoundError",
    "UnsupportedMediaTypeError",
    "ServerError",
    "InternalServerError",
]
