"""HTTPX clients for the FusionBrain API.

Provides:
- Vendor status-code mapping to structured errors
- Optional GET retries with exponential backoff (off by default)
- Debug logging of requests with the key/secret headers masked
- JSON and Pydantic response decoding
"""

from __future__ import annotations

import asyncio
import time
import uuid
from collections.abc import Mapping
from typing import Any

import httpx
from pydantic import BaseModel, TypeAdapter, ValidationError

from kandinsky.core.api.http.config import HttpClientConfig
from kandinsky.core.api.http.errors import (
    STATUS_ERRORS,
    ApiError,
    DecodeError,
    ErrorBody,
    NetworkError,
    TimeoutError,
)
from kandinsky.core.api.http.logging_utils import log_request, log_response
from kandinsky.core.api.http.retry import RetryPolicy


def _is_json(response: httpx.Response) -> bool:
    ctype = response.headers.get("content-type", "")
    return "application/json" in ctype or "+json" in ctype


def parse_error_body(response: httpx.Response) -> ErrorBody | None:
    """Parse the vendor error body from a response, if it carries one."""
    if not response.content or not _is_json(response):
        return None
    try:
        data = response.json()
    except ValueError:
        return None
    if not isinstance(data, dict) or "error" not in data:
        return None
    try:
        return ErrorBody.model_validate(data)
    except ValidationError:
        return None


class _BaseApiClient:
    """Request preparation, status mapping and decoding shared by both clients."""

    config: HttpClientConfig
    retry_policy: RetryPolicy

    def _client_kwargs(self, auth: httpx.Auth | None) -> dict[str, Any]:
        return {
            "base_url": self.config.base_url,
            "headers": {"User-Agent": self.config.user_agent, **self.config.headers},
            "timeout": self.config.timeout,
            "verify": self.config.verify,
            "auth": auth,
        }

    def _url(self, path: str) -> str:
        return f"{self.config.base_url}/{path.lstrip('/')}"

    def _error(
        self,
        exc_type: type[ApiError],
        message: str,
        method: str,
        url: str,
        *,
        request_id: str | None = None,
        response: httpx.Response | None = None,
        cause: BaseException | None = None,
    ) -> ApiError:
        """Build an ApiError carrying whatever response context is available."""
        if response is None:
            return exc_type(
                message=message, method=method, url=url, request_id=request_id, cause=cause
            )
        body = response.content or b""
        return exc_type(
            message=message,
            method=method,
            url=url,
            status_code=response.status_code,
            request_id=request_id or response.headers.get("x-request-id"),
            response_headers=dict(response.headers),
            response_body_snippet=body[: self.config.max_error_body].decode(
                "utf-8", errors="replace"
            ),
            error_body=parse_error_body(response),
            cause=cause,
        )

    def _check_status(
        self, response: httpx.Response, method: str, url: str, request_id: str
    ) -> None:
        """Raise the mapped error for documented vendor status codes.

        Statuses outside the mapping fall through to body parsing.
        """
        exc_type = STATUS_ERRORS.get(response.status_code)
        if exc_type is not None:
            raise self._error(
                exc_type,
                f"FusionBrain returned HTTP {response.status_code}",
                method,
                url,
                request_id=request_id,
                response=response,
            )

    def _transport_error(
        self, exc: httpx.RequestError, method: str, url: str, request_id: str
    ) -> ApiError:
        if isinstance(exc, httpx.TimeoutException):
            return self._error(
                TimeoutError, "Request timed out", method, url, request_id=request_id, cause=exc
            )
        return self._error(
            NetworkError, f"Network error: {exc}", method, url, request_id=request_id, cause=exc
        )

    def _decode_error(
        self, message: str, response: httpx.Response, cause: BaseException | None = None
    ) -> ApiError:
        return self._error(
            DecodeError,
            message,
            response.request.method,
            str(response.request.url),
            response=response,
            cause=cause,
        )

    def json(self, response: httpx.Response) -> Any:
        """Decode a JSON response body.

        Raises:
            DecodeError: If the body is empty, not JSON, or malformed
        """
        if not response.content:
            raise self._decode_error("Response body is empty", response)
        if not _is_json(response):
            raise self._decode_error("Response is not JSON (content-type mismatch)", response)
        try:
            return response.json()
        except ValueError as e:
            raise self._decode_error("Failed to parse JSON response", response, e) from e

    def parse_pydantic(
        self, response: httpx.Response, model: type[BaseModel] | TypeAdapter
    ) -> Any:
        """Decode and validate a response with a Pydantic model or TypeAdapter.

        Raises:
            DecodeError: If decoding or validation fails
        """
        data = self.json(response)
        try:
            if isinstance(model, TypeAdapter):
                return model.validate_python(data)
            return model.model_validate(data)
        except ValidationError as e:
            raise self._decode_error("Response failed validation", response, e) from e


class ApiClient(_BaseApiClient):
    """Synchronous FusionBrain HTTP client.

    Args:
        config: Transport configuration
        auth: Optional authentication handler (e.g. KeySecretAuth)
        retry_policy: Retry policy (defaults to a single attempt)
        transport: Optional custom transport (useful for testing)

    Example:
        >>> config = HttpClientConfig(base_url="https://api-key.fusionbrain.ai")
        >>> with ApiClient(config, auth=KeySecretAuth(key="abc", secret="xyz")) as client:
        ...     models = client.json(client.get("/key/api/v1/models"))
    """

    def __init__(
        self,
        config: HttpClientConfig,
        *,
        auth: httpx.Auth | None = None,
        retry_policy: RetryPolicy | None = None,
        transport: httpx.BaseTransport | None = None,
    ) -> None:
        self.config = config
        self.retry_policy = retry_policy or RetryPolicy()
        self._client = httpx.Client(**self._client_kwargs(auth), transport=transport)

    def close(self) -> None:
        self._client.close()

    def __enter__(self) -> ApiClient:
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.close()

    def request(
        self,
        method: str,
        path: str,
        *,
        params: Mapping[str, Any] | None = None,
        headers: Mapping[str, str] | None = None,
        data: Any = None,
        files: Any = None,
    ) -> httpx.Response:
        """Send a request, mapping documented error statuses to ApiError subclasses.

        Raises:
            ApiError: On a mapped status or a transport failure
        """
        method = method.upper()
        url = self._url(path)
        request_id = uuid.uuid4().hex
        merged = {**self._client.headers, **(headers or {}), "X-Request-Id": request_id}
        attempt = 0

        while True:
            attempt += 1
            started = log_request(
                method,
                url,
                attempt=attempt,
                request_id=request_id,
                headers=merged,
                sensitive=self.config.redact_headers,
            )
            try:
                response = self._client.request(
                    method, url, params=params, headers=merged, data=data, files=files
                )
            except httpx.RequestError as e:
                if not self.retry_policy.allows(method, attempt):
                    raise self._transport_error(e, method, url, request_id) from e
                time.sleep(self.retry_policy.delay_after(attempt))
                continue

            log_response(
                method,
                url,
                attempt=attempt,
                request_id=request_id,
                status_code=response.status_code,
                started=started,
            )
            if self.retry_policy.retries_status(method, response.status_code, attempt):
                time.sleep(self.retry_policy.delay_after(attempt))
                continue
            self._check_status(response, method, url, request_id)
            return response

    def get(self, path: str, **kwargs: Any) -> httpx.Response:
        return self.request("GET", path, **kwargs)

    def post(self, path: str, **kwargs: Any) -> httpx.Response:
        return self.request("POST", path, **kwargs)


class AsyncApiClient(_BaseApiClient):
    """Asynchronous FusionBrain HTTP client; same behaviour as ApiClient."""

    def __init__(
        self,
        config: HttpClientConfig,
        *,
        auth: httpx.Auth | None = None,
        retry_policy: RetryPolicy | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self.config = config
        self.retry_policy = retry_policy or RetryPolicy()
        self._client = httpx.AsyncClient(**self._client_kwargs(auth), transport=transport)

    async def aclose(self) -> None:
        await self._client.aclose()

    async def __aenter__(self) -> AsyncApiClient:
        return self

    async def __aexit__(self, exc_type, exc, tb) -> None:
        await self.aclose()

    async def request(
        self,
        method: str,
        path: str,
        *,
        params: Mapping[str, Any] | None = None,
        headers: Mapping[str, str] | None = None,
        data: Any = None,
        files: Any = None,
    ) -> httpx.Response:
        method = method.upper()
        url = self._url(path)
        request_id = uuid.uuid4().hex
        merged = {**self._client.headers, **(headers or {}), "X-Request-Id": request_id}
        attempt = 0

        while True:
            attempt += 1
            started = log_request(
                method,
                url,
                attempt=attempt,
                request_id=request_id,
                headers=merged,
                sensitive=self.config.redact_headers,
            )
            try:
                response = await self._client.request(
                    method, url, params=params, headers=merged, data=data, files=files
                )
            except httpx.RequestError as e:
                if not self.retry_policy.allows(method, attempt):
                    raise self._transport_error(e, method, url, request_id) from e
                await asyncio.sleep(self.retry_policy.delay_after(attempt))
                continue

            log_response(
                method,
                url,
                attempt=attempt,
                request_id=request_id,
                status_code=response.status_code,
                started=started,
            )
            if self.retry_policy.retries_status(method, response.status_code, attempt):
                await asyncio.sleep(self.retry_policy.delay_after(attempt))
                continue
            self._check_status(response, method, url, request_id)
            return response

    async def get(self, path: str, **kwargs: Any) -> httpx.Response:
        return await self.request("GET", path, **kwargs)

    async def post(self, path: str, **kwargs: Any) -> httpx.Response:
        return await self.request("POST", path, **kwargs)
