from __future__ import annotations

from collections.abc import AsyncGenerator, Generator

import httpx
from pydantic import BaseModel, Field


class KeySecretAuth(httpx.Auth, BaseModel):
    """FusionBrain key/secret header authentication.

    Every request carries two headers:
    - ``X-Key: Key <key>``
    - ``X-Secret: Secret <secret>``

    Supports both sync and async requests.

    Args:
        key: API key value
        secret: API secret value

    Example:
        >>> auth = KeySecretAuth(key="abc", secret="xyz")
    """

    model_config = {"frozen": True, "arbitrary_types_allowed": True}

    key: str = Field(repr=False)  # Don't leak secrets in repr
    secret: str = Field(repr=False)
    key_header: str = "X-Key"
    secret_header: str = "X-Secret"

    def _apply(self, request: httpx.Request) -> None:
        request.headers[self.key_header] = f"Key {self.key}"
        request.headers[self.secret_header] = f"Secret {self.secret}"

    def auth_flow(self, request: httpx.Request) -> Generator[httpx.Request, httpx.Response, None]:
        """Apply key/secret headers to request (sync).

        Args:
            request: Request to authenticate

        Yields:
            Request with auth headers
        """
        self._apply(request)
        yield request

    async def async_auth_flow(
        self, request: httpx.Request
    ) -> AsyncGenerator[httpx.Request, httpx.Response]:
        """Apply key/secret headers to request (async).

        Args:
            request: Request to authenticate

        Yields:
            Request with auth headers
        """
        self._apply(request)
        yield request
