"""Bearer-authenticated REST transport over httpx."""

import logging
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager
from typing import Any

import httpx

from formchat.client.config import ClientConfig, get_client_config
from formchat.client.errors import ApiError

logger = logging.getLogger(__name__)


def _error_message(response: httpx.Response) -> str:
    """Pick the backend's error text out of a failed response."""
    try:
        body = response.json()
    except ValueError:
        body = None
    if isinstance(body, dict):
        for key in ("message", "error", "detail"):
            if isinstance(body.get(key), str) and body[key]:
                return body[key]
    return f"HTTP {response.status_code}"


class ApiClient:
    """Async JSON client for the conversation backend.

    Wraps a single ``httpx.AsyncClient`` rooted at ``config.api_url`` and adds
    the bearer token to every request. Pass ``client`` to supply your own
    ``httpx.AsyncClient`` (a mock transport in tests, a shared pool in an
    app); a supplied client is left open on ``aclose``.
    """

    def __init__(
        self,
        config: ClientConfig | None = None,
        client: httpx.AsyncClient | None = None,
    ) -> None:
        self._config = config or get_client_config()
        self._owns_client = client is None
        self._client = client or httpx.AsyncClient(timeout=self._config.timeout)

    @property
    def config(self) -> ClientConfig:
        return self._config

    def url(self, path: str) -> str:
        return f"{self._config.api_url}/{path.lstrip('/')}"

    def headers(self, extra: dict[str, str] | None = None) -> dict[str, str]:
        headers = {"Accept": "application/json"}
        if self._config.api_token:
            headers["Authorization"] = f"Bearer {self._config.api_token}"
        if extra:
            headers.update(extra)
        return headers

    async def request(
        self,
        method: str,
        path: str,
        *,
        json: Any = None,
        params: dict[str, str] | None = None,
        headers: dict[str, str] | None = None,
    ) -> Any:
        """Send a request and return the decoded JSON body.

        Raises:
            ApiError: On a non-2xx status, a transport failure, or a body
                that is not JSON.
        """
        try:
            response = await self._client.request(
                method,
                self.url(path),
                json=json,
                params=params,
                headers=self.headers(headers),
            )
        except httpx.HTTPError as e:
            logger.error(f"{method} {path} failed: {e}")
            raise ApiError(f"Connection failed: {e}") from e

        if not response.is_success:
            message = _error_message(response)
            logger.warning(f"{method} {path} returned {response.status_code}: {message}")
            raise ApiError(message, status_code=response.status_code)

        if response.status_code == 204 or not response.content:
            return None
        try:
            return response.json()
        except ValueError as e:
            logger.warning(f"{method} {path} returned a body that is not JSON: {e}")
            raise ApiError("Invalid JSON response", status_code=response.status_code) from e

    async def get(self, path: str, **kwargs: Any) -> Any:
        return await self.request("GET", path, **kwargs)

    async def post(self, path: str, json: Any = None, **kwargs: Any) -> Any:
        return await self.request("POST", path, json=json, **kwargs)

    @asynccontextmanager
    async def stream(
        self,
        method: str,
        path: str,
        *,
        params: dict[str, str] | None = None,
        headers: dict[str, str] | None = None,
    ) -> AsyncIterator[httpx.Response]:
        """Open a streaming request; the body is not read up front.

        The status is not checked here, callers decide what a non-2xx
        response means for them. httpx errors propagate unchanged.
        """
        async with self._client.stream(
            method,
            self.url(path),
            params=params,
            headers=self.headers(headers),
        ) as response:
            yield response

    async def aclose(self) -> None:
        if self._owns_client:
            await self._client.aclose()

    async def __aenter__(self) -> "ApiClient":
        return self

    async def __aexit__(self, *exc_info: object) -> None:
        await self.aclose()
