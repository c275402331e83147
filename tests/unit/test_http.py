"""Unit tests for the ApiClient transport."""

import json

import httpx
import pytest
import pytest_check as check

from formchat.client.config import ClientConfig
from formchat.client.errors import ApiError
from formchat.client.http import ApiClient


def make_client(handler, token: str = "tok-123") -> tuple[ApiClient, httpx.AsyncClient]:
    http_client = httpx.AsyncClient(transport=httpx.MockTransport(handler))
    config = ClientConfig(api_url="http://test/api/", api_token=token)
    return ApiClient(config, client=http_client), http_client


class TestApiClientRequests:
    """Tests for request construction and response decoding."""

    async def test_get_sends_bearer_token(self) -> None:
        seen: list[httpx.Request] = []

        def handler(request: httpx.Request) -> httpx.Response:
            seen.append(request)
            return httpx.Response(200, json={"ok": True})

        api, http_client = make_client(handler)
        async with http_client:
            data = await api.get("/conversations/abc/state")

        assert data == {"ok": True}
        check.equal(str(seen[0].url), "http://test/api/conversations/abc/state")
        check.equal(seen[0].headers["authorization"], "Bearer tok-123")
        check.equal(seen[0].headers["accept"], "application/json")

    async def test_no_token_means_no_authorization_header(self) -> None:
        seen: list[httpx.Request] = []

        def handler(request: httpx.Request) -> httpx.Response:
            seen.append(request)
            return httpx.Response(200, json=[])

        api, http_client = make_client(handler, token="")
        async with http_client:
            await api.get("/agents")

        assert "authorization" not in seen[0].headers

    async def test_post_sends_json_body(self) -> None:
        seen: list[httpx.Request] = []

        def handler(request: httpx.Request) -> httpx.Response:
            seen.append(request)
            return httpx.Response(201, json={"id": "1"})

        api, http_client = make_client(handler)
        async with http_client:
            data = await api.post("/things", json={"name": "x"})

        check.equal(data, {"id": "1"})
        check.equal(json.loads(seen[0].content), {"name": "x"})

    async def test_empty_response_returns_none(self) -> None:
        api, http_client = make_client(lambda request: httpx.Response(204))
        async with http_client:
            assert await api.post("/sessions/1/close") is None


class TestApiClientErrors:
    """Tests for error translation."""

    @pytest.mark.parametrize("key", ["message", "error", "detail"])
    async def test_error_message_from_body(self, key: str) -> None:
        """Backend error text is surfaced from common JSON keys."""
        api, http_client = make_client(
            lambda request: httpx.Response(400, json={key: "Invalid password"})
        )
        async with http_client:
            with pytest.raises(ApiError, match="Invalid password") as exc_info:
                await api.post("/conversations/start", json={})

        assert exc_info.value.status_code == 400

    async def test_error_without_json_uses_status(self) -> None:
        api, http_client = make_client(lambda request: httpx.Response(502, text="Bad Gateway"))
        async with http_client:
            with pytest.raises(ApiError, match="HTTP 502"):
                await api.get("/anything")

    async def test_connection_error_has_no_status(self) -> None:
        def handler(request: httpx.Request) -> httpx.Response:
            raise httpx.ConnectError("refused")

        api, http_client = make_client(handler)
        async with http_client:
            with pytest.raises(ApiError, match="Connection failed") as exc_info:
                await api.get("/anything")

        assert exc_info.value.status_code is None

    async def test_non_json_success_body(self) -> None:
        """A 2xx page that is not JSON is reported as an API error."""
        api, http_client = make_client(
            lambda request: httpx.Response(
                200, text="<html>Maintenance</html>", headers={"content-type": "text/html"}
            )
        )
        async with http_client:
            with pytest.raises(ApiError, match="Invalid JSON response") as exc_info:
                await api.get("/conversations/abc/state")

        assert exc_info.value.status_code == 200


class TestApiClientLifecycle:
    """Tests for client ownership."""

    async def test_supplied_client_left_open(self) -> None:
        api, http_client = make_client(lambda request: httpx.Response(200))

        async with api:
            pass

        assert not http_client.is_closed
        await http_client.aclose()

    async def test_owned_client_closed(self) -> None:
        api = ApiClient(ClientConfig(api_url="http://test/api"))

        async with api:
            pass

        assert api._client.is_closed
