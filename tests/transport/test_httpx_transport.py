"""Tests for the httpx-backed transport using httpx.MockTransport."""

import json

import httpx
import pytest

from authly.transport.http import HttpxTransport

BASE_URL = "https://api.example"


def _transport(handler) -> HttpxTransport:
    client = httpx.AsyncClient(
        base_url=BASE_URL,
        transport=httpx.MockTransport(handler),
        follow_redirects=True,
    )
    return HttpxTransport(BASE_URL, http_client=client)


class TestHttpxTransport:
    async def test_json_response_and_request_body(self):
        # Arrange
        seen = {}

        def handler(request: httpx.Request) -> httpx.Response:
            seen["method"] = request.method
            seen["path"] = request.url.path
            seen["body"] = json.loads(request.content)
            return httpx.Response(200, json={"success": True, "data": {}})

        transport = _transport(handler)

        # Act
        response = await transport.request(
            "POST", "/auth/login", {"username": "alice", "password": "pw"}
        )

        # Assert
        assert response.status_code == 200
        assert response.body == {"success": True, "data": {}}
        assert response.redirected is False
        assert response.redirect_url is None
        assert seen == {
            "method": "POST",
            "path": "/auth/login",
            "body": {"username": "alice", "password": "pw"},
        }
        await transport.close()

    async def test_followed_redirect_is_reported(self):
        def handler(request: httpx.Request) -> httpx.Response:
            if request.url.path == "/auth/me":
                return httpx.Response(302, headers={"Location": "/login"})
            return httpx.Response(200, text="<html>login</html>")

        transport = _transport(handler)

        response = await transport.request("GET", "/auth/me")

        assert response.redirected is True
        assert response.redirect_url == f"{BASE_URL}/login"
        assert response.body is None
        await transport.close()

    async def test_error_status_keeps_json_body(self):
        def handler(request: httpx.Request) -> httpx.Response:
            return httpx.Response(
                401, json={"success": False, "error": "unauthorized"}
            )

        transport = _transport(handler)

        response = await transport.request("GET", "/auth/me")

        assert response.status_code == 401
        assert response.body == {"success": False, "error": "unauthorized"}
        await transport.close()

    async def test_network_failure_raises_connection_error(self):
        def handler(request: httpx.Request) -> httpx.Response:
            raise httpx.ConnectError("connection refused", request=request)

        transport = _transport(handler)

        with pytest.raises(ConnectionError):
            await transport.request("GET", "/auth/me")
        await transport.close()

    async def test_context_manager_closes_client(self):
        client = httpx.AsyncClient(base_url=BASE_URL)

        async with HttpxTransport(BASE_URL, http_client=client):
            pass

        assert client.is_closed
