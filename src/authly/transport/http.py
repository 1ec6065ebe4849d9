"""httpx-backed transport for the backend API."""

import logging
from typing import Any

import httpx

from authly.models.results import RawResponse
from authly.transport.base import Transport

logger = logging.getLogger(__name__)


class HttpxTransport(Transport):
    """Transport over an httpx.AsyncClient.

    Redirects are followed, as a browser would, and reported through
    RawResponse.redirected so the caller can tell a bounced session from a
    real answer. Cookies set by the backend persist on the client.
    """

    def __init__(
        self,
        base_url: str,
        timeout: float = 30.0,
        http_client: httpx.AsyncClient | None = None,
    ) -> None:
        self._http_client = http_client or httpx.AsyncClient(
            base_url=base_url,
            timeout=timeout,
            follow_redirects=True,
        )

    async def request(
        self, method: str, path: str, body: dict[str, Any] | None = None
    ) -> RawResponse:
        headers = {"Accept": "application/json"}
        logger.debug(f"{method} {path}")

        try:
            response = await self._http_client.request(
                method, path, json=body, headers=headers
            )
        except httpx.RequestError as e:
            raise ConnectionError(f"{method} {path} failed: {e}") from e

        redirected = bool(response.history)

        try:
            payload = response.json()
        except ValueError:
            payload = None

        return RawResponse(
            status_code=response.status_code,
            body=payload,
            redirected=redirected,
            redirect_url=str(response.url) if redirected else None,
        )

    async def close(self) -> None:
        await self._http_client.aclose()
