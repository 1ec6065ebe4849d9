from typing import Any

from authly.models.results import RawResponse
from authly.transport.base import Transport

VALID_PARAMS = {
    "client_id": "abc",
    "redirect_uri": "https://app.example/cb",
    "response_type": "code",
    "scope": "openid",
    "state": "xyz",
    "code_challenge": "chal",
    "code_challenge_method": "s256",
}

USER = {
    "id": "user-1",
    "username": "alice",
    "first_name": "Alice",
    "last_name": "Liddell",
    "email": "alice@example.com",
    "is_active": True,
    "created_at": "2024-01-01T00:00:00Z",
    "updated_at": "2024-01-01T00:00:00Z",
}


class StubTransport(Transport):
    """Transport that replays queued responses and records requests."""

    def __init__(self, *responses: RawResponse):
        self.responses = list(responses)
        self.requests: list[tuple[str, str, dict[str, Any] | None]] = []
        self.closed = False

    async def request(
        self, method: str, path: str, body: dict[str, Any] | None = None
    ) -> RawResponse:
        self.requests.append((method, path, body))
        return self.responses.pop(0)

    async def close(self) -> None:
        self.closed = True
