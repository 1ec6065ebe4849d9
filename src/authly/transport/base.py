from abc import ABC, abstractmethod
from types import TracebackType
from typing import Any, Self

from authly.models.results import RawResponse


class Transport(ABC):
    """Abstract transport to the backend API.

    Handles the mechanics of a request (verb dispatch, headers, cookies)
    without knowledge of response semantics. Interpreting the outcome is
    the normalizer's job.
    """

    @abstractmethod
    async def request(
        self, method: str, path: str, body: dict[str, Any] | None = None
    ) -> RawResponse:
        """Send one request and report what came back.

        Args:
            method: HTTP method
            path: Path relative to the API base URL, query string included
            body: JSON body, if any

        Raises:
            ConnectionError: If the request could not be completed
        """

    @abstractmethod
    async def close(self) -> None:
        """Release the transport's connections."""

    async def __aenter__(self) -> Self:
        return self

    async def __aexit__(
        self,
        exc_type: type[BaseException] | None,
        exc_val: BaseException | None,
        exc_tb: TracebackType | None,
    ) -> None:
        await self.close()
        return None
