"""Transport outcomes and the normalized result union.

Every backend operation produces a RawResponse, which the normalizer turns
into exactly one of Success[T] or Failure.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Generic, Literal, TypeVar

from pydantic import BaseModel, ConfigDict

T = TypeVar("T")

REDIRECT_OCCURRED = "redirect_occurred"
UNKNOWN_ERROR = "unknown_error"


@dataclass(frozen=True)
class RawResponse:
    """What the transport saw for one request.

    body is the decoded JSON envelope, or None when the response had no
    JSON body. redirected is set when the transport followed a redirect
    instead of receiving the expected response directly.
    """

    status_code: int
    body: Any = None
    redirected: bool = False
    redirect_url: str | None = None


class Success(BaseModel, Generic[T]):
    """Successful backend operation carrying its typed payload."""

    model_config = ConfigDict(frozen=True)

    success: Literal[True] = True
    data: T
    message: str = ""


class Failure(BaseModel):
    """Failed backend operation.

    error is either a backend error code passed through verbatim,
    "redirect_occurred" (with the redirect target when known) or
    "unknown_error".
    """

    model_config = ConfigDict(frozen=True)

    success: Literal[False] = False
    error: str
    error_description: str | None = None
    redirect_url: str | None = None

    def is_redirect(self) -> bool:
        return self.error == REDIRECT_OCCURRED

    def user_message(self, fallback: str) -> str:
        """Message to show the user: the backend's description, else fallback."""
        return self.error_description or fallback

