"""Flow state models.

FlowState tracks where a page flow is in the authenticate, login and
confirm sequence. AuthenticationState is the session-scoped verdict of the
most recent identity check.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum


class FlowState(str, Enum):
    IDLE = "idle"
    CHECKING_AUTH = "checking_auth"
    AUTHENTICATED = "authenticated"
    UNAUTHENTICATED = "unauthenticated"
    LOGGING_IN = "logging_in"
    LOGIN_FAILED = "login_failed"
    REGISTERING = "registering"
    REGISTER_FAILED = "register_failed"
    VALIDATING_REQUEST = "validating_request"
    AWAITING_CONFIRMATION = "awaiting_confirmation"
    REQUEST_INVALID = "request_invalid"
    CONFIRMING = "confirming"
    CONFIRM_FAILED = "confirm_failed"
    REDIRECTING = "redirecting"

    @property
    def is_transitional(self) -> bool:
        """True while a network-bound step is in flight."""
        return self in _TRANSITIONAL


_TRANSITIONAL = frozenset(
    {
        FlowState.CHECKING_AUTH,
        FlowState.LOGGING_IN,
        FlowState.REGISTERING,
        FlowState.VALIDATING_REQUEST,
        FlowState.CONFIRMING,
    }
)


@dataclass(frozen=True)
class Unknown:
    pass


@dataclass(frozen=True)
class Checking:
    pass


@dataclass(frozen=True)
class Authenticated:
    user_id: str


@dataclass(frozen=True)
class Unauthenticated:
    pass


AuthenticationState = Unknown | Checking | Authenticated | Unauthenticated
