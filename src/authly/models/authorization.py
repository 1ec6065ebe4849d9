"""Authorization request models for the OIDC authorization code flow.

Contains the untrusted inbound parameter bag, the validated parameter set
and the protocol error value produced when validation fails.
"""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass
from typing import Literal

from pydantic import BaseModel, ConfigDict

AuthorizationRequestParams = Mapping[str, str]

ErrorCode = Literal["invalid_request", "unsupported_response_type"]

REQUIRED_PARAMS = (
    "client_id",
    "redirect_uri",
    "response_type",
    "scope",
    "state",
    "code_challenge",
    "code_challenge_method",
)


class ValidatedAuthorizationParams(BaseModel):
    """Authorization request parameters that passed every validation rule."""

    model_config = ConfigDict(frozen=True)

    client_id: str
    redirect_uri: str
    response_type: str
    scope: str
    state: str
    code_challenge: str
    code_challenge_method: str


@dataclass(frozen=True)
class ValidationError:
    """OAuth protocol error for a rejected authorization request."""

    error: ErrorCode
    error_description: str


@dataclass(frozen=True)
class ValidationResult:
    """Outcome of validating an authorization request.

    Exactly one of params (when valid) or error (when not) is set.
    """

    valid: bool
    params: ValidatedAuthorizationParams | None = None
    error: ValidationError | None = None

    @classmethod
    def ok(cls, params: ValidatedAuthorizationParams) -> ValidationResult:
        return cls(valid=True, params=params)

    @classmethod
    def fail(cls, error: ErrorCode, description: str) -> ValidationResult:
        return cls(valid=False, error=ValidationError(error, description))


class AuthorizationDetails(BaseModel):
    """Backend view of an authorization request, shown on the consent step."""

    client_id: str
    client_name: str | None = None
    scopes: list[str] = []
    redirect_uri: str | None = None


class ConfirmAuthorizationPayload(BaseModel):
    """Backend answer to a confirmed authorization.

    redirect_uri is required whenever the backend reports success; it is
    optional here so that its absence surfaces as a contract violation in
    the flow rather than as a schema error.
    """

    redirect_uri: str | None = None
    code: str | None = None
    state: str | None = None
