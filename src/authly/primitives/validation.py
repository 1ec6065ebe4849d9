"""Authorization request validation for the OIDC authorization endpoint.

Rules run in a fixed order and the first failing rule decides the error,
so multi-error inputs always report the same problem.
"""

from __future__ import annotations

import logging
from urllib.parse import urlsplit

from authly.models.authorization import (
    AuthorizationRequestParams,
    ValidatedAuthorizationParams,
    ValidationResult,
)

logger = logging.getLogger(__name__)

SUPPORTED_RESPONSE_TYPE = "code"
# Matched case-sensitively; "S256" is rejected.
SUPPORTED_CODE_CHALLENGE_METHODS = ("s256", "plain")
# Never navigated to, even when well-formed
UNSAFE_REDIRECT_SCHEMES = frozenset({"javascript", "data", "vbscript"})


def is_absolute_url(value: str) -> bool:
    """Check that value parses as a well-formed absolute URL.

    Requires a scheme and no whitespace; http(s) URLs also need a host.
    """
    if not value or any(ch.isspace() for ch in value):
        return False
    try:
        parsed = urlsplit(value)
        # Accessing port validates it
        parsed.port
    except ValueError:
        return False
    if not parsed.scheme:
        return False
    if parsed.scheme in ("http", "https") and not parsed.netloc:
        return False
    return True


def is_trusted_redirect_uri(value: str) -> bool:
    """Check that value is safe to send the user to with an error report.

    Custom application schemes are allowed; script-capable ones are not.
    """
    if not is_absolute_url(value):
        return False
    return urlsplit(value).scheme not in UNSAFE_REDIRECT_SCHEMES


def _missing(name: str) -> ValidationResult:
    return ValidationResult.fail(
        "invalid_request", f"Missing required parameter: {name}"
    )


def validate_authorization_params(params: AuthorizationRequestParams) -> ValidationResult:
    """Validate the query parameters of an inbound authorization request.

    Args:
        params: Query string keys mapped to their (last) value

    Returns:
        ValidationResult holding either the seven validated parameters,
        unchanged, or the first protocol error encountered
    """
    client_id = params.get("client_id")
    redirect_uri = params.get("redirect_uri")
    response_type = params.get("response_type")
    scope = params.get("scope")
    state = params.get("state")
    code_challenge = params.get("code_challenge")
    code_challenge_method = params.get("code_challenge_method")

    if not client_id:
        return _missing("client_id")
    if not redirect_uri:
        return _missing("redirect_uri")
    if not response_type:
        return _missing("response_type")

    if response_type != SUPPORTED_RESPONSE_TYPE:
        return ValidationResult.fail(
            "unsupported_response_type",
            f"Unsupported response_type: {response_type}. Only 'code' is supported.",
        )

    if not scope:
        return _missing("scope")
    if not state:
        return _missing("state")
    if not code_challenge:
        return _missing("code_challenge")
    if not code_challenge_method:
        return _missing("code_challenge_method")

    if code_challenge_method not in SUPPORTED_CODE_CHALLENGE_METHODS:
        return ValidationResult.fail(
            "invalid_request",
            f"Unsupported code_challenge_method: {code_challenge_method}. "
            "Only 's256' and 'plain' are supported.",
        )

    if not is_absolute_url(redirect_uri):
        return ValidationResult.fail("invalid_request", "Invalid redirect_uri format")

    logger.debug(f"Authorization request for client {client_id} passed validation")

    return ValidationResult.ok(
        ValidatedAuthorizationParams(
            client_id=client_id,
            redirect_uri=redirect_uri,
            response_type=response_type,
            scope=scope,
            state=state,
            code_challenge=code_challenge,
            code_challenge_method=code_challenge_method,
        )
    )
