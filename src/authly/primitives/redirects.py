"""Redirect URL construction for the authorization flow.

Builds the outbound redirects to the client application (authorization
code or protocol error) and carries the original authorization request
across the login page as a single serialized parameter.

All functions are pure. Output is byte-identical for identical input
because query serialization goes through urllib.parse.urlencode, which
emits parameters in insertion order. Rebuilding a query normalizes it:
a bare key such as "?flag" comes back as "flag=", and a host-only URI
such as "https://app.example" keeps its empty path rather than gaining "/".
"""

from __future__ import annotations

from collections.abc import Iterable, Mapping
from urllib.parse import parse_qsl, urlencode, urlsplit, urlunsplit

from authly.models.authorization import ValidationError
from authly.models.errors import RedirectURIError
from authly.primitives.validation import is_absolute_url

OIDC_PARAMS_KEY = "oidc_params"


def _set_query_params(url: str, updates: Mapping[str, str]) -> str:
    """Return url with each key in updates set to its value.

    An existing key keeps the position of its first occurrence and loses
    any repeats; new keys are appended in the order given.
    """
    if not is_absolute_url(url):
        raise RedirectURIError(f"Invalid redirect URI: {url!r}")

    parts = urlsplit(url)
    pairs: list[tuple[str, str]] = []
    seen: set[str] = set()
    for key, value in parse_qsl(parts.query, keep_blank_values=True):
        if key in updates:
            if key in seen:
                continue
            seen.add(key)
            value = updates[key]
        pairs.append((key, value))
    pairs.extend((key, value) for key, value in updates.items() if key not in seen)

    return urlunsplit(parts._replace(query=urlencode(pairs)))


def build_error_redirect(
    redirect_uri: str, error: ValidationError, state: str | None = None
) -> str:
    """Build the client redirect that reports a protocol error.

    Args:
        redirect_uri: Client application's redirect URI
        error: Protocol error to report
        state: Original request state, echoed back when provided

    Returns:
        redirect_uri with error, error_description and optional state set

    Raises:
        RedirectURIError: If redirect_uri is not an absolute URL
    """
    updates = {"error": error.error, "error_description": error.error_description}
    if state:
        updates["state"] = state
    return _set_query_params(redirect_uri, updates)


def build_success_redirect(redirect_uri: str, code: str, state: str | None = None) -> str:
    """Build the client redirect that carries the authorization code.

    state is omitted entirely when not provided.

    Raises:
        RedirectURIError: If redirect_uri is not an absolute URL
    """
    updates = {"code": code}
    if state:
        updates["state"] = state
    return _set_query_params(redirect_uri, updates)


def query_params(url: str) -> dict[str, str]:
    """Extract the query parameters of url; repeated keys keep the last value."""
    return dict(parse_qsl(urlsplit(url).query, keep_blank_values=True))


def encode_oidc_params(params: Mapping[str, str]) -> str:
    """Serialize an authorization request's full query string."""
    return urlencode(list(params.items()))


def decode_oidc_params(blob: str) -> list[tuple[str, str]]:
    """Parse a serialized authorization query string.

    Raises:
        UnicodeDecodeError: If blob holds percent-escapes that are not UTF-8
    """
    return parse_qsl(blob, keep_blank_values=True, errors="strict")


def build_login_path(login_path: str, params: Mapping[str, str]) -> str:
    """Login page path carrying the original authorization request.

    Returns the bare login_path when there is nothing to preserve.
    """
    if not params:
        return login_path
    return f"{login_path}?{urlencode({OIDC_PARAMS_KEY: encode_oidc_params(params)})}"


def build_authorize_url(authorize_url: str, params: Iterable[tuple[str, str]]) -> str:
    """Authorization page URL with params set on it; later keys win."""
    return _set_query_params(authorize_url, dict(params))
