"""Client configuration for the authorization flow.

Values come from constructor arguments or, via load_config(), from
AUTHLY_* environment variables.
"""

from __future__ import annotations

import os
from dataclasses import dataclass
from urllib.parse import urlsplit


def _getenv(name: str, default: str) -> str:
    return os.environ.get(name, default).strip()


@dataclass(frozen=True)
class ClientConfig:
    """Where the backend API lives and where the flow's pages are mounted."""

    api_base_url: str = "http://localhost:8000"
    origin: str = "http://localhost:3000"
    timeout: float = 30.0

    login_path: str = "/login"
    register_path: str = "/register"
    authorize_path: str = "/authorize"
    home_path: str = "/"

    def authorize_url(self) -> str:
        """Absolute URL of the authorization page on this origin."""
        return f"{self.origin.rstrip('/')}{self.authorize_path}"


def load_config() -> ClientConfig:
    api_base_url = _getenv("AUTHLY_API_URL", "http://localhost:8000")
    origin = _getenv("AUTHLY_ORIGIN", "http://localhost:3000")
    timeout_raw = _getenv("AUTHLY_TIMEOUT", "30")

    for name, value in (("AUTHLY_API_URL", api_base_url), ("AUTHLY_ORIGIN", origin)):
        parsed = urlsplit(value)
        if parsed.scheme not in ("http", "https") or not parsed.netloc:
            raise ValueError(f"{name} must be an absolute http(s) URL (got {value!r})")

    try:
        timeout = float(timeout_raw)
    except ValueError:
        raise ValueError(f"AUTHLY_TIMEOUT must be a number (got {timeout_raw!r})") from None

    if timeout <= 0:
        raise ValueError(f"AUTHLY_TIMEOUT must be positive (got {timeout_raw!r})")

    return ClientConfig(api_base_url=api_base_url, origin=origin, timeout=timeout)
