"""Query result cache shared by the page flows.

Keys are tuples; invalidating a key drops every entry it prefixes, so
invalidating AUTH_KEY clears all authentication results.
"""

from __future__ import annotations

import logging
from collections.abc import Awaitable, Callable
from typing import Any, Protocol

logger = logging.getLogger(__name__)

CacheKey = tuple[str, ...]


AUTH_KEY: CacheKey = ("auth",)
AUTH_ME_KEY: CacheKey = (*AUTH_KEY, "me")
OIDC_KEY: CacheKey = ("oidc",)


def oidc_validate_key(query: str) -> CacheKey:
    return (*OIDC_KEY, "validate", query)


class QueryCache(Protocol):
    """Cache collaborator used by the flows."""

    def get(self, key: CacheKey) -> Any | None: ...

    def set(self, key: CacheKey, value: Any) -> None: ...

    def invalidate(self, key: CacheKey) -> None: ...

    async def fetch(
        self, key: CacheKey, loader: Callable[[], Awaitable[Any]]
    ) -> Any: ...


class InMemoryQueryCache:
    """Process-local QueryCache backed by a dict."""

    def __init__(self) -> None:
        self._entries: dict[CacheKey, Any] = {}

    def get(self, key: CacheKey) -> Any | None:
        return self._entries.get(key)

    def set(self, key: CacheKey, value: Any) -> None:
        self._entries[key] = value

    def invalidate(self, key: CacheKey) -> None:
        stale = [k for k in self._entries if k[: len(key)] == key]
        for k in stale:
            del self._entries[k]
        logger.debug(f"Invalidated {len(stale)} cache entries under {key}")

    async def fetch(self, key: CacheKey, loader: Callable[[], Awaitable[Any]]) -> Any:
        """Return the cached value for key, loading and storing it on a miss."""
        if key in self._entries:
            return self._entries[key]
        value = await loader()
        self._entries[key] = value
        return value
