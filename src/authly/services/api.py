"""Backend API operations for the authorization flow.

Each operation sends one request through the transport and returns the
normalized result; none of them raise on backend-reported failures.
"""

from __future__ import annotations

import logging
from collections.abc import Mapping
from typing import Any, TypeVar
from urllib.parse import urlencode

from authly.models.authorization import (
    AuthorizationDetails,
    ConfirmAuthorizationPayload,
    ValidatedAuthorizationParams,
)
from authly.models.results import Failure, Success
from authly.models.users import (
    LoginPayload,
    LoginRequest,
    MePayload,
    RegisterPayload,
    RegisterRequest,
)
from authly.services.normalizer import normalize_response
from authly.transport.base import Transport

logger = logging.getLogger(__name__)

T = TypeVar("T")


class AuthlyAPI:
    """Client for the backend authentication and authorization endpoints.

    Covers:
    - POST /auth/login and POST /auth/register
    - GET /auth/me
    - GET /oauth/authorize/validate and POST /oauth/authorize/confirm
    """

    def __init__(self, transport: Transport):
        self._transport = transport

    async def login(self, credentials: LoginRequest) -> Success[LoginPayload] | Failure:
        logger.debug(f"Logging in as {credentials.username}")
        return await self._call(
            "POST", "/auth/login", credentials.model_dump(mode="json"), LoginPayload
        )

    async def register(
        self, registration: RegisterRequest
    ) -> Success[RegisterPayload] | Failure:
        logger.debug(f"Registering account {registration.username}")
        return await self._call(
            "POST",
            "/auth/register",
            registration.model_dump(mode="json", exclude_none=True),
            RegisterPayload,
        )

    async def get_me(self) -> Success[MePayload] | Failure:
        return await self._call("GET", "/auth/me", None, MePayload)

    async def validate_authorization_request(
        self, params: Mapping[str, str]
    ) -> Success[AuthorizationDetails] | Failure:
        """Ask the backend to validate an authorization request.

        Args:
            params: The inbound authorization query parameters, as received
        """
        path = f"/oauth/authorize/validate?{urlencode(list(params.items()))}"
        return await self._call("GET", path, None, AuthorizationDetails)

    async def confirm_authorization(
        self, params: ValidatedAuthorizationParams
    ) -> Success[ConfirmAuthorizationPayload] | Failure:
        logger.debug(f"Confirming authorization for client {params.client_id}")
        return await self._call(
            "POST",
            "/oauth/authorize/confirm",
            params.model_dump(mode="json"),
            ConfirmAuthorizationPayload,
        )

    async def _call(
        self,
        method: str,
        path: str,
        body: dict[str, Any] | None,
        schema: type[T],
    ) -> Success[T] | Failure:
        response = await self._transport.request(method, path, body)
        result = normalize_response(response, schema)

        if isinstance(result, Failure):
            logger.warning(
                f"{method} {path.split('?', 1)[0]} failed: {result.error}"
                + (f" - {result.error_description}" if result.error_description else "")
            )
        else:
            logger.debug(f"{method} {path.split('?', 1)[0]} succeeded")

        return result

    async def close(self) -> None:
        """Close the underlying transport."""
        await self._transport.close()
