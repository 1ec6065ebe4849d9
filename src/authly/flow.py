"""Page flows for the OIDC authorization code flow.

AuthorizeFlow drives the authorization page: identity check, request
validation and user confirmation. LoginFlow and RegisterFlow drive the
account pages and, once the user is signed in, replay the authorization
request that sent them there.

Each flow instance belongs to one page visit. Flows refuse new actions
while a network-bound step is still in flight.
"""

from __future__ import annotations

import logging
from collections.abc import Awaitable, Callable, Mapping
from typing import Any, Protocol, TypeVar
from urllib.parse import urlencode

import pydantic

from authly.config import ClientConfig
from authly.models.authorization import (
    AuthorizationDetails,
    ConfirmAuthorizationPayload,
    ValidatedAuthorizationParams,
    ValidationError,
)
from authly.models.errors import ContractViolationError, FlowStateError, RedirectURIError
from authly.models.flow import (
    Authenticated,
    AuthenticationState,
    Checking,
    FlowState,
    Unauthenticated,
    Unknown,
)
from authly.models.results import UNKNOWN_ERROR, Failure, Success
from authly.models.users import LoginRequest, RegisterRequest
from authly.primitives.redirects import (
    OIDC_PARAMS_KEY,
    build_authorize_url,
    build_error_redirect,
    build_login_path,
    build_success_redirect,
    decode_oidc_params,
    encode_oidc_params,
)
from authly.primitives.validation import (
    is_trusted_redirect_uri,
    validate_authorization_params,
)
from authly.services.api import AuthlyAPI
from authly.services.cache import (
    AUTH_KEY,
    AUTH_ME_KEY,
    InMemoryQueryCache,
    QueryCache,
    oidc_validate_key,
)

logger = logging.getLogger(__name__)

T = TypeVar("T")
F = TypeVar("F", bound=pydantic.BaseModel)


class Navigator(Protocol):
    """Navigation capability supplied by the hosting page."""

    def push(self, path: str) -> None:
        """Change route within the app."""
        ...

    def assign(self, url: str) -> None:
        """Navigate the whole page to url."""
        ...


async def _settle(
    operation: Callable[[], Awaitable[Success[T] | Failure]],
) -> Success[T] | Failure:
    """Await a backend operation, recovering transport failures as unknown_error."""
    try:
        return await operation()
    except ConnectionError as e:
        logger.warning(f"Transport failure: {e}")
        return Failure(error=UNKNOWN_ERROR)


def _field_errors(exc: pydantic.ValidationError) -> dict[str, str]:
    errors: dict[str, str] = {}
    for err in exc.errors():
        if err["loc"]:
            errors.setdefault(str(err["loc"][0]), err["msg"])
    return errors


class _PageFlow:
    def __init__(
        self,
        api: AuthlyAPI,
        navigator: Navigator,
        query: Mapping[str, str],
        cache: QueryCache | None = None,
        config: ClientConfig | None = None,
    ):
        self.query = dict(query)
        self.state = FlowState.IDLE
        self._api = api
        self._navigator = navigator
        self._cache = cache if cache is not None else InMemoryQueryCache()
        self._config = config or ClientConfig()

    def _require(self, *allowed: FlowState, action: str) -> None:
        if self.state not in allowed:
            raise FlowStateError(f"Cannot {action} while {self.state.value}")


class AuthorizeFlow(_PageFlow):
    """Authorization page: authenticate, validate, then confirm.

    States: IDLE -> CHECKING_AUTH -> AUTHENTICATED | UNAUTHENTICATED;
    AUTHENTICATED -> VALIDATING_REQUEST -> AWAITING_CONFIRMATION |
    REQUEST_INVALID; AWAITING_CONFIRMATION -> CONFIRMING -> REDIRECTING |
    CONFIRM_FAILED.
    """

    GENERIC_ERROR = "The authorization request could not be completed"

    def __init__(
        self,
        api: AuthlyAPI,
        navigator: Navigator,
        query: Mapping[str, str],
        cache: QueryCache | None = None,
        config: ClientConfig | None = None,
    ):
        super().__init__(api, navigator, query, cache, config)
        self.auth_state: AuthenticationState = Unknown()
        self.params: ValidatedAuthorizationParams | None = None
        self.details: AuthorizationDetails | None = None
        self.error: ValidationError | None = None
        self.failure: Failure | None = None

    @property
    def error_message(self) -> str | None:
        if self.error is not None:
            return self.error.error_description
        if self.failure is not None:
            return self.failure.user_message(self.GENERIC_ERROR)
        return None

    async def start(self) -> FlowState:
        """Check the current identity and, if signed in, validate the request.

        An unauthenticated user is sent to the login page with the whole
        inbound query preserved in oidc_params.
        """
        self._require(FlowState.IDLE, action="start the authorization flow")
        self.state = FlowState.CHECKING_AUTH
        self.auth_state = Checking()

        result = await _settle(self._api.get_me)
        # A fresh check always supersedes whatever was cached before
        self._cache.set(AUTH_ME_KEY, result)

        if isinstance(result, Failure):
            logger.info(f"Not authenticated ({result.error}); redirecting to login")
            self.auth_state = Unauthenticated()
            self.state = FlowState.UNAUTHENTICATED
            self._navigator.push(build_login_path(self._config.login_path, self.query))
            return self.state

        self.auth_state = Authenticated(user_id=result.data.user.id)
        self.state = FlowState.AUTHENTICATED
        logger.debug(f"Authenticated as user {result.data.user.id}")

        if self.query:
            await self._validate_request()
        return self.state

    async def _validate_request(self) -> None:
        self.state = FlowState.VALIDATING_REQUEST

        outcome = validate_authorization_params(self.query)
        if not outcome.valid:
            self.error = outcome.error
            self.state = FlowState.REQUEST_INVALID
            self._report_to_client(outcome.error)
            return

        query = encode_oidc_params(self.query)
        result = await _settle(
            lambda: self._cache.fetch(
                oidc_validate_key(query),
                lambda: self._api.validate_authorization_request(self.query),
            )
        )
        if isinstance(result, Failure):
            # Only successful validations stay cached so a revisit retries
            self._cache.invalidate(oidc_validate_key(query))
            self.failure = result
            self.state = FlowState.REQUEST_INVALID
            return

        self.params = outcome.params
        self.details = result.data
        self.state = FlowState.AWAITING_CONFIRMATION

    def _report_to_client(self, error: ValidationError) -> None:
        """Send a protocol error back to the client when redirect_uri is usable."""
        redirect_uri = self.query.get("redirect_uri")
        if not redirect_uri or not is_trusted_redirect_uri(redirect_uri):
            logger.warning(
                f"Invalid authorization request ({error.error}) without a usable "
                "redirect_uri; reporting in-app"
            )
            return

        logger.info(f"Reporting {error.error} to client at {redirect_uri}")
        self._navigator.assign(
            build_error_redirect(redirect_uri, error, self.query.get("state"))
        )

    async def confirm(self) -> FlowState:
        """Confirm the authorization and send the user back to the client."""
        self._require(FlowState.AWAITING_CONFIRMATION, action="confirm authorization")
        self.state = FlowState.CONFIRMING
        params = self.params

        result = await _settle(lambda: self._api.confirm_authorization(params))
        if isinstance(result, Failure):
            self.failure = result
            self.state = FlowState.CONFIRM_FAILED
            return self.state

        try:
            target = self._client_redirect(result.data, params)
        except (ContractViolationError, RedirectURIError):
            self.state = FlowState.CONFIRM_FAILED
            raise

        logger.info(f"Authorization confirmed for client {params.client_id}")
        self.state = FlowState.REDIRECTING
        self._navigator.assign(target)
        return self.state

    def _client_redirect(
        self,
        payload: ConfirmAuthorizationPayload,
        params: ValidatedAuthorizationParams,
    ) -> str:
        if not payload.redirect_uri:
            raise ContractViolationError(
                "Authorization confirm succeeded without a redirect_uri"
            )
        if payload.code:
            return build_success_redirect(
                payload.redirect_uri, payload.code, payload.state or params.state
            )
        return payload.redirect_uri


class _AccountFlow(_PageFlow):
    """Shared submit and replay logic for the login and registration pages."""

    PENDING: FlowState
    FAILED: FlowState
    GENERIC_ERROR: str

    def __init__(
        self,
        api: AuthlyAPI,
        navigator: Navigator,
        query: Mapping[str, str],
        cache: QueryCache | None = None,
        config: ClientConfig | None = None,
    ):
        super().__init__(api, navigator, query, cache, config)
        self.state = FlowState.UNAUTHENTICATED
        self.field_errors: dict[str, str] = {}
        self.failure: Failure | None = None

    @property
    def error_message(self) -> str | None:
        if self.failure is None:
            return None
        return self.failure.user_message(self.GENERIC_ERROR)

    def _link(self, path: str) -> str:
        """path, carrying the preserved authorization request along."""
        blob = self.query.get(OIDC_PARAMS_KEY)
        if not blob:
            return path
        return f"{path}?{urlencode({OIDC_PARAMS_KEY: blob})}"

    async def _submit(
        self,
        form: type[F],
        fields: dict[str, Any],
        operation: Callable[[F], Awaitable[Success[Any] | Failure]],
    ) -> FlowState:
        self._require(
            FlowState.UNAUTHENTICATED, self.FAILED, action="submit the form"
        )
        self.field_errors = {}
        self.failure = None

        try:
            request = form.model_validate(fields)
        except pydantic.ValidationError as e:
            self.field_errors = _field_errors(e)
            return self.state

        self.state = self.PENDING
        result = await _settle(lambda: operation(request))

        if isinstance(result, Failure):
            self.failure = result
            self.state = self.FAILED
            return self.state

        self._cache.invalidate(AUTH_KEY)
        self.state = FlowState.AUTHENTICATED
        self._resume_authorization()
        return self.state

    def _resume_authorization(self) -> None:
        """Replay the preserved authorization request, or go home."""
        blob = self.query.get(OIDC_PARAMS_KEY)
        if not blob:
            self._navigator.push(self._config.home_path)
            return

        self.state = FlowState.REDIRECTING
        try:
            params = decode_oidc_params(blob)
        except ValueError:
            logger.warning(
                "Could not decode preserved authorization parameters; "
                "passing them through as-is"
            )
            self._navigator.push(f"{self._config.authorize_path}?{blob}")
            return

        # Full navigation so the authorization page re-checks the new session
        self._navigator.assign(build_authorize_url(self._config.authorize_url(), params))


class LoginFlow(_AccountFlow):
    """Login page: validate the form locally, log in, resume authorization."""

    PENDING = FlowState.LOGGING_IN
    FAILED = FlowState.LOGIN_FAILED
    GENERIC_ERROR = "Login failed"

    @property
    def register_link(self) -> str:
        return self._link(self._config.register_path)

    async def submit(self, username: str, password: str) -> FlowState:
        return await self._submit(
            LoginRequest,
            {"username": username, "password": password},
            self._api.login,
        )


class RegisterFlow(_AccountFlow):
    """Registration page: same shape as login, for a new account."""

    PENDING = FlowState.REGISTERING
    FAILED = FlowState.REGISTER_FAILED
    GENERIC_ERROR = "Registration failed"

    @property
    def login_link(self) -> str:
        return self._link(self._config.login_path)

    async def submit(
        self,
        username: str,
        password: str,
        first_name: str,
        last_name: str,
        email: str | None = None,
    ) -> FlowState:
        return await self._submit(
            RegisterRequest,
            {
                "username": username,
                "password": password,
                "first_name": first_name,
                "last_name": last_name,
                "email": email,
            },
            self._api.register,
        )
