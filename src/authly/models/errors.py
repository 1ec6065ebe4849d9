"""Exception hierarchy for the authorization client.

Protocol and form validation problems are returned as values; these
exceptions cover failures the caller cannot recover from in-page.
"""

from __future__ import annotations


class AuthlyError(Exception):
    """Base exception for all authorization client errors."""

    pass


class ContractViolationError(AuthlyError):
    """Raised when a backend success response is missing a required field.

    The operation is aborted; the response is never downgraded to a
    silent success or a recoverable failure.
    """

    pass


class ResponseSchemaError(ContractViolationError):
    """Raised when a normalized result does not match its declared schema."""

    pass


class RedirectURIError(AuthlyError, ValueError):
    """Raised when a redirect URI cannot be parsed as an absolute URL."""

    pass


class FlowStateError(AuthlyError):
    """Raised when a flow action is invoked in a state that does not allow it.

    This covers re-entrant submissions made while an earlier one is still
    in flight.
    """

    pass
