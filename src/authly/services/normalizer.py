"""Normalization of backend responses into Success / Failure results.

Every API operation funnels its RawResponse through normalize_response so
the redirect, structured-error and unknown-error rules live in one place.
"""

from __future__ import annotations

import logging
from typing import Any, TypeVar

from pydantic import BaseModel, ValidationError

from authly.models.errors import ResponseSchemaError
from authly.models.results import (
    REDIRECT_OCCURRED,
    UNKNOWN_ERROR,
    Failure,
    RawResponse,
    Success,
)

logger = logging.getLogger(__name__)

T = TypeVar("T")
M = TypeVar("M", bound=BaseModel)


def _validate(model: type[M], payload: dict[str, Any]) -> M:
    try:
        return model.model_validate(payload)
    except ValidationError as e:
        raise ResponseSchemaError(
            f"Response does not match {model.__name__} schema: {e}"
        ) from e


def normalize_response(response: RawResponse, schema: type[T]) -> Success[T] | Failure:
    """Convert a transport outcome into a normalized result.

    Args:
        response: Raw transport outcome for one operation
        schema: Operation-specific success payload type

    Returns:
        Success[schema] or Failure

    Raises:
        ResponseSchemaError: If the result does not match its schema
    """
    if response.redirected:
        # The transport followed a redirect (typically a rejected session)
        # instead of returning JSON; the body is never trusted here.
        logger.warning(
            f"Request was redirected to {response.redirect_url}; "
            "treating as redirect_occurred"
        )
        return _validate(
            Failure,
            {
                "success": False,
                "error": REDIRECT_OCCURRED,
                "redirect_url": response.redirect_url,
            },
        )

    body = response.body if isinstance(response.body, dict) else {}

    if body.get("success") is not True:
        error = body.get("error")
        if isinstance(error, str) and error:
            payload = {"success": False, "error": error}
            if body.get("error_description") is not None:
                payload["error_description"] = body["error_description"]
            return _validate(Failure, payload)

        logger.warning(
            f"Unrecognized response (HTTP {response.status_code}); "
            "treating as unknown_error"
        )
        return _validate(Failure, {"success": False, "error": UNKNOWN_ERROR})

    message = body.get("message")
    return _validate(
        Success[schema],
        {
            "success": True,
            "data": body.get("data"),
            "message": "" if message is None else message,
        },
    )
