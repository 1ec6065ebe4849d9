"""Tests for response normalization.

Covers the four outcome shapes and schema enforcement on the result.
"""

import pytest

from authly.models.errors import ContractViolationError, ResponseSchemaError
from authly.models.results import Failure, RawResponse, Success
from authly.models.users import LoginPayload
from authly.services.normalizer import normalize_response
from tests.conftest import USER


class TestRedirectOccurred:
    def test_redirect_wins_over_success_body(self):
        # Arrange
        response = RawResponse(
            status_code=200,
            body={"success": True, "data": {"user": USER}},
            redirected=True,
            redirect_url="https://id.example/login",
        )

        # Act
        result = normalize_response(response, LoginPayload)

        # Assert
        assert isinstance(result, Failure)
        assert result.success is False
        assert result.error == "redirect_occurred"
        assert result.redirect_url == "https://id.example/login"
        assert result.is_redirect()

    def test_redirect_without_body(self):
        result = normalize_response(
            RawResponse(status_code=200, body=None, redirected=True), LoginPayload
        )

        assert result == Failure(error="redirect_occurred")


class TestStructuredError:
    def test_error_and_description_pass_through(self):
        response = RawResponse(
            status_code=401,
            body={
                "success": False,
                "error": "invalid_credentials",
                "error_description": "Username or password is incorrect",
            },
        )

        result = normalize_response(response, LoginPayload)

        assert result == Failure(
            error="invalid_credentials",
            error_description="Username or password is incorrect",
        )

    def test_error_without_description(self):
        result = normalize_response(
            RawResponse(status_code=400, body={"success": False, "error": "bad"}),
            LoginPayload,
        )

        assert result.error == "bad"
        assert result.error_description is None

    def test_non_string_description_is_a_schema_error(self):
        with pytest.raises(ResponseSchemaError):
            normalize_response(
                RawResponse(
                    status_code=400,
                    body={"success": False, "error": "bad", "error_description": 5},
                ),
                LoginPayload,
            )


class TestUnknownError:
    @pytest.mark.parametrize(
        "body",
        [
            None,
            {},
            {"success": False},
            {"success": False, "error": ""},
            {"success": "true", "data": {"user": USER}},
            ["unexpected"],
            "<html>oops</html>",
        ],
    )
    def test_unrecognized_body_is_unknown_error(self, body):
        result = normalize_response(RawResponse(status_code=500, body=body), LoginPayload)

        assert result == Failure(error="unknown_error")


class TestSuccess:
    def test_payload_is_validated_into_schema(self):
        # Act
        result = normalize_response(
            RawResponse(
                status_code=200,
                body={"success": True, "data": {"user": USER}, "message": "Welcome"},
            ),
            LoginPayload,
        )

        # Assert
        assert isinstance(result, Success)
        assert result.success is True
        assert isinstance(result.data, LoginPayload)
        assert result.data.user.id == "user-1"
        assert result.message == "Welcome"

    @pytest.mark.parametrize("extra", [{}, {"message": None}])
    def test_missing_message_defaults_to_empty(self, extra):
        body = {"success": True, "data": {"user": USER}, **extra}

        result = normalize_response(RawResponse(status_code=200, body=body), LoginPayload)

        assert result.message == ""

    def test_payload_mismatch_fails_loudly(self):
        # Arrange
        response = RawResponse(
            status_code=200, body={"success": True, "data": {"user": {"id": 1}}}
        )

        # Act & Assert
        with pytest.raises(ResponseSchemaError) as exc_info:
            normalize_response(response, LoginPayload)

        assert isinstance(exc_info.value, ContractViolationError)
