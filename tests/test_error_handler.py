"""
Error Handler Unit Tests

Tests for secure error response generation and authentication error mapping.
"""

import logging

import pytest
from unittest.mock import MagicMock
from fastapi import HTTPException

from src.models.results import AuthErrorKind, AuthResult


class TestSafeErrorResponse:
    """Tests for safe_error_response function."""

    def test_returns_http_exception(self):
        from src.utils.error_handler import safe_error_response

        result = safe_error_response(500, "saving draft", Exception("Internal details"), MagicMock())

        assert isinstance(result, HTTPException)
        assert result.status_code == 500

    def test_logs_full_error_details(self):
        """safe_error_response should log full exception details."""
        from src.utils.error_handler import safe_error_response

        mock_logger = MagicMock()

        safe_error_response(500, "saving draft", Exception("Internal details here"), mock_logger)

        mock_logger.error.assert_called_once()
        call_args = mock_logger.error.call_args
        assert "saving draft failed" in call_args[0][0]
        assert "Internal details here" in call_args[0][0]
        assert call_args[1]["exc_info"] is True

    def test_server_error_generic_message(self):
        """5xx errors should return generic message."""
        from src.utils.error_handler import safe_error_response

        exc = Exception("Storage write failed for key 'credentials_jane_example_com'")

        result = safe_error_response(500, "saving registration progress", exc, MagicMock())

        assert "credentials_jane" not in result.detail
        assert "internal error" in result.detail.lower()
        assert "saving registration progress" in result.detail

    def test_client_error_message(self):
        from src.utils.error_handler import safe_error_response

        result = safe_error_response(400, "validating input", ValueError("Invalid email format"), MagicMock())

        assert result.status_code == 400
        assert "check your request" in result.detail.lower()
        assert "Invalid email format" not in result.detail

    def test_hides_file_paths(self):
        from src.utils.error_handler import safe_error_response

        exc = OSError("Permission denied: /home/app/data/secure_store.json")

        result = safe_error_response(500, "saving data", exc, MagicMock())

        assert "secure_store.json" not in result.detail


class TestLogAndRaise:
    """Tests for log_and_raise function."""

    def test_raises_http_exception(self):
        from src.utils.error_handler import log_and_raise

        with pytest.raises(HTTPException) as exc_info:
            log_and_raise(500, "testing", Exception("Test error"), MagicMock())

        assert exc_info.value.status_code == 500

    def test_logs_before_raising(self):
        from src.utils.error_handler import log_and_raise

        mock_logger = MagicMock()

        with pytest.raises(HTTPException):
            log_and_raise(500, "testing", Exception("Test error"), mock_logger)

        mock_logger.error.assert_called_once()

    def test_typical_try_except_pattern(self):
        """Test typical usage in a route handler."""
        from src.utils.error_handler import log_and_raise

        logger = logging.getLogger("test")

        def route_handler():
            try:
                raise PermissionError("Secret password: abc123")
            except Exception as e:
                log_and_raise(500, "authenticating", e, logger)

        with pytest.raises(HTTPException) as exc_info:
            route_handler()

        assert "abc123" not in exc_info.value.detail
        assert "password" not in exc_info.value.detail.lower()


class TestAuthErrorResponse:
    """Tests for mapping AuthResult failures to HTTP errors."""

    @pytest.mark.parametrize("kind,status", [
        (AuthErrorKind.ACCOUNT_LOCKED, 423),
        (AuthErrorKind.INVALID_CREDENTIALS, 401),
        (AuthErrorKind.BIOMETRIC_UNAVAILABLE, 400),
        (AuthErrorKind.BIOMETRIC_FAILED, 401),
        (AuthErrorKind.NO_ACCOUNT_FOUND, 404),
        (AuthErrorKind.STORAGE_WRITE_FAILED, 500),
    ])
    def test_status_codes(self, kind, status):
        from src.utils.error_handler import auth_error_response

        exc = auth_error_response(AuthResult.failure(kind))

        assert exc.status_code == status
        assert exc.detail["code"] == kind.value

    def test_detail_carries_message(self):
        from src.utils.error_handler import auth_error_response

        exc = auth_error_response(AuthResult.failure(AuthErrorKind.ACCOUNT_LOCKED))

        assert exc.detail == {
            "error": "Account locked due to too many failed attempts",
            "code": "account_locked",
        }

    def test_every_kind_is_mapped(self):
        from src.utils.error_handler import AUTH_ERROR_STATUS

        assert set(AUTH_ERROR_STATUS) == set(AuthErrorKind)


class TestRaiseForResult:

    def test_success_does_not_raise(self):
        from src.utils.error_handler import raise_for_result

        raise_for_result(AuthResult.success())

    def test_failure_raises(self):
        from src.utils.error_handler import raise_for_result

        with pytest.raises(HTTPException) as exc_info:
            raise_for_result(AuthResult.failure(AuthErrorKind.INVALID_CREDENTIALS))

        assert exc_info.value.status_code == 401
