"""
Error Handler Utility - Secure Error Response Generation

Maps authentication outcomes to HTTP errors and keeps internal exception
details out of API responses. Details are logged; clients get a fixed,
generic message.

Usage:
    from src.utils.error_handler import log_and_raise, raise_for_result

    result = await auth.login(email, password)
    raise_for_result(result)

    try:
        # risky operation
    except Exception as e:
        log_and_raise(500, "loading notifications", e, logger)
"""

import logging
from typing import NoReturn
from fastapi import HTTPException

from src.models.results import AuthErrorKind, AuthResult

AUTH_ERROR_STATUS = {
    AuthErrorKind.ACCOUNT_LOCKED: 423,
    AuthErrorKind.INVALID_CREDENTIALS: 401,
    AuthErrorKind.BIOMETRIC_UNAVAILABLE: 400,
    AuthErrorKind.BIOMETRIC_FAILED: 401,
    AuthErrorKind.NO_ACCOUNT_FOUND: 404,
    AuthErrorKind.STORAGE_WRITE_FAILED: 500,
}


def safe_error_response(
    status_code: int,
    operation: str,
    exception: Exception,
    logger: logging.Logger
) -> HTTPException:
    """
    Create a safe HTTPException that doesn't expose internal details.

    Args:
        status_code: HTTP status code (e.g., 500, 400)
        operation: Description of what operation failed (e.g., "loading notifications")
        exception: The caught exception
        logger: Logger instance for recording the error

    Returns:
        HTTPException with sanitized error message
    """
    logger.error(f"{operation} failed: {exception}", exc_info=True)

    if status_code >= 500:
        detail = f"An internal error occurred while {operation}. Please try again later."
    else:
        detail = f"Error while {operation}. Please check your request and try again."

    return HTTPException(status_code=status_code, detail=detail)


def log_and_raise(
    status_code: int,
    operation: str,
    exception: Exception,
    logger: logging.Logger
) -> NoReturn:
    """Log an exception and raise a safe HTTPException."""
    raise safe_error_response(status_code, operation, exception, logger)


def auth_error_response(result: AuthResult) -> HTTPException:
    """HTTPException for a failed AuthResult, carrying the error kind as code."""
    status_code = AUTH_ERROR_STATUS.get(result.error, 500)
    return HTTPException(
        status_code=status_code,
        detail={"error": result.message, "code": result.error.value},
    )


def raise_for_result(result: AuthResult) -> None:
    """Raise the matching HTTPException when result is a failure."""
    if not result.ok:
        raise auth_error_response(result)
