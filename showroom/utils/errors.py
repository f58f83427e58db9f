"""
Standardized error response utilities for the showroom API.

Every error response carries a human readable ``error`` string and a
machine readable ``code``:
{
    "error": "Email is required",
    "code": "VALIDATION_ERROR"
}

Usage:
    from showroom.utils.errors import error_response, ErrorCode

    return error_response("Customer not found", ErrorCode.NOT_FOUND, 404)
"""
import logging
from enum import Enum
from flask import jsonify
from typing import Optional

logger = logging.getLogger(__name__)


class ErrorCode(str, Enum):
    """Standardized error codes for API responses."""

    # Authentication (401)
    INVALID_SIGNATURE = "INVALID_SIGNATURE"

    # Validation Errors (400)
    INVALID_REQUEST = "INVALID_REQUEST"
    VALIDATION_ERROR = "VALIDATION_ERROR"

    # Not Found (404)
    NOT_FOUND = "NOT_FOUND"
    CUSTOMER_NOT_FOUND = "CUSTOMER_NOT_FOUND"

    # Method (405)
    METHOD_NOT_ALLOWED = "METHOD_NOT_ALLOWED"

    # External Service Errors
    SHOPIFY_ERROR = "SHOPIFY_ERROR"

    # Server Errors (500)
    CONFIGURATION_ERROR = "CONFIGURATION_ERROR"
    INTERNAL_ERROR = "INTERNAL_ERROR"


def error_response(
    message: str,
    code: ErrorCode = ErrorCode.INTERNAL_ERROR,
    status_code: int = 500,
    log_error: bool = True,
    details: Optional[dict] = None
) -> tuple:
    """
    Create a standardized error response.

    Args:
        message: User-friendly error message
        code: Error code from ErrorCode enum (or a raw code string)
        status_code: HTTP status code
        log_error: Whether to log the error
        details: Optional additional details (only logged, not returned to user)

    Returns:
        Tuple of (response, status_code) for Flask
    """
    code_value = code.value if isinstance(code, ErrorCode) else code

    if log_error and status_code >= 500:
        logger.error(f"API Error [{code_value}]: {message}", extra={"details": details})
    elif log_error and status_code >= 400:
        logger.warning(f"API Error [{code_value}]: {message}", extra={"details": details})

    return jsonify({"error": message, "code": code_value}), status_code


def bad_request(message: str, code: ErrorCode = ErrorCode.INVALID_REQUEST) -> tuple:
    """400 Bad Request error."""
    return error_response(message, code, 400, log_error=False)


def unauthorized(message: str = "Unauthorized", code: ErrorCode = ErrorCode.INVALID_SIGNATURE) -> tuple:
    """401 Unauthorized error."""
    return error_response(message, code, 401)


def not_found(message: str, code: ErrorCode = ErrorCode.NOT_FOUND) -> tuple:
    """404 Not Found error."""
    return error_response(message, code, 404, log_error=False)


def method_not_allowed(message: str = "Method Not Allowed") -> tuple:
    """405 Method Not Allowed error."""
    return error_response(message, ErrorCode.METHOD_NOT_ALLOWED, 405, log_error=False)


def internal_error(message: str = "An unexpected error occurred", details: Optional[dict] = None) -> tuple:
    """500 Internal Server Error."""
    return error_response(message, ErrorCode.INTERNAL_ERROR, 500, log_error=True, details=details)
