"""
Custom exceptions for showroom business logic.

Each exception carries the HTTP status it maps to, so the Flask error
handlers can turn any of them into a JSON response without extra lookup.
"""
from .errors import ErrorCode


class ShowroomError(Exception):
    """Base exception for all showroom business logic errors."""

    status_code = 500

    def __init__(self, message: str, code: str = "SHOWROOM_ERROR"):
        self.message = message
        self.code = code
        super().__init__(message)


class ValidationError(ShowroomError):
    """Missing or malformed request data."""

    status_code = 400

    def __init__(self, message: str, field: str = None):
        self.field = field
        code = f"INVALID_{field.upper()}" if field else ErrorCode.VALIDATION_ERROR.value
        super().__init__(message, code)


class NotFoundError(ShowroomError):
    """Resource not found."""

    status_code = 404

    def __init__(self, resource: str, identifier=None):
        message = f"{resource} not found"
        if identifier:
            message = f"{resource} {identifier} not found"
        super().__init__(message, f"{resource.upper().replace(' ', '_')}_NOT_FOUND")


class CustomerNotFoundError(NotFoundError):
    """No Shopify customer matches the given email."""

    def __init__(self, email: str = None):
        super().__init__("Customer", email)


class UpstreamError(ShowroomError):
    """A third-party API answered with an error."""

    def __init__(self, service: str, message: str, status: int = None, code: str = "UPSTREAM_ERROR"):
        self.service = service
        self.upstream_status = status
        if status is not None:
            message = f"{message} ({service} status {status})"
        super().__init__(message, code)


class ShopifyError(UpstreamError):
    """Error communicating with the Shopify Admin API."""

    def __init__(self, message: str, status: int = None, original_error: Exception = None):
        self.original_error = original_error
        super().__init__("Shopify", message, status, ErrorCode.SHOPIFY_ERROR.value)


class ConfigurationError(ShowroomError):
    """Application configuration error."""

    def __init__(self, message: str):
        super().__init__(message, ErrorCode.CONFIGURATION_ERROR.value)
