"""
Utility modules for the showroom service.
"""
from datetime import datetime, timezone

from .logging_config import setup_logging
from .errors import (
    ErrorCode,
    error_response,
    bad_request,
    unauthorized,
    not_found,
    method_not_allowed,
    internal_error
)
from .exceptions import (
    ShowroomError,
    ValidationError,
    NotFoundError,
    CustomerNotFoundError,
    UpstreamError,
    ShopifyError,
    ConfigurationError
)
from .throttle import run_in_batches, BatchItemResult


def utc_now_iso() -> str:
    """Current UTC time as an ISO-8601 string with a Z suffix."""
    return datetime.now(timezone.utc).isoformat().replace('+00:00', 'Z')
