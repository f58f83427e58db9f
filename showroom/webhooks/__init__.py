"""
Webhook handlers for the bridal showroom.
Shopify lifecycle events advance bridal party memberships.
"""
import hmac
import hashlib
import base64
import logging
from functools import wraps

from flask import request

from ..extensions import get_components
from ..utils.errors import unauthorized

logger = logging.getLogger(__name__)


def verify_shopify_webhook_signature(data: bytes, hmac_header: str, secret: str) -> bool:
    """
    Verify Shopify webhook HMAC-SHA256 signature.

    Shopify signs the raw body with the webhook secret and sends the base64
    digest in the X-Shopify-Hmac-SHA256 header. The comparison is timing-safe.

    Args:
        data: Raw request body bytes
        hmac_header: The X-Shopify-Hmac-SHA256 header value
        secret: The configured webhook secret

    Returns:
        True if signature is valid, False otherwise
    """
    if not secret:
        logger.warning('No webhook secret configured for verification')
        return False

    if not hmac_header:
        logger.warning('No HMAC header in webhook request')
        return False

    computed_hmac = base64.b64encode(
        hmac.new(secret.encode('utf-8'), data, hashlib.sha256).digest()
    ).decode('utf-8')

    return hmac.compare_digest(computed_hmac.encode('utf-8'), hmac_header.encode('utf-8'))


def require_webhook_verification(f):
    """
    Reject any request whose body signature does not verify.

    Runs before the body is parsed, so a bad signature never reaches the
    handler and never causes a write.
    """
    @wraps(f)
    def decorated_function(*args, **kwargs):
        hmac_header = request.headers.get('X-Shopify-Hmac-SHA256', '')
        secret = get_components().settings.webhook_secret

        if not verify_shopify_webhook_signature(request.get_data(), hmac_header, secret):
            logger.warning('Invalid webhook signature for topic %s',
                           request.headers.get('X-Shopify-Topic', 'unknown'))
            return unauthorized('Invalid signature')

        return f(*args, **kwargs)

    return decorated_function


from .lifecycle import lifecycle_bp

__all__ = [
    'lifecycle_bp',
    'verify_shopify_webhook_signature',
    'require_webhook_verification',
]
