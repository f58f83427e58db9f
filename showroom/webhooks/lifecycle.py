"""
Shopify lifecycle webhook.

One endpoint receives every subscribed topic; the topic is read from the
X-Shopify-Topic header and routed by the lifecycle processor.
"""
import logging

from flask import Blueprint, jsonify, request

from ..extensions import get_components
from ..utils.errors import ErrorCode, bad_request
from . import require_webhook_verification

logger = logging.getLogger(__name__)

lifecycle_bp = Blueprint('lifecycle_webhook', __name__)


@lifecycle_bp.route('/lifecycle', methods=['POST'])
@require_webhook_verification
def handle_lifecycle_event():
    """
    Handle customers/create, customers/enable, customers/login and orders/create.

    Processing problems are logged and still acknowledged with 200 so
    Shopify does not retry an event that cannot succeed.
    """
    payload = request.get_json(silent=True)
    if not isinstance(payload, dict):
        return bad_request('Invalid JSON payload', ErrorCode.INVALID_REQUEST)

    topic = request.headers.get('X-Shopify-Topic', '')
    result = get_components().lifecycle.process(topic, payload)

    if result.error:
        logger.error('Lifecycle webhook %s for %s failed: %s', topic, result.email, result.error)

    return jsonify({'success': True, **result.to_dict()})
