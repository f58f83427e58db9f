"""
Showroom API endpoints.
Bride-side showroom data kept in customer metafields.
"""
import logging

from flask import Blueprint, jsonify, request

from ..extensions import get_components
from ..schemas import EmailRequest, SyncRequest
from ..services.showroom_state import OWNER_NAMESPACE
from ..utils.errors import ErrorCode, not_found

logger = logging.getLogger(__name__)

showrooms_bp = Blueprint('showrooms', __name__)


@showrooms_bp.route('', methods=['GET'])
def list_showrooms():
    """
    Every showroom a customer owns or was invited to.

    Query params:
        email: customer email

    Returns:
        {customer_id, email, showrooms, total_showrooms}
    """
    lookup = EmailRequest.from_json({'email': request.args.get('email')}, 'Email parameter is required')
    return jsonify(get_components().query.list_showrooms_for_email(lookup.email))


@showrooms_bp.route('/sync', methods=['GET'])
def get_showroom_data():
    """
    Raw owned-showroom data for a bride.

    Query params:
        email: customer email
    """
    lookup = EmailRequest.from_json({'email': request.args.get('email')}, 'Email parameter is required')
    data = get_components().query.get_owned_showroom_data(lookup.email)
    if data is None:
        return not_found('No showroom data found', ErrorCode.NOT_FOUND)

    return jsonify({'success': True, 'showroomData': data})


@showrooms_bp.route('/sync', methods=['POST'])
def sync_showroom_data():
    """
    Write bride-side metafields, creating the customer when configured to.

    Request body:
        email: customer email
        metafields: {key: value} written under the 'showroom' namespace
    """
    sync = SyncRequest.from_json(request.get_json(silent=True))
    components = get_components()

    result = components.reconciler.upsert_membership(
        sync.email,
        OWNER_NAMESPACE,
        sync.metafields,
        policy=components.settings.sync_policy,
    )

    message = 'Customer created and metafields set' if result.created else 'Customer metafields updated'
    logger.info('%s for %s (%s written, %s failed)',
                message, sync.email, len(result.written_keys), len(result.failed_keys))

    return jsonify({
        'success': True,
        'message': message,
        'customerId': result.customer.id,
        'failedKeys': result.failed_keys,
    })


@showrooms_bp.route('/delete', methods=['POST'])
def delete_showroom():
    """
    Remove a bride's showroom metafields and bride tag.

    Request body:
        email: customer email
    """
    lookup = EmailRequest.from_json(request.get_json(silent=True))
    result = get_components().reconciler.delete_owned_showroom(lookup.email)

    if not result.customer_found:
        return jsonify({
            'success': True,
            'message': 'Customer not found - nothing to delete',
            'deletedMetafields': 0,
        })

    return jsonify({
        'success': True,
        'message': f'Deleted {result.deleted} showroom metafields',
        'deletedMetafields': result.deleted,
    })
