"""
Bridal party API endpoints.
Inviting members into a showroom and reading their progress.
"""
import logging

from flask import Blueprint, jsonify, request

from ..extensions import get_components
from ..schemas import InviteRequest, StatusRequest

logger = logging.getLogger(__name__)

bridal_party_bp = Blueprint('bridal_party', __name__)


@bridal_party_bp.route('/invite', methods=['POST'])
def invite_member():
    """
    Invite a bridal party member.

    Request body:
        email, firstName, lastName (required)
        showroomId, brideName, weddingDate, roles, customerNote (optional)

    Returns:
        Customer plus whether the Shopify invite and Klaviyo email went out
    """
    invite = InviteRequest.from_json(request.get_json(silent=True))
    logger.info('Inviting %s to showroom %s', invite.email, invite.showroom_id)

    result = get_components().invitations.invite_member(invite)
    return jsonify(result)


@bridal_party_bp.route('/status', methods=['POST'])
def get_member_status():
    """
    Current status of each bridal party member.

    Request body:
        emails: list of member emails
        showroomId: optional showroom to report on

    Returns:
        {"results": {email: {status, joinedDate, customerId, accountState}}}
    """
    status_request = StatusRequest.from_json(request.get_json(silent=True))
    statuses = get_components().query.get_status_for_emails(
        status_request.emails, status_request.showroom_id
    )
    return jsonify({'results': statuses})
