"""
Bridal party invitations.

Creating the customer is the primary effect of an invite; everything after
it (metafields, tags, Shopify invite, Klaviyo email) is best effort and
only reported back.
"""
import logging
from typing import Any, Dict

from ..schemas import InviteRequest
from ..utils.exceptions import ShopifyError, ShowroomError, ValidationError
from .klaviyo_service import KlaviyoService
from .membership_reconciler import MembershipReconciler

logger = logging.getLogger(__name__)


class BridalPartyService:
    """Invites members into a bride's showroom."""

    def __init__(self, reconciler: MembershipReconciler, klaviyo: KlaviyoService):
        self.reconciler = reconciler
        self.shopify = reconciler.shopify
        self.klaviyo = klaviyo
        self.settings = reconciler.settings

    def invite_member(self, invite: InviteRequest) -> Dict[str, Any]:
        """
        Create (or reuse) the customer and record the invitation.

        Raises:
            ValidationError: Shopify rejected the customer data
            CustomerNotFoundError: Policy requires an existing customer
            ShopifyError: Customer lookup/creation failed
        """
        try:
            customer, created = self.reconciler.resolve_customer(
                invite.email,
                self.settings.invite_policy,
                first_name=invite.first_name,
                last_name=invite.last_name,
                note=invite.customer_note,
            )
        except ShopifyError as e:
            if e.upstream_status == 422:
                raise ValidationError(f'Shopify rejected customer {invite.email}: {e.message}')
            raise

        if not created and invite.customer_note and invite.customer_note != customer.note:
            try:
                self.shopify.update_customer(customer.id, note=invite.customer_note)
                customer.note = invite.customer_note
            except ShowroomError as e:
                logger.error('Failed to update note for customer %s: %s', customer.id, e)

        membership = None
        try:
            membership = self.reconciler.record_invitation(
                customer,
                invite.showroom_id,
                bride_name=invite.bride_name,
                wedding_date=invite.wedding_date,
                roles=invite.roles,
            )
        except ShowroomError as e:
            logger.error('Error storing bridal party data for customer %s: %s', customer.id, e)

        activation_url, invite_sent = self._send_shopify_invite(customer)

        email_result = self.klaviyo.track_bridal_party_invited(
            email=invite.email,
            first_name=invite.first_name,
            last_name=invite.last_name,
            activation_url=activation_url,
            showroom_id=invite.showroom_id,
            bride_name=invite.bride_name,
            wedding_date=invite.wedding_date,
            roles=invite.roles,
            invite_date=membership.invite_date if membership else None,
        )

        return {
            'success': True,
            'customer': customer.to_dict(),
            'created': created,
            'membership': membership.to_dict() if membership else None,
            'inviteSent': invite_sent,
            'emailSent': bool(email_result.get('success')),
        }

    def _send_shopify_invite(self, customer):
        """Activation URL plus Shopify's own invite email, for disabled accounts."""
        if customer.is_enabled:
            return None, False

        activation_url = None
        try:
            activation_url = self.shopify.create_account_activation_url(customer.id)
        except ShowroomError as e:
            logger.error('No activation URL generated for customer %s: %s', customer.id, e)

        try:
            self.shopify.send_invite(customer.id)
            return activation_url, True
        except ShowroomError as e:
            logger.error('Failed to send Shopify invite to customer %s: %s', customer.id, e)
            return activation_url, False
