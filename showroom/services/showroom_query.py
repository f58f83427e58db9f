"""
Read-only showroom queries used by the storefront.
"""
import logging
from typing import Any, Dict, List, Optional

from ..utils.exceptions import CustomerNotFoundError
from .membership_reconciler import MembershipReconciler
from .showroom_state import find_owner_blob

logger = logging.getLogger(__name__)


class ShowroomQueryService:
    """Aggregated, read-only views over customer metafields."""

    def __init__(self, reconciler: MembershipReconciler):
        self.reconciler = reconciler
        self.shopify = reconciler.shopify

    def list_showrooms_for_email(self, email: str) -> Dict[str, Any]:
        """
        All showrooms a customer owns or was invited to, owned first.

        Raises:
            CustomerNotFoundError: No customer matches the email
        """
        customer = self.shopify.find_customer_by_email(email)
        if not customer:
            raise CustomerNotFoundError(email)

        state = self.reconciler.load_state(customer)
        showrooms = []
        for membership in state.memberships():
            data = membership.to_dict()
            if not membership.is_owner:
                effective = membership.effective_status(customer.state)
                data['status'] = effective.value if effective else None
            showrooms.append(data)

        logger.info('Found %s showrooms for customer %s', len(showrooms), customer.id)
        return {
            'customer_id': customer.id,
            'email': customer.email,
            'showrooms': showrooms,
            'total_showrooms': len(showrooms),
        }

    def get_owned_showroom_data(self, email: str) -> Optional[Dict[str, Any]]:
        """
        The raw owned-showroom blob for a customer.

        Returns:
            Parsed blob, or None when the customer owns no showroom

        Raises:
            CustomerNotFoundError: No customer matches the email
        """
        customer = self.shopify.find_customer_by_email(email)
        if not customer:
            raise CustomerNotFoundError(email)

        _, data = find_owner_blob(self.shopify.list_metafields(customer.id))
        return data

    def get_status_for_emails(self, emails: List[str], showroom_id: str = None) -> Dict[str, Dict[str, Any]]:
        """
        Invitee status for each email, resolved independently.

        A failed lookup is recorded for that email and the batch carries on.
        """
        results = {}
        for email in emails:
            try:
                results[email] = self._status_for_email(email, showroom_id)
            except Exception as e:
                logger.error('Status lookup failed for %s: %s', email, e)
                results[email] = {'status': None, 'error': str(e)}
        return results

    def _status_for_email(self, email: str, showroom_id: Optional[str]) -> Dict[str, Any]:
        customer = self.shopify.find_customer_by_email(email)
        if not customer:
            return {'status': None}

        state = self.reconciler.load_state(customer)
        membership = state.primary_invitation(showroom_id)
        status = membership.effective_status(customer.state) if membership else None

        return {
            'status': status.value if status else None,
            'joinedDate': membership.joined_date if membership else None,
            'customerId': customer.id,
            'accountState': customer.state,
        }
