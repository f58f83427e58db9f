"""
Lifecycle event processing for bridal party members.

Shopify webhooks drive the invitee status forward:

- customers/create, customers/enable, customers/login: invited -> joined
- orders/create: joined -> purchased, when the order contains a product
  from the member's showroom

Every event re-reads the stored status, so redelivered events are
harmless and a transition that failed is retried by the next delivery.
"""
import logging
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, List, Optional, Set

from ..config import CustomerPolicy
from ..models import Customer, MembershipStatus, ShowroomState
from ..utils import utc_now_iso
from ..utils.exceptions import CustomerNotFoundError
from .membership_reconciler import MembershipReconciler
from .product_catalog import ShowroomProductCatalog

logger = logging.getLogger(__name__)


class LifecycleTopic(str, Enum):
    """Webhook topics the processor understands."""
    CUSTOMER_CREATED = 'customers/create'
    CUSTOMER_ENABLED = 'customers/enable'
    CUSTOMER_LOGGED_IN = 'customers/login'
    ORDER_CREATED = 'orders/create'


ACCOUNT_TOPICS = {
    LifecycleTopic.CUSTOMER_CREATED,
    LifecycleTopic.CUSTOMER_ENABLED,
    LifecycleTopic.CUSTOMER_LOGGED_IN,
}


@dataclass
class LifecycleResult:
    """What processing one event did."""
    topic: str
    email: Optional[str] = None
    ignored: bool = False
    transitions: List[Dict[str, str]] = field(default_factory=list)
    error: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        return {
            'topic': self.topic,
            'email': self.email,
            'ignored': self.ignored,
            'transitions': self.transitions,
            'error': self.error,
        }


def order_product_ids(order: Dict[str, Any]) -> Set[str]:
    """Product ids of an order's line items, as strings."""
    product_ids = set()
    for item in order.get('line_items') or []:
        product_id = item.get('product_id')
        if product_id is not None:
            product_ids.add(str(product_id))
    return product_ids


class LifecycleEventProcessor:
    """Applies webhook events to invitee memberships."""

    def __init__(self, reconciler: MembershipReconciler, catalog: ShowroomProductCatalog = None):
        self.reconciler = reconciler
        self.catalog = catalog or ShowroomProductCatalog()

    def process(self, topic: str, payload: Dict[str, Any]) -> LifecycleResult:
        """
        Process one verified webhook.

        Never raises: failures are logged and reported on the result so the
        webhook endpoint can still acknowledge the delivery.
        """
        result = LifecycleResult(topic=topic)

        try:
            parsed_topic = LifecycleTopic(topic)
        except ValueError:
            logger.info('Ignoring webhook topic %s', topic)
            result.ignored = True
            return result

        try:
            if parsed_topic in ACCOUNT_TOPICS:
                self._handle_account_event(payload, result)
            else:
                self._handle_order_placed(payload, result)
        except CustomerNotFoundError:
            logger.info('No Shopify customer for %s, nothing to update', result.email)
        except Exception as e:
            logger.exception(f'Error processing {topic} webhook: {e}')
            result.error = str(e)

        return result

    # ==================== HANDLERS ====================

    def _handle_account_event(self, customer_data: Dict[str, Any], result: LifecycleResult) -> None:
        result.email = customer_data.get('email')
        if not result.email:
            logger.info('Customer webhook without email, skipping')
            return

        customer = self._load_customer(result.email)
        state = self.reconciler.load_state(customer)
        now = utc_now_iso()

        for membership in state.invited:
            previous = membership.status
            if membership.advance(MembershipStatus.JOINED, joined_date=now, customer_id=customer.id):
                result.transitions.append(self._transition(membership.showroom_id, previous, membership.status))

        self._save(customer, state, result)

    def _handle_order_placed(self, order: Dict[str, Any], result: LifecycleResult) -> None:
        result.email = order.get('email') or (order.get('customer') or {}).get('email')
        if not result.email:
            logger.info('Order %s has no customer email, skipping', order.get('id'))
            return

        product_ids = order_product_ids(order)
        if not product_ids:
            return

        customer = self._load_customer(result.email)
        state = self.reconciler.load_state(customer)
        now = utc_now_iso()

        for membership in state.invited:
            if membership.status != MembershipStatus.JOINED:
                continue
            if not product_ids & self.catalog.products_for(membership.showroom_id):
                continue

            previous = membership.status
            if membership.advance(MembershipStatus.PURCHASED, purchased_date=now, order_id=order.get('id')):
                result.transitions.append(self._transition(membership.showroom_id, previous, membership.status))

        self._save(customer, state, result)

    # ==================== HELPERS ====================

    def _load_customer(self, email: str) -> Customer:
        customer, _ = self.reconciler.resolve_customer(email, CustomerPolicy.REQUIRE_EXISTING)
        return customer

    def _save(self, customer: Customer, state: ShowroomState, result: LifecycleResult) -> None:
        if not result.transitions:
            return

        upsert = self.reconciler.save_invitations(customer, state, state.primary_invitation())
        for transition in result.transitions:
            logger.info(
                'Updated %s status to %s in showroom %s',
                result.email, transition['to'], transition['showroom_id']
            )
        if upsert.failed_keys:
            result.error = f"Failed to write {', '.join(upsert.failed_keys)}"

    @staticmethod
    def _transition(showroom_id: str, previous, current) -> Dict[str, str]:
        return {
            'showroom_id': showroom_id,
            'from': previous.value if previous else None,
            'to': current.value,
        }
