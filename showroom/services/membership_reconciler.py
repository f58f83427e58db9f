"""
Membership reconciliation against Shopify customer metafields.

Merges requested writes into a customer's existing metafields and keeps
the customer's profile name and tags in step with the showroom data.
"""
import json
import logging
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Tuple, Union

from ..config import CustomerPolicy, ShowroomSettings
from ..models import Customer, Membership, MembershipRole, MembershipStatus, ShowroomState
from ..utils import run_in_batches, utc_now_iso
from ..utils.exceptions import CustomerNotFoundError, ShowroomError
from . import customer_tags
from .shopify_client import ShopifyClient
from .showroom_state import (
    INVITEE_NAMESPACE,
    MEMBERSHIPS_KEY,
    OWNER_BLOB_KEYS,
    OWNER_NAMESPACE,
    build_showroom_state,
    legacy_fields,
    membership_records,
    parse_json_object,
    party_size_of,
)

logger = logging.getLogger(__name__)


@dataclass
class UpsertResult:
    """Outcome of a metafield write-set for one customer."""
    customer: Customer
    created: bool = False
    written_keys: List[str] = field(default_factory=list)
    failed_keys: List[str] = field(default_factory=list)

    @property
    def success(self) -> bool:
        # Individual metafield failures do not fail the call
        return self.customer is not None


@dataclass
class DeleteResult:
    """Outcome of removing a customer's owned showroom."""
    customer_found: bool
    deleted: int = 0
    failed: int = 0
    customer_id: Optional[str] = None


def encode_metafield_value(namespace: str, value: Any) -> Tuple[str, str]:
    """
    Encode a value for Shopify and pick its metafield type.

    Returns:
        (value string, metafield type)
    """
    if isinstance(value, bool):
        return ('true' if value else 'false'), 'boolean'
    if isinstance(value, int):
        return str(value), 'number_integer'
    if isinstance(value, (dict, list)):
        return json.dumps(value), 'json'

    text = '' if value is None else str(value)
    if namespace == OWNER_NAMESPACE:
        try:
            json.loads(text)
            return text, 'json'
        except ValueError:
            pass
    if '\n' in text:
        return text, 'multi_line_text_field'
    return text, 'single_line_text_field'


def split_name(full_name: str) -> Tuple[str, str]:
    """First token is the first name; the rest is the last name."""
    tokens = (full_name or '').split()
    if not tokens:
        return '', ''
    return tokens[0], ' '.join(tokens[1:])


class MembershipReconciler:
    """
    Reads and writes showroom memberships on Shopify customers.

    Writes are not atomic: each metafield is written on its own, a few at a
    time, and one failed key never blocks the others.
    """

    def __init__(self, shopify: ShopifyClient, settings: ShowroomSettings):
        self.shopify = shopify
        self.settings = settings

    # ==================== CUSTOMERS ====================

    def resolve_customer(
        self,
        customer_ref: Union[str, Customer],
        policy: CustomerPolicy = CustomerPolicy.REQUIRE_EXISTING,
        first_name: str = None,
        last_name: str = None,
        note: str = None
    ) -> Tuple[Customer, bool]:
        """
        Turn an email (or an already loaded customer) into a customer.

        Returns:
            (customer, created)

        Raises:
            CustomerNotFoundError: No match and the policy forbids creating one
            ShopifyError: Lookup or creation failed
        """
        if isinstance(customer_ref, Customer):
            return customer_ref, False

        email = customer_ref.strip()
        customer = self.shopify.find_customer_by_email(email)
        if customer:
            return customer, False

        if policy != CustomerPolicy.CREATE:
            raise CustomerNotFoundError(email)

        customer = self.shopify.create_customer(
            email=email,
            first_name=first_name or self.settings.default_first_name,
            last_name=last_name or self.settings.default_last_name,
            note=note or self.settings.default_note,
            accepts_marketing=True,
        )
        logger.info('Created customer %s for %s', customer.id, email)
        return customer, True

    def load_state(self, customer: Customer) -> ShowroomState:
        return build_showroom_state(self.shopify.list_metafields(customer.id))

    # ==================== WRITES ====================

    def upsert_membership(
        self,
        customer_ref: Union[str, Customer],
        namespace: str,
        fields: Dict[str, Any],
        policy: CustomerPolicy = CustomerPolicy.REQUIRE_EXISTING
    ) -> UpsertResult:
        """
        Write a set of metafields and apply the derived profile/tag changes.

        Args:
            customer_ref: Customer email or loaded Customer
            namespace: 'showroom' (bride side) or 'bridal_showroom' (invitee side)
            fields: key -> value; non-string values are JSON encoded
            policy: What to do when no customer matches the email

        Returns:
            UpsertResult listing written and failed keys
        """
        customer, created = self.resolve_customer(customer_ref, policy)
        result = UpsertResult(customer=customer, created=created)

        writes = []
        for key, value in fields.items():
            encoded, value_type = encode_metafield_value(namespace, value)
            writes.append((key, encoded, value_type))

        outcomes = run_in_batches(
            writes,
            lambda write: self.shopify.set_metafield(customer.id, namespace, *write),
            batch_size=self.settings.batch_size,
            delay_ms=self.settings.batch_delay_ms,
            label='metafield'
        )
        for outcome in outcomes:
            key = outcome.item[0]
            (result.written_keys if outcome.success else result.failed_keys).append(key)

        if result.failed_keys:
            logger.warning('Customer %s: failed to write %s.%s', customer.id, namespace, result.failed_keys)

        if namespace == OWNER_NAMESPACE:
            blob = self._owner_blob(fields)
            if blob is not None:
                self.apply_bride_name(customer, blob.get('bride_name'))
                self.add_tags(customer, customer_tags.owner_tags(party_size_of(blob)))
        elif namespace == INVITEE_NAMESPACE:
            self.add_tags(customer, customer_tags.invitee_tags(self._invitee_roles(fields)))

        return result

    def record_invitation(
        self,
        customer: Customer,
        showroom_id: str,
        bride_name: str = None,
        wedding_date: str = None,
        roles: List[str] = None
    ) -> Membership:
        """
        Add or refresh an invitation without regressing its status.

        A re-invite updates the descriptive fields but leaves a joined or
        purchased member where they are.
        """
        state = self.load_state(customer)
        membership = state.find_invitation(showroom_id)

        if membership is None:
            membership = Membership(
                showroom_id=showroom_id,
                role=MembershipRole.INVITED,
                status=MembershipStatus.INVITED,
                invite_date=utc_now_iso(),
            )
            state.invited.append(membership)
        else:
            logger.info('Customer %s already invited to %s (status %s)',
                        customer.id, showroom_id, membership.status)

        if bride_name:
            membership.bride_name = bride_name
        if wedding_date:
            membership.wedding_date = wedding_date
        if roles:
            membership.roles = list(dict.fromkeys(membership.roles + [str(role) for role in roles]))

        self.save_invitations(customer, state, membership)
        return membership

    def save_invitations(self, customer: Customer, state: ShowroomState, changed: Membership) -> UpsertResult:
        """
        Persist the membership list and mirror ``changed`` into the flat keys.

        The mirror is only written once the list is, so it never runs ahead
        of the list and a failed save is redone by the next attempt.
        """
        result = self.upsert_membership(
            customer, INVITEE_NAMESPACE, {MEMBERSHIPS_KEY: membership_records(state.invited)}
        )
        if result.failed_keys:
            return result

        mirror = self.upsert_membership(customer, INVITEE_NAMESPACE, legacy_fields(changed))
        result.written_keys.extend(mirror.written_keys)
        result.failed_keys.extend(mirror.failed_keys)
        return result

    # ==================== PROFILE & TAGS ====================

    def apply_bride_name(self, customer: Customer, bride_name: Optional[str]) -> bool:
        """Copy the bride's name onto the customer profile. Best effort."""
        first_name, last_name = split_name(bride_name)
        if not first_name and not last_name:
            return False

        try:
            self.shopify.update_customer(customer.id, first_name=first_name, last_name=last_name)
        except ShowroomError as e:
            logger.error('Failed to update name for customer %s: %s', customer.id, e)
            return False

        customer.first_name, customer.last_name = first_name, last_name
        return True

    def add_tags(self, customer: Customer, tags: List[str]) -> bool:
        """Union ``tags`` into the customer's tags. Best effort."""
        merged = customer_tags.merge_tags(customer.tags, tags)
        if merged == customer.tags:
            return False
        return self._save_tags(customer, merged)

    def remove_tag(self, customer: Customer, tag: str) -> bool:
        """Drop one tag, keeping all others. Best effort."""
        remaining = customer_tags.remove_tags(customer.tags, [tag])
        if remaining == customer.tags:
            return False
        return self._save_tags(customer, remaining)

    def _save_tags(self, customer: Customer, tags: List[str]) -> bool:
        try:
            self.shopify.update_customer(customer.id, tags=tags)
        except ShowroomError as e:
            logger.error('Failed to update tags for customer %s: %s', customer.id, e)
            return False
        customer.tags = tags
        return True

    # ==================== DELETE ====================

    def delete_owned_showroom(self, email: str) -> DeleteResult:
        """
        Remove every bride-side metafield and the bride tag.

        Unknown customers are a no-op so the call can be repeated safely.
        """
        customer = self.shopify.find_customer_by_email(email)
        if not customer:
            logger.info('Customer not found for %s - nothing to delete', email)
            return DeleteResult(customer_found=False)

        owner_fields = [
            mf for mf in self.shopify.list_metafields(customer.id, namespace=OWNER_NAMESPACE)
            if mf.namespace == OWNER_NAMESPACE
        ]
        result = DeleteResult(customer_found=True, customer_id=customer.id)

        if owner_fields:
            logger.info('Found %s showroom metafields to delete for customer %s', len(owner_fields), customer.id)
            outcomes = run_in_batches(
                owner_fields,
                lambda mf: self.shopify.delete_metafield(customer.id, mf.id),
                batch_size=self.settings.batch_size,
                delay_ms=self.settings.batch_delay_ms,
                label='metafield delete'
            )
            result.deleted = sum(1 for outcome in outcomes if outcome.success)
            result.failed = len(outcomes) - result.deleted

        self.remove_tag(customer, customer_tags.BRIDE_TAG)
        return result

    # ==================== HELPERS ====================

    @staticmethod
    def _owner_blob(fields: Dict[str, Any]) -> Optional[Dict[str, Any]]:
        for key in OWNER_BLOB_KEYS:
            if key in fields:
                return parse_json_object(fields[key])
        return None

    @staticmethod
    def _invitee_roles(fields: Dict[str, Any]) -> List[str]:
        roles = fields.get('roles')
        if isinstance(roles, str):
            try:
                roles = json.loads(roles)
            except ValueError:
                return []
        return [str(role) for role in roles] if isinstance(roles, list) else []
