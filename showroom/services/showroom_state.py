"""
Rebuilds a customer's showroom memberships from their metafields.

Metafield layout:

``showroom`` namespace (bride side)
    ``showroom_data`` (or ``data``): JSON object describing the showroom the
    customer owns. Other keys in this namespace are frontend data.

``bridal_showroom`` namespace (invitee side)
    ``memberships``: JSON list, one record per showroom the customer was
    invited to, keyed by ``showroom_id``.
    Flat keys (``showroom_id``, ``status``, ``roles``, ``bride_name``,
    ``wedding_date``, ``invite_date``, ``joined_date``, ...): the legacy
    single-invitation layout. Still read, and still written as a mirror of
    the most recent invitation so older storefront code keeps working.
"""
import json
import logging
from typing import Any, Dict, Iterable, List, Optional, Tuple

from ..models import (
    UNKNOWN_SHOWROOM_ID,
    Membership,
    MembershipRole,
    MembershipStatus,
    Metafield,
    ShowroomState,
    parse_roles,
)

logger = logging.getLogger(__name__)

OWNER_NAMESPACE = 'showroom'
INVITEE_NAMESPACE = 'bridal_showroom'

OWNER_BLOB_KEYS = ('showroom_data', 'data')
MEMBERSHIPS_KEY = 'memberships'

# camelCase keys written by older webhook handlers
LEGACY_KEY_ALIASES = {
    'showroomId': 'showroom_id',
    'brideName': 'bride_name',
    'weddingDate': 'wedding_date',
    'inviteDate': 'invite_date',
    'joinedDate': 'joined_date',
    'purchasedDate': 'purchased_date',
    'customerId': 'customer_id',
    'orderId': 'order_id',
}

LEGACY_TEXT_KEYS = (
    'showroom_id', 'status', 'bride_name', 'wedding_date', 'invite_date',
    'joined_date', 'purchased_date', 'customer_id', 'order_id',
)


def build_showroom_state(metafields: Iterable[Metafield]) -> ShowroomState:
    """
    Rebuild all memberships of one customer.

    Never raises on bad data: a malformed value only drops that value.
    """
    owner_fields = []
    invitee_fields = []
    for mf in metafields:
        if mf.namespace == OWNER_NAMESPACE:
            owner_fields.append(mf)
        elif mf.namespace == INVITEE_NAMESPACE:
            invitee_fields.append(mf)

    invited, legacy_id = _invited_memberships(invitee_fields)
    return ShowroomState(
        owned=_owned_membership(owner_fields),
        invited=invited,
        legacy_showroom_id=legacy_id,
    )


# ==================== OWNER SIDE ====================

def find_owner_blob(metafields: Iterable[Metafield]) -> Tuple[Optional[Metafield], Optional[Dict[str, Any]]]:
    """
    Locate and parse the owned-showroom JSON blob.

    Returns:
        (metafield, parsed object); parsed object is None when missing or malformed
    """
    by_key = {mf.key: mf for mf in metafields if mf.namespace == OWNER_NAMESPACE}
    for key in OWNER_BLOB_KEYS:
        mf = by_key.get(key)
        if mf is None:
            continue
        data = parse_json_object(mf.value)
        if data is None:
            logger.warning('Failed to parse bride showroom data in %s.%s', mf.namespace, mf.key)
        return mf, data
    return None, None


def parse_json_object(value) -> Optional[Dict[str, Any]]:
    """Decode a JSON object, tolerating one level of double encoding."""
    if isinstance(value, dict):
        return value
    if not value:
        return None
    try:
        data = json.loads(value)
        if isinstance(data, str):
            data = json.loads(data)
    except (TypeError, ValueError):
        return None
    return data if isinstance(data, dict) else None


def party_size_of(data: Dict[str, Any]) -> Optional[int]:
    """Bridal party size from a showroom blob, if it states one."""
    size = data.get('party_size', data.get('partySize'))
    if size not in (None, ''):
        try:
            return int(size)
        except (TypeError, ValueError):
            logger.warning('Ignoring non-numeric party size: %r', size)
    party = data.get('bridal_party', data.get('bridalParty'))
    if isinstance(party, list):
        return len(party)
    return None


def _owned_membership(fields: List[Metafield]) -> Optional[Membership]:
    mf, data = find_owner_blob(fields)
    if not data:
        return None
    if not any(data.get(k) for k in ('showroom_id', 'bride_name', 'wedding_date')):
        return None

    return Membership(
        showroom_id=str(data.get('showroom_id') or UNKNOWN_SHOWROOM_ID),
        role=MembershipRole.OWNER,
        bride_name=data.get('bride_name') or '',
        wedding_date=data.get('wedding_date') or '',
        roles=['bride'],
        party_size=party_size_of(data),
        created_date=mf.created_at,
        updated_date=mf.updated_at,
    )


# ==================== INVITEE SIDE ====================

def _invited_memberships(fields: List[Metafield]) -> Tuple[List[Membership], Optional[str]]:
    by_key: Dict[str, Metafield] = {}
    for mf in fields:
        # last seen wins
        by_key[LEGACY_KEY_ALIASES.get(mf.key, mf.key)] = mf

    invited = parse_membership_list(by_key.pop(MEMBERSHIPS_KEY, None))

    legacy = _legacy_membership(by_key)
    if legacy is None:
        return invited, None

    existing = next((m for m in invited if m.showroom_id == legacy.showroom_id), None)
    if existing:
        merge_membership(existing, legacy, fill_gaps=False)
    else:
        invited.append(legacy)
    return invited, legacy.showroom_id


def parse_membership_list(mf: Optional[Metafield]) -> List[Membership]:
    """Decode the membership list; bad entries are skipped, duplicates merged."""
    if mf is None or not mf.value:
        return []
    try:
        records = json.loads(mf.value)
    except ValueError:
        logger.warning('Failed to parse membership list for metafield %s', mf.id)
        return []
    if not isinstance(records, list):
        logger.warning('Membership list is not a list (metafield %s)', mf.id)
        return []

    memberships: List[Membership] = []
    for record in records:
        if not isinstance(record, dict):
            logger.warning('Skipping malformed membership entry: %r', record)
            continue
        membership = Membership.from_record(record)
        duplicate = next((m for m in memberships if m.showroom_id == membership.showroom_id), None)
        if duplicate:
            merge_membership(duplicate, membership)
        else:
            memberships.append(membership)
    return memberships


def _legacy_membership(by_key: Dict[str, Metafield]) -> Optional[Membership]:
    if 'showroom_id' not in by_key and 'status' not in by_key:
        return None

    def text(key: str) -> Optional[str]:
        mf = by_key.get(key)
        return mf.value if mf is not None and mf.value not in (None, '') else None

    roles_mf = by_key.get('roles')
    roles = parse_roles(roles_mf.value) if roles_mf is not None else None
    anchor = by_key.get('showroom_id') or by_key.get('status')

    return Membership(
        showroom_id=text('showroom_id') or UNKNOWN_SHOWROOM_ID,
        role=MembershipRole.INVITED,
        bride_name=text('bride_name') or '',
        wedding_date=text('wedding_date') or '',
        roles=roles or [],
        status=MembershipStatus.parse(text('status'), MembershipStatus.INVITED),
        invite_date=text('invite_date'),
        joined_date=text('joined_date'),
        purchased_date=text('purchased_date'),
        customer_id=text('customer_id'),
        order_id=text('order_id'),
        created_date=anchor.created_at,
        updated_date=anchor.updated_at,
    )


def merge_membership(target: Membership, other: Membership, fill_gaps: bool = True) -> Membership:
    """
    Fold ``other`` into ``target`` for the same showroom.

    Status never moves backwards and lifecycle stamps follow the later
    status. With ``fill_gaps``, empty descriptive fields are also copied.
    The legacy mirror is merged without it: its flat keys can hold stale
    values left over from an earlier showroom.
    """
    if other.status and (target.status is None or target.status.can_advance_to(other.status)):
        target.status = other.status
        for name in ('joined_date', 'purchased_date', 'customer_id', 'order_id'):
            value = getattr(other, name)
            if value:
                setattr(target, name, value)

    if not fill_gaps:
        return target

    for name in ('bride_name', 'wedding_date', 'invite_date', 'joined_date',
                 'purchased_date', 'customer_id', 'order_id', 'created_date', 'updated_date'):
        if not getattr(target, name) and getattr(other, name):
            setattr(target, name, getattr(other, name))

    if not target.roles and other.roles:
        target.roles = list(other.roles)
    return target


# ==================== SERIALIZATION ====================

def membership_records(memberships: Iterable[Membership]) -> List[Dict[str, Any]]:
    """Value for the ``bridal_showroom.memberships`` metafield (stored as json)."""
    return [m.to_record() for m in memberships if not m.is_owner]


def legacy_fields(membership: Membership) -> Dict[str, str]:
    """Flat ``bridal_showroom`` keys mirroring one invitation."""
    record = membership.to_record()
    fields = {key: str(record[key]) for key in LEGACY_TEXT_KEYS if key in record}
    if membership.roles:
        fields['roles'] = json.dumps(list(membership.roles))
    return fields
