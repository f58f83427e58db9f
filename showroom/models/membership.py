"""
Showroom membership model.

A membership is not stored as a single entity in Shopify; it is rebuilt
from customer metafields (see ``services.showroom_state``). These classes
hold the rebuilt view and the rules that govern status changes.
"""
import json
import logging
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, List, Optional

logger = logging.getLogger(__name__)

UNKNOWN_SHOWROOM_ID = 'unknown'


class MembershipRole(str, Enum):
    """How the customer relates to the showroom."""
    OWNER = 'owned'
    INVITED = 'invited'


class MembershipStatus(str, Enum):
    """Invitee lifecycle. Ordered: a status only ever moves forward."""
    INVITED = 'invited'
    JOINED = 'joined'
    PURCHASED = 'purchased'

    @property
    def rank(self) -> int:
        return _STATUS_ORDER.index(self)

    def can_advance_to(self, target: 'MembershipStatus') -> bool:
        """True when ``target`` is strictly later in the lifecycle."""
        return target.rank > self.rank

    @classmethod
    def parse(cls, value, default: Optional['MembershipStatus'] = None) -> Optional['MembershipStatus']:
        """Parse a stored status string, falling back to ``default``."""
        if isinstance(value, cls):
            return value
        try:
            return cls(str(value).strip().lower())
        except ValueError:
            if value not in (None, ''):
                logger.warning('Unknown membership status %r, using %s', value, default)
            return default


_STATUS_ORDER = [MembershipStatus.INVITED, MembershipStatus.JOINED, MembershipStatus.PURCHASED]


def parse_roles(value) -> Optional[List[str]]:
    """
    Parse a roles value (list or JSON-encoded list).

    Returns None when the value cannot be read as a list of strings.
    """
    if value is None or value == '':
        return None
    if isinstance(value, str):
        try:
            value = json.loads(value)
        except ValueError:
            logger.warning('Ignoring malformed roles value: %r', value)
            return None
    if not isinstance(value, list):
        logger.warning('Ignoring roles value that is not a list: %r', value)
        return None

    roles = []
    for role in value:
        role = str(role).strip()
        if role and role not in roles:
            roles.append(role)
    return roles


@dataclass
class Membership:
    """One customer's relationship with one showroom."""
    showroom_id: str
    role: MembershipRole
    bride_name: str = ''
    wedding_date: str = ''
    roles: List[str] = field(default_factory=list)
    status: Optional[MembershipStatus] = None
    invite_date: Optional[str] = None
    joined_date: Optional[str] = None
    purchased_date: Optional[str] = None
    customer_id: Optional[str] = None
    order_id: Optional[str] = None
    party_size: Optional[int] = None
    created_date: Optional[str] = None
    updated_date: Optional[str] = None

    @property
    def is_owner(self) -> bool:
        return self.role == MembershipRole.OWNER

    def effective_status(self, account_state: Optional[str] = None) -> Optional[MembershipStatus]:
        """
        Status as reported to callers.

        An invitee whose Shopify account is already enabled has joined, even
        when no webhook has rewritten the stored status yet.
        """
        if self.status == MembershipStatus.INVITED and account_state == 'enabled':
            return MembershipStatus.JOINED
        return self.status

    def advance(self, target: MembershipStatus, **stamps) -> bool:
        """
        Move to ``target`` if it is later than the current status.

        Keyword stamps (joined_date, customer_id, ...) are applied only when
        the status actually changes.

        Returns:
            True if the membership changed
        """
        if self.status is not None and not self.status.can_advance_to(target):
            return False
        self.status = target
        for name, value in stamps.items():
            if value is not None:
                setattr(self, name, str(value))
        return True

    @classmethod
    def from_record(cls, record: Dict[str, Any]) -> 'Membership':
        """Build an invited membership from a stored list entry."""
        roles = parse_roles(record.get('roles'))
        return cls(
            showroom_id=str(record.get('showroom_id') or UNKNOWN_SHOWROOM_ID),
            role=MembershipRole.INVITED,
            bride_name=record.get('bride_name') or '',
            wedding_date=record.get('wedding_date') or '',
            roles=roles or [],
            status=MembershipStatus.parse(record.get('status'), MembershipStatus.INVITED),
            invite_date=record.get('invite_date'),
            joined_date=record.get('joined_date'),
            purchased_date=record.get('purchased_date'),
            customer_id=_optional_str(record.get('customer_id')),
            order_id=_optional_str(record.get('order_id')),
        )

    def to_record(self) -> Dict[str, Any]:
        """Entry stored in the bridal_showroom membership list."""
        record = {
            'showroom_id': self.showroom_id,
            'status': self.status.value if self.status else None,
            'roles': list(self.roles),
            'bride_name': self.bride_name,
            'wedding_date': self.wedding_date,
            'invite_date': self.invite_date,
            'joined_date': self.joined_date,
            'purchased_date': self.purchased_date,
            'customer_id': self.customer_id,
            'order_id': self.order_id,
        }
        return {k: v for k, v in record.items() if v not in (None, '')}

    def to_dict(self) -> Dict[str, Any]:
        """Public representation used by the listing endpoint."""
        data = {
            'id': self.showroom_id,
            'type': self.role.value,
            'bride_name': self.bride_name,
            'wedding_date': self.wedding_date,
            'roles': list(self.roles),
            'status': self.status.value if self.status else None,
            'invite_date': self.invite_date,
            'joined_date': self.joined_date,
            'purchased_date': self.purchased_date,
            'created_date': self.created_date,
            'updated_date': self.updated_date,
        }
        if self.party_size is not None:
            data['party_size'] = self.party_size
        return data


@dataclass
class ShowroomState:
    """All showroom memberships of one customer."""
    owned: Optional[Membership] = None
    invited: List[Membership] = field(default_factory=list)
    legacy_showroom_id: Optional[str] = None

    def memberships(self) -> List[Membership]:
        """Owned showroom first, then invitations."""
        result = [self.owned] if self.owned else []
        return result + list(self.invited)

    def find_invitation(self, showroom_id: str) -> Optional[Membership]:
        for membership in self.invited:
            if membership.showroom_id == showroom_id:
                return membership
        return None

    def primary_invitation(self, showroom_id: str = None) -> Optional[Membership]:
        """
        The invitation a single-status read reports on.

        An explicit showroom id wins. Otherwise the invitation mirrored in
        the flat legacy keys, else the most recent list entry.
        """
        if showroom_id:
            return self.find_invitation(showroom_id)
        if self.legacy_showroom_id:
            legacy = self.find_invitation(self.legacy_showroom_id)
            if legacy:
                return legacy
        return self.invited[-1] if self.invited else None


def _optional_str(value) -> Optional[str]:
    return None if value in (None, '') else str(value)
