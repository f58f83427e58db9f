"""
Request schemas for the showroom API.

Payloads are validated here, at the HTTP boundary; services only ever see
these typed requests.
"""
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional

from .models import UNKNOWN_SHOWROOM_ID
from .utils.exceptions import ValidationError


def _as_mapping(data) -> Dict[str, Any]:
    if data is None:
        return {}
    if not isinstance(data, dict):
        raise ValidationError('Request body must be a JSON object')
    return data


def _optional_text(data: Dict[str, Any], name: str) -> Optional[str]:
    value = data.get(name)
    if value is None:
        return None
    if not isinstance(value, (str, int)):
        raise ValidationError(f'{name} must be a string', field=name)
    value = str(value).strip()
    return value or None


def _required_text(data: Dict[str, Any], name: str, message: str = None) -> str:
    value = _optional_text(data, name)
    if not value:
        raise ValidationError(message or f'{name} is required', field=name)
    return value


@dataclass
class InviteRequest:
    """Create a customer (if needed) and invite them to a showroom."""
    email: str
    first_name: str
    last_name: str
    showroom_id: str = UNKNOWN_SHOWROOM_ID
    bride_name: Optional[str] = None
    wedding_date: Optional[str] = None
    roles: List[str] = field(default_factory=list)
    customer_note: Optional[str] = None

    @classmethod
    def from_json(cls, data) -> 'InviteRequest':
        data = _as_mapping(data)
        if not all(_optional_text(data, name) for name in ('email', 'firstName', 'lastName')):
            raise ValidationError('Email, firstName, and lastName are required')

        roles = data.get('roles') or []
        if isinstance(roles, str):
            roles = [roles]
        if not isinstance(roles, list) or not all(isinstance(role, str) for role in roles):
            raise ValidationError('roles must be a list of strings', field='roles')

        return cls(
            email=_required_text(data, 'email'),
            first_name=_required_text(data, 'firstName'),
            last_name=_required_text(data, 'lastName'),
            showroom_id=_optional_text(data, 'showroomId') or UNKNOWN_SHOWROOM_ID,
            bride_name=_optional_text(data, 'brideName'),
            wedding_date=_optional_text(data, 'weddingDate'),
            roles=[role.strip() for role in roles if role.strip()],
            customer_note=_optional_text(data, 'customerNote'),
        )


@dataclass
class StatusRequest:
    """Batch status read."""
    emails: List[str]
    showroom_id: Optional[str] = None

    @classmethod
    def from_json(cls, data) -> 'StatusRequest':
        data = _as_mapping(data)
        emails = data.get('emails')
        if not isinstance(emails, list) or not emails:
            raise ValidationError('emails array required', field='emails')
        if not all(isinstance(email, str) for email in emails):
            raise ValidationError('emails must be strings', field='emails')
        return cls(emails=emails, showroom_id=_optional_text(data, 'showroomId'))


@dataclass
class EmailRequest:
    """Any request keyed by a single email."""
    email: str

    @classmethod
    def from_json(cls, data, message: str = 'Email is required') -> 'EmailRequest':
        return cls(email=_required_text(_as_mapping(data), 'email', message))


@dataclass
class SyncRequest:
    """Write bride-side showroom metafields."""
    email: str
    metafields: Dict[str, Any]

    @classmethod
    def from_json(cls, data) -> 'SyncRequest':
        data = _as_mapping(data)
        metafields = data.get('metafields')
        if not _optional_text(data, 'email') or not metafields:
            raise ValidationError('Email and metafields are required')
        if not isinstance(metafields, dict):
            raise ValidationError('metafields must be an object of key/value pairs', field='metafields')
        return cls(email=_required_text(data, 'email'), metafields=metafields)


@dataclass
class CustomerLookupRequest:
    """Customer search or recent-orders lookup."""
    mode: str
    email: Optional[str] = None
    customer_id: Optional[str] = None
    created_at_min: Optional[str] = None

    MODES = ('search', 'orders')

    @classmethod
    def from_json(cls, data) -> 'CustomerLookupRequest':
        data = _as_mapping(data)
        mode = data.get('mode')
        if mode not in cls.MODES:
            raise ValidationError('Invalid mode', field='mode')

        request = cls(
            mode=mode,
            email=_optional_text(data, 'email'),
            customer_id=_optional_text(data, 'customerId'),
            created_at_min=_optional_text(data, 'createdAtMin'),
        )
        if mode == 'search' and not request.email:
            raise ValidationError('Email is required', field='email')
        if mode == 'orders' and not request.customer_id:
            raise ValidationError('customerId is required', field='customerId')
        return request
