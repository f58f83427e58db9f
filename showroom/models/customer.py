"""
Customer and Metafield records as returned by the Shopify Admin REST API.
"""
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional


def parse_tags(raw) -> List[str]:
    """Split Shopify's comma-joined tag string into a clean list."""
    if not raw:
        return []
    if isinstance(raw, (list, tuple, set)):
        candidates = raw
    else:
        candidates = str(raw).split(',')

    tags = []
    for tag in candidates:
        tag = str(tag).strip()
        if tag and tag not in tags:
            tags.append(tag)
    return tags


@dataclass
class Customer:
    """A Shopify customer, reduced to the fields the showroom uses."""
    id: str
    email: str
    first_name: Optional[str] = None
    last_name: Optional[str] = None
    tags: List[str] = field(default_factory=list)
    note: Optional[str] = None
    state: Optional[str] = None

    @classmethod
    def from_shopify(cls, data: Dict[str, Any]) -> 'Customer':
        return cls(
            id=str(data.get('id')),
            email=data.get('email') or '',
            first_name=data.get('first_name'),
            last_name=data.get('last_name'),
            tags=parse_tags(data.get('tags')),
            note=data.get('note'),
            state=data.get('state'),
        )

    @property
    def is_enabled(self) -> bool:
        """Account activated by the customer."""
        return self.state == 'enabled'

    def to_dict(self) -> Dict[str, Any]:
        return {
            'id': self.id,
            'email': self.email,
            'first_name': self.first_name,
            'last_name': self.last_name,
            'tags': ', '.join(self.tags),
            'note': self.note,
            'state': self.state,
        }


@dataclass
class Metafield:
    """One namespaced key/value attribute attached to a customer."""
    namespace: str
    key: str
    value: Optional[str]
    type: str = 'single_line_text_field'
    id: Optional[str] = None
    created_at: Optional[str] = None
    updated_at: Optional[str] = None

    @classmethod
    def from_shopify(cls, data: Dict[str, Any]) -> 'Metafield':
        value = data.get('value')
        return cls(
            namespace=data.get('namespace', ''),
            key=data.get('key', ''),
            value=None if value is None else str(value),
            type=data.get('type') or 'single_line_text_field',
            id=str(data['id']) if data.get('id') is not None else None,
            created_at=data.get('created_at'),
            updated_at=data.get('updated_at'),
        )
