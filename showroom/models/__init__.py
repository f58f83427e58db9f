"""
Domain models for the bridal showroom service.
Customers and metafields come from Shopify; memberships are rebuilt from them.
"""
from .customer import Customer, Metafield, parse_tags
from .membership import (
    UNKNOWN_SHOWROOM_ID,
    MembershipRole,
    MembershipStatus,
    Membership,
    ShowroomState,
    parse_roles,
)

__all__ = [
    'Customer',
    'Metafield',
    'parse_tags',
    'UNKNOWN_SHOWROOM_ID',
    'MembershipRole',
    'MembershipStatus',
    'Membership',
    'ShowroomState',
    'parse_roles',
]
