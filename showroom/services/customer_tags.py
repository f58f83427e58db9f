"""
Customer tag rules for the bridal showroom.

Tags are only ever added (set union) or removed one by one (set
difference). Tags owned by other apps or staff always survive.
"""
from typing import Iterable, List, Optional

BRIDE_TAG = 'showroom-bride'
BRIDAL_PARTY_SIZE_TAG = 'showroom-bridal-party-{size}'
BRIDAL_PARTY_TAG = 'bridal-party'
INVITED_TAG = 'showroom-invited'

ROLE_TAGS = {
    'bridesmaid': ['bridesmaid'],
    'maid-of-honor': ['maid-of-honor', 'moh'],
    'wedding-guest': ['wedding-guest'],
}


def owner_tags(party_size: Optional[int] = None) -> List[str]:
    """Tags for a customer who owns a showroom."""
    tags = [BRIDE_TAG]
    if party_size is not None:
        tags.append(BRIDAL_PARTY_SIZE_TAG.format(size=party_size))
    return tags


def invitee_tags(roles: Iterable[str] = ()) -> List[str]:
    """Tags for a customer invited to a bridal party."""
    tags = [BRIDAL_PARTY_TAG, INVITED_TAG]
    for role in roles or ():
        role = str(role).strip()
        if not role:
            continue
        for tag in ROLE_TAGS.get(role, [role]):
            if tag not in tags:
                tags.append(tag)
    return tags


def merge_tags(existing: Iterable[str], additions: Iterable[str]) -> List[str]:
    """Union keeping existing order first, no duplicates."""
    merged = []
    for tag in list(existing) + list(additions):
        tag = str(tag).strip()
        if tag and tag not in merged:
            merged.append(tag)
    return merged


def remove_tags(existing: Iterable[str], removals: Iterable[str]) -> List[str]:
    """Difference: drop only the named tags."""
    removals = {str(tag).strip() for tag in removals}
    return [tag for tag in existing if tag not in removals]
