"""
Tests for the membership model and status rules.
"""
from showroom.models import (
    Customer,
    Membership,
    MembershipRole,
    MembershipStatus,
    parse_roles,
    parse_tags,
)


def invited(status=MembershipStatus.INVITED, **kwargs):
    return Membership(showroom_id='sr-1', role=MembershipRole.INVITED, status=status, **kwargs)


class TestMembershipStatus:
    """Tests for status ordering."""

    def test_status_order(self):
        assert MembershipStatus.INVITED.can_advance_to(MembershipStatus.JOINED)
        assert MembershipStatus.JOINED.can_advance_to(MembershipStatus.PURCHASED)
        assert MembershipStatus.INVITED.can_advance_to(MembershipStatus.PURCHASED)

    def test_status_never_moves_back(self):
        assert not MembershipStatus.PURCHASED.can_advance_to(MembershipStatus.JOINED)
        assert not MembershipStatus.PURCHASED.can_advance_to(MembershipStatus.INVITED)
        assert not MembershipStatus.JOINED.can_advance_to(MembershipStatus.JOINED)

    def test_parse(self):
        assert MembershipStatus.parse('Joined') == MembershipStatus.JOINED
        assert MembershipStatus.parse(' purchased ') == MembershipStatus.PURCHASED
        assert MembershipStatus.parse('bogus') is None
        assert MembershipStatus.parse(None, MembershipStatus.INVITED) == MembershipStatus.INVITED


class TestAdvance:
    """Tests for Membership.advance."""

    def test_advance_sets_status_and_stamps(self):
        membership = invited()

        changed = membership.advance(MembershipStatus.JOINED, joined_date='2026-02-01T00:00:00Z', customer_id=42)

        assert changed is True
        assert membership.status == MembershipStatus.JOINED
        assert membership.joined_date == '2026-02-01T00:00:00Z'
        assert membership.customer_id == '42'

    def test_purchased_cannot_be_reverted(self):
        membership = invited(MembershipStatus.PURCHASED, joined_date='2026-01-01T00:00:00Z')

        assert membership.advance(MembershipStatus.JOINED, joined_date='2026-05-05T00:00:00Z') is False
        assert membership.advance(MembershipStatus.INVITED) is False
        assert membership.status == MembershipStatus.PURCHASED
        assert membership.joined_date == '2026-01-01T00:00:00Z'

    def test_same_status_is_not_a_change(self):
        membership = invited(MembershipStatus.JOINED)
        assert membership.advance(MembershipStatus.JOINED) is False

    def test_none_stamps_are_skipped(self):
        membership = invited()
        membership.advance(MembershipStatus.PURCHASED, purchased_date='2026-03-01T00:00:00Z', order_id=None)
        assert membership.order_id is None


class TestEffectiveStatus:
    """Tests for the lazy joined upgrade."""

    def test_invited_with_enabled_account_reports_joined(self):
        membership = invited()
        assert membership.effective_status('enabled') == MembershipStatus.JOINED
        assert membership.status == MembershipStatus.INVITED

    def test_invited_with_disabled_account_stays_invited(self):
        assert invited().effective_status('disabled') == MembershipStatus.INVITED

    def test_purchased_is_not_downgraded(self):
        assert invited(MembershipStatus.PURCHASED).effective_status('enabled') == MembershipStatus.PURCHASED


class TestRecordConversion:
    """Tests for list entry conversion."""

    def test_from_record_defaults(self):
        membership = Membership.from_record({'showroom_id': 5, 'customer_id': 99})

        assert membership.showroom_id == '5'
        assert membership.status == MembershipStatus.INVITED
        assert membership.customer_id == '99'
        assert membership.roles == []

    def test_to_dict_shape(self):
        membership = invited(bride_name='Jane', roles=['bridesmaid'])
        data = membership.to_dict()

        assert data['id'] == 'sr-1'
        assert data['type'] == 'invited'
        assert data['status'] == 'invited'
        assert data['roles'] == ['bridesmaid']
        assert 'party_size' not in data


class TestParsing:
    """Tests for roles and tags parsing."""

    def test_parse_roles(self):
        assert parse_roles('["bridesmaid", "bridesmaid", "moh"]') == ['bridesmaid', 'moh']
        assert parse_roles(['a', ' b ']) == ['a', 'b']
        assert parse_roles('[broken') is None
        assert parse_roles('"bridesmaid"') is None
        assert parse_roles('') is None

    def test_parse_tags(self):
        assert parse_tags('vip, bridal-party,vip , ') == ['vip', 'bridal-party']
        assert parse_tags(None) == []
        assert parse_tags(['a', 'b']) == ['a', 'b']

    def test_customer_from_shopify(self):
        customer = Customer.from_shopify({
            'id': 123, 'email': 'a@x.com', 'tags': 'vip, bride', 'state': 'enabled',
        })

        assert customer.id == '123'
        assert customer.tags == ['vip', 'bride']
        assert customer.is_enabled
        assert customer.to_dict()['tags'] == 'vip, bride'
