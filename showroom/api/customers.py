"""
Customer lookup API.
Thin pass-through to the Shopify customer search and order listing.
"""
import logging

from flask import Blueprint, jsonify, request

from ..extensions import get_components
from ..schemas import CustomerLookupRequest

logger = logging.getLogger(__name__)

customers_bp = Blueprint('customers', __name__)


@customers_bp.route('/lookup', methods=['POST'])
def lookup_customer():
    """
    Look up customers by email, or a customer's recent orders.

    Request body:
        mode: 'search' (needs email) or 'orders' (needs customerId)
        createdAtMin: optional ISO date lower bound for orders
    """
    lookup = CustomerLookupRequest.from_json(request.get_json(silent=True))
    shopify = get_components().shopify

    if lookup.mode == 'search':
        customers = shopify.search_customers(f'email:{lookup.email}')
        return jsonify({'customers': customers})

    orders = shopify.list_customer_orders(lookup.customer_id, created_at_min=lookup.created_at_min)
    return jsonify({'orders': orders})
