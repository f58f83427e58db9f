"""
Shopify Admin API client.
Handles customer lookup, profile/tag updates and customer metafields.
"""
import logging
from typing import Any, Dict, List, Optional

import httpx

from ..models import Customer, Metafield
from ..utils.exceptions import ConfigurationError, ShopifyError

logger = logging.getLogger(__name__)


class ShopifyClient:
    """
    Client for the Shopify Admin REST API.

    Supports:
    - Customer search, create, update
    - Customer metafields (list, upsert, delete)
    - Account invites and activation URLs
    - Recent orders for a customer
    """

    def __init__(self, shop_domain: str, access_token: str, api_version: str = '2024-10', timeout: float = 30.0):
        self.shop_domain = (shop_domain or '').replace('https://', '').replace('http://', '').rstrip('/')
        self.access_token = access_token
        self.api_version = api_version
        self.timeout = timeout
        self.base_url = f'https://{self.shop_domain}/admin/api/{api_version}'

    @classmethod
    def from_settings(cls, settings) -> 'ShopifyClient':
        return cls(settings.shop_domain, settings.access_token, settings.api_version)

    def is_configured(self) -> bool:
        return bool(self.shop_domain and self.access_token)

    def _request(
        self,
        method: str,
        path: str,
        params: Optional[Dict[str, Any]] = None,
        payload: Optional[Dict[str, Any]] = None
    ) -> Dict[str, Any]:
        """Execute a REST call and return the decoded body."""
        if not self.is_configured():
            raise ConfigurationError('Shopify configuration missing')

        headers = {
            'X-Shopify-Access-Token': self.access_token,
            'Content-Type': 'application/json'
        }

        try:
            with httpx.Client() as client:
                response = client.request(
                    method,
                    f'{self.base_url}/{path}',
                    headers=headers,
                    params=params,
                    json=payload,
                    timeout=self.timeout
                )
        except httpx.HTTPError as e:
            raise ShopifyError(f'Shopify request failed: {method} {path}: {e}', original_error=e)

        if response.status_code >= 400:
            logger.error('Shopify %s %s failed: %s %s', method, path, response.status_code, response.text)
            raise ShopifyError(f'Shopify request failed: {method} {path}', status=response.status_code)

        if not response.content:
            return {}
        return response.json()

    # ==================== CUSTOMERS ====================

    def search_customers(self, query: str, limit: int = 10) -> List[Dict[str, Any]]:
        """
        Run a Shopify customer search.

        Args:
            query: Shopify search syntax (e.g. 'email:jane@example.com')
            limit: Maximum results to return

        Returns:
            Raw customer dicts as returned by Shopify
        """
        data = self._request('GET', 'customers/search.json', params={'query': query, 'limit': limit})
        return data.get('customers') or []

    def find_customer_by_email(self, email: str) -> Optional[Customer]:
        """
        Find the customer whose email matches exactly.

        Returns:
            Customer or None when nobody matches
        """
        wanted = email.strip()
        for raw in self.search_customers(f'email:{wanted}', limit=5):
            if (raw.get('email') or '').strip() == wanted:
                return Customer.from_shopify(raw)
        return None

    def create_customer(
        self,
        email: str,
        first_name: str = None,
        last_name: str = None,
        note: str = None,
        tags: List[str] = None,
        accepts_marketing: bool = False
    ) -> Customer:
        """
        Create a new customer in Shopify.

        The account is left disabled; the customer activates it from the
        invite email.

        Raises:
            ShopifyError: If customer creation fails
        """
        customer = {
            'email': email,
            'send_email_welcome': False,
            'email_marketing_consent': {
                'state': 'subscribed' if accepts_marketing else 'not_subscribed',
                'opt_in_level': 'single_opt_in',
            },
        }
        if first_name:
            customer['first_name'] = first_name
        if last_name:
            customer['last_name'] = last_name
        if note:
            customer['note'] = note
        if tags:
            customer['tags'] = ', '.join(tags)

        data = self._request('POST', 'customers.json', payload={'customer': customer})
        created = data.get('customer')
        if not created:
            raise ShopifyError('Customer creation returned no customer data')

        logger.info('Created Shopify customer %s for %s', created.get('id'), email)
        return Customer.from_shopify(created)

    def update_customer(self, customer_id: str, **fields) -> Customer:
        """
        Update profile fields on a customer.

        ``tags`` may be given as a list; it replaces the stored tag string,
        so callers merge with existing tags first.
        """
        if isinstance(fields.get('tags'), (list, tuple, set)):
            fields['tags'] = ', '.join(fields['tags'])

        payload = {'customer': {'id': customer_id, **fields}}
        data = self._request('PUT', f'customers/{customer_id}.json', payload=payload)
        return Customer.from_shopify(data.get('customer') or {'id': customer_id})

    def send_invite(self, customer_id: str) -> Dict[str, Any]:
        """Ask Shopify to email the account activation invite."""
        data = self._request('POST', f'customers/{customer_id}/send_invite.json', payload={'customer_invite': {}})
        return data.get('customer_invite') or {}

    def create_account_activation_url(self, customer_id: str) -> Optional[str]:
        """Generate a one-time account activation URL for a disabled account."""
        data = self._request('POST', f'customers/{customer_id}/account_activation_url.json')
        return data.get('account_activation_url')

    # ==================== METAFIELDS ====================

    def list_metafields(self, customer_id: str, namespace: str = None) -> List[Metafield]:
        """
        Get metafields for a customer.

        Args:
            customer_id: Shopify customer ID
            namespace: Optional namespace filter

        Returns:
            List of Metafield
        """
        params = {'limit': 250}
        if namespace:
            params['namespace'] = namespace

        data = self._request('GET', f'customers/{customer_id}/metafields.json', params=params)
        return [Metafield.from_shopify(mf) for mf in data.get('metafields') or []]

    def set_metafield(
        self,
        customer_id: str,
        namespace: str,
        key: str,
        value: str,
        value_type: str = 'single_line_text_field'
    ) -> Metafield:
        """Create or overwrite one customer metafield (upsert by namespace/key)."""
        payload = {
            'metafield': {
                'namespace': namespace,
                'key': key,
                'value': value,
                'type': value_type
            }
        }
        data = self._request('POST', f'customers/{customer_id}/metafields.json', payload=payload)
        return Metafield.from_shopify(data.get('metafield') or payload['metafield'])

    def delete_metafield(self, customer_id: str, metafield_id: str) -> None:
        self._request('DELETE', f'customers/{customer_id}/metafields/{metafield_id}.json')

    # ==================== ORDERS ====================

    def list_customer_orders(self, customer_id: str, created_at_min: str = None, limit: int = 10) -> List[Dict[str, Any]]:
        """
        Recent orders for a customer, any status.

        Returns:
            Raw order dicts as returned by Shopify
        """
        params = {'customer_id': customer_id, 'status': 'any', 'limit': limit}
        if created_at_min:
            params['created_at_min'] = created_at_min
        data = self._request('GET', 'orders.json', params=params)
        return data.get('orders') or []
