"""
Shared fixtures for the showroom test suite.

Shopify is replaced by an in-memory store that records every call, and
Klaviyo by a service that records events instead of posting them.
"""
import base64
import hashlib
import hmac
import json
import threading

import pytest

from showroom import create_app
from showroom.config import ShowroomSettings, TestingConfig
from showroom.models import Customer, Metafield
from showroom.services import KlaviyoService, MembershipReconciler, StaticProductCatalog
from showroom.utils.exceptions import ShopifyError

WEBHOOK_SECRET = TestingConfig.SHOPIFY_WEBHOOK_SECRET
SHOWROOM_PRODUCT_ID = 9876543210123


def generate_hmac_signature(payload: bytes, secret: str = WEBHOOK_SECRET) -> str:
    """Generate Shopify-compatible HMAC signature."""
    return base64.b64encode(
        hmac.new(secret.encode('utf-8'), payload, hashlib.sha256).digest()
    ).decode('utf-8')


class FakeShopifyClient:
    """
    In-memory stand-in for ShopifyClient.

    Same public methods, backed by dicts. Every call is appended to
    ``calls`` as (method, args, kwargs); ``fail()`` makes matching calls
    raise ShopifyError.
    """

    WRITE_METHODS = {
        'create_customer', 'update_customer', 'set_metafield',
        'delete_metafield', 'send_invite',
    }

    def __init__(self):
        self.customers = {}
        self.metafields = {}
        self.orders = {}
        self.calls = []
        self._failures = []
        self._next_id = 7890123456000
        self._lock = threading.Lock()

    # ---- test helpers ----

    def _new_id(self) -> int:
        self._next_id += 1
        return self._next_id

    def add_customer(self, email, state='disabled', tags='', first_name=None, last_name=None, note=None) -> Customer:
        customer_id = self._new_id()
        self.customers[str(customer_id)] = {
            'id': customer_id,
            'email': email,
            'first_name': first_name,
            'last_name': last_name,
            'tags': tags,
            'note': note,
            'state': state,
        }
        self.metafields[str(customer_id)] = []
        return Customer.from_shopify(self.customers[str(customer_id)])

    def add_metafield(self, customer_id, namespace, key, value, value_type='single_line_text_field'):
        if not isinstance(value, str):
            value = json.dumps(value)
            value_type = 'json'
        self.metafields[str(customer_id)].append({
            'id': self._new_id(),
            'namespace': namespace,
            'key': key,
            'value': value,
            'type': value_type,
            'created_at': '2026-01-10T10:00:00Z',
            'updated_at': '2026-01-10T10:00:00Z',
        })

    def metafield_value(self, customer_id, namespace, key):
        for mf in self.metafields.get(str(customer_id), []):
            if mf['namespace'] == namespace and mf['key'] == key:
                return mf['value']
        return None

    def customer_tags(self, customer_id):
        return Customer.from_shopify(self.customers[str(customer_id)]).tags

    def fail(self, method, when=None, status=500):
        """Make ``method`` raise; ``when(*args, **kwargs)`` narrows which calls."""
        self._failures.append((method, when, status))

    @property
    def writes(self):
        return [call for call in self.calls if call[0] in self.WRITE_METHODS]

    def calls_to(self, method):
        return [call for call in self.calls if call[0] == method]

    def _record(self, method, *args, **kwargs):
        with self._lock:
            self.calls.append((method, args, kwargs))
        for name, when, status in self._failures:
            if name == method and (when is None or when(*args, **kwargs)):
                raise ShopifyError(f'Injected failure in {method}', status=status)

    # ---- ShopifyClient surface ----

    def search_customers(self, query, limit=10):
        self._record('search_customers', query, limit=limit)
        wanted = query.split('email:', 1)[-1].strip()
        return [dict(c) for c in self.customers.values() if c['email'] == wanted][:limit]

    def find_customer_by_email(self, email):
        self._record('find_customer_by_email', email)
        wanted = email.strip()
        for raw in self.customers.values():
            if raw['email'] == wanted:
                return Customer.from_shopify(raw)
        return None

    def create_customer(self, email, first_name=None, last_name=None, note=None, tags=None, accepts_marketing=False):
        self._record('create_customer', email, first_name=first_name, last_name=last_name, note=note)
        customer = self.add_customer(email, tags=', '.join(tags or []),
                                     first_name=first_name, last_name=last_name, note=note)
        return customer

    def update_customer(self, customer_id, **fields):
        self._record('update_customer', customer_id, **fields)
        if isinstance(fields.get('tags'), (list, tuple, set)):
            fields['tags'] = ', '.join(fields['tags'])
        self.customers[str(customer_id)].update(fields)
        return Customer.from_shopify(self.customers[str(customer_id)])

    def send_invite(self, customer_id):
        self._record('send_invite', customer_id)
        return {'to': self.customers[str(customer_id)]['email']}

    def create_account_activation_url(self, customer_id):
        self._record('create_account_activation_url', customer_id)
        return f'https://test-shop.myshopify.com/account/activate/{customer_id}/token123'

    def list_metafields(self, customer_id, namespace=None):
        self._record('list_metafields', customer_id, namespace=namespace)
        return [
            Metafield.from_shopify(mf) for mf in self.metafields.get(str(customer_id), [])
            if namespace is None or mf['namespace'] == namespace
        ]

    def set_metafield(self, customer_id, namespace, key, value, value_type='single_line_text_field'):
        self._record('set_metafield', customer_id, namespace, key, value, value_type)
        with self._lock:
            stored = self.metafields.setdefault(str(customer_id), [])
            for mf in stored:
                if mf['namespace'] == namespace and mf['key'] == key:
                    mf.update(value=value, type=value_type, updated_at='2026-02-01T10:00:00Z')
                    return Metafield.from_shopify(mf)
            mf = {
                'id': self._new_id(),
                'namespace': namespace,
                'key': key,
                'value': value,
                'type': value_type,
                'created_at': '2026-02-01T10:00:00Z',
                'updated_at': '2026-02-01T10:00:00Z',
            }
            stored.append(mf)
            return Metafield.from_shopify(mf)

    def delete_metafield(self, customer_id, metafield_id):
        self._record('delete_metafield', customer_id, metafield_id)
        with self._lock:
            stored = self.metafields.get(str(customer_id), [])
            self.metafields[str(customer_id)] = [mf for mf in stored if str(mf['id']) != str(metafield_id)]

    def list_customer_orders(self, customer_id, created_at_min=None, limit=10):
        self._record('list_customer_orders', customer_id, created_at_min=created_at_min, limit=limit)
        return self.orders.get(str(customer_id), [])[:limit]


class RecordingKlaviyoService(KlaviyoService):
    """KlaviyoService that records events instead of calling the API."""

    def __init__(self, *args, **kwargs):
        super().__init__(*args, **kwargs)
        self.events = []
        self.succeed = True

    def track_event(self, event_name, email, properties, profile=None, unique_id=None):
        self.events.append({
            'event': event_name,
            'email': email,
            'properties': properties,
            'profile': profile,
        })
        if not self.succeed:
            return {'success': False, 'error': 'API error: 500'}
        return {'success': True, 'event': event_name, 'message': 'Event tracked'}


def testing_settings(**overrides) -> ShowroomSettings:
    config = {name: getattr(TestingConfig, name) for name in dir(TestingConfig) if name.isupper()}
    config.update(overrides)
    return ShowroomSettings.from_mapping(config)


@pytest.fixture
def shopify():
    """In-memory Shopify store."""
    return FakeShopifyClient()


@pytest.fixture
def klaviyo():
    """Klaviyo service that records events."""
    return RecordingKlaviyoService(
        TestingConfig.KLAVIYO_PRIVATE_API_KEY,
        site_url=TestingConfig.SITE_URL,
    )


@pytest.fixture
def catalog():
    """Catalog where showroom-1 sells one product."""
    return StaticProductCatalog({'showroom-1': [SHOWROOM_PRODUCT_ID]})


@pytest.fixture
def settings():
    return testing_settings()


@pytest.fixture
def reconciler(shopify, settings):
    return MembershipReconciler(shopify, settings)


@pytest.fixture
def app(shopify, klaviyo, catalog):
    """Create application for testing."""
    app = create_app(
        'testing',
        shopify_client=shopify,
        klaviyo_service=klaviyo,
        product_catalog=catalog,
    )
    yield app


@pytest.fixture
def client(app):
    """Create test client."""
    return app.test_client()


@pytest.fixture
def post_webhook(client):
    """POST a signed lifecycle webhook."""
    def _post(topic, payload, signature=None, raw_body=None):
        body = raw_body if raw_body is not None else json.dumps(payload).encode('utf-8')
        headers = {
            'Content-Type': 'application/json',
            'X-Shopify-Topic': topic,
            'X-Shopify-Shop-Domain': TestingConfig.SHOPIFY_SHOP_DOMAIN,
        }
        if signature is not False:
            headers['X-Shopify-Hmac-SHA256'] = signature or generate_hmac_signature(body)
        return client.post('/webhook/lifecycle', data=body, headers=headers)
    return _post
