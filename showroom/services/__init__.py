"""
Services layer for the bridal showroom.
Shopify and Klaviyo clients plus the membership reconciliation core.
"""
from .shopify_client import ShopifyClient
from .klaviyo_service import KlaviyoService
from .membership_reconciler import MembershipReconciler, UpsertResult, DeleteResult
from .lifecycle_processor import LifecycleEventProcessor, LifecycleTopic, LifecycleResult
from .product_catalog import ShowroomProductCatalog, StaticProductCatalog
from .bridal_party_service import BridalPartyService
from .showroom_query import ShowroomQueryService
