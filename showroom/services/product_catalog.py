"""
Showroom product lookup used by the purchase transition.

Which products belong to a showroom is not stored anywhere the service can
read yet (the storefront keeps showroom picks client side). The default
catalog therefore knows no products and the purchase transition stays
dormant until a real source is plugged in through ``create_app``.
"""
import logging
from typing import Dict, Iterable, Set

logger = logging.getLogger(__name__)


class ShowroomProductCatalog:
    """Answers which Shopify product ids belong to a showroom."""

    def products_for(self, showroom_id: str) -> Set[str]:
        logger.debug('No product source configured for showroom %s', showroom_id)
        return set()


class StaticProductCatalog(ShowroomProductCatalog):
    """Catalog backed by a fixed showroom id -> product ids mapping."""

    def __init__(self, products: Dict[str, Iterable]):
        self._products = {
            str(showroom_id): {str(product_id) for product_id in product_ids}
            for showroom_id, product_ids in products.items()
        }

    def products_for(self, showroom_id: str) -> Set[str]:
        return set(self._products.get(str(showroom_id), set()))
