"""
Storefront API blueprints for the bridal showroom.
"""
from .bridal_party import bridal_party_bp
from .showrooms import showrooms_bp
from .customers import customers_bp

__all__ = [
    'bridal_party_bp',
    'showrooms_bp',
    'customers_bp',
]
