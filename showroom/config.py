"""
Configuration management for the bridal showroom service.
"""
import os
from dataclasses import dataclass
from enum import Enum
from typing import Any, Mapping

from dotenv import load_dotenv

load_dotenv()


class CustomerPolicy(str, Enum):
    """What a write operation does when no customer matches the email."""
    CREATE = 'create'
    REQUIRE_EXISTING = 'require_existing'


class BaseConfig:
    """Base configuration."""
    SECRET_KEY = os.getenv('SECRET_KEY', 'dev-secret-key-change-in-production')

    # Shopify store (single store per deployment)
    SHOPIFY_SHOP_DOMAIN = os.getenv('SHOPIFY_SHOP_DOMAIN', '')
    SHOPIFY_ACCESS_TOKEN = os.getenv('SHOPIFY_ACCESS_TOKEN', '')
    SHOPIFY_API_VERSION = os.getenv('SHOPIFY_API_VERSION', '2024-10')
    SHOPIFY_WEBHOOK_SECRET = os.getenv('SHOPIFY_WEBHOOK_SECRET', '')

    # Klaviyo
    KLAVIYO_PRIVATE_API_KEY = os.getenv('KLAVIYO_PRIVATE_API_KEY', '')
    KLAVIYO_INVITE_EVENT = os.getenv('KLAVIYO_INVITE_EVENT', 'Bridal Party Invited')

    # Storefront
    SITE_URL = os.getenv('SITE_URL', 'https://your-store.com')
    CORS_ALLOWED_ORIGIN = os.getenv('CORS_ALLOWED_ORIGIN', '*')

    # Metafield write throttling (Shopify REST rate limit)
    METAFIELD_BATCH_SIZE = int(os.getenv('METAFIELD_BATCH_SIZE', '5'))
    METAFIELD_BATCH_DELAY_MS = int(os.getenv('METAFIELD_BATCH_DELAY_MS', '100'))

    # Customer creation policy per entry point
    INVITE_CUSTOMER_POLICY = os.getenv('INVITE_CUSTOMER_POLICY', CustomerPolicy.CREATE.value)
    SYNC_CUSTOMER_POLICY = os.getenv('SYNC_CUSTOMER_POLICY', CustomerPolicy.CREATE.value)

    # Placeholder profile for customers created by a sync call
    DEFAULT_CUSTOMER_FIRST_NAME = 'Bridal'
    DEFAULT_CUSTOMER_LAST_NAME = 'Party'
    DEFAULT_CUSTOMER_NOTE = 'Created via bridal showroom'


class DevelopmentConfig(BaseConfig):
    """Development configuration."""
    DEBUG = True


class ProductionConfig(BaseConfig):
    """Production configuration."""
    DEBUG = False

    REQUIRED_SETTINGS = (
        'SHOPIFY_SHOP_DOMAIN',
        'SHOPIFY_ACCESS_TOKEN',
        'SHOPIFY_WEBHOOK_SECRET',
    )

    @classmethod
    def validate(cls) -> None:
        """
        Validate required settings in production.

        Raises:
            RuntimeError: If a required setting is missing
        """
        missing = [name for name in cls.REQUIRED_SETTINGS if not getattr(cls, name)]
        if missing:
            raise RuntimeError(
                f"CRITICAL: missing required environment variables: {', '.join(missing)}\n"
                "Production deployments MUST configure the Shopify store and webhook secret."
            )


class TestingConfig(BaseConfig):
    """Testing configuration."""
    TESTING = True
    SHOPIFY_SHOP_DOMAIN = 'test-shop.myshopify.com'
    SHOPIFY_ACCESS_TOKEN = 'shpat_test_token'
    SHOPIFY_WEBHOOK_SECRET = 'test_webhook_secret_123'
    KLAVIYO_PRIVATE_API_KEY = 'pk_test_key'
    SITE_URL = 'https://test-shop.example.com'
    METAFIELD_BATCH_DELAY_MS = 0


config_map = {
    'development': DevelopmentConfig,
    'production': ProductionConfig,
    'testing': TestingConfig
}


def get_config(config_name: str = 'development'):
    """Get configuration class by name."""
    return config_map.get(config_name, DevelopmentConfig)


def validate_config(config_name: str = 'development') -> None:
    """
    Validate configuration before app startup.

    Args:
        config_name: The configuration environment name

    Raises:
        RuntimeError: If validation fails in production
    """
    if config_name == 'production':
        ProductionConfig.validate()


@dataclass(frozen=True)
class ShowroomSettings:
    """
    Settings handed to each component at construction.

    Built once from the Flask config so core logic never reads the
    environment directly.
    """
    shop_domain: str
    access_token: str
    api_version: str
    webhook_secret: str
    klaviyo_api_key: str
    klaviyo_invite_event: str
    site_url: str
    batch_size: int = 5
    batch_delay_ms: int = 100
    invite_policy: CustomerPolicy = CustomerPolicy.CREATE
    sync_policy: CustomerPolicy = CustomerPolicy.CREATE
    default_first_name: str = 'Bridal'
    default_last_name: str = 'Party'
    default_note: str = 'Created via bridal showroom'

    @classmethod
    def from_mapping(cls, config: Mapping[str, Any]) -> 'ShowroomSettings':
        """Build settings from a Flask config (or any mapping)."""
        return cls(
            shop_domain=config.get('SHOPIFY_SHOP_DOMAIN', ''),
            access_token=config.get('SHOPIFY_ACCESS_TOKEN', ''),
            api_version=config.get('SHOPIFY_API_VERSION', '2024-10'),
            webhook_secret=config.get('SHOPIFY_WEBHOOK_SECRET', ''),
            klaviyo_api_key=config.get('KLAVIYO_PRIVATE_API_KEY', ''),
            klaviyo_invite_event=config.get('KLAVIYO_INVITE_EVENT', 'Bridal Party Invited'),
            site_url=config.get('SITE_URL', '').rstrip('/'),
            batch_size=int(config.get('METAFIELD_BATCH_SIZE', 5)),
            batch_delay_ms=int(config.get('METAFIELD_BATCH_DELAY_MS', 100)),
            invite_policy=CustomerPolicy(config.get('INVITE_CUSTOMER_POLICY', CustomerPolicy.CREATE.value)),
            sync_policy=CustomerPolicy(config.get('SYNC_CUSTOMER_POLICY', CustomerPolicy.CREATE.value)),
            default_first_name=config.get('DEFAULT_CUSTOMER_FIRST_NAME', 'Bridal'),
            default_last_name=config.get('DEFAULT_CUSTOMER_LAST_NAME', 'Party'),
            default_note=config.get('DEFAULT_CUSTOMER_NOTE', 'Created via bridal showroom'),
        )
