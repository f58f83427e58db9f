"""
Flask extensions initialization.

The showroom components are built once per app from the Flask config and
stored on ``app.extensions``; handlers fetch them with ``get_components()``.
"""
from dataclasses import dataclass

from flask import Flask, current_app

from .config import ShowroomSettings
from .services import (
    BridalPartyService,
    KlaviyoService,
    LifecycleEventProcessor,
    MembershipReconciler,
    ShopifyClient,
    ShowroomProductCatalog,
    ShowroomQueryService,
)

EXTENSION_KEY = 'showroom'


@dataclass
class ShowroomComponents:
    """Wired service graph for one app."""
    settings: ShowroomSettings
    shopify: ShopifyClient
    klaviyo: KlaviyoService
    reconciler: MembershipReconciler
    lifecycle: LifecycleEventProcessor
    invitations: BridalPartyService
    query: ShowroomQueryService


class ShowroomServices:
    """Flask extension that builds the showroom components."""

    def __init__(self, app: Flask = None, **collaborators):
        if app is not None:
            self.init_app(app, **collaborators)

    def init_app(
        self,
        app: Flask,
        shopify_client: ShopifyClient = None,
        klaviyo_service: KlaviyoService = None,
        product_catalog: ShowroomProductCatalog = None
    ) -> ShowroomComponents:
        settings = ShowroomSettings.from_mapping(app.config)
        shopify = shopify_client or ShopifyClient.from_settings(settings)
        klaviyo = klaviyo_service or KlaviyoService.from_settings(settings)
        reconciler = MembershipReconciler(shopify, settings)

        components = ShowroomComponents(
            settings=settings,
            shopify=shopify,
            klaviyo=klaviyo,
            reconciler=reconciler,
            lifecycle=LifecycleEventProcessor(reconciler, product_catalog),
            invitations=BridalPartyService(reconciler, klaviyo),
            query=ShowroomQueryService(reconciler),
        )
        app.extensions[EXTENSION_KEY] = components
        return components


def get_components() -> ShowroomComponents:
    """Components of the current app."""
    return current_app.extensions[EXTENSION_KEY]


showroom_services = ShowroomServices()
