"""Application bootstrap wiring storage, the shared cart, and API clients."""
from __future__ import annotations

from dataclasses import dataclass

from storefront.application.checkout.pipeline import CheckoutPipeline
from storefront.integrations.catalog_client import CatalogClient
from storefront.integrations.local_storage import KeyValueStorage, create_storage
from storefront.integrations.order_api import OrderApiClient
from storefront.integrations.sentry_integration import init_sentry

from .cart_storage import CartStore
from .config import Settings
from .logging_config import setup_logging


@dataclass
class Storefront:
    """Composition root. Owns the single cart store every consumer shares."""

    settings: Settings
    storage: KeyValueStorage
    cart: CartStore
    catalog: CatalogClient
    orders: OrderApiClient

    def new_checkout(self) -> CheckoutPipeline:
        return CheckoutPipeline(self.cart, self.orders)

    async def close(self) -> None:
        await self.catalog.close()
        await self.orders.close()


def build_storefront(settings: Settings, *, configure_logging: bool = True) -> Storefront:
    """Create runtime components from configuration."""
    if configure_logging:
        setup_logging(settings.log_level)
        init_sentry(settings)

    storage = create_storage(settings)
    cart = CartStore(storage, storage_key=settings.cart_storage.key)
    catalog = CatalogClient(settings.api_base_url, timeout=settings.request_timeout)
    orders = OrderApiClient(settings.api_base_url, timeout=settings.request_timeout)

    return Storefront(
        settings=settings,
        storage=storage,
        cart=cart,
        catalog=catalog,
        orders=orders,
    )
