"""Integrations package - storage backends and storefront API clients."""

from storefront.integrations.catalog_client import CatalogClient
from storefront.integrations.local_storage import (
    FileStorage,
    KeyValueStorage,
    MemoryStorage,
    RedisStorage,
    create_storage,
)
from storefront.integrations.order_api import OrderApiClient

__all__ = [
    "CatalogClient",
    "OrderApiClient",
    "KeyValueStorage",
    "FileStorage",
    "MemoryStorage",
    "RedisStorage",
    "create_storage",
]
