"""Shared pytest fixtures for cart and checkout tests."""
from __future__ import annotations

from dataclasses import dataclass, field

import pytest

from storefront.core.cart_storage import CartStore
from storefront.core.exceptions import PersistenceException
from storefront.domain.cart import Product


@dataclass
class RecordingStorage:
    """MemoryStorage that records writes and can be told to fail."""

    data: dict[str, str] = field(default_factory=dict)
    writes: list[tuple[str, str]] = field(default_factory=list)
    removed: list[str] = field(default_factory=list)
    fail_reads: bool = False
    fail_writes: bool = False

    def get(self, key: str) -> str | None:
        if self.fail_reads:
            raise PersistenceException("read failed")
        return self.data.get(key)

    def set(self, key: str, value: str) -> None:
        if self.fail_writes:
            raise PersistenceException("quota exceeded")
        self.data[key] = value
        self.writes.append((key, value))

    def remove(self, key: str) -> None:
        self.removed.append(key)
        self.data.pop(key, None)


@pytest.fixture()
def storage() -> RecordingStorage:
    return RecordingStorage()


@pytest.fixture()
def cart(storage: RecordingStorage) -> CartStore:
    return CartStore(storage)


@pytest.fixture()
def plush() -> Product:
    return Product(product_id=1, name="Plush", unit_price=1200, image_ref="/img/plush.png")


@pytest.fixture()
def mug() -> Product:
    return Product(product_id=2, name="Mug", unit_price=600, image_ref="/img/mug.png")
