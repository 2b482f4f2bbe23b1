"""Cart store: the shared, persisted collection of line items.

One instance is owned by the application root (see ``storefront.core.bootstrap``) and
handed to every consumer. Each mutation is written through to durable storage before
the call returns, then subscribers are notified.
"""
from __future__ import annotations

import json
import logging
import time
from collections.abc import Callable
from typing import Any

from storefront.core.exceptions import CorruptPayloadException, PersistenceException
from storefront.core.order_math import calc_items_total, calc_quantity
from storefront.domain.cart import LineItem, Product
from storefront.integrations.local_storage import KeyValueStorage, MemoryStorage

logger = logging.getLogger(__name__)

CartListener = Callable[["CartStore"], None]

DEFAULT_STORAGE_KEY = "cart"


class CartStore:
    """In-memory cart persisted under a fixed storage key."""

    def __init__(self, storage: KeyValueStorage | None = None, storage_key: str = DEFAULT_STORAGE_KEY):
        self._storage: KeyValueStorage = storage if storage is not None else MemoryStorage()
        self._storage_key = storage_key
        self._items: dict[int, LineItem] = {}
        self._listeners: list[CartListener] = []
        self._memory_fallback = False
        self._load()

    # ---------------------------------------------------------------- storage

    @property
    def storage(self) -> KeyValueStorage:
        return self._storage

    @property
    def storage_key(self) -> str:
        return self._storage_key

    @property
    def is_memory_fallback(self) -> bool:
        return self._memory_fallback

    def _switch_to_memory_fallback(self, reason: Exception | str) -> None:
        logger.warning("Cart storage fallback to memory mode: %s", reason)
        self._storage = MemoryStorage()
        self._memory_fallback = True

    @staticmethod
    def _parse_payload(raw: str) -> list[LineItem]:
        try:
            payload = json.loads(raw)
        except (TypeError, ValueError) as exc:
            raise PersistenceException(f"Cart payload is not valid JSON: {exc}") from exc

        if isinstance(payload, dict) and isinstance(payload.get("items"), list):
            raw_items = payload["items"]
        else:
            raise PersistenceException("Cart payload has unexpected shape")

        items: list[LineItem] = []
        seen: set[int] = set()
        for raw_item in raw_items:
            item = LineItem.from_dict(raw_item)
            if item.product_id in seen:
                raise PersistenceException(f"Duplicate product {item.product_id} in cart payload")
            seen.add(item.product_id)
            items.append(item)
        return items

    def _discard_payload(self, reason: Exception) -> None:
        logger.warning("Discarding corrupt cart payload under %r: %s", self._storage_key, reason)
        try:
            self._storage.remove(self._storage_key)
        except PersistenceException as remove_exc:
            logger.warning("Failed to remove corrupt cart payload: %s", remove_exc)

    def _load(self) -> None:
        try:
            raw = self._storage.get(self._storage_key)
        except CorruptPayloadException as exc:
            self._discard_payload(exc)
            return
        except PersistenceException as exc:
            self._switch_to_memory_fallback(exc)
            return

        if not raw:
            return

        try:
            items = self._parse_payload(raw)
        except PersistenceException as exc:
            self._discard_payload(exc)
            return

        self._items = {item.product_id: item for item in items}
        logger.debug("Loaded cart with %s items", len(self._items))

    def serialize(self) -> str:
        payload: dict[str, Any] = {
            "items": [item.to_dict() for item in self._items.values()],
            "updatedAt": int(time.time()),
        }
        return json.dumps(payload, ensure_ascii=False)

    def _save(self) -> None:
        serialized = self.serialize()
        try:
            self._storage.set(self._storage_key, serialized)
            return
        except PersistenceException as exc:
            # Stale durable contents must not come back on the next load
            try:
                self._storage.remove(self._storage_key)
            except PersistenceException as remove_exc:
                logger.warning("Failed to remove stale cart payload: %s", remove_exc)
            self._switch_to_memory_fallback(exc)
        self._storage.set(self._storage_key, serialized)

    def _commit(self) -> None:
        self._save()
        self._notify()

    # ------------------------------------------------------------ listeners

    def subscribe(self, listener: CartListener) -> Callable[[], None]:
        """Register a change listener. Returns a callable that unsubscribes it."""
        self._listeners.append(listener)

        def unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    def _notify(self) -> None:
        for listener in list(self._listeners):
            try:
                listener(self)
            except Exception:
                logger.exception("Cart listener %r failed", listener)

    # ----------------------------------------------------------- mutations

    def add_item(self, product: Product, quantity: int = 1) -> LineItem | None:
        """Add product to cart or increment quantity if it is already there."""
        if quantity < 1:
            logger.debug("Ignored add_item for product %s with quantity %s", product.product_id, quantity)
            return None
        if int(product.unit_price) < 0:
            logger.warning(
                "Ignored add_item for product %s with negative price %s",
                product.product_id,
                product.unit_price,
            )
            return None

        item = self._items.get(int(product.product_id))
        if item is not None:
            item.quantity += int(quantity)
            logger.info("Updated cart item %s qty=%s", item.product_id, item.quantity)
        else:
            item = LineItem.from_product(product, quantity)
            self._items[item.product_id] = item
            logger.info("Added item %s to cart", item.product_id)

        self._commit()
        return item.copy()

    def update_quantity(self, product_id: int, new_quantity: int) -> bool:
        """Set quantity exactly. Values below 1 remove the item. Returns True if found."""
        item = self._items.get(int(product_id))
        if item is None:
            return False
        if new_quantity < 1:
            return self.remove_item(product_id)
        item.quantity = int(new_quantity)
        self._commit()
        return True

    def remove_item(self, product_id: int) -> bool:
        """Remove item from cart. Returns True if found and removed."""
        if self._items.pop(int(product_id), None) is None:
            return False
        logger.info("Removed item %s from cart", product_id)
        self._commit()
        return True

    def clear(self) -> None:
        """Empty the cart."""
        self._items.clear()
        self._commit()
        logger.info("Cleared cart")

    # ------------------------------------------------------------ queries

    def get_items(self) -> list[LineItem]:
        """Snapshot of the items in first-added-first-shown order."""
        return [item.copy() for item in self._items.values()]

    def get_item(self, product_id: int) -> LineItem | None:
        item = self._items.get(int(product_id))
        return item.copy() if item is not None else None

    def get_total_quantity(self) -> int:
        return calc_quantity(self._items.values())

    def get_total_price(self) -> int:
        return calc_items_total(self._items.values())

    def is_empty(self) -> bool:
        return not self._items

    def __len__(self) -> int:
        return len(self._items)
