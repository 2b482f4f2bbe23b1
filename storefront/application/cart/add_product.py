"""Use case: look a product up in the catalog and add it to the cart."""
from __future__ import annotations

from dataclasses import dataclass
from typing import Protocol

from storefront.core.cart_storage import CartStore
from storefront.core.exceptions import ProductNotFoundException, TransportException
from storefront.domain.cart import LineItem, Product


class ProductLookup(Protocol):
    async def get_product(self, product_id: int) -> Product:
        ...


@dataclass
class AddToCartResult:
    ok: bool
    error_key: str | None = None
    item: LineItem | None = None
    message: str | None = None


async def add_product_to_cart(
    cart: CartStore,
    catalog: ProductLookup,
    product_id: int,
    quantity: int = 1,
) -> AddToCartResult:
    if quantity < 1:
        return AddToCartResult(False, "invalid_quantity")

    try:
        product = await catalog.get_product(product_id)
    except ProductNotFoundException as exc:
        return AddToCartResult(False, "not_found", message=exc.message)
    except TransportException as exc:
        return AddToCartResult(False, "catalog_unavailable", message=exc.message)

    item = cart.add_item(product, quantity)
    return AddToCartResult(True, item=item)
