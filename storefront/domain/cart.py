"""Cart domain types: catalog product snapshot and line item."""
from __future__ import annotations

from dataclasses import dataclass
from typing import Any

from storefront.core.exceptions import PersistenceException
from storefront.core.order_math import calc_line_subtotal


@dataclass(frozen=True, slots=True)
class Product:
    """Catalog record as returned by the product lookup."""

    product_id: int
    name: str
    unit_price: int
    image_ref: str = ""
    description: str = ""
    category: str = ""


def _strict_int(data: dict[str, Any], key: str) -> int:
    value = data[key]
    # bool is an int subclass; "true" is not a quantity
    if isinstance(value, bool) or not isinstance(value, int):
        raise PersistenceException(f"Field {key!r} must be an integer, got {value!r}")
    return value


@dataclass(slots=True)
class LineItem:
    """Single product entry in the cart.

    ``name``, ``unit_price`` and ``image_ref`` are copied from the catalog when the
    product is first added and are never refreshed afterwards.
    """

    product_id: int
    name: str
    unit_price: int
    image_ref: str
    quantity: int

    @classmethod
    def from_product(cls, product: Product, quantity: int = 1) -> LineItem:
        return cls(
            product_id=int(product.product_id),
            name=product.name,
            unit_price=int(product.unit_price),
            image_ref=product.image_ref,
            quantity=int(quantity),
        )

    @property
    def subtotal(self) -> int:
        return calc_line_subtotal(self.unit_price, self.quantity)

    def copy(self) -> LineItem:
        return LineItem(
            product_id=self.product_id,
            name=self.name,
            unit_price=self.unit_price,
            image_ref=self.image_ref,
            quantity=self.quantity,
        )

    def to_dict(self) -> dict[str, Any]:
        return {
            "productId": int(self.product_id),
            "name": self.name,
            "unitPrice": int(self.unit_price),
            "imageRef": self.image_ref,
            "quantity": int(self.quantity),
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> LineItem:
        """Rebuild a persisted item. Raises PersistenceException on malformed records."""
        if not isinstance(data, dict):
            raise PersistenceException(f"Line item must be an object, got {type(data).__name__}")
        try:
            product_id = _strict_int(data, "productId")
            unit_price = _strict_int(data, "unitPrice")
            quantity = _strict_int(data, "quantity")
            name = data["name"]
        except KeyError as exc:
            raise PersistenceException(f"Line item is missing field {exc.args[0]!r}") from exc

        if not isinstance(name, str):
            raise PersistenceException("Field 'name' must be a string")
        if unit_price < 0:
            raise PersistenceException(f"Negative unit price for product {product_id}")
        if quantity < 1:
            raise PersistenceException(f"Quantity below 1 for product {product_id}")

        image_ref = data.get("imageRef") or ""
        return cls(
            product_id=product_id,
            name=name,
            unit_price=unit_price,
            image_ref=str(image_ref),
            quantity=quantity,
        )
