"""Order domain types and checkout status constants."""
from __future__ import annotations

from dataclasses import dataclass, field, replace
from typing import Any

from storefront.core.exceptions import ValidationException


class CheckoutStatus:
    """Checkout pipeline lifecycle statuses."""

    IDLE = "idle"
    EDITING = "editing"
    SUBMITTING = "submitting"
    SUCCEEDED = "succeeded"
    FAILED = "failed"


@dataclass(frozen=True, slots=True)
class ShippingInfo:
    name: str
    address: str
    phone_number: str = ""

    def normalized(self) -> ShippingInfo:
        return replace(
            self,
            name=(self.name or "").strip(),
            address=(self.address or "").strip(),
            phone_number=(self.phone_number or "").strip(),
        )

    def validate(self) -> None:
        """Raise ValidationException unless name and address are filled in."""
        missing = [
            label
            for label, value in (("name", self.name), ("address", self.address))
            if not (value or "").strip()
        ]
        if missing:
            raise ValidationException(
                f"Shipping {' and '.join(missing)} {'is' if len(missing) == 1 else 'are'} required"
            )

    def to_payload(self) -> dict[str, str]:
        return {
            "name": self.name,
            "address": self.address,
            "phoneNumber": self.phone_number,
        }


@dataclass(frozen=True, slots=True)
class OrderItem:
    product_id: int
    name: str
    unit_price: int
    quantity: int
    subtotal: int

    def to_payload(self) -> dict[str, Any]:
        return {
            "productId": self.product_id,
            "name": self.name,
            "price": self.unit_price,
            "quantity": self.quantity,
            "subtotal": self.subtotal,
        }


@dataclass(frozen=True, slots=True)
class OrderRequest:
    """Immutable order body frozen at submission time."""

    items: tuple[OrderItem, ...]
    total_amount: int
    shipping_info: ShippingInfo

    def to_payload(self) -> dict[str, Any]:
        return {
            "items": [item.to_payload() for item in self.items],
            "totalAmount": self.total_amount,
            "shippingInfo": self.shipping_info.to_payload(),
        }


@dataclass(frozen=True, slots=True)
class Order:
    """Order as recorded and identified by the order service."""

    order_id: int
    timestamp: str
    items: tuple[OrderItem, ...]
    total_amount: int
    shipping_info: ShippingInfo
    user_id: int | None = field(default=None)

    @property
    def items_total(self) -> int:
        return sum(item.subtotal for item in self.items)
