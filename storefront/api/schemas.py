"""Wire schemas for the storefront REST endpoints."""
from __future__ import annotations

from typing import Any

from pydantic import BaseModel, ConfigDict, Field, field_validator

from storefront.domain.cart import Product
from storefront.domain.order import Order, OrderItem, ShippingInfo


def _to_minor_units(value: Any) -> Any:
    # Prices travel as JSON numbers; the backend may emit 1200.0 for 1200
    if isinstance(value, float):
        if not value.is_integer():
            raise ValueError(f"price must be a whole number of currency units, got {value}")
        return int(value)
    return value


class _WireModel(BaseModel):
    model_config = ConfigDict(populate_by_name=True, extra="ignore")


class ProductSchema(_WireModel):
    id: int
    name: str
    price: int = Field(ge=0)
    description: str = ""
    image_url: str = Field(default="", alias="imageUrl")
    category: str = ""

    @field_validator("price", mode="before")
    @classmethod
    def coerce_price(cls, value: Any) -> Any:
        return _to_minor_units(value)

    def to_domain(self) -> Product:
        return Product(
            product_id=self.id,
            name=self.name,
            unit_price=self.price,
            image_ref=self.image_url,
            description=self.description,
            category=self.category,
        )


class OrderItemSchema(_WireModel):
    product_id: int = Field(alias="productId")
    name: str
    price: int = Field(ge=0)
    quantity: int = Field(ge=1)
    subtotal: int | None = None

    @field_validator("price", "subtotal", mode="before")
    @classmethod
    def coerce_money(cls, value: Any) -> Any:
        return _to_minor_units(value)

    def to_domain(self) -> OrderItem:
        subtotal = self.subtotal if self.subtotal is not None else self.price * self.quantity
        return OrderItem(
            product_id=self.product_id,
            name=self.name,
            unit_price=self.price,
            quantity=self.quantity,
            subtotal=subtotal,
        )


class ShippingInfoSchema(_WireModel):
    name: str
    address: str
    phone_number: str = Field(default="", alias="phoneNumber")

    def to_domain(self) -> ShippingInfo:
        return ShippingInfo(name=self.name, address=self.address, phone_number=self.phone_number)


class OrderSchema(_WireModel):
    id: int
    user_id: int | None = Field(default=None, alias="userId")
    timestamp: str = ""
    items: list[OrderItemSchema] = Field(default_factory=list)
    total_amount: int = Field(alias="totalAmount")
    shipping_info: ShippingInfoSchema = Field(alias="shippingInfo")

    @field_validator("total_amount", mode="before")
    @classmethod
    def coerce_total(cls, value: Any) -> Any:
        return _to_minor_units(value)

    def to_domain(self) -> Order:
        return Order(
            order_id=self.id,
            timestamp=self.timestamp,
            items=tuple(item.to_domain() for item in self.items),
            total_amount=self.total_amount,
            shipping_info=self.shipping_info.to_domain(),
            user_id=self.user_id,
        )
