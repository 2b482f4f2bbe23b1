"""Order service client (``POST /api/orders`` and ``GET /api/orders``)."""
from __future__ import annotations

import logging

from pydantic import ValidationError

from storefront.api.schemas import OrderSchema
from storefront.core.exceptions import TransportException
from storefront.domain.order import Order, OrderRequest

from .http_client import BaseApiClient

logger = logging.getLogger(__name__)

ORDERS_PATH = "/api/orders"


class OrderApiClient(BaseApiClient):
    """Submit orders and read back order history.

    ``create_order`` sends exactly one request and never retries; a retry is the
    caller's decision.
    """

    async def create_order(self, request: OrderRequest) -> Order:
        _, data = await self._request_json(
            "POST",
            ORDERS_PATH,
            json=request.to_payload(),
            ok_statuses=(200, 201),
        )
        try:
            order = OrderSchema.model_validate(data).to_domain()
        except ValidationError as exc:
            logger.error("Order service returned malformed order: %s", exc)
            raise TransportException("Order service returned a malformed order") from exc

        logger.info(
            "Order created: ID=%s, Total=%s, Items=%s",
            order.order_id,
            order.total_amount,
            len(order.items),
        )
        return order

    async def list_orders(self) -> list[Order]:
        _, data = await self._request_json("GET", ORDERS_PATH)
        # Go encodes an empty slice as null
        if data is None:
            return []
        if not isinstance(data, list):
            raise TransportException("Order list response is not an array")
        try:
            return [OrderSchema.model_validate(raw).to_domain() for raw in data]
        except ValidationError as exc:
            logger.error("Order service returned malformed order list: %s", exc)
            raise TransportException("Order service returned a malformed order list") from exc
