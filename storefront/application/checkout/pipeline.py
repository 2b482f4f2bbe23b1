"""Checkout pipeline: cart snapshot + shipping info -> order, clearing the cart on success.

States follow ``storefront.domain.checkout_fsm``::

    idle -> editing -> submitting -> succeeded
                  ^          |
                  +-- failed <+

A submit while ``submitting`` is a no-op, so one user action sends at most one
order request.
"""
from __future__ import annotations

import logging
from collections.abc import Callable
from dataclasses import dataclass
from typing import Protocol

from storefront.core.cart_storage import CartStore
from storefront.core.exceptions import (
    EmptyCartException,
    TransportException,
    ValidationException,
)
from storefront.core.order_math import calc_line_subtotal
from storefront.domain.checkout_fsm import (
    SUBMITTABLE_STATUSES,
    validate_checkout_transition,
)
from storefront.domain.order import (
    CheckoutStatus,
    Order,
    OrderItem,
    OrderRequest,
    ShippingInfo,
)

logger = logging.getLogger(__name__)

GENERIC_ERROR_MESSAGE = "An error occurred while processing the order"


class OrderGateway(Protocol):
    async def create_order(self, request: OrderRequest) -> Order:
        ...


@dataclass
class CheckoutResult:
    ok: bool
    error_key: str | None = None
    message: str | None = None
    order: Order | None = None
    redirect: str | None = None


PipelineListener = Callable[["CheckoutPipeline"], None]


class CheckoutPipeline:
    """One checkout attempt bound to the shared cart store."""

    def __init__(self, cart: CartStore, order_client: OrderGateway):
        self._cart = cart
        self._order_client = order_client
        self._status = CheckoutStatus.IDLE
        self._error: str | None = None
        self._order: Order | None = None
        self._listeners: list[PipelineListener] = []

    @property
    def cart(self) -> CartStore:
        return self._cart

    @property
    def status(self) -> str:
        return self._status

    @property
    def error(self) -> str | None:
        return self._error

    @property
    def order(self) -> Order | None:
        return self._order

    @property
    def is_submitting(self) -> bool:
        return self._status == CheckoutStatus.SUBMITTING

    def subscribe(self, listener: PipelineListener) -> Callable[[], None]:
        self._listeners.append(listener)

        def unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    def _transition(self, target: str) -> None:
        result = validate_checkout_transition(current_status=self._status, target_status=target)
        if not result.allowed:
            raise RuntimeError(result.reason)
        logger.debug("Checkout %s -> %s", self._status, target)
        self._status = target
        for listener in list(self._listeners):
            try:
                listener(self)
            except Exception:
                logger.exception("Checkout listener %r failed", listener)

    def start(self) -> CheckoutResult:
        """Enter editing. Refused (with a redirect to browsing) when the cart is empty."""
        if self._status == CheckoutStatus.EDITING:
            return CheckoutResult(True)
        if self._status != CheckoutStatus.IDLE:
            return CheckoutResult(False, "already_started")
        if self._cart.get_total_quantity() <= 0:
            exc = EmptyCartException()
            return CheckoutResult(False, "empty_cart", message=exc.message, redirect="browse")
        self._transition(CheckoutStatus.EDITING)
        return CheckoutResult(True)

    def edit(self) -> bool:
        """Return from failed to editing so the user can fix shipping info."""
        if self._status != CheckoutStatus.FAILED:
            return self._status == CheckoutStatus.EDITING
        self._transition(CheckoutStatus.EDITING)
        return True

    def build_order_request(self, shipping_info: ShippingInfo) -> OrderRequest:
        """Freeze the current cart into an order body.

        Raises ValidationException for missing shipping fields and
        EmptyCartException when there is nothing to order.
        """
        shipping_info.validate()
        items = self._cart.get_items()
        if not items:
            raise EmptyCartException()

        order_items = tuple(
            OrderItem(
                product_id=item.product_id,
                name=item.name,
                unit_price=item.unit_price,
                quantity=item.quantity,
                subtotal=calc_line_subtotal(item.unit_price, item.quantity),
            )
            for item in items
        )
        total_amount = self._cart.get_total_price()
        if total_amount != sum(item.subtotal for item in order_items):
            raise ValidationException("Cart total does not match line subtotals")

        return OrderRequest(
            items=order_items,
            total_amount=total_amount,
            shipping_info=shipping_info.normalized(),
        )

    async def submit(self, shipping_info: ShippingInfo) -> CheckoutResult:
        if self._status == CheckoutStatus.SUBMITTING:
            logger.info("Ignored duplicate checkout submit while request is in flight")
            return CheckoutResult(False, "in_progress")
        if self._status == CheckoutStatus.SUCCEEDED:
            return CheckoutResult(False, "already_completed", order=self._order)
        if self._status not in SUBMITTABLE_STATUSES:
            return CheckoutResult(False, "not_started", message="Checkout has not been started")

        try:
            request = self.build_order_request(shipping_info)
        except EmptyCartException as exc:
            self._error = exc.message
            if self._status == CheckoutStatus.FAILED:
                self._transition(CheckoutStatus.EDITING)
            return CheckoutResult(False, "empty_cart", message=exc.message, redirect="browse")
        except ValidationException as exc:
            self._error = exc.message
            if self._status == CheckoutStatus.FAILED:
                self._transition(CheckoutStatus.EDITING)
            return CheckoutResult(False, "validation", message=exc.message)

        self._error = None
        self._transition(CheckoutStatus.SUBMITTING)
        logger.info(
            "Submitting order: items=%s total=%s",
            len(request.items),
            request.total_amount,
        )

        try:
            order = await self._order_client.create_order(request)
        except TransportException as exc:
            self._error = exc.message or GENERIC_ERROR_MESSAGE
            self._transition(CheckoutStatus.FAILED)
            logger.warning("Order submission failed: %s", self._error)
            return CheckoutResult(False, "transport", message=self._error)
        except Exception:
            logger.exception("Unexpected error while submitting order")
            self._error = GENERIC_ERROR_MESSAGE
            self._transition(CheckoutStatus.FAILED)
            return CheckoutResult(False, "unexpected", message=self._error)

        # No await between these two steps
        self._cart.clear()
        self._order = order
        self._transition(CheckoutStatus.SUCCEEDED)
        logger.info("Order %s confirmed at %s", order.order_id, order.timestamp)
        return CheckoutResult(True, order=order)
