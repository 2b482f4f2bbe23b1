"""Shared helpers for line subtotals, cart totals and quantities."""
from __future__ import annotations

from collections.abc import Iterable
from typing import Protocol


class _Priced(Protocol):
    unit_price: int
    quantity: int


def calc_line_subtotal(unit_price: int, quantity: int) -> int:
    return int(unit_price) * int(quantity)


def calc_items_total(items: Iterable[_Priced]) -> int:
    return sum(calc_line_subtotal(item.unit_price, item.quantity) for item in items)


def calc_quantity(items: Iterable[_Priced]) -> int:
    return sum(int(item.quantity) for item in items)
