"""Checkout status transition rules (single source of truth)."""
from __future__ import annotations

from dataclasses import dataclass
from typing import Mapping

from storefront.domain.order import CheckoutStatus


ALLOWED_TRANSITIONS: Mapping[str, frozenset[str]] = {
    CheckoutStatus.IDLE: frozenset({CheckoutStatus.EDITING}),
    CheckoutStatus.EDITING: frozenset(
        {
            CheckoutStatus.EDITING,
            CheckoutStatus.SUBMITTING,
        }
    ),
    CheckoutStatus.SUBMITTING: frozenset(
        {
            CheckoutStatus.SUCCEEDED,
            CheckoutStatus.FAILED,
        }
    ),
    CheckoutStatus.FAILED: frozenset(
        {
            CheckoutStatus.EDITING,
            CheckoutStatus.SUBMITTING,
        }
    ),
    CheckoutStatus.SUCCEEDED: frozenset(),
}

TERMINAL_STATUSES = frozenset({CheckoutStatus.SUCCEEDED})

SUBMITTABLE_STATUSES = frozenset(
    {
        CheckoutStatus.EDITING,
        CheckoutStatus.FAILED,
    }
)


@dataclass(frozen=True, slots=True)
class TransitionValidationResult:
    allowed: bool
    reason: str | None = None


def validate_checkout_transition(
    *,
    current_status: str,
    target_status: str,
) -> TransitionValidationResult:
    """Validate terminal guard and the transition matrix."""
    if target_status not in ALLOWED_TRANSITIONS:
        return TransitionValidationResult(False, f"Unsupported status: {target_status}")

    if current_status not in ALLOWED_TRANSITIONS:
        return TransitionValidationResult(False, f"Unsupported current status: {current_status}")

    if current_status in TERMINAL_STATUSES:
        return TransitionValidationResult(
            False,
            f"Cannot leave terminal status '{current_status}'.",
        )

    if target_status not in ALLOWED_TRANSITIONS[current_status]:
        return TransitionValidationResult(
            False,
            f"Transition '{current_status} -> {target_status}' is not allowed.",
        )

    return TransitionValidationResult(True)
