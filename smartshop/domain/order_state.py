"""Order status state machine"""

from decimal import Decimal
from typing import Dict, FrozenSet

from smartshop.domain.exceptions import BusinessRuleViolation, InvalidTransitionError
from smartshop.domain.models import OrderStatus
from smartshop.utils.money import EPSILON

# Transitions a caller may request on an existing order.
# REJECTED is only ever an initial status, assigned by the pricing step.
ALLOWED_TRANSITIONS: Dict[OrderStatus, FrozenSet[OrderStatus]] = {
    OrderStatus.PENDING: frozenset({OrderStatus.CONFIRMED, OrderStatus.CANCELED}),
    OrderStatus.CONFIRMED: frozenset(),
    OrderStatus.CANCELED: frozenset(),
    OrderStatus.REJECTED: frozenset(),
}

TERMINAL_STATUSES = frozenset(
    status for status, targets in ALLOWED_TRANSITIONS.items() if not targets
)


def initial_status(stock_available: bool) -> OrderStatus:
    return OrderStatus.PENDING if stock_available else OrderStatus.REJECTED


def validate_transition(current: OrderStatus, target: OrderStatus) -> None:
    """Raise InvalidTransitionError unless current -> target is permitted"""
    if target not in ALLOWED_TRANSITIONS[current]:
        raise InvalidTransitionError("order", current, target)


def validate_confirmation(current: OrderStatus, remaining_amount: Decimal) -> None:
    """
    PENDING -> CONFIRMED additionally requires the order to be paid off.

    remaining_amount must come from the payment ledger, not the cached
    column on the order.
    """
    validate_transition(current, OrderStatus.CONFIRMED)
    if remaining_amount > EPSILON:
        raise BusinessRuleViolation(
            f"Cannot confirm order: remaining amount {remaining_amount} is still unpaid"
        )
