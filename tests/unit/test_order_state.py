"""Unit tests for the order status state machine"""

import pytest
from decimal import Decimal
from smartshop.domain.exceptions import BusinessRuleViolation, InvalidTransitionError
from smartshop.domain.models import OrderStatus
from smartshop.domain.order_state import (
    TERMINAL_STATUSES,
    initial_status,
    validate_confirmation,
    validate_transition,
)


def test_initial_status_depends_on_stock():
    assert initial_status(True) == OrderStatus.PENDING
    assert initial_status(False) == OrderStatus.REJECTED


def test_pending_can_be_confirmed_or_canceled():
    validate_transition(OrderStatus.PENDING, OrderStatus.CONFIRMED)
    validate_transition(OrderStatus.PENDING, OrderStatus.CANCELED)


def test_pending_cannot_be_rejected_by_caller():
    with pytest.raises(InvalidTransitionError):
        validate_transition(OrderStatus.PENDING, OrderStatus.REJECTED)


@pytest.mark.parametrize("current", [OrderStatus.CONFIRMED, OrderStatus.CANCELED, OrderStatus.REJECTED])
@pytest.mark.parametrize("target", list(OrderStatus))
def test_terminal_states_have_no_exits(current, target):
    with pytest.raises(InvalidTransitionError) as exc_info:
        validate_transition(current, target)

    message = str(exc_info.value)
    assert current.value in message
    assert target.value in message


def test_terminal_statuses():
    assert TERMINAL_STATUSES == {OrderStatus.CONFIRMED, OrderStatus.CANCELED, OrderStatus.REJECTED}


def test_confirmation_allows_rounding_tolerance():
    validate_confirmation(OrderStatus.PENDING, Decimal("0.00"))
    validate_confirmation(OrderStatus.PENDING, Decimal("0.01"))


def test_confirmation_requires_full_payment():
    with pytest.raises(BusinessRuleViolation, match="remaining amount"):
        validate_confirmation(OrderStatus.PENDING, Decimal("0.02"))


def test_confirmation_of_confirmed_order_fails():
    """Confirming twice must fail rather than decrement stock again"""
    with pytest.raises(InvalidTransitionError):
        validate_confirmation(OrderStatus.CONFIRMED, Decimal("0.00"))
