"""Payment settlement rules - per-method validation and remaining-amount math"""

from decimal import Decimal
from typing import Dict, FrozenSet, Iterable, Optional

from smartshop.domain.exceptions import BusinessRuleViolation, InvalidTransitionError, ValidationFailure
from smartshop.domain.models import (
    CashDetails,
    ChequeDetails,
    OrderStatus,
    PaymentDetails,
    PaymentMethod,
    PaymentRequest,
    PaymentStatus,
    TransferDetails,
)
from smartshop.utils.money import EPSILON, ZERO, round2

# Per-payment ceiling on cash settlements (cash-transaction reporting limit)
CASH_LEGAL_LIMIT = Decimal("20000")

# REJECTED orders stay payable: they are kept as audit records
PAYABLE_ORDER_STATUSES = frozenset({OrderStatus.PENDING, OrderStatus.REJECTED})

PAYMENT_TRANSITIONS: Dict[PaymentStatus, FrozenSet[PaymentStatus]] = {
    PaymentStatus.PENDING: frozenset({PaymentStatus.SETTLED, PaymentStatus.REJECTED}),
    PaymentStatus.SETTLED: frozenset(),
    PaymentStatus.REJECTED: frozenset(),
}


def calculate_remaining_amount(total: Decimal, settled_amounts: Iterable[Decimal]) -> Decimal:
    """
    Amount still owed on an order: total minus every SETTLED payment.

    Clamped at zero; the 0.01 overpayment tolerance never shows up as a
    negative balance.
    """
    paid = sum(settled_amounts, ZERO)
    return max(round2(total - paid), ZERO)


def is_fully_paid(remaining_amount: Decimal) -> bool:
    return remaining_amount < EPSILON


def next_sequence_number(max_sequence_number: Optional[int]) -> int:
    """1-based, gapless numbering within one order"""
    return (max_sequence_number or 0) + 1


def initial_payment_status(method: PaymentMethod) -> PaymentStatus:
    """Cash settles on receipt; cheques and transfers wait for clearing"""
    if method == PaymentMethod.CASH:
        return PaymentStatus.SETTLED
    return PaymentStatus.PENDING


def validate_order_payable(status: OrderStatus) -> None:
    if status not in PAYABLE_ORDER_STATUSES:
        raise BusinessRuleViolation(f"Cannot add payment to order with status: {status.value}")


def _require(value: Optional[str], message: str) -> str:
    if value is None or not str(value).strip():
        raise BusinessRuleViolation(message)
    return value


def build_payment_details(request: PaymentRequest) -> PaymentDetails:
    """
    Validate the method-specific fields of a request and build the matching details.

    - CASH: nothing required, receipt number optional
    - CHEQUE: check number, bank and due date
    - TRANSFER: reference and bank
    """
    try:
        method = PaymentMethod(request.method)
    except ValueError:
        raise BusinessRuleViolation(f"Unknown payment method: {request.method}")

    if method == PaymentMethod.CASH:
        return CashDetails(receipt_number=request.receipt_number)

    if method == PaymentMethod.CHEQUE:
        check_number = _require(request.check_number, "Check number is required for CHEQUE payment")
        bank = _require(request.check_bank, "Check bank is required for CHEQUE payment")
        if request.check_due_date is None:
            raise BusinessRuleViolation("Check due date is required for CHEQUE payment")
        return ChequeDetails(check_number=check_number, bank=bank, due_date=request.check_due_date)

    if method == PaymentMethod.TRANSFER:
        reference = _require(request.transfer_reference, "Transfer reference is required for TRANSFER payment")
        bank = _require(request.transfer_bank, "Transfer bank is required for TRANSFER payment")
        return TransferDetails(reference=reference, bank=bank)

    raise BusinessRuleViolation(f"Unknown payment method: {method.value}")


def validate_new_payment(
    order_status: OrderStatus,
    amount: Decimal,
    remaining_amount: Decimal,
    request: PaymentRequest,
) -> PaymentDetails:
    """
    Run every check a new payment must pass, in order, and return its details.

    Raises:
        ValidationFailure: amount is not positive
        BusinessRuleViolation: order not payable, amount over the remaining
            balance, missing method field, or cash over the legal limit
    """
    if amount <= ZERO:
        raise ValidationFailure("Payment amount must be positive")

    validate_order_payable(order_status)

    if amount > remaining_amount + EPSILON:
        raise BusinessRuleViolation(
            f"Payment amount ({amount}) exceeds remaining amount ({remaining_amount})"
        )

    details = build_payment_details(request)

    if details.method == PaymentMethod.CASH and amount > CASH_LEGAL_LIMIT:
        raise BusinessRuleViolation(
            f"Cash payment ({amount}) exceeds legal limit of {CASH_LEGAL_LIMIT}"
        )

    return details


def validate_payment_transition(current: PaymentStatus, target: PaymentStatus) -> None:
    """Only PENDING -> SETTLED and PENDING -> REJECTED are allowed"""
    if current == target:
        raise BusinessRuleViolation(f"Payment is already in {target.value} status")
    if target not in PAYMENT_TRANSITIONS[current]:
        raise InvalidTransitionError("payment", current, target)


def validate_settlement(amount: Decimal, total: Decimal, settled_amounts: Iterable[Decimal]) -> None:
    """A deferred payment may not clear once other payments already cover the order"""
    outstanding = round2(total - sum(settled_amounts, ZERO))
    if amount > outstanding + EPSILON:
        raise BusinessRuleViolation(
            f"Settling payment ({amount}) would overpay order (outstanding {max(outstanding, ZERO)})"
        )
