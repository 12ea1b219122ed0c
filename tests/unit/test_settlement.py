"""Unit tests for payment settlement rules"""

import pytest
from datetime import date
from decimal import Decimal
from smartshop.domain.exceptions import BusinessRuleViolation, InvalidTransitionError, ValidationFailure
from smartshop.domain.models import (
    CashDetails,
    ChequeDetails,
    OrderStatus,
    PaymentMethod,
    PaymentRequest,
    PaymentStatus,
    TransferDetails,
)
from smartshop.domain.settlement import (
    build_payment_details,
    calculate_remaining_amount,
    initial_payment_status,
    is_fully_paid,
    next_sequence_number,
    validate_new_payment,
    validate_payment_transition,
    validate_settlement,
)


def cash(amount: str = "100", **fields) -> PaymentRequest:
    return PaymentRequest(order_id=1, amount=Decimal(amount), method=PaymentMethod.CASH, **fields)


def cheque(amount: str = "100", **fields) -> PaymentRequest:
    defaults = {"check_number": "CHK-001", "check_bank": "Bank A", "check_due_date": date(2030, 1, 15)}
    defaults.update(fields)
    return PaymentRequest(order_id=1, amount=Decimal(amount), method=PaymentMethod.CHEQUE, **defaults)


def transfer(amount: str = "100", **fields) -> PaymentRequest:
    defaults = {"transfer_reference": "TRF-42", "transfer_bank": "Bank B"}
    defaults.update(fields)
    return PaymentRequest(order_id=1, amount=Decimal(amount), method=PaymentMethod.TRANSFER, **defaults)


def test_remaining_amount_subtracts_settled_payments():
    assert calculate_remaining_amount(Decimal("1000"), [Decimal("300")]) == Decimal("700.00")
    assert calculate_remaining_amount(Decimal("1000"), [Decimal("300"), Decimal("200"), Decimal("150")]) == Decimal("350.00")
    assert calculate_remaining_amount(Decimal("1000"), []) == Decimal("1000.00")


def test_remaining_amount_never_negative():
    assert calculate_remaining_amount(Decimal("1000"), [Decimal("1000.01")]) == Decimal("0.00")


def test_is_fully_paid_below_one_cent():
    assert is_fully_paid(Decimal("0.00")) is True
    assert is_fully_paid(Decimal("0.01")) is False
    assert is_fully_paid(Decimal("250.00")) is False


def test_sequence_numbers_start_at_one():
    assert next_sequence_number(None) == 1
    assert next_sequence_number(0) == 1
    assert next_sequence_number(3) == 4


def test_only_cash_settles_immediately():
    assert initial_payment_status(PaymentMethod.CASH) == PaymentStatus.SETTLED
    assert initial_payment_status(PaymentMethod.CHEQUE) == PaymentStatus.PENDING
    assert initial_payment_status(PaymentMethod.TRANSFER) == PaymentStatus.PENDING


def test_build_details_per_method():
    assert build_payment_details(cash(receipt_number="R-1")) == CashDetails(receipt_number="R-1")
    assert build_payment_details(cash()) == CashDetails()
    assert build_payment_details(cheque()) == ChequeDetails("CHK-001", "Bank A", date(2030, 1, 15))
    assert build_payment_details(transfer()) == TransferDetails("TRF-42", "Bank B")


@pytest.mark.parametrize(
    "request_",
    [
        cheque(check_number=None),
        cheque(check_number=""),
        cheque(check_bank="  "),
        cheque(check_due_date=None),
        transfer(transfer_reference=None),
        transfer(transfer_bank=""),
    ],
)
def test_missing_method_fields_are_rejected(request_):
    with pytest.raises(BusinessRuleViolation, match="required"):
        build_payment_details(request_)


@pytest.mark.parametrize("method", list(PaymentMethod))
def test_every_method_builds_its_own_details(method):
    request_ = {PaymentMethod.CASH: cash, PaymentMethod.CHEQUE: cheque, PaymentMethod.TRANSFER: transfer}[method]()
    assert build_payment_details(request_).method == method


def test_unknown_method_is_rejected():
    request_ = PaymentRequest(order_id=1, amount=Decimal("10"), method="BITCOIN")
    with pytest.raises(BusinessRuleViolation, match="Unknown payment method"):
        build_payment_details(request_)


def test_new_payment_must_be_positive():
    with pytest.raises(ValidationFailure):
        validate_new_payment(OrderStatus.PENDING, Decimal("0"), Decimal("100"), cash("0"))


@pytest.mark.parametrize("status", [OrderStatus.CONFIRMED, OrderStatus.CANCELED])
def test_new_payment_requires_payable_order(status):
    with pytest.raises(BusinessRuleViolation, match=status.value):
        validate_new_payment(status, Decimal("10"), Decimal("100"), cash("10"))


def test_rejected_order_still_accepts_payments():
    details = validate_new_payment(OrderStatus.REJECTED, Decimal("10"), Decimal("10"), cash("10"))
    assert details == CashDetails()


def test_new_payment_cannot_exceed_remaining():
    with pytest.raises(BusinessRuleViolation, match="exceeds remaining amount"):
        validate_new_payment(OrderStatus.PENDING, Decimal("100.02"), Decimal("100"), cash("100.02"))


def test_new_payment_within_tolerance_is_accepted():
    validate_new_payment(OrderStatus.PENDING, Decimal("100.01"), Decimal("100"), cash("100.01"))


def test_cash_legal_limit():
    """Cash above 20,000 fails regardless of the remaining amount"""
    with pytest.raises(BusinessRuleViolation, match="legal limit"):
        validate_new_payment(OrderStatus.PENDING, Decimal("20000.01"), Decimal("50000"), cash("20000.01"))

    validate_new_payment(OrderStatus.PENDING, Decimal("20000"), Decimal("50000"), cash("20000"))


def test_cash_limit_does_not_apply_to_cheques():
    details = validate_new_payment(OrderStatus.PENDING, Decimal("25000"), Decimal("50000"), cheque("25000"))
    assert details.method == PaymentMethod.CHEQUE


def test_payment_transitions_from_pending():
    validate_payment_transition(PaymentStatus.PENDING, PaymentStatus.SETTLED)
    validate_payment_transition(PaymentStatus.PENDING, PaymentStatus.REJECTED)


@pytest.mark.parametrize(
    "current,target",
    [
        (PaymentStatus.SETTLED, PaymentStatus.REJECTED),
        (PaymentStatus.SETTLED, PaymentStatus.PENDING),
        (PaymentStatus.REJECTED, PaymentStatus.SETTLED),
        (PaymentStatus.REJECTED, PaymentStatus.PENDING),
    ],
)
def test_settled_and_rejected_are_terminal(current, target):
    with pytest.raises(InvalidTransitionError):
        validate_payment_transition(current, target)


def test_same_status_update_is_rejected():
    with pytest.raises(BusinessRuleViolation, match="already"):
        validate_payment_transition(PaymentStatus.PENDING, PaymentStatus.PENDING)


def test_settlement_cannot_overpay():
    validate_settlement(Decimal("400"), Decimal("1000"), [Decimal("600")])
    with pytest.raises(BusinessRuleViolation, match="overpay"):
        validate_settlement(Decimal("400"), Decimal("1000"), [Decimal("1000")])
