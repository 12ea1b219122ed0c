"""Payment settlement service - fractional, multi-method payments against an order"""

from datetime import datetime, timezone
from decimal import Decimal, InvalidOperation
from typing import List, Optional

from sqlalchemy.orm import Session

from smartshop.domain.exceptions import NotFoundError, ValidationFailure
from smartshop.domain.models import Order, Page, Payment, PaymentMethod, PaymentRequest, PaymentResult, PaymentStatus
from smartshop.domain.settlement import (
    calculate_remaining_amount,
    initial_payment_status,
    is_fully_paid,
    next_sequence_number,
    validate_new_payment,
    validate_payment_transition,
    validate_settlement,
)
from smartshop.infrastructure.database.repositories import OrderRepository, PaymentRepository
from smartshop.infrastructure.observability.logging import log_payment_recorded, log_payment_status_changed
from smartshop.infrastructure.observability.metrics import payment_status_counter, payments_recorded_counter
from smartshop.services.transaction import atomic
from smartshop.utils.money import round2
from smartshop.utils.paging import validate_page


class PaymentService:
    """Records payments and keeps each order's remaining amount in step with its ledger"""

    def __init__(self, db: Session):
        self.db = db
        self.orders = OrderRepository(db)
        self.payments = PaymentRepository(db)

    def _get_order(self, order_id: int, for_update: bool = False) -> Order:
        order = self.orders.find_order_by_id(order_id, for_update=for_update)
        if order is None:
            raise NotFoundError(f"Order not found: {order_id}")
        return order

    def _get_payment(self, payment_id: int) -> Payment:
        payment = self.payments.find_payment_by_id(payment_id)
        if payment is None:
            raise NotFoundError(f"Payment not found: {payment_id}")
        return payment

    def calculate_remaining_amount(self, order: Order) -> Decimal:
        """Order total minus SETTLED payments, always read from the ledger"""
        settled = self.payments.find_settled_payments_by_order_id(order.id)
        return calculate_remaining_amount(order.total, (p.amount for p in settled))

    def add_payment(self, request: PaymentRequest) -> PaymentResult:
        """
        Record one payment against an order.

        Flow:
        1. Lock the order row (serializes numbering and balance checks per order)
        2. Recompute remaining amount from the ledger
        3. Validate status, amount, method fields and cash ceiling
        4. Assign the next sequence number and persist
        5. Refresh the order's cached remaining amount
        """
        try:
            amount = round2(request.amount)
        except (InvalidOperation, TypeError, ValueError):
            raise ValidationFailure(f"Invalid payment amount: {request.amount!r}")

        with atomic(self.db, "add_payment"):
            order = self._get_order(request.order_id, for_update=True)
            remaining = self.calculate_remaining_amount(order)

            details = validate_new_payment(order.status, amount, remaining, request)

            status = initial_payment_status(details.method)
            now = datetime.now(timezone.utc)
            payment = self.payments.save_payment(
                Payment(
                    id=None,
                    order_id=order.id,
                    amount=amount,
                    details=details,
                    status=status,
                    sequence_number=next_sequence_number(self.payments.max_sequence_number_for_order(order.id)),
                    created_at=now,
                    settled_at=now if status == PaymentStatus.SETTLED else None,
                )
            )

            order.remaining_amount = self.calculate_remaining_amount(order)
            self.orders.save_order(order)

        payments_recorded_counter.labels(method=payment.method.value).inc()
        log_payment_recorded(payment, order.remaining_amount)
        return PaymentResult(payment=payment, remaining_amount=order.remaining_amount)

    def update_payment_status(self, payment_id: int, new_status) -> PaymentResult:
        """
        Move a PENDING payment to SETTLED or REJECTED.

        Refreshes the order's remaining amount but never confirms the order.
        """
        try:
            target = PaymentStatus(new_status)
        except ValueError:
            raise ValidationFailure(f"Unknown payment status: {new_status}")

        with atomic(self.db, "update_payment_status"):
            # Lock the order first, then re-read the payment under that lock
            order_id = self._get_payment(payment_id).order_id
            order = self._get_order(order_id, for_update=True)
            payment = self.payments.find_payment_by_id(payment_id, for_update=True)
            previous = payment.status

            validate_payment_transition(previous, target)
            if target == PaymentStatus.SETTLED:
                settled = self.payments.find_settled_payments_by_order_id(order.id)
                validate_settlement(payment.amount, order.total, (p.amount for p in settled))
                payment.settled_at = datetime.now(timezone.utc)

            payment.status = target
            payment = self.payments.save_payment(payment)

            order.remaining_amount = self.calculate_remaining_amount(order)
            self.orders.save_order(order)

        payment_status_counter.labels(target=target.value).inc()
        log_payment_status_changed(payment, previous, order.remaining_amount)
        return PaymentResult(payment=payment, remaining_amount=order.remaining_amount)

    def get_payment(self, payment_id: int) -> PaymentResult:
        payment = self._get_payment(payment_id)
        order = self._get_order(payment.order_id)
        return PaymentResult(payment=payment, remaining_amount=self.calculate_remaining_amount(order))

    def list_order_payments(self, order_id: int) -> List[Payment]:
        """Payments of an order in sequence-number order"""
        self._get_order(order_id)
        return self.payments.find_payments_by_order_id(order_id)

    def get_remaining_amount(self, order_id: int) -> Decimal:
        return self.calculate_remaining_amount(self._get_order(order_id))

    def is_fully_paid(self, order_id: int) -> bool:
        return is_fully_paid(self.get_remaining_amount(order_id))

    def list_order_payments_page(self, order_id: int, page: int = 0, size: int = 20) -> Page:
        """One page of an order's payments in sequence-number order"""
        validate_page(page, size)
        self._get_order(order_id)
        return self.payments.find_payments_by_order_id_page(order_id, page, size)

    def search_payments(
        self,
        status: Optional[PaymentStatus] = None,
        method: Optional[PaymentMethod] = None,
        page: int = 0,
        size: int = 20,
    ) -> Page:
        """Payments across all orders, newest first"""
        validate_page(page, size)
        return self.payments.find_payments(status=status, method=method, page=page, size=size)

    def list_payments_by_status(self, status: PaymentStatus, page: int = 0, size: int = 20) -> Page:
        return self.search_payments(status=status, page=page, size=size)

    def list_payments_by_method(self, method: PaymentMethod, page: int = 0, size: int = 20) -> Page:
        return self.search_payments(method=method, page=page, size=size)
