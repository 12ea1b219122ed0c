"""Payment endpoints - record, settle/reject, and query an order's ledger"""

from typing import Optional

from fastapi import APIRouter, Depends, Query

from smartshop.api.dependencies import get_payment_service
from smartshop.api.v1.schemas import (
    FullyPaidResponse,
    PaymentCreateRequest,
    PaymentListResponse,
    PaymentPageResponse,
    PaymentResponse,
    PaymentStatusUpdate,
)
from smartshop.domain.models import PaymentMethod, PaymentRequest, PaymentStatus
from smartshop.services.payments import PaymentService

router = APIRouter()


@router.post("/payments", response_model=PaymentResponse, status_code=201)
def add_payment(
    request_body: PaymentCreateRequest,
    service: PaymentService = Depends(get_payment_service),
):
    """
    Record a partial payment.

    CASH settles immediately (max 20,000 per payment); CHEQUE and TRANSFER
    stay PENDING until their status is updated.
    """
    result = service.add_payment(PaymentRequest(**request_body.model_dump()))
    return PaymentResponse.from_domain(result.payment, result.remaining_amount)


@router.get("/payments", response_model=PaymentPageResponse)
def search_payments(
    status: Optional[PaymentStatus] = Query(None),
    method: Optional[PaymentMethod] = Query(None),
    page: int = Query(0, ge=0),
    size: int = Query(20, ge=1, le=100),
    service: PaymentService = Depends(get_payment_service),
):
    """Payments across all orders, newest first, filtered by status and/or method"""
    return PaymentPageResponse.from_page(
        service.search_payments(status=status, method=method, page=page, size=size)
    )


@router.get("/payments/{payment_id}", response_model=PaymentResponse)
def get_payment(payment_id: int, service: PaymentService = Depends(get_payment_service)):
    result = service.get_payment(payment_id)
    return PaymentResponse.from_domain(result.payment, result.remaining_amount)


@router.put("/payments/{payment_id}/status", response_model=PaymentResponse)
def update_payment_status(
    payment_id: int,
    request_body: PaymentStatusUpdate,
    service: PaymentService = Depends(get_payment_service),
):
    """PENDING -> SETTLED | REJECTED; does not confirm the order"""
    result = service.update_payment_status(payment_id, request_body.status)
    return PaymentResponse.from_domain(result.payment, result.remaining_amount)


@router.get("/orders/{order_id}/payments", response_model=PaymentListResponse)
def get_order_payments(
    order_id: int,
    page: int = Query(0, ge=0),
    size: int = Query(20, ge=1, le=100),
    service: PaymentService = Depends(get_payment_service),
):
    """Payments of an order ordered by sequence number, one page at a time"""
    payments = service.list_order_payments_page(order_id, page=page, size=size)
    return PaymentListResponse(
        order_id=order_id,
        payments=[PaymentResponse.from_domain(payment) for payment in payments.items],
        remaining_amount=service.get_remaining_amount(order_id),
        total=payments.total,
        page=payments.page,
        size=payments.size,
        total_pages=payments.total_pages,
    )


@router.get("/orders/{order_id}/fully-paid", response_model=FullyPaidResponse)
def get_fully_paid(order_id: int, service: PaymentService = Depends(get_payment_service)):
    return FullyPaidResponse(order_id=order_id, fully_paid=service.is_fully_paid(order_id))
