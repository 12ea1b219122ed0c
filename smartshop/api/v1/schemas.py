"""Pydantic schemas for API request/response validation"""

from datetime import date, datetime
from decimal import Decimal
from typing import List, Optional

from pydantic import BaseModel, Field

from smartshop.domain.models import (
    CashDetails,
    ChequeDetails,
    Client,
    Order,
    OrderStatus,
    Page,
    Payment,
    PaymentMethod,
    PaymentStatus,
    Product,
    Tier,
)


class OrderItemRequest(BaseModel):
    """Single line of a create-order request"""

    product_id: int
    quantity: int = Field(..., gt=0)
    unit_price: Optional[Decimal] = Field(None, ge=0, description="Defaults to the catalogue price")


class OrderCreateRequest(BaseModel):
    """Request body for POST /v1/orders"""

    client_id: int
    items: List[OrderItemRequest] = Field(..., min_length=1)
    promo_code: Optional[str] = Field(None, max_length=50, description="PROMO-XXXX")


class OrderItemSchema(BaseModel):
    product_id: int
    quantity: int
    unit_price: Decimal
    line_total: Decimal


class OrderResponse(BaseModel):
    id: int
    client_id: int
    status: OrderStatus
    items: List[OrderItemSchema]
    subtotal: Decimal
    discount_amount: Decimal
    tax_rate: Decimal
    tax_amount: Decimal
    total: Decimal
    remaining_amount: Decimal
    promo_code: Optional[str] = None
    created_at: Optional[datetime] = None

    @classmethod
    def from_domain(cls, order: Order) -> "OrderResponse":
        return cls(
            id=order.id,
            client_id=order.client_id,
            status=order.status,
            items=[
                OrderItemSchema(
                    product_id=item.product_id,
                    quantity=item.quantity,
                    unit_price=item.unit_price,
                    line_total=item.line_total,
                )
                for item in order.items
            ],
            subtotal=order.subtotal,
            discount_amount=order.discount_amount,
            tax_rate=order.tax_rate,
            tax_amount=order.tax_amount,
            total=order.total,
            remaining_amount=order.remaining_amount,
            promo_code=order.promo_code,
            created_at=order.created_at,
        )


class OrderHistoryResponse(BaseModel):
    """Response for GET /v1/clients/{client_id}/orders"""

    client_id: int
    orders: List[OrderResponse]


class PaymentCreateRequest(BaseModel):
    """Request body for POST /v1/payments; required fields depend on method"""

    order_id: int
    amount: Decimal = Field(..., gt=0)
    method: PaymentMethod
    receipt_number: Optional[str] = None
    check_number: Optional[str] = None
    check_bank: Optional[str] = None
    check_due_date: Optional[date] = None
    transfer_reference: Optional[str] = None
    transfer_bank: Optional[str] = None


class PaymentStatusUpdate(BaseModel):
    """Request body for PUT /v1/payments/{payment_id}/status"""

    status: PaymentStatus


class PaymentResponse(BaseModel):
    id: int
    order_id: int
    sequence_number: int
    amount: Decimal
    method: PaymentMethod
    status: PaymentStatus
    receipt_number: Optional[str] = None
    check_number: Optional[str] = None
    check_bank: Optional[str] = None
    check_due_date: Optional[date] = None
    transfer_reference: Optional[str] = None
    transfer_bank: Optional[str] = None
    created_at: Optional[datetime] = None
    settled_at: Optional[datetime] = None
    remaining_amount: Optional[Decimal] = None

    @classmethod
    def from_domain(cls, payment: Payment, remaining_amount: Optional[Decimal] = None) -> "PaymentResponse":
        details = payment.details
        fields = {}
        if isinstance(details, CashDetails):
            fields["receipt_number"] = details.receipt_number
        elif isinstance(details, ChequeDetails):
            fields.update(check_number=details.check_number, check_bank=details.bank, check_due_date=details.due_date)
        else:
            fields.update(transfer_reference=details.reference, transfer_bank=details.bank)

        return cls(
            id=payment.id,
            order_id=payment.order_id,
            sequence_number=payment.sequence_number,
            amount=payment.amount,
            method=payment.method,
            status=payment.status,
            created_at=payment.created_at,
            settled_at=payment.settled_at,
            remaining_amount=remaining_amount,
            **fields,
        )


class PaymentListResponse(BaseModel):
    """Response for GET /v1/orders/{order_id}/payments"""

    order_id: int
    payments: List[PaymentResponse]
    remaining_amount: Decimal
    total: int
    page: int
    size: int
    total_pages: int


class FullyPaidResponse(BaseModel):
    order_id: int
    fully_paid: bool


class ClientResponse(BaseModel):
    id: int
    name: str
    email: str
    tier: Tier
    total_orders: int
    total_spent: Decimal
    first_order_date: Optional[datetime] = None
    last_order_date: Optional[datetime] = None

    @classmethod
    def from_domain(cls, client: Client) -> "ClientResponse":
        return cls(
            id=client.id,
            name=client.name,
            email=client.email,
            tier=client.tier,
            total_orders=client.total_orders,
            total_spent=client.total_spent,
            first_order_date=client.first_order_date,
            last_order_date=client.last_order_date,
        )


class TierResponse(BaseModel):
    """Response for POST /v1/clients/{client_id}/tier"""

    client_id: int
    tier: Tier


class ClientCreateRequest(BaseModel):
    """Request body for POST /v1/clients and PUT /v1/clients/{client_id}"""

    name: str = Field(..., min_length=3, max_length=100)
    email: str = Field(..., max_length=255, pattern=r"^[^@\s]+@[^@\s]+\.[^@\s]+$")


class ClientListResponse(BaseModel):
    clients: List[ClientResponse]
    total: int


class ProductRequest(BaseModel):
    """Request body for POST /v1/products and PUT /v1/products/{product_id}"""

    name: str = Field(..., min_length=3, max_length=100)
    price: Decimal = Field(..., gt=0)
    stock: int = Field(..., ge=0)


class ProductResponse(BaseModel):
    id: int
    name: str
    price: Decimal
    stock: int

    @classmethod
    def from_domain(cls, product: Product) -> "ProductResponse":
        return cls(id=product.id, name=product.name, price=product.price, stock=product.stock)


class ProductPageResponse(BaseModel):
    """Response for GET /v1/products"""

    products: List[ProductResponse]
    total: int
    page: int
    size: int
    total_pages: int

    @classmethod
    def from_page(cls, page: Page) -> "ProductPageResponse":
        return cls(
            products=[ProductResponse.from_domain(product) for product in page.items],
            total=page.total,
            page=page.page,
            size=page.size,
            total_pages=page.total_pages,
        )


class PaymentPageResponse(BaseModel):
    """Response for GET /v1/payments"""

    payments: List[PaymentResponse]
    total: int
    page: int
    size: int
    total_pages: int

    @classmethod
    def from_page(cls, page: Page) -> "PaymentPageResponse":
        return cls(
            payments=[PaymentResponse.from_domain(payment) for payment in page.items],
            total=page.total,
            page=page.page,
            size=page.size,
            total_pages=page.total_pages,
        )
