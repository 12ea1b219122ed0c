"""Domain models - pure Python dataclasses representing business entities"""

from dataclasses import dataclass
from datetime import date, datetime
from decimal import Decimal
from enum import Enum
from typing import Any, ClassVar, List, Optional, Union

from smartshop.utils.money import ZERO, round2


class Tier(str, Enum):
    """Loyalty level derived from a client's order history"""

    BASIC = "BASIC"
    SILVER = "SILVER"
    GOLD = "GOLD"
    PLATINUM = "PLATINUM"


class OrderStatus(str, Enum):
    PENDING = "PENDING"
    CONFIRMED = "CONFIRMED"
    CANCELED = "CANCELED"
    REJECTED = "REJECTED"


class PaymentStatus(str, Enum):
    PENDING = "PENDING"  # collected, not yet cleared
    SETTLED = "SETTLED"
    REJECTED = "REJECTED"


class PaymentMethod(str, Enum):
    CASH = "CASH"
    CHEQUE = "CHEQUE"
    TRANSFER = "TRANSFER"


@dataclass
class Client:
    """Shop customer with persisted aggregate stats"""

    id: int
    name: str
    email: str
    tier: Tier = Tier.BASIC
    total_orders: int = 0
    total_spent: Decimal = ZERO
    first_order_date: Optional[datetime] = None
    last_order_date: Optional[datetime] = None


@dataclass
class Product:
    id: int
    name: str
    price: Decimal
    stock: int
    deleted: bool = False


@dataclass
class OrderItem:
    """Price snapshot of one product line, fixed at order creation"""

    product_id: int
    quantity: int
    unit_price: Decimal

    @property
    def line_total(self) -> Decimal:
        return round2(self.unit_price * self.quantity)


@dataclass
class Order:
    """Priced order. Money fields are fixed at creation time."""

    id: Optional[int]
    client_id: int
    items: List[OrderItem]
    status: OrderStatus
    subtotal: Decimal
    discount_amount: Decimal
    tax_rate: Decimal  # percent, e.g. 20.00
    tax_amount: Decimal
    total: Decimal
    remaining_amount: Decimal
    promo_code: Optional[str] = None
    created_at: Optional[datetime] = None


@dataclass(frozen=True)
class CashDetails:
    method: ClassVar[PaymentMethod] = PaymentMethod.CASH

    receipt_number: Optional[str] = None


@dataclass(frozen=True)
class ChequeDetails:
    method: ClassVar[PaymentMethod] = PaymentMethod.CHEQUE

    check_number: str
    bank: str
    due_date: date


@dataclass(frozen=True)
class TransferDetails:
    method: ClassVar[PaymentMethod] = PaymentMethod.TRANSFER

    reference: str
    bank: str


PaymentDetails = Union[CashDetails, ChequeDetails, TransferDetails]


@dataclass
class Payment:
    """One partial payment against an order, numbered within that order"""

    id: Optional[int]
    order_id: int
    amount: Decimal
    details: PaymentDetails
    status: PaymentStatus
    sequence_number: int
    created_at: Optional[datetime] = None
    settled_at: Optional[datetime] = None

    @property
    def method(self) -> PaymentMethod:
        return self.details.method


@dataclass
class LineRequest:
    """Requested order line; unit_price falls back to the catalogue price"""

    product_id: int
    quantity: int
    unit_price: Optional[Decimal] = None


@dataclass
class OrderRequest:
    client_id: int
    items: List[LineRequest]
    promo_code: Optional[str] = None


@dataclass
class PaymentRequest:
    """Flat payment input; method-specific fields are validated per method"""

    order_id: int
    amount: Decimal
    method: PaymentMethod
    receipt_number: Optional[str] = None
    check_number: Optional[str] = None
    check_bank: Optional[str] = None
    check_due_date: Optional[date] = None
    transfer_reference: Optional[str] = None
    transfer_bank: Optional[str] = None


@dataclass
class PricingBreakdown:
    """Output of the pricing engine"""

    subtotal: Decimal
    tier_discount_percent: Decimal
    promo_discount_percent: Decimal
    discount_amount: Decimal
    taxable_amount: Decimal
    tax_rate: Decimal
    tax_amount: Decimal
    total: Decimal

    @property
    def discount_percent(self) -> Decimal:
        return self.tier_discount_percent + self.promo_discount_percent


@dataclass
class PaymentResult:
    """Payment together with the order's freshly computed remaining amount"""

    payment: Payment
    remaining_amount: Decimal



@dataclass
class ProductFilter:
    """Catalogue search; every criterion is optional"""

    name: Optional[str] = None
    min_price: Optional[Decimal] = None
    max_price: Optional[Decimal] = None
    in_stock: Optional[bool] = None
    page: int = 0
    size: int = 10


@dataclass
class Page:
    """One zero-based page of a larger result set"""

    items: List[Any]
    total: int
    page: int
    size: int

    @property
    def total_pages(self) -> int:
        if self.size <= 0:
            return 0
        return -(-self.total // self.size)
