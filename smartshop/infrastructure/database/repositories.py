"""Data access layer - storage collaborator for the order and payment engines"""

from datetime import datetime, timezone
from typing import Dict, Iterable, List, Optional

from sqlalchemy import func
from sqlalchemy.orm import Session

from smartshop.domain.models import (
    CashDetails,
    ChequeDetails,
    Client,
    Order,
    OrderItem,
    OrderStatus,
    Page,
    Payment,
    PaymentMethod,
    PaymentStatus,
    Product,
    ProductFilter,
    Tier,
    TransferDetails,
)
from smartshop.infrastructure.database.models import (
    ClientRecord,
    OrderItemRecord,
    OrderRecord,
    PaymentRecord,
    ProductRecord,
)
from smartshop.utils.money import round2


def _to_client(record: ClientRecord) -> Client:
    return Client(
        id=record.id,
        name=record.name,
        email=record.email,
        tier=Tier(record.tier),
        total_orders=record.total_orders,
        total_spent=round2(record.total_spent),
        first_order_date=record.first_order_date,
        last_order_date=record.last_order_date,
    )


def _to_product(record: ProductRecord) -> Product:
    return Product(
        id=record.id,
        name=record.name,
        price=round2(record.price),
        stock=record.stock,
        deleted=record.deleted,
    )


def _to_order(record: OrderRecord) -> Order:
    return Order(
        id=record.id,
        client_id=record.client_id,
        items=[
            OrderItem(product_id=item.product_id, quantity=item.quantity, unit_price=round2(item.unit_price))
            for item in record.items
        ],
        status=OrderStatus(record.status),
        subtotal=round2(record.subtotal),
        discount_amount=round2(record.discount_amount),
        tax_rate=round2(record.tax_rate),
        tax_amount=round2(record.tax_amount),
        total=round2(record.total),
        remaining_amount=round2(record.remaining_amount),
        promo_code=record.promo_code,
        created_at=record.created_at,
    )


def _to_payment(record: PaymentRecord) -> Payment:
    method = PaymentMethod(record.method)
    if method == PaymentMethod.CASH:
        details = CashDetails(receipt_number=record.receipt_number)
    elif method == PaymentMethod.CHEQUE:
        details = ChequeDetails(
            check_number=record.check_number,
            bank=record.check_bank,
            due_date=record.check_due_date,
        )
    else:
        details = TransferDetails(reference=record.transfer_reference, bank=record.transfer_bank)

    return Payment(
        id=record.id,
        order_id=record.order_id,
        amount=round2(record.amount),
        details=details,
        status=PaymentStatus(record.status),
        sequence_number=record.sequence_number,
        created_at=record.created_at,
        settled_at=record.settled_at,
    )


def _paginate(query, page: int, size: int, mapper) -> Page:
    total = query.order_by(None).count()
    records = query.offset(page * size).limit(size).all()
    return Page(items=[mapper(record) for record in records], total=total, page=page, size=size)


class ClientRepository:
    """Repository for clients"""

    def __init__(self, db: Session):
        self.db = db

    def create_client(self, name: str, email: str) -> Client:
        record = ClientRecord(name=name, email=email, tier=Tier.BASIC.value, total_orders=0, total_spent=0)
        self.db.add(record)
        self.db.flush()
        return _to_client(record)

    def find_client_by_id(self, client_id: int, for_update: bool = False) -> Optional[Client]:
        query = self.db.query(ClientRecord).filter(ClientRecord.id == client_id)
        if for_update:
            query = query.with_for_update().populate_existing()
        record = query.first()
        return _to_client(record) if record else None

    def find_client_by_email(self, email: str) -> Optional[Client]:
        record = self.db.query(ClientRecord).filter(func.lower(ClientRecord.email) == email.lower()).first()
        return _to_client(record) if record else None

    def list_clients(self) -> List[Client]:
        records = self.db.query(ClientRecord).order_by(ClientRecord.id.asc()).all()
        return [_to_client(record) for record in records]

    def count_orders(self, client_id: int) -> int:
        return self.db.query(OrderRecord).filter(OrderRecord.client_id == client_id).count()

    def save_client(self, client: Client) -> Client:
        """Persist identity, tier and aggregate stats of an existing client"""
        record = self.db.get(ClientRecord, client.id)
        record.name = client.name
        record.email = client.email
        record.tier = client.tier.value
        record.total_orders = client.total_orders
        record.total_spent = round2(client.total_spent)
        record.first_order_date = client.first_order_date
        record.last_order_date = client.last_order_date
        self.db.flush()
        return _to_client(record)

    def delete_client(self, client_id: int) -> None:
        record = self.db.get(ClientRecord, client_id)
        self.db.delete(record)
        self.db.flush()


class ProductRepository:
    """Repository for catalogue products and stock"""

    def __init__(self, db: Session):
        self.db = db

    def create_product(self, name: str, price, stock: int) -> Product:
        record = ProductRecord(name=name, price=round2(price), stock=stock, deleted=False)
        self.db.add(record)
        self.db.flush()
        return _to_product(record)

    def find_product_by_id(self, product_id: int) -> Optional[Product]:
        record = self.db.get(ProductRecord, product_id)
        return _to_product(record) if record else None

    def find_products_by_ids(self, product_ids: Iterable[int]) -> Dict[int, Product]:
        """Active (not soft-deleted) products keyed by id; unknown ids are absent"""
        ids = set(product_ids)
        if not ids:
            return {}
        records = (
            self.db.query(ProductRecord)
            .filter(ProductRecord.id.in_(ids), ProductRecord.deleted.is_(False))
            .all()
        )
        return {record.id: _to_product(record) for record in records}

    def search_products(self, filters: ProductFilter) -> Page:
        """Active products matching every given criterion, ordered by id"""
        query = self.db.query(ProductRecord).filter(ProductRecord.deleted.is_(False))
        if filters.name:
            query = query.filter(ProductRecord.name.ilike(f"%{filters.name}%"))
        if filters.min_price is not None:
            query = query.filter(ProductRecord.price >= filters.min_price)
        if filters.max_price is not None:
            query = query.filter(ProductRecord.price <= filters.max_price)
        if filters.in_stock:
            query = query.filter(ProductRecord.stock > 0)
        query = query.order_by(ProductRecord.id.asc())
        return _paginate(query, filters.page, filters.size, _to_product)

    def save_product(self, product: Product) -> Product:
        """Persist name, price, stock and the soft-delete flag of an existing product"""
        record = self.db.get(ProductRecord, product.id)
        record.name = product.name
        record.price = round2(product.price)
        record.stock = product.stock
        record.deleted = product.deleted
        self.db.flush()
        return _to_product(record)

    def decrement_product_stock(self, product_id: int, quantity: int) -> bool:
        """
        Atomically take quantity units out of stock.

        Single conditional UPDATE, so two concurrent confirmations cannot both
        pass the check. Returns False when stock is insufficient.
        """
        updated = (
            self.db.query(ProductRecord)
            .filter(
                ProductRecord.id == product_id,
                ProductRecord.deleted.is_(False),
                ProductRecord.stock >= quantity,
            )
            .update({ProductRecord.stock: ProductRecord.stock - quantity}, synchronize_session=False)
        )
        return updated == 1


class OrderRepository:
    """Repository for orders and their items"""

    def __init__(self, db: Session):
        self.db = db

    def save_order(self, order: Order) -> Order:
        """Insert a new order with its items, or persist status/remaining of an existing one"""
        if order.id is None:
            record = OrderRecord(
                client_id=order.client_id,
                status=order.status.value,
                subtotal=order.subtotal,
                discount_amount=order.discount_amount,
                tax_rate=order.tax_rate,
                tax_amount=order.tax_amount,
                total=order.total,
                remaining_amount=order.remaining_amount,
                promo_code=order.promo_code,
                created_at=order.created_at or datetime.now(timezone.utc),
                items=[
                    OrderItemRecord(product_id=item.product_id, quantity=item.quantity, unit_price=item.unit_price)
                    for item in order.items
                ],
            )
            self.db.add(record)
        else:
            record = self.db.get(OrderRecord, order.id)
            record.status = order.status.value
            record.remaining_amount = order.remaining_amount

        self.db.flush()  # Get ID without committing
        return _to_order(record)

    def find_order_by_id(self, order_id: int, for_update: bool = False) -> Optional[Order]:
        """
        Fetch order; for_update locks the row for the rest of the transaction.

        A locked read always reloads the row, so a copy cached earlier in the
        session cannot hide a concurrent change.
        """
        query = self.db.query(OrderRecord).filter(OrderRecord.id == order_id)
        if for_update:
            query = query.with_for_update().populate_existing()
        record = query.first()
        return _to_order(record) if record else None

    def find_orders_by_client(self, client_id: int, limit: int = 50) -> List[Order]:
        """Client's order history, newest first"""
        records = (
            self.db.query(OrderRecord)
            .filter(OrderRecord.client_id == client_id)
            .order_by(OrderRecord.created_at.desc(), OrderRecord.id.desc())
            .limit(limit)
            .all()
        )
        return [_to_order(record) for record in records]


class PaymentRepository:
    """Repository for the per-order payment ledger"""

    def __init__(self, db: Session):
        self.db = db

    def save_payment(self, payment: Payment) -> Payment:
        """Insert a new payment, or persist the status change of an existing one"""
        if payment.id is None:
            record = PaymentRecord(
                order_id=payment.order_id,
                sequence_number=payment.sequence_number,
                amount=payment.amount,
                method=payment.method.value,
                status=payment.status.value,
                created_at=payment.created_at or datetime.now(timezone.utc),
                settled_at=payment.settled_at,
            )
            details = payment.details
            if isinstance(details, CashDetails):
                record.receipt_number = details.receipt_number
            elif isinstance(details, ChequeDetails):
                record.check_number = details.check_number
                record.check_bank = details.bank
                record.check_due_date = details.due_date
            else:
                record.transfer_reference = details.reference
                record.transfer_bank = details.bank
            self.db.add(record)
        else:
            record = self.db.get(PaymentRecord, payment.id)
            record.status = payment.status.value
            record.settled_at = payment.settled_at

        self.db.flush()
        return _to_payment(record)

    def find_payment_by_id(self, payment_id: int, for_update: bool = False) -> Optional[Payment]:
        """Fetch payment; for_update locks and reloads the row"""
        query = self.db.query(PaymentRecord).filter(PaymentRecord.id == payment_id)
        if for_update:
            query = query.with_for_update().populate_existing()
        record = query.first()
        return _to_payment(record) if record else None

    def find_payments_by_order_id(self, order_id: int) -> List[Payment]:
        """All payments of an order, ordered by sequence number"""
        records = (
            self.db.query(PaymentRecord)
            .filter(PaymentRecord.order_id == order_id)
            .order_by(PaymentRecord.sequence_number.asc())
            .all()
        )
        return [_to_payment(record) for record in records]

    def find_payments_by_order_id_page(self, order_id: int, page: int, size: int) -> Page:
        query = (
            self.db.query(PaymentRecord)
            .filter(PaymentRecord.order_id == order_id)
            .order_by(PaymentRecord.sequence_number.asc())
        )
        return _paginate(query, page, size, _to_payment)

    def find_payments(
        self,
        status: Optional[PaymentStatus] = None,
        method: Optional[PaymentMethod] = None,
        page: int = 0,
        size: int = 20,
    ) -> Page:
        """Payments across all orders, newest first, optionally by status and/or method"""
        query = self.db.query(PaymentRecord)
        if status is not None:
            query = query.filter(PaymentRecord.status == status.value)
        if method is not None:
            query = query.filter(PaymentRecord.method == method.value)
        query = query.order_by(PaymentRecord.created_at.desc(), PaymentRecord.id.desc())
        return _paginate(query, page, size, _to_payment)

    def find_settled_payments_by_order_id(self, order_id: int) -> List[Payment]:
        records = (
            self.db.query(PaymentRecord)
            .filter(PaymentRecord.order_id == order_id, PaymentRecord.status == PaymentStatus.SETTLED.value)
            .order_by(PaymentRecord.sequence_number.asc())
            .all()
        )
        return [_to_payment(record) for record in records]

    def max_sequence_number_for_order(self, order_id: int) -> int:
        value = (
            self.db.query(func.coalesce(func.max(PaymentRecord.sequence_number), 0))
            .filter(PaymentRecord.order_id == order_id)
            .scalar()
        )
        return int(value)
