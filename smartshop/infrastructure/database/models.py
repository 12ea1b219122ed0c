"""SQLAlchemy ORM models for clients, catalogue, orders and payments"""

from sqlalchemy import (
    Boolean,
    Column,
    Date,
    DateTime,
    ForeignKey,
    Integer,
    Numeric,
    String,
    Text,
    UniqueConstraint,
)
from sqlalchemy.orm import declarative_base, relationship
from sqlalchemy.sql import func

Base = declarative_base()

Money = Numeric(19, 2)


class ClientRecord(Base):
    """Customer with persisted aggregate stats and derived tier"""

    __tablename__ = "clients"

    id = Column(Integer, primary_key=True, autoincrement=True)
    name = Column(Text, nullable=False)
    email = Column(String(255), nullable=False, unique=True)
    tier = Column(String(20), nullable=False, default="BASIC")
    total_orders = Column(Integer, nullable=False, default=0)
    total_spent = Column(Money, nullable=False, default=0)
    first_order_date = Column(DateTime(timezone=True), nullable=True)
    last_order_date = Column(DateTime(timezone=True), nullable=True)

    orders = relationship("OrderRecord", back_populates="client")


class ProductRecord(Base):
    """Catalogue product with its stock counter"""

    __tablename__ = "products"

    id = Column(Integer, primary_key=True, autoincrement=True)
    name = Column(String(150), nullable=False)
    price = Column(Money, nullable=False)
    stock = Column(Integer, nullable=False, default=0)
    deleted = Column(Boolean, nullable=False, default=False)


class OrderRecord(Base):
    """Priced order; remaining_amount is a cache of the payment ledger"""

    __tablename__ = "orders"

    id = Column(Integer, primary_key=True, autoincrement=True)
    client_id = Column(Integer, ForeignKey("clients.id"), nullable=False, index=True)
    status = Column(String(20), nullable=False)
    subtotal = Column(Money, nullable=False)
    discount_amount = Column(Money, nullable=False)
    tax_rate = Column(Numeric(5, 2), nullable=False)
    tax_amount = Column(Money, nullable=False)
    total = Column(Money, nullable=False)
    remaining_amount = Column(Money, nullable=False)
    promo_code = Column(String(50), nullable=True)
    created_at = Column(DateTime(timezone=True), nullable=False, server_default=func.now())

    client = relationship("ClientRecord", back_populates="orders")
    items = relationship(
        "OrderItemRecord",
        back_populates="order",
        cascade="all, delete-orphan",
        order_by="OrderItemRecord.id",
    )
    payments = relationship("PaymentRecord", back_populates="order", cascade="all, delete-orphan")


class OrderItemRecord(Base):
    """Order line, owned by its order"""

    __tablename__ = "order_items"

    id = Column(Integer, primary_key=True, autoincrement=True)
    order_id = Column(Integer, ForeignKey("orders.id", ondelete="CASCADE"), nullable=False)
    product_id = Column(Integer, ForeignKey("products.id"), nullable=False)
    quantity = Column(Integer, nullable=False)
    unit_price = Column(Money, nullable=False)

    order = relationship("OrderRecord", back_populates="items")


class PaymentRecord(Base):
    """Payment row; method-specific columns are only set for their method"""

    __tablename__ = "payments"
    __table_args__ = (UniqueConstraint("order_id", "sequence_number", name="uq_payment_order_sequence"),)

    id = Column(Integer, primary_key=True, autoincrement=True)
    order_id = Column(Integer, ForeignKey("orders.id", ondelete="CASCADE"), nullable=False, index=True)
    sequence_number = Column(Integer, nullable=False)
    amount = Column(Money, nullable=False)
    method = Column(String(20), nullable=False)
    status = Column(String(20), nullable=False)

    # CASH
    receipt_number = Column(String(100), nullable=True)
    # CHEQUE
    check_number = Column(String(100), nullable=True)
    check_bank = Column(String(100), nullable=True)
    check_due_date = Column(Date, nullable=True)
    # TRANSFER
    transfer_reference = Column(String(100), nullable=True)
    transfer_bank = Column(String(100), nullable=True)

    created_at = Column(DateTime(timezone=True), nullable=False, server_default=func.now())
    settled_at = Column(DateTime(timezone=True), nullable=True)

    order = relationship("OrderRecord", back_populates="payments")
