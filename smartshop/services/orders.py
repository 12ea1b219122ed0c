"""Order service - pricing at checkout and the order lifecycle"""

from collections import Counter
from datetime import datetime, timezone
from decimal import InvalidOperation
from typing import Dict, List

from sqlalchemy.orm import Session

from smartshop.domain.exceptions import BusinessRuleViolation, NotFoundError, ValidationFailure
from smartshop.domain.models import Order, OrderItem, OrderRequest, OrderStatus, Product
from smartshop.domain.order_state import initial_status, validate_confirmation, validate_transition
from smartshop.domain.pricing import normalize_promo_code, price_order, promo_discount_percent, rejected_pricing
from smartshop.infrastructure.database.repositories import OrderRepository, ProductRepository
from smartshop.infrastructure.observability.logging import log_order_created, log_order_transition
from smartshop.infrastructure.observability.metrics import order_transitions_counter, record_order_created
from smartshop.services.clients import ClientService
from smartshop.services.payments import PaymentService
from smartshop.services.transaction import atomic
from smartshop.utils.money import ZERO, round2


def _quantities_by_product(items: List[OrderItem]) -> Dict[int, int]:
    totals = Counter()
    for item in items:
        totals[item.product_id] += item.quantity
    return dict(totals)


def _stock_available(items: List[OrderItem], products: Dict[int, Product]) -> bool:
    return all(
        products[product_id].stock >= quantity
        for product_id, quantity in _quantities_by_product(items).items()
    )


class OrderService:
    """Creates priced orders and drives PENDING -> CONFIRMED / CANCELED"""

    def __init__(self, db: Session):
        self.db = db
        self.orders = OrderRepository(db)
        self.products = ProductRepository(db)
        self.clients = ClientService(db)
        self.payments = PaymentService(db)

    def _get_order(self, order_id: int, for_update: bool = False) -> Order:
        order = self.orders.find_order_by_id(order_id, for_update=for_update)
        if order is None:
            raise NotFoundError(f"Order not found: {order_id}")
        return order

    def _build_items(self, request: OrderRequest, products: Dict[int, Product]) -> List[OrderItem]:
        items = []
        for line in request.items:
            if line.unit_price is None:
                unit_price = products[line.product_id].price
            else:
                try:
                    unit_price = round2(line.unit_price)
                except (InvalidOperation, TypeError, ValueError):
                    raise ValidationFailure(f"Invalid unit price for product {line.product_id}")
            if unit_price < ZERO:
                raise ValidationFailure(f"Unit price must not be negative (product {line.product_id})")
            items.append(OrderItem(product_id=line.product_id, quantity=line.quantity, unit_price=unit_price))
        return items

    def create_order(self, request: OrderRequest) -> Order:
        """
        Price and persist a new order.

        Flow:
        1. Resolve client and products (NotFoundError if any is missing)
        2. Reject malformed promo codes before anything is written
        3. Stock check: any shortfall persists the order as REJECTED with zero amounts
        4. Otherwise price with tier + promo discount and 20% tax, status PENDING
        """
        if not request.items:
            raise ValidationFailure("Order must contain at least one item")
        for line in request.items:
            if line.quantity is None or line.quantity <= 0:
                raise ValidationFailure(f"Quantity must be positive (product {line.product_id})")

        with atomic(self.db, "create_order"):
            client = self.clients.get_client(request.client_id)

            product_ids = {line.product_id for line in request.items}
            products = self.products.find_products_by_ids(product_ids)
            missing = sorted(product_ids - set(products))
            if missing:
                raise NotFoundError(f"Product not found: {', '.join(str(pid) for pid in missing)}")

            promo_code = normalize_promo_code(request.promo_code)
            promo_discount_percent(promo_code)

            items = self._build_items(request, products)
            status = initial_status(_stock_available(items, products))
            if status == OrderStatus.REJECTED:
                pricing = rejected_pricing()
            else:
                pricing = price_order(items, client.tier, promo_code)

            order = self.orders.save_order(
                Order(
                    id=None,
                    client_id=client.id,
                    items=items,
                    status=status,
                    subtotal=pricing.subtotal,
                    discount_amount=pricing.discount_amount,
                    tax_rate=pricing.tax_rate,
                    tax_amount=pricing.tax_amount,
                    total=pricing.total,
                    remaining_amount=pricing.total,
                    promo_code=promo_code,
                    created_at=datetime.now(timezone.utc),
                )
            )

        record_order_created(order.status.value, order.total)
        log_order_created(order)
        return order

    def get_order(self, order_id: int) -> Order:
        return self._get_order(order_id)

    def list_client_orders(self, client_id: int) -> List[Order]:
        """Order history of a client, newest first"""
        self.clients.get_client(client_id)
        return self.orders.find_orders_by_client(client_id)

    def confirm_order(self, order_id: int) -> Order:
        """
        PENDING -> CONFIRMED once the ledger shows the order paid.

        Decrements stock for every line and advances the client's stats and
        tier in the same transaction; a stock shortfall on any product undoes
        all of it.
        """
        with atomic(self.db, "confirm_order"):
            order = self._get_order(order_id, for_update=True)
            remaining = self.payments.calculate_remaining_amount(order)
            validate_confirmation(order.status, remaining)

            for product_id, quantity in sorted(_quantities_by_product(order.items).items()):
                if not self.products.decrement_product_stock(product_id, quantity):
                    raise BusinessRuleViolation(f"Insufficient stock for product: {product_id}")

            previous = order.status
            order.status = OrderStatus.CONFIRMED
            order.remaining_amount = remaining
            order = self.orders.save_order(order)

            self.clients.record_confirmed_order(order.client_id, order.total)

        order_transitions_counter.labels(target=order.status.value).inc()
        log_order_transition(order.id, previous, order.status)
        return order

    def cancel_order(self, order_id: int) -> Order:
        """PENDING -> CANCELED; every other status is final"""
        with atomic(self.db, "cancel_order"):
            order = self._get_order(order_id, for_update=True)
            previous = order.status
            validate_transition(previous, OrderStatus.CANCELED)

            order.status = OrderStatus.CANCELED
            order = self.orders.save_order(order)

        order_transitions_counter.labels(target=order.status.value).inc()
        log_order_transition(order.id, previous, order.status)
        return order
