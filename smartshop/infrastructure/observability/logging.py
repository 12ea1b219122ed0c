"""Structured JSON logging for order and payment events"""

import logging
import sys
from datetime import datetime, timezone
from decimal import Decimal
from typing import Any, Dict
from pythonjsonlogger import jsonlogger

from smartshop.config import settings
from smartshop.domain.models import Client, Order, OrderStatus, Payment, PaymentStatus, Product, Tier


class CustomJsonFormatter(jsonlogger.JsonFormatter):
    """Custom JSON formatter with timestamp and service metadata"""

    def add_fields(self, log_record: Dict[str, Any], record: logging.LogRecord, message_dict: Dict[str, Any]) -> None:
        super().add_fields(log_record, record, message_dict)
        log_record["timestamp"] = datetime.now(timezone.utc).isoformat()
        log_record["level"] = record.levelname
        log_record["service"] = settings.service_name


def setup_logging(level: str = "INFO") -> None:
    """Configure structured JSON logging"""
    logger = logging.getLogger()
    logger.setLevel(level)

    # Remove existing handlers
    logger.handlers.clear()

    # JSON handler for stdout
    handler = logging.StreamHandler(sys.stdout)
    formatter = CustomJsonFormatter(
        "%(timestamp)s %(level)s %(name)s %(message)s"
    )
    handler.setFormatter(formatter)
    logger.addHandler(handler)


def log_order_created(order: Order) -> None:
    logging.info(
        "Order created",
        extra={
            "step": "order_created",
            "order_id": order.id,
            "client_id": order.client_id,
            "status": order.status.value,
            "total": str(order.total),
            "promo_code": order.promo_code,
        },
    )


def log_order_transition(order_id: int, previous: OrderStatus, current: OrderStatus) -> None:
    logging.info(
        "Order status changed",
        extra={
            "step": "order_transition",
            "order_id": order_id,
            "from_status": previous.value,
            "to_status": current.value,
        },
    )


def log_payment_recorded(payment: Payment, remaining_amount: Decimal) -> None:
    logging.info(
        "Payment recorded",
        extra={
            "step": "payment_recorded",
            "order_id": payment.order_id,
            "payment_id": payment.id,
            "sequence_number": payment.sequence_number,
            "method": payment.method.value,
            "amount": str(payment.amount),
            "status": payment.status.value,
            "remaining_amount": str(remaining_amount),
        },
    )


def log_payment_status_changed(payment: Payment, previous: PaymentStatus, remaining_amount: Decimal) -> None:
    logging.info(
        "Payment status changed",
        extra={
            "step": "payment_status",
            "order_id": payment.order_id,
            "payment_id": payment.id,
            "from_status": previous.value,
            "to_status": payment.status.value,
            "remaining_amount": str(remaining_amount),
        },
    )


def log_tier_recalculated(client_id: int, previous: Tier, current: Tier) -> None:
    logging.info(
        "Tier recalculated",
        extra={
            "step": "tier_recalculated",
            "client_id": client_id,
            "previous_tier": previous.value,
            "tier": current.value,
            "changed": previous != current,
        },
    )


def log_product_changed(product: Product, action: str) -> None:
    logging.info(
        f"Product {action}",
        extra={
            "step": "catalogue",
            "action": action,
            "product_id": product.id,
            "price": str(product.price),
            "stock": product.stock,
        },
    )


def log_client_changed(client: Client, action: str) -> None:
    logging.info(
        f"Client {action}",
        extra={
            "step": "client",
            "action": action,
            "client_id": client.id,
        },
    )
