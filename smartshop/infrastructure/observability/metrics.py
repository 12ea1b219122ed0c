"""Prometheus metrics for order volume, settlement activity and tier movement"""

from decimal import Decimal

from prometheus_client import Counter, Histogram

# Order metrics
orders_created_counter = Counter(
    "smartshop_orders_created_total",
    "Orders created",
    ["status"],  # PENDING | REJECTED
)

order_transitions_counter = Counter(
    "smartshop_order_transitions_total",
    "Order status transitions",
    ["target"],  # CONFIRMED | CANCELED
)

order_total_histogram = Histogram(
    "smartshop_order_total",
    "Total amount of priced orders",
    buckets=[50, 100, 250, 500, 1000, 2500, 5000, 10000, 25000],
)

# Payment metrics
payments_recorded_counter = Counter(
    "smartshop_payments_recorded_total",
    "Payments recorded against orders",
    ["method"],  # CASH | CHEQUE | TRANSFER
)

payment_status_counter = Counter(
    "smartshop_payment_status_changes_total",
    "Payment status updates",
    ["target"],  # SETTLED | REJECTED
)

# Rule rejections
business_rule_rejections_counter = Counter(
    "smartshop_business_rule_rejections_total",
    "Operations refused by a business rule",
    ["operation"],
)

# Loyalty
tier_changes_counter = Counter(
    "smartshop_tier_changes_total",
    "Client tier changes",
    ["tier"],
)

# Catalogue and client management
catalogue_changes_counter = Counter(
    "smartshop_catalogue_changes_total",
    "Product catalogue changes",
    ["action"],  # created | updated | deleted
)

client_changes_counter = Counter(
    "smartshop_client_changes_total",
    "Client records created, updated or deleted",
    ["action"],
)

# Service health
request_duration_histogram = Histogram(
    "http_request_duration_seconds",
    "HTTP request latency",
    ["method", "endpoint", "status"],
)


def record_order_created(status: str, total: Decimal) -> None:
    """Count the new order; only priced orders feed the totals histogram"""
    orders_created_counter.labels(status=status).inc()
    if status == "PENDING":
        order_total_histogram.observe(float(total))
