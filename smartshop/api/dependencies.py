"""Dependency injection for FastAPI endpoints"""

from fastapi import Depends, Request
from sqlalchemy.orm import Session

from smartshop.infrastructure.database.session import get_db
from smartshop.services.clients import ClientService
from smartshop.services.orders import OrderService
from smartshop.services.payments import PaymentService
from smartshop.services.products import ProductService


def get_request_id(request: Request) -> str:
    """Extract request ID from request state"""
    return getattr(request.state, "request_id", "unknown")


def get_order_service(db: Session = Depends(get_db)) -> OrderService:
    return OrderService(db)


def get_payment_service(db: Session = Depends(get_db)) -> PaymentService:
    return PaymentService(db)


def get_client_service(db: Session = Depends(get_db)) -> ClientService:
    return ClientService(db)


def get_product_service(db: Session = Depends(get_db)) -> ProductService:
    return ProductService(db)
