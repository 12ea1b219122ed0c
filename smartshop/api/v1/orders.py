"""Order endpoints - checkout, lookup, history, confirm and cancel"""

from fastapi import APIRouter, Depends

from smartshop.api.dependencies import get_order_service
from smartshop.api.v1.schemas import OrderCreateRequest, OrderHistoryResponse, OrderResponse
from smartshop.domain.models import LineRequest, OrderRequest
from smartshop.services.orders import OrderService

router = APIRouter()


@router.post("/orders", response_model=OrderResponse, status_code=201)
def create_order(
    request_body: OrderCreateRequest,
    service: OrderService = Depends(get_order_service),
):
    """
    Price and persist an order.

    Orders failing the stock check are still created, with status REJECTED
    and zero amounts.
    """
    order = service.create_order(
        OrderRequest(
            client_id=request_body.client_id,
            items=[
                LineRequest(product_id=item.product_id, quantity=item.quantity, unit_price=item.unit_price)
                for item in request_body.items
            ],
            promo_code=request_body.promo_code,
        )
    )
    return OrderResponse.from_domain(order)


@router.get("/orders/{order_id}", response_model=OrderResponse)
def get_order(order_id: int, service: OrderService = Depends(get_order_service)):
    return OrderResponse.from_domain(service.get_order(order_id))


@router.get("/clients/{client_id}/orders", response_model=OrderHistoryResponse)
def get_client_orders(client_id: int, service: OrderService = Depends(get_order_service)):
    """Client's order history, newest first"""
    orders = service.list_client_orders(client_id)
    return OrderHistoryResponse(
        client_id=client_id,
        orders=[OrderResponse.from_domain(order) for order in orders],
    )


@router.put("/orders/{order_id}/confirm", response_model=OrderResponse)
def confirm_order(order_id: int, service: OrderService = Depends(get_order_service)):
    """Confirm a fully paid PENDING order and take its items out of stock"""
    return OrderResponse.from_domain(service.confirm_order(order_id))


@router.put("/orders/{order_id}/cancel", response_model=OrderResponse)
def cancel_order(order_id: int, service: OrderService = Depends(get_order_service)):
    return OrderResponse.from_domain(service.cancel_order(order_id))
