"""Catalogue endpoints - product search, lookup and management"""

from decimal import Decimal
from typing import Optional

from fastapi import APIRouter, Depends, Query, Response

from smartshop.api.dependencies import get_product_service
from smartshop.api.v1.schemas import ProductPageResponse, ProductRequest, ProductResponse
from smartshop.domain.models import ProductFilter
from smartshop.services.products import ProductService

router = APIRouter()


@router.get("/products", response_model=ProductPageResponse)
def search_products(
    name: Optional[str] = Query(None, max_length=100, description="Case-insensitive substring"),
    min_price: Optional[Decimal] = Query(None, ge=0),
    max_price: Optional[Decimal] = Query(None, ge=0),
    in_stock: Optional[bool] = Query(None),
    page: int = Query(0, ge=0),
    size: int = Query(10, ge=1, le=100),
    service: ProductService = Depends(get_product_service),
):
    """Active catalogue, one page at a time; every filter is optional"""
    filters = ProductFilter(
        name=name,
        min_price=min_price,
        max_price=max_price,
        in_stock=in_stock,
        page=page,
        size=size,
    )
    return ProductPageResponse.from_page(service.search_products(filters))


@router.get("/products/{product_id}", response_model=ProductResponse)
def get_product(product_id: int, service: ProductService = Depends(get_product_service)):
    return ProductResponse.from_domain(service.get_product(product_id))


@router.post("/products", response_model=ProductResponse, status_code=201)
def create_product(request_body: ProductRequest, service: ProductService = Depends(get_product_service)):
    product = service.create_product(request_body.name, request_body.price, request_body.stock)
    return ProductResponse.from_domain(product)


@router.put("/products/{product_id}", response_model=ProductResponse)
def update_product(
    product_id: int,
    request_body: ProductRequest,
    service: ProductService = Depends(get_product_service),
):
    product = service.update_product(product_id, request_body.name, request_body.price, request_body.stock)
    return ProductResponse.from_domain(product)


@router.delete("/products/{product_id}", status_code=204)
def delete_product(product_id: int, service: ProductService = Depends(get_product_service)):
    """Soft delete; orders already placed keep referencing the product"""
    service.delete_product(product_id)
    return Response(status_code=204)
