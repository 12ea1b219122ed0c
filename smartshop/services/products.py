"""Product catalogue service - create, update, soft delete and search"""

from decimal import Decimal, InvalidOperation

from sqlalchemy.orm import Session

from smartshop.domain.exceptions import NotFoundError, ValidationFailure
from smartshop.domain.models import Page, Product, ProductFilter
from smartshop.infrastructure.database.repositories import ProductRepository
from smartshop.infrastructure.observability.logging import log_product_changed
from smartshop.infrastructure.observability.metrics import catalogue_changes_counter
from smartshop.services.transaction import atomic
from smartshop.utils.money import ZERO, round2
from smartshop.utils.paging import validate_page

NAME_MIN_LENGTH = 3
NAME_MAX_LENGTH = 100


def _clean_name(name: str) -> str:
    cleaned = (name or "").strip()
    if not NAME_MIN_LENGTH <= len(cleaned) <= NAME_MAX_LENGTH:
        raise ValidationFailure(
            f"Product name must be between {NAME_MIN_LENGTH} and {NAME_MAX_LENGTH} characters"
        )
    return cleaned


def _clean_price(price) -> Decimal:
    try:
        value = round2(price)
    except (InvalidOperation, TypeError, ValueError):
        raise ValidationFailure(f"Invalid product price: {price!r}")
    if value <= ZERO:
        raise ValidationFailure("Product price must be positive")
    return value


def _clean_stock(stock: int) -> int:
    if stock is None or stock < 0:
        raise ValidationFailure("Product stock must not be negative")
    return stock


class ProductService:
    """Catalogue management; deleted products stay in the table for order history"""

    def __init__(self, db: Session):
        self.db = db
        self.products = ProductRepository(db)

    def get_product(self, product_id: int) -> Product:
        """Active product by id; soft-deleted products are not found"""
        product = self.products.find_product_by_id(product_id)
        if product is None or product.deleted:
            raise NotFoundError(f"Product not found: {product_id}")
        return product

    def search_products(self, filters: ProductFilter) -> Page:
        """
        Page of active products.

        Name matches case-insensitively anywhere in the product name; price
        bounds are inclusive; in_stock=True keeps only products with stock left.
        """
        validate_page(filters.page, filters.size)
        if (
            filters.min_price is not None
            and filters.max_price is not None
            and filters.min_price > filters.max_price
        ):
            raise ValidationFailure("min_price must not exceed max_price")
        return self.products.search_products(filters)

    def create_product(self, name: str, price, stock: int) -> Product:
        with atomic(self.db, "create_product"):
            product = self.products.create_product(
                name=_clean_name(name),
                price=_clean_price(price),
                stock=_clean_stock(stock),
            )

        catalogue_changes_counter.labels(action="created").inc()
        log_product_changed(product, "created")
        return product

    def update_product(self, product_id: int, name: str, price, stock: int) -> Product:
        """Replace name, price and stock; existing orders keep their price snapshot"""
        with atomic(self.db, "update_product"):
            product = self.get_product(product_id)
            product.name = _clean_name(name)
            product.price = _clean_price(price)
            product.stock = _clean_stock(stock)
            product = self.products.save_product(product)

        catalogue_changes_counter.labels(action="updated").inc()
        log_product_changed(product, "updated")
        return product

    def delete_product(self, product_id: int) -> Product:
        """Soft delete: the product disappears from the catalogue and from new orders"""
        with atomic(self.db, "delete_product"):
            product = self.get_product(product_id)
            product.deleted = True
            product = self.products.save_product(product)

        catalogue_changes_counter.labels(action="deleted").inc()
        log_product_changed(product, "deleted")
        return product
