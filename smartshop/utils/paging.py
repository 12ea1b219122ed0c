"""Page/size checks shared by the list operations"""

from smartshop.domain.exceptions import ValidationFailure

MAX_PAGE_SIZE = 100


def validate_page(page: int, size: int) -> None:
    """Pages are zero-based; size must be between 1 and MAX_PAGE_SIZE"""
    if page < 0:
        raise ValidationFailure(f"Page must not be negative: {page}")
    if size < 1 or size > MAX_PAGE_SIZE:
        raise ValidationFailure(f"Page size must be between 1 and {MAX_PAGE_SIZE}: {size}")
