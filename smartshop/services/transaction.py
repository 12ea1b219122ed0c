"""Transaction boundary shared by the application services"""

from contextlib import contextmanager
from typing import Iterator

from sqlalchemy.orm import Session

from smartshop.domain.exceptions import BusinessRuleViolation
from smartshop.infrastructure.observability.metrics import business_rule_rejections_counter


@contextmanager
def atomic(db: Session, operation: str) -> Iterator[Session]:
    """
    Commit when the block completes, roll back on any exception.

    A failed operation leaves no partial writes behind.
    """
    try:
        yield db
        db.commit()
    except BusinessRuleViolation:
        db.rollback()
        business_rule_rejections_counter.labels(operation=operation).inc()
        raise
    except Exception:
        db.rollback()
        raise
