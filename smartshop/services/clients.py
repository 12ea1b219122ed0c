"""Client service - client records and tier recalculation over persisted order stats"""

import re
from datetime import datetime, timezone
from decimal import Decimal
from typing import List, Optional

from sqlalchemy.orm import Session

from smartshop.domain.exceptions import BusinessRuleViolation, NotFoundError, ValidationFailure
from smartshop.domain.models import Client, Tier
from smartshop.domain.tiers import requalify
from smartshop.infrastructure.database.repositories import ClientRepository
from smartshop.infrastructure.observability.logging import log_client_changed, log_tier_recalculated
from smartshop.infrastructure.observability.metrics import client_changes_counter, tier_changes_counter
from smartshop.services.transaction import atomic
from smartshop.utils.money import round2

EMAIL_PATTERN = re.compile(r"[^@\s]+@[^@\s]+\.[^@\s]+")
NAME_MIN_LENGTH = 3
NAME_MAX_LENGTH = 100


def _clean_identity(name: str, email: str):
    name = (name or "").strip()
    email = (email or "").strip()
    if not NAME_MIN_LENGTH <= len(name) <= NAME_MAX_LENGTH:
        raise ValidationFailure(f"Client name must be between {NAME_MIN_LENGTH} and {NAME_MAX_LENGTH} characters")
    if not EMAIL_PATTERN.fullmatch(email):
        raise ValidationFailure(f"Invalid email address: {email!r}")
    return name, email


class ClientService:
    """Owns the tier recompute step; stats are advanced on order confirmation"""

    def __init__(self, db: Session):
        self.db = db
        self.clients = ClientRepository(db)

    def get_client(self, client_id: int, for_update: bool = False) -> Client:
        client = self.clients.find_client_by_id(client_id, for_update=for_update)
        if client is None:
            raise NotFoundError(f"Client not found: {client_id}")
        return client

    def calculate_and_update_tier(self, client: Client) -> Client:
        """
        Recompute the tier from total_orders / total_spent and persist it.

        Does not touch the stats themselves. Runs inside the caller's
        transaction.
        """
        previous = client.tier
        client.total_spent = round2(client.total_spent)
        client.tier = requalify(client.total_orders, client.total_spent)
        saved = self.clients.save_client(client)

        log_tier_recalculated(client.id, previous, saved.tier)
        if saved.tier != previous:
            tier_changes_counter.labels(tier=saved.tier.value).inc()
        return saved

    def record_confirmed_order(self, client_id: int, order_total: Decimal, confirmed_at: Optional[datetime] = None) -> Client:
        """Advance the client's stats for a newly confirmed order, then requalify"""
        confirmed_at = confirmed_at or datetime.now(timezone.utc)
        client = self.get_client(client_id, for_update=True)

        client.total_orders += 1
        client.total_spent = round2(client.total_spent + order_total)
        if client.first_order_date is None:
            client.first_order_date = confirmed_at
        client.last_order_date = confirmed_at

        return self.calculate_and_update_tier(client)

    def recalculate_tier(self, client_id: int) -> Tier:
        """Standalone tier recompute for one client"""
        with atomic(self.db, "recalculate_tier"):
            client = self.get_client(client_id, for_update=True)
            updated = self.calculate_and_update_tier(client)
        return updated.tier

    def list_clients(self) -> List[Client]:
        return self.clients.list_clients()

    def _ensure_email_free(self, email: str, client_id: Optional[int] = None) -> None:
        existing = self.clients.find_client_by_email(email)
        if existing is not None and existing.id != client_id:
            raise BusinessRuleViolation("A client with this email already exists")

    def create_client(self, name: str, email: str) -> Client:
        """New BASIC client with empty stats; email must be unique (case-insensitive)"""
        name, email = _clean_identity(name, email)
        with atomic(self.db, "create_client"):
            self._ensure_email_free(email)
            client = self.clients.create_client(name=name, email=email)

        client_changes_counter.labels(action="created").inc()
        log_client_changed(client, "created")
        return client

    def update_client(self, client_id: int, name: str, email: str) -> Client:
        """Change name and email; tier and stats are left alone"""
        name, email = _clean_identity(name, email)
        with atomic(self.db, "update_client"):
            client = self.get_client(client_id, for_update=True)
            self._ensure_email_free(email, client_id)
            client.name = name
            client.email = email
            client = self.clients.save_client(client)

        client_changes_counter.labels(action="updated").inc()
        log_client_changed(client, "updated")
        return client

    def delete_client(self, client_id: int) -> None:
        """Remove a client that has never placed an order"""
        with atomic(self.db, "delete_client"):
            client = self.get_client(client_id, for_update=True)
            if self.clients.count_orders(client_id):
                raise BusinessRuleViolation(f"Cannot delete client with existing orders: {client_id}")
            self.clients.delete_client(client_id)

        client_changes_counter.labels(action="deleted").inc()
        log_client_changed(client, "deleted")
