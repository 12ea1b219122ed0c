"""Integration tests for client stats and tier recalculation"""

import pytest
from datetime import datetime, timezone
from decimal import Decimal
from smartshop.domain.exceptions import BusinessRuleViolation, NotFoundError, ValidationFailure
from smartshop.domain.models import LineRequest, OrderRequest, Tier
from smartshop.services.orders import OrderService
from smartshop.services.clients import ClientService

pytestmark = pytest.mark.integration


def test_recalculate_tier_from_persisted_stats(db, make_client):
    shop_client = make_client(tier=Tier.BASIC, total_orders=10, total_spent="200")

    tier = ClientService(db).recalculate_tier(shop_client.id)

    assert tier == Tier.GOLD
    assert ClientService(db).get_client(shop_client.id).tier == Tier.GOLD


def test_recalculate_tier_can_demote(db, make_client):
    shop_client = make_client(tier=Tier.PLATINUM, total_orders=1, total_spent="50")

    assert ClientService(db).recalculate_tier(shop_client.id) == Tier.BASIC


def test_recalculate_tier_is_idempotent(db, make_client):
    shop_client = make_client(total_orders=0, total_spent="15000")
    service = ClientService(db)

    assert service.recalculate_tier(shop_client.id) == Tier.PLATINUM
    assert service.recalculate_tier(shop_client.id) == Tier.PLATINUM


def test_recalculate_tier_leaves_stats_untouched(db, make_client):
    shop_client = make_client(total_orders=4, total_spent="999.99")

    ClientService(db).recalculate_tier(shop_client.id)

    stored = ClientService(db).get_client(shop_client.id)
    assert stored.total_orders == 4
    assert stored.total_spent == Decimal("999.99")
    assert stored.tier == Tier.SILVER


def test_record_confirmed_order_advances_stats(db, make_client):
    shop_client = make_client(total_orders=9, total_spent="4000")
    confirmed_at = datetime(2026, 3, 1, 12, 0, tzinfo=timezone.utc)
    service = ClientService(db)

    updated = service.record_confirmed_order(shop_client.id, Decimal("1000.00"), confirmed_at)
    db.commit()

    assert updated.total_orders == 10
    assert updated.total_spent == Decimal("5000.00")
    assert updated.tier == Tier.GOLD
    assert updated.first_order_date is not None
    assert updated.last_order_date is not None


def test_unknown_client(db):
    with pytest.raises(NotFoundError, match="Client not found"):
        ClientService(db).recalculate_tier(404)


def test_create_client_starts_basic(db):
    created = ClientService(db).create_client(" Ada Lovelace ", "ada@example.com")

    assert created.name == "Ada Lovelace"
    assert created.tier == Tier.BASIC
    assert created.total_orders == 0
    assert created.total_spent == Decimal("0.00")
    assert [c.id for c in ClientService(db).list_clients()] == [created.id]


def test_create_client_rejects_duplicate_email(db):
    service = ClientService(db)
    service.create_client("Ada Lovelace", "ada@example.com")

    with pytest.raises(BusinessRuleViolation, match="already exists"):
        service.create_client("Other Ada", "ADA@example.com")


@pytest.mark.parametrize("name, email", [("Al", "al@example.com"), ("Alan Turing", "not-an-email")])
def test_create_client_validation(db, name, email):
    with pytest.raises(ValidationFailure):
        ClientService(db).create_client(name, email)


def test_update_client_keeps_stats(db, make_client):
    shop_client = make_client(tier=Tier.GOLD, total_orders=12, total_spent="6000")
    service = ClientService(db)

    updated = service.update_client(shop_client.id, "New Name", "new@example.com")

    assert (updated.name, updated.email) == ("New Name", "new@example.com")
    assert updated.tier == Tier.GOLD
    assert updated.total_orders == 12
    # Same email as before is not a conflict
    assert service.update_client(shop_client.id, "New Name", "new@example.com").email == "new@example.com"


def test_update_client_rejects_email_of_another_client(db, make_client):
    first = make_client()
    second = make_client()

    with pytest.raises(BusinessRuleViolation):
        ClientService(db).update_client(second.id, second.name, first.email)


def test_delete_client_without_orders(db, make_client):
    shop_client = make_client()
    service = ClientService(db)

    service.delete_client(shop_client.id)

    with pytest.raises(NotFoundError):
        service.get_client(shop_client.id)


def test_delete_client_with_orders_refused(db, make_client, make_product):
    shop_client = make_client()
    product = make_product()
    OrderService(db).create_order(
        OrderRequest(client_id=shop_client.id, items=[LineRequest(product_id=product.id, quantity=1)])
    )

    with pytest.raises(BusinessRuleViolation, match="existing orders"):
        ClientService(db).delete_client(shop_client.id)

    assert ClientService(db).get_client(shop_client.id).id == shop_client.id
