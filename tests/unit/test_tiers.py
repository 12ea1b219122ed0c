"""Unit tests for tier qualification"""

import pytest
from decimal import Decimal
from smartshop.domain.models import Tier
from smartshop.domain.tiers import calculate_tier, requalify, tier_discount_percent


@pytest.mark.parametrize(
    "total_orders,total_spent,expected",
    [
        (0, "0", Tier.BASIC),
        (2, "999.99", Tier.BASIC),
        (3, "0", Tier.SILVER),  # order count threshold is inclusive
        (0, "1000", Tier.SILVER),  # spend threshold is inclusive
        (9, "4999.99", Tier.SILVER),
        (10, "0", Tier.GOLD),
        (0, "5000", Tier.GOLD),
        (19, "14999.99", Tier.GOLD),
        (20, "0", Tier.PLATINUM),
        (0, "15000", Tier.PLATINUM),
        (25, "30000", Tier.PLATINUM),
    ],
)
def test_calculate_tier_thresholds(total_orders, total_spent, expected):
    """Either condition qualifies; highest matching tier wins"""
    assert calculate_tier(total_orders, Decimal(total_spent)) == expected


def test_calculate_tier_is_idempotent():
    first = calculate_tier(4, Decimal("1200"))
    assert calculate_tier(4, Decimal("1200")) == first == Tier.SILVER


def test_calculate_tier_monotone_in_both_inputs():
    """More orders or more spend never lowers the tier"""
    order = [Tier.BASIC, Tier.SILVER, Tier.GOLD, Tier.PLATINUM]
    previous = Tier.BASIC
    for orders, spent in [(0, 0), (1, 500), (3, 500), (3, 4000), (10, 4000), (10, 20000)]:
        current = calculate_tier(orders, Decimal(spent))
        assert order.index(current) >= order.index(previous)
        previous = current


def test_requalify_rounds_spend_to_cents():
    assert requalify(0, Decimal("999.995")) == Tier.SILVER
    assert requalify(0, Decimal("999.994")) == Tier.BASIC


def test_tier_discount_requires_minimum_subtotal():
    """Tier discount only applies from the tier's own minimum subtotal"""
    assert tier_discount_percent(Tier.PLATINUM, Decimal("1200")) == Decimal("15")
    assert tier_discount_percent(Tier.PLATINUM, Decimal("1199.99")) == Decimal("0")
    assert tier_discount_percent(Tier.GOLD, Decimal("800")) == Decimal("10")
    assert tier_discount_percent(Tier.GOLD, Decimal("799.99")) == Decimal("0")
    assert tier_discount_percent(Tier.SILVER, Decimal("500")) == Decimal("5")
    assert tier_discount_percent(Tier.SILVER, Decimal("499.99")) == Decimal("0")


def test_basic_tier_never_discounts():
    assert tier_discount_percent(Tier.BASIC, Decimal("100000")) == Decimal("0")
