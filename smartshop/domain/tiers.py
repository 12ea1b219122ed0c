"""Tier qualification engine - loyalty level from order count and spend"""

from decimal import Decimal
from typing import NamedTuple

from smartshop.domain.models import Tier
from smartshop.utils.money import ZERO, round2


class TierRule(NamedTuple):
    tier: Tier
    min_orders: int
    min_spent: Decimal
    discount_percent: Decimal
    min_subtotal: Decimal  # order subtotal needed for the tier discount to apply


# Strict descending order: first match wins
TIER_RULES = (
    TierRule(Tier.PLATINUM, 20, Decimal("15000"), Decimal("15"), Decimal("1200")),
    TierRule(Tier.GOLD, 10, Decimal("5000"), Decimal("10"), Decimal("800")),
    TierRule(Tier.SILVER, 3, Decimal("1000"), Decimal("5"), Decimal("500")),
)

_RULES_BY_TIER = {rule.tier: rule for rule in TIER_RULES}


def calculate_tier(total_orders: int, total_spent: Decimal) -> Tier:
    """
    Map aggregate order history to a tier.

    Thresholds are inclusive and either condition is enough:
    - PLATINUM: 20 orders OR 15,000 spent
    - GOLD:     10 orders OR 5,000 spent
    - SILVER:    3 orders OR 1,000 spent
    - BASIC otherwise
    """
    for rule in TIER_RULES:
        if total_orders >= rule.min_orders or total_spent >= rule.min_spent:
            return rule.tier
    return Tier.BASIC


def tier_discount_percent(tier: Tier, subtotal: Decimal) -> Decimal:
    """Discount percent granted by the tier, or 0 below the tier's minimum subtotal"""
    rule = _RULES_BY_TIER.get(tier)
    if rule is None or subtotal < rule.min_subtotal:
        return ZERO
    return rule.discount_percent


def requalify(total_orders: int, total_spent: Decimal) -> Tier:
    """Tier for persisted stats, rounding spend to cents first"""
    return calculate_tier(total_orders, round2(total_spent))
