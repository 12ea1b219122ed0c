"""Order pricing engine - subtotal, discount, tax and total for a new order"""

import re
from decimal import Decimal
from typing import Iterable, Optional

from smartshop.domain.exceptions import BusinessRuleViolation
from smartshop.domain.models import OrderItem, PricingBreakdown, Tier
from smartshop.domain.tiers import tier_discount_percent
from smartshop.utils.money import ZERO, round2

TAX_RATE_PERCENT = Decimal("20")
PROMO_DISCOUNT_PERCENT = Decimal("5")
PROMO_CODE_PATTERN = re.compile(r"PROMO-[A-Z0-9]{4}")

_HUNDRED = Decimal("100")


def normalize_promo_code(promo_code: Optional[str]) -> Optional[str]:
    """Blank codes count as no code at all"""
    if promo_code is None or not promo_code.strip():
        return None
    return promo_code


def promo_discount_percent(promo_code: Optional[str]) -> Decimal:
    """
    Flat 5% for a well-formed code, 0% when no code is given.

    Raises:
        BusinessRuleViolation: code present but not PROMO- followed by
            exactly 4 uppercase alphanumerics
    """
    code = normalize_promo_code(promo_code)
    if code is None:
        return ZERO
    if not PROMO_CODE_PATTERN.fullmatch(code):
        raise BusinessRuleViolation(f"Invalid promo code format: {code!r} (expected PROMO-XXXX)")
    return PROMO_DISCOUNT_PERCENT


def calculate_subtotal(items: Iterable[OrderItem]) -> Decimal:
    return round2(sum((item.line_total for item in items), ZERO))


def price_order(items: Iterable[OrderItem], tier: Tier, promo_code: Optional[str] = None) -> PricingBreakdown:
    """
    Price a feasible order.

    The discount rate is the tier component plus the promo component.
    Every intermediate amount is rounded half-up to cents:

        subtotal  = round2(sum(qty * unit_price))
        discount  = round2(subtotal * rate / 100)
        taxable   = round2(subtotal - discount)
        tax       = round2(taxable * 20 / 100)
        total     = round2(taxable + tax)
    """
    promo_percent = promo_discount_percent(promo_code)
    subtotal = calculate_subtotal(items)
    tier_percent = tier_discount_percent(tier, subtotal)

    discount_amount = round2(subtotal * (tier_percent + promo_percent) / _HUNDRED)
    taxable_amount = round2(subtotal - discount_amount)
    tax_amount = round2(taxable_amount * TAX_RATE_PERCENT / _HUNDRED)
    total = round2(taxable_amount + tax_amount)

    return PricingBreakdown(
        subtotal=subtotal,
        tier_discount_percent=tier_percent,
        promo_discount_percent=promo_percent,
        discount_amount=discount_amount,
        taxable_amount=taxable_amount,
        tax_rate=round2(TAX_RATE_PERCENT),
        tax_amount=tax_amount,
        total=total,
    )


def rejected_pricing() -> PricingBreakdown:
    """All-zero pricing recorded on orders that failed the stock check"""
    return PricingBreakdown(
        subtotal=ZERO,
        tier_discount_percent=ZERO,
        promo_discount_percent=ZERO,
        discount_amount=ZERO,
        taxable_amount=ZERO,
        tax_rate=round2(TAX_RATE_PERCENT),
        tax_amount=ZERO,
        total=ZERO,
    )
