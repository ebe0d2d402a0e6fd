"""Order total calculation.

Shipping is a flat fee and tax applies to the subtotal only. Amounts are
integer cents; tax is rounded half-up with `Decimal` so results do not
depend on float behaviour.
"""

from dataclasses import dataclass
from decimal import ROUND_HALF_UP, Decimal

from django.conf import settings


@dataclass(frozen=True)
class PriceBreakdown:
    subtotal_cents: int
    shipping_cents: int
    tax_cents: int
    total_cents: int


def compute_tax(subtotal_cents: int) -> int:
    rate = Decimal(str(settings.TAX_RATE))
    return int((Decimal(subtotal_cents) * rate).quantize(Decimal("1"), rounding=ROUND_HALF_UP))


def compute_total(subtotal_cents: int) -> PriceBreakdown:
    """Return shipping, tax and grand total for a subtotal in cents."""
    if subtotal_cents < 0:
        raise ValueError("Subtotal cannot be negative")
    shipping = int(settings.SHIPPING_FLAT_CENTS)
    tax = compute_tax(subtotal_cents)
    return PriceBreakdown(
        subtotal_cents=subtotal_cents,
        shipping_cents=shipping,
        tax_cents=tax,
        total_cents=subtotal_cents + shipping + tax,
    )
