"""Inventory services: conditional stock updates with an audit ledger."""

import logging

from catalog.models import ProductVariant
from django.db import transaction
from django.db.models import F

from .models import StockMovement

logger = logging.getLogger("manicvanity.inventory")


class MovementError(Exception):
    pass


@transaction.atomic
def decrement_variant_stock(*, variant_id: int, quantity: int, reason: str = "order", reference: str = "") -> bool:
    """Remove `quantity` units from a variant if enough are on hand.

    Runs a single `UPDATE ... WHERE stock >= quantity`, so concurrent callers
    can never drive stock below zero. Returns False (and logs) when the
    variant is missing or stock is insufficient; nothing is changed then.
    """
    if quantity <= 0:
        raise MovementError("Decrement quantity must be positive")

    updated = ProductVariant.objects.filter(id=variant_id, stock__gte=quantity).update(stock=F("stock") - quantity)
    if updated == 0:
        logger.warning(
            "insufficient_stock",
            extra={"event": "insufficient_stock", "variant_id": variant_id, "quantity": quantity, "reference": reference},
        )
        return False

    StockMovement.objects.create(
        variant_id=variant_id,
        movement_type=StockMovement.TYPE_OUTBOUND,
        quantity=-quantity,
        reason=reason,
        reference=reference,
    )
    return True


@transaction.atomic
def restock_variant(*, variant_id: int, quantity: int, reason: str = "restock", reference: str = "") -> StockMovement:
    """Add `quantity` units to a variant and record an inbound movement."""
    if quantity <= 0:
        raise MovementError("Restock quantity must be positive")
    updated = ProductVariant.objects.filter(id=variant_id).update(stock=F("stock") + quantity)
    if updated == 0:
        raise MovementError("Variant not found")
    return StockMovement.objects.create(
        variant_id=variant_id,
        movement_type=StockMovement.TYPE_INBOUND,
        quantity=quantity,
        reason=reason,
        reference=reference,
    )
