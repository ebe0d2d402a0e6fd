"""Cart services that span more than one store."""

import logging

from django.db import transaction

from .models import CartItem
from .stores import AccountCartStore, CartError, GuestCartStore

logger = logging.getLogger("manicvanity.cart")


def merge_guest_cart(*, token: str, user) -> int:
    """Fold a guest cart into the user's account cart.

    Lines are keyed by (product, variant); quantities are summed. The guest
    copy is deleted before applying, so repeating the merge with the same
    token is a no-op. Returns the number of guest lines applied.
    """

    try:
        guest = GuestCartStore(token)
    except CartError:
        logger.warning("cart.merge_invalid_token", extra={"event": "cart.merge_invalid_token", "user_id": user.id})
        return 0

    lines = guest.take()
    if not lines:
        return 0

    account = AccountCartStore(user)
    applied = 0
    for line in lines:
        try:
            with transaction.atomic():
                account.add_line(line.product_id, line.variant_id, line.quantity)
            applied += 1
        except CartError:
            # Product removed from the catalog since it was added
            logger.warning(
                "cart.merge_line_skipped",
                extra={
                    "event": "cart.merge_line_skipped",
                    "user_id": user.id,
                    "product_id": line.product_id,
                    "variant_id": line.variant_id,
                },
            )
    logger.info(
        "cart.merged",
        extra={"event": "cart.merged", "user_id": user.id, "token": token, "lines": applied},
    )
    return applied


def clear_account_cart(*, user) -> int:
    """Delete every line of the user's active cart. Returns rows removed."""

    deleted, _ = CartItem.objects.filter(cart__user=user, cart__status="active").delete()
    if deleted:
        logger.info("cart.cleared", extra={"event": "cart.cleared", "user_id": user.id, "guest": False})
    return deleted
