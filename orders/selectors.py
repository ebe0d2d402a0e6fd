"""Owner-scoped order queries.

An order owned by someone else is indistinguishable from a missing one.
"""

from django.db.models import QuerySet

from .models import Order


def list_orders_for_owner(owner) -> QuerySet[Order]:
    """Return the owner's orders, newest first, with items prefetched."""

    return Order.objects.filter(user_id=owner.id).prefetch_related("items").order_by("-created_at", "-id")


def get_order_for_owner(order_id, owner) -> Order:
    """Return one of the owner's orders or raise `Order.DoesNotExist`."""

    try:
        pk = int(order_id)
    except (TypeError, ValueError):
        raise Order.DoesNotExist(order_id)
    return list_orders_for_owner(owner).get(id=pk)
