"""Shared enumerations and choices used across apps."""

from django.db import models


class MovementType(models.TextChoices):
    INBOUND = "in", "Inbound"
    OUTBOUND = "out", "Outbound"


class CartStatus(models.TextChoices):
    ACTIVE = "active", "Active"


class OrderStatus(models.TextChoices):
    """Lifecycle statuses for orders.

    Valid transitions: pending -> paid, paid -> refunded.
    """

    PENDING = "pending", "Pending"
    PAID = "paid", "Paid"
    REFUNDED = "refunded", "Refunded"
