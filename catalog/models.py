"""Catalog app models.

Defines the entities the storefront sells: categories, products, and
variants. Prices are integer cents; variant `stock` is the on-hand count
decremented atomically by `inventory.services`.
"""

from django.conf import settings
from django.db import models


class TimeStampedModel(models.Model):
    """Abstract base model adding created/updated timestamps."""

    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        abstract = True


def default_currency() -> str:
    return settings.STORE_CURRENCY


class Category(TimeStampedModel):
    name = models.CharField(max_length=120)
    slug = models.SlugField(max_length=140, unique=True)
    description = models.TextField(blank=True)
    is_active = models.BooleanField(default=True, db_index=True)

    class Meta:
        ordering = ["name"]
        verbose_name_plural = "categories"

    def __str__(self) -> str:  # pragma: no cover
        return self.name


class Product(TimeStampedModel):
    """Sellable product with a base price in cents."""

    name = models.CharField(max_length=200)
    slug = models.SlugField(max_length=220, unique=True)
    description = models.TextField(blank=True)
    category = models.ForeignKey(
        Category,
        related_name="products",
        null=True,
        blank=True,
        on_delete=models.SET_NULL,
    )
    price_cents = models.PositiveIntegerField()
    compare_at_cents = models.PositiveIntegerField(null=True, blank=True)
    currency = models.CharField(max_length=3, default=default_currency)
    image_url = models.URLField(blank=True)
    is_active = models.BooleanField(default=True, db_index=True)
    # Marks rows created by the demo top-up so they can be told apart
    is_generated = models.BooleanField(default=False)

    class Meta:
        ordering = ["name"]

    def __str__(self) -> str:  # pragma: no cover
        return self.name


class ProductVariant(TimeStampedModel):
    """Variant SKU under a product (e.g., shade or size).

    `price_cents` overrides the product price when set.
    """

    product = models.ForeignKey(Product, related_name="variants", on_delete=models.CASCADE)
    name = models.CharField(max_length=120)
    sku = models.CharField(max_length=64, unique=True)
    price_cents = models.PositiveIntegerField(null=True, blank=True)
    stock = models.IntegerField(default=0)

    class Meta:
        ordering = ["sku"]
        constraints = [
            models.CheckConstraint(name="variant_stock_non_negative", condition=models.Q(stock__gte=0)),
        ]

    def __str__(self) -> str:  # pragma: no cover
        return f"{self.product.name} [{self.sku}]"

    @property
    def unit_price_cents(self) -> int:
        if self.price_cents is not None:
            return self.price_cents
        return self.product.price_cents
