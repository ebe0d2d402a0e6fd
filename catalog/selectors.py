"""Selectors for the catalog domain.

Read-only query helpers shared by the storefront API, the cart stores and
checkout. Selectors return querysets or lightweight data structures and
avoid side effects.
"""

from dataclasses import dataclass
from typing import Iterable, Optional

from django.db.models import Prefetch, Q, QuerySet

from .models import Category, Product, ProductVariant


@dataclass(frozen=True)
class ResolvedLine:
    """A cart line re-priced against the live catalog at checkout time."""

    product_id: int
    variant_id: Optional[int]
    quantity: int
    unit_price_cents: int
    name: str
    sku: Optional[str]

    @property
    def line_total_cents(self) -> int:
        return self.unit_price_cents * self.quantity


def list_categories() -> QuerySet[Category]:
    return Category.objects.filter(is_active=True).order_by("name")


def list_products(
    *,
    category_slug: Optional[str] = None,
    search: Optional[str] = None,
    ordering: Optional[Iterable[str]] = None,
) -> QuerySet[Product]:
    """Return active products with category and variants prefetched."""

    qs = Product.objects.filter(is_active=True).select_related("category").prefetch_related("variants")
    if category_slug:
        qs = qs.filter(category__slug=category_slug)
    if search:
        qs = qs.filter(Q(name__icontains=search) | Q(description__icontains=search))
    ordering = list(ordering or ("name",))
    return qs.order_by(*ordering)


def get_product_by_slug(slug: str) -> Optional[Product]:
    qs = Product.objects.select_related("category").prefetch_related(
        Prefetch("variants", queryset=ProductVariant.objects.order_by("sku"))
    )
    try:
        return qs.get(slug=slug, is_active=True)
    except Product.DoesNotExist:
        return None


def get_sellable(product_id, variant_id=None) -> tuple[Optional[Product], Optional[ProductVariant]]:
    """Return the product (and variant) for a cart line, or `(None, None)`.

    A variant that belongs to a different product is treated as missing.
    """

    try:
        product = Product.objects.get(pk=product_id)
    except (Product.DoesNotExist, ValueError, TypeError):
        return None, None
    if variant_id is None:
        return product, None
    try:
        variant = ProductVariant.objects.get(pk=variant_id, product=product)
    except (ProductVariant.DoesNotExist, ValueError, TypeError):
        return None, None
    return product, variant


def resolve_checkout_lines(lines) -> list[ResolvedLine]:
    """Re-price cart lines from the catalog.

    Accepts any iterable of objects exposing `product_id`, `variant_id` and
    `quantity`. Lines whose product or variant no longer exists are dropped;
    the caller decides what an empty result means.
    """

    lines = list(lines)
    product_ids = {line.product_id for line in lines}
    variant_ids = {line.variant_id for line in lines if line.variant_id is not None}
    products = Product.objects.in_bulk(product_ids)
    variants = ProductVariant.objects.in_bulk(variant_ids)

    resolved: list[ResolvedLine] = []
    for line in lines:
        product = products.get(line.product_id)
        if product is None:
            continue
        if line.variant_id is None:
            resolved.append(
                ResolvedLine(
                    product_id=product.id,
                    variant_id=None,
                    quantity=line.quantity,
                    unit_price_cents=product.price_cents,
                    name=product.name,
                    sku=None,
                )
            )
            continue
        variant = variants.get(line.variant_id)
        if variant is None or variant.product_id != product.id:
            continue
        # Avoid a query for variant.product
        variant.product = product
        resolved.append(
            ResolvedLine(
                product_id=product.id,
                variant_id=variant.id,
                quantity=line.quantity,
                unit_price_cents=variant.unit_price_cents,
                name=f"{product.name} - {variant.name}",
                sku=variant.sku,
            )
        )
    return resolved
