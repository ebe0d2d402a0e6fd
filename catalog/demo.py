"""Demo catalog top-up used by the secret-gated admin endpoint."""

import logging
import random
from dataclasses import dataclass

from django.conf import settings
from django.db import transaction
from inventory.services import restock_variant

from .models import Category, Product, ProductVariant

logger = logging.getLogger("manicvanity.demo")

LOW_STOCK_THRESHOLD = 5
GENERATED_DESCRIPTION = (
    "A stunning piece from our generated collection. This item embodies the MANIC VANITY aesthetic "
    "with its bold design and premium materials."
)


class DemoDataError(Exception):
    pass


@dataclass(frozen=True)
class ReseedResult:
    products_added: int
    variants_restocked: int
    product_count: int


@transaction.atomic
def reseed_catalog(*, target: int | None = None, rng: random.Random | None = None) -> ReseedResult:
    """Top generated products up to `target` and restock low variants.

    New products are spread round-robin across existing categories, each
    with one variant. Variants with fewer than 5 units are restocked to a
    random level between 10 and 59.
    """
    rng = rng or random.Random()
    target = settings.DEMO_PRODUCT_TARGET if target is None else target

    categories = list(Category.objects.order_by("id"))
    if not categories:
        raise DemoDataError("No categories found. Run seed_catalog first.")

    count = Product.objects.count()
    added = 0
    for index in range(count, target):
        number = index + 1
        product = Product.objects.create(
            category=categories[index % len(categories)],
            name=f"Generated Product {number}",
            slug=f"generated-product-{number}",
            description=GENERATED_DESCRIPTION,
            price_cents=rng.randint(5000, 44999),
            compare_at_cents=rng.randint(45000, 54999),
            image_url=f"https://picsum.photos/1200/1500?random={rng.randint(1, 1000)}",
            is_generated=True,
        )
        ProductVariant.objects.create(
            product=product,
            name="Standard",
            sku=f"GEN-{number:04d}",
            stock=rng.randint(10, 59),
        )
        added += 1

    restocked = 0
    for variant in ProductVariant.objects.filter(stock__lt=LOW_STOCK_THRESHOLD).order_by("id"):
        level = rng.randint(10, 59)
        restock_variant(variant_id=variant.id, quantity=level - variant.stock, reason="demo_reseed")
        restocked += 1

    logger.info(
        "demo.reseed",
        extra={"event": "demo.reseed", "products_added": added, "variants_restocked": restocked},
    )
    return ReseedResult(products_added=added, variants_restocked=restocked, product_count=count + added)
