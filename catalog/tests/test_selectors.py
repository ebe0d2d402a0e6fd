from collections import namedtuple

import pytest
from catalog.selectors import get_sellable, resolve_checkout_lines
from catalog.tests.factories import ProductFactory, ProductVariantFactory

Line = namedtuple("Line", "product_id variant_id quantity")


@pytest.mark.django_db
def test_resolve_reprices_and_names_lines():
    product = ProductFactory(name="Logo Tee", price_cents=3800)
    variant = ProductVariantFactory(product=product, name="XL", sku="TEE-XL", price_cents=4200)

    resolved = resolve_checkout_lines([Line(product.id, None, 2), Line(product.id, variant.id, 1)])

    assert [(r.name, r.unit_price_cents, r.sku) for r in resolved] == [
        ("Logo Tee", 3800, None),
        ("Logo Tee - XL", 4200, "TEE-XL"),
    ]
    assert sum(r.line_total_cents for r in resolved) == 11800


@pytest.mark.django_db
def test_resolve_drops_missing_and_mismatched_lines():
    product = ProductFactory()
    other_variant = ProductVariantFactory()

    resolved = resolve_checkout_lines(
        [Line(product.id, None, 1), Line(999999, None, 1), Line(product.id, other_variant.id, 1), Line(product.id, 999999, 1)]
    )

    assert [r.product_id for r in resolved] == [product.id]


@pytest.mark.django_db
def test_get_sellable_rejects_variant_of_another_product():
    product = ProductFactory()
    variant = ProductVariantFactory()

    assert get_sellable(product.id, variant.id) == (None, None)
    assert get_sellable(variant.product_id, variant.id) == (variant.product, variant)
    assert get_sellable("abc") == (None, None)
