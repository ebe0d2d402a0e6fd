"""Seed a small apparel catalog for local development.

Re-running is idempotent; existing rows are reused by slug/sku.
"""

from catalog.models import Category, Product, ProductVariant
from django.core.management.base import BaseCommand
from django.db import transaction
from django.utils.text import slugify

CATEGORIES = [
    ("Apparel", "Tees, hoodies and outerwear"),
    ("Accessories", "Bags, caps and jewellery"),
    ("Beauty", "Lip, eye and nail colour"),
]

PRODUCTS = [
    {
        "name": "Manic Logo Tee",
        "category": "Apparel",
        "description": "Heavyweight cotton tee with a cracked-print logo.",
        "price_cents": 3800,
        "variants": [("S", 12), ("M", 20), ("L", 15), ("XL", 6)],
    },
    {
        "name": "Vanity Zip Hoodie",
        "category": "Apparel",
        "description": "Brushed fleece hoodie with embroidered chest hit.",
        "price_cents": 8800,
        "compare_at_cents": 9800,
        "variants": [("S", 5), ("M", 9), ("L", 9)],
    },
    {
        "name": "Chain Tote",
        "category": "Accessories",
        "description": "Canvas tote with chrome chain strap.",
        "price_cents": 4500,
        "variants": [],
    },
    {
        "name": "Velvet Lip",
        "category": "Beauty",
        "description": "Matte liquid lipstick.",
        "price_cents": 2400,
        "variants": [("Ruby", 30), ("Noir", 18), ("Blush", 25)],
    },
]


class Command(BaseCommand):
    help = "Seed a development catalog (categories, products, variants)"

    @transaction.atomic
    def handle(self, *args, **options):
        self.stdout.write("Seeding catalog data...")

        categories = {}
        for name, desc in CATEGORIES:
            cat, _ = Category.objects.get_or_create(slug=slugify(name), defaults={"name": name, "description": desc})
            categories[name] = cat

        created = 0
        for entry in PRODUCTS:
            slug = slugify(entry["name"])
            product, was_created = Product.objects.get_or_create(
                slug=slug,
                defaults={
                    "name": entry["name"],
                    "description": entry["description"],
                    "category": categories[entry["category"]],
                    "price_cents": entry["price_cents"],
                    "compare_at_cents": entry.get("compare_at_cents"),
                },
            )
            created += int(was_created)
            for variant_name, stock in entry["variants"]:
                ProductVariant.objects.get_or_create(
                    sku=f"{slug}-{slugify(variant_name)}".upper(),
                    defaults={"product": product, "name": variant_name, "stock": stock},
                )

        self.stdout.write(self.style.SUCCESS(f"Catalog seed complete. New products: {created}."))
