"""Demo order generation used by the secret-gated admin endpoint."""

import logging
import random
import uuid
from datetime import timedelta

from catalog.models import Product
from django.conf import settings
from django.contrib.auth import get_user_model
from django.db import transaction
from django.utils import timezone

from .models import Order, OrderItem
from .pricing import compute_total
from .services import order_number

logger = logging.getLogger("manicvanity.demo")

MAX_DEMO_ORDERS = 50
DEMO_STATUSES = [Order.STATUS_PAID, Order.STATUS_PENDING, Order.STATUS_REFUNDED]


class DemoOrdersError(Exception):
    pass


def get_demo_user():
    User = get_user_model()
    email = settings.DEMO_USER_EMAIL
    user, created = User.objects.get_or_create(email=email, defaults={"username": email})
    if created:
        user.set_unusable_password()
        user.save(update_fields=["password"])
    return user


@transaction.atomic
def generate_demo_orders(*, count: int = 10, rng: random.Random | None = None) -> list[Order]:
    """Create `count` orders for the demo user with random products and status.

    Totals come from the same pricing as real checkouts; creation dates are
    spread over the last 30 days.
    """
    if count < 1 or count > MAX_DEMO_ORDERS:
        raise DemoOrdersError(f"count must be between 1 and {MAX_DEMO_ORDERS}")
    rng = rng or random.Random()

    products = list(Product.objects.filter(is_active=True).order_by("id")[:20])
    if not products:
        raise DemoOrdersError("No products found")

    user = get_demo_user()
    orders = []
    for _ in range(count):
        picked = rng.sample(products, k=min(len(products), rng.randint(1, 3)))
        snapshot = [
            {
                "productId": p.id,
                "variantId": None,
                "quantity": rng.randint(1, 3),
                "unitPrice": p.price_cents,
                "name": p.name,
                "sku": None,
            }
            for p in picked
        ]
        breakdown = compute_total(sum(line["unitPrice"] * line["quantity"] for line in snapshot))
        order = Order.objects.create(
            user=user,
            email=user.email,
            subtotal_cents=breakdown.subtotal_cents,
            shipping_cents=breakdown.shipping_cents,
            tax_cents=breakdown.tax_cents,
            total_cents=breakdown.total_cents,
            status=rng.choice(DEMO_STATUSES),
            stripe_session_id=f"demo_session_{uuid.uuid4().hex}",
            temp_cart=snapshot,
        )
        created_at = timezone.now() - timedelta(days=rng.randint(1, 30))
        order.number = order_number(order.id)
        Order.objects.filter(id=order.id).update(number=order.number, created_at=created_at)
        order.created_at = created_at
        OrderItem.objects.bulk_create(
            [
                OrderItem(
                    order=order,
                    product_id=line["productId"],
                    name=line["name"],
                    quantity=line["quantity"],
                    unit_price_cents=line["unitPrice"],
                )
                for line in snapshot
            ]
        )
        orders.append(order)

    logger.info("demo.orders_generated", extra={"event": "demo.orders_generated", "count": len(orders)})
    return orders
