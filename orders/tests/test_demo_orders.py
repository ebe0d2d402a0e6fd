import random

import pytest
from catalog.tests.factories import ProductFactory
from orders.demo import DemoOrdersError, generate_demo_orders
from orders.models import Order
from orders.pricing import compute_total


@pytest.mark.django_db
def test_generates_priced_orders_for_demo_user(settings):
    settings.DEMO_USER_EMAIL = "demo@example.com"
    ProductFactory.create_batch(4)

    orders = generate_demo_orders(count=5, rng=random.Random(7))

    assert len(orders) == 5
    assert Order.objects.filter(user__email="demo@example.com").count() == 5
    for order in orders:
        order.refresh_from_db()
        assert order.number == f"MV-{order.id:06d}"
        assert order.status in {Order.STATUS_PAID, Order.STATUS_PENDING, Order.STATUS_REFUNDED}
        assert order.total_cents == compute_total(order.subtotal_cents).total_cents
        assert order.items.count() == len(order.temp_cart)
        assert order.created_at < order.updated_at


@pytest.mark.django_db
def test_demo_user_cannot_sign_in():
    ProductFactory()
    order = generate_demo_orders(count=1)[0]
    assert not order.user.has_usable_password()


@pytest.mark.django_db
def test_count_bounds_and_empty_catalog():
    with pytest.raises(DemoOrdersError):
        generate_demo_orders(count=1)
    ProductFactory()
    with pytest.raises(DemoOrdersError):
        generate_demo_orders(count=0)
    with pytest.raises(DemoOrdersError):
        generate_demo_orders(count=51)
