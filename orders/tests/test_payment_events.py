import pytest
from cart.models import CartItem
from cart.stores import AccountCartStore
from catalog.tests.factories import ProductFactory, ProductVariantFactory
from django.core import mail
from inventory.models import StockMovement
from orders.models import Order, OrderItem
from orders.services import (
    CheckoutItem,
    handle_charge_refunded,
    handle_checkout_completed,
    handle_payment_event,
    start_checkout,
)
from orders.tests.factories import OrderFactory
from payments.tests.fakes import FakeGateway
from users.tests.factories import UserFactory


def completed(session_id, email="payer@example.com", payment_intent="pi_test_1"):
    return {
        "type": "checkout.session.completed",
        "data": {
            "object": {
                "id": session_id,
                "payment_intent": payment_intent,
                "customer_details": {"email": email},
            }
        },
    }


def refunded(payment_intent="pi_test_1"):
    return {"type": "charge.refunded", "data": {"object": {"id": "ch_test_1", "payment_intent": payment_intent}}}


def checkout_for(user, *lines):
    return start_checkout(lines=list(lines), owner=user, gateway=FakeGateway())


@pytest.mark.django_db
def test_completion_finalizes_once():
    user = UserFactory()
    variant = ProductVariantFactory(stock=10, price_cents=1200)
    AccountCartStore(user).add_line(variant.product_id, variant.id, 2)
    result = checkout_for(user, CheckoutItem(variant.product_id, variant.id, 2))

    handle_payment_event(completed(result.session_id))

    order = Order.objects.get(id=result.order_id)
    assert order.status == Order.STATUS_PAID
    assert order.payment_reference == "pi_test_1"
    assert order.email == "payer@example.com"
    item = order.items.get()
    assert (item.variant_id, item.quantity, item.unit_price_cents) == (variant.id, 2, 1200)
    variant.refresh_from_db()
    assert variant.stock == 8
    assert not CartItem.objects.filter(cart__user=user).exists()
    assert len(mail.outbox) == 1
    assert mail.outbox[0].subject == f"Order Confirmation - MANIC VANITY #{order.number}"
    assert mail.outbox[0].to == ["payer@example.com"]

    handle_payment_event(completed(result.session_id))

    variant.refresh_from_db()
    assert variant.stock == 8
    assert OrderItem.objects.filter(order=order).count() == 1
    assert StockMovement.objects.filter(variant=variant).count() == 1
    assert len(mail.outbox) == 1
    assert Order.objects.get(id=order.id).status == Order.STATUS_PAID


@pytest.mark.django_db
def test_completion_for_unknown_session_changes_nothing():
    variant = ProductVariantFactory(stock=5)

    assert handle_checkout_completed({"id": "cs_unknown"}) is None

    variant.refresh_from_db()
    assert variant.stock == 5
    assert not OrderItem.objects.exists()


@pytest.mark.django_db
def test_items_come_from_snapshot_not_live_cart():
    user = UserFactory()
    bought = ProductVariantFactory(price_cents=1000)
    later = ProductVariantFactory()
    result = checkout_for(user, CheckoutItem(bought.product_id, bought.id, 1))
    AccountCartStore(user).add_line(later.product_id, later.id, 1)
    bought.price_cents = 5000
    bought.save()

    handle_checkout_completed(completed(result.session_id)["data"]["object"])

    order = Order.objects.get(id=result.order_id)
    assert [item.variant_id for item in order.items.all()] == [bought.id]
    assert order.items.get().unit_price_cents == 1000
    assert order.subtotal_cents == 1000
    # The cart is cleared entirely, including lines added after checkout
    assert not CartItem.objects.filter(cart__user=user).exists()


@pytest.mark.django_db
def test_insufficient_stock_does_not_block_other_steps():
    user = UserFactory()
    short = ProductVariantFactory(stock=1)
    plenty = ProductVariantFactory(stock=10)
    result = checkout_for(
        user,
        CheckoutItem(short.product_id, short.id, 3),
        CheckoutItem(plenty.product_id, plenty.id, 2),
    )

    handle_checkout_completed(completed(result.session_id)["data"]["object"])

    short.refresh_from_db()
    plenty.refresh_from_db()
    assert short.stock == 1
    assert plenty.stock == 8
    order = Order.objects.get(id=result.order_id)
    assert order.status == Order.STATUS_PAID
    assert order.items.count() == 2


@pytest.mark.django_db
def test_plain_product_lines_do_not_touch_stock():
    user = UserFactory()
    product = ProductFactory(price_cents=700)
    result = checkout_for(user, CheckoutItem(product.id, None, 3))

    handle_checkout_completed({"id": result.session_id, "customer_email": "fallback@example.com"})

    order = Order.objects.get(id=result.order_id)
    assert order.items.get().line_total_cents == 2100
    assert not StockMovement.objects.exists()
    assert mail.outbox[0].to == ["fallback@example.com"]


@pytest.mark.django_db
def test_email_failure_is_logged_and_order_stays_paid(monkeypatch, caplog):
    user = UserFactory()
    variant = ProductVariantFactory(stock=4)
    result = checkout_for(user, CheckoutItem(variant.product_id, variant.id, 1))

    def broken(order, to_email):
        raise ConnectionError("smtp down")

    monkeypatch.setattr("orders.services.send_order_confirmation_email", broken)

    order = handle_checkout_completed(completed(result.session_id)["data"]["object"])

    assert order.status == Order.STATUS_PAID
    variant.refresh_from_db()
    assert variant.stock == 3
    assert any(getattr(r, "step", None) == "confirmation_email" for r in caplog.records)


@pytest.mark.django_db
def test_refund_moves_paid_order_to_refunded():
    user = UserFactory()
    product = ProductFactory()
    result = checkout_for(user, CheckoutItem(product.id, None, 1))
    handle_payment_event(completed(result.session_id, payment_intent="pi_refund_me"))

    handle_payment_event(refunded("pi_refund_me"))

    assert Order.objects.get(id=result.order_id).status == Order.STATUS_REFUNDED
    # A second refund notice is ignored
    assert handle_charge_refunded({"payment_intent": "pi_refund_me"}) is None


@pytest.mark.django_db
def test_refund_for_pending_order_is_ignored():
    order = OrderFactory(status=Order.STATUS_PENDING, payment_reference="pi_pending")

    handle_payment_event(refunded("pi_pending"))

    order.refresh_from_db()
    assert order.status == Order.STATUS_PENDING


@pytest.mark.django_db
def test_refund_for_unknown_payment_is_ignored():
    assert handle_charge_refunded({"payment_intent": "pi_nobody"}) is None


@pytest.mark.django_db
def test_refunded_order_cannot_be_paid_again():
    order = OrderFactory(status=Order.STATUS_REFUNDED)

    assert handle_checkout_completed({"id": order.stripe_session_id}) is None

    order.refresh_from_db()
    assert order.status == Order.STATUS_REFUNDED


@pytest.mark.django_db
def test_unhandled_event_types_are_acknowledged():
    order = OrderFactory()
    handle_payment_event({"type": "payment_intent.created", "data": {"object": {"id": order.stripe_session_id}}})
    order.refresh_from_db()
    assert order.status == Order.STATUS_PENDING
