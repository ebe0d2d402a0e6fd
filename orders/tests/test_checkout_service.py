import pytest
from catalog.tests.factories import ProductFactory, ProductVariantFactory
from orders.models import Order
from orders.services import CheckoutItem, CheckoutValidationError, start_checkout
from payments.gateway import GatewayError
from payments.tests.fakes import FakeGateway
from users.tests.factories import UserFactory


@pytest.fixture(autouse=True)
def _pricing(settings):
    settings.SHIPPING_FLAT_CENTS = 600
    settings.TAX_RATE = "0.085"


@pytest.mark.django_db
def test_signed_in_checkout_records_pending_order_with_snapshot():
    user = UserFactory()
    variant = ProductVariantFactory(price_cents=1200, product__name="Velvet Lip", name="Ruby", sku="MV-LIP-RUBY")
    gateway = FakeGateway()

    result = start_checkout(lines=[CheckoutItem(variant.product_id, variant.id, 2)], owner=user, gateway=gateway)

    order = Order.objects.get(id=result.order_id)
    assert order.status == Order.STATUS_PENDING
    assert order.stripe_session_id == result.session_id
    assert order.number == f"MV-{order.id:06d}"
    assert (order.subtotal_cents, order.shipping_cents, order.tax_cents, order.total_cents) == (2400, 600, 204, 3204)
    assert order.email == user.email
    assert order.temp_cart == [
        {
            "productId": variant.product_id,
            "variantId": variant.id,
            "quantity": 2,
            "unitPrice": 1200,
            "name": "Velvet Lip - Ruby",
            "sku": "MV-LIP-RUBY",
        }
    ]
    assert not order.items.exists()
    assert result.url.startswith("https://checkout.stripe.test/")


@pytest.mark.django_db
def test_session_lines_carry_shipping_and_tax():
    variant = ProductVariantFactory(price_cents=2000)
    gateway = FakeGateway()

    start_checkout(lines=[CheckoutItem(variant.product_id, variant.id, 1)], gateway=gateway)

    params = gateway.created[0]
    names = [item["price_data"]["product_data"]["name"] for item in params["line_items"]]
    amounts = [item["price_data"]["unit_amount"] for item in params["line_items"]]
    assert names[1:] == ["Shipping", "Tax"]
    assert amounts == [2000, 600, 170]
    assert params["success_url"] == "http://testserver-frontend/checkout/success?session_id={CHECKOUT_SESSION_ID}"
    assert params["cancel_url"] == "http://testserver-frontend/checkout/cancel"
    assert params["metadata"]["source"] == "manic-vanity-store"


@pytest.mark.django_db
def test_prices_come_from_catalog_not_cart():
    product = ProductFactory(price_cents=1500)
    gateway = FakeGateway()

    class StaleLine:
        product_id = product.id
        variant_id = None
        quantity = 1
        unit_price_cents = 1

    result = start_checkout(lines=[StaleLine()], owner=UserFactory(), gateway=gateway)

    assert Order.objects.get(id=result.order_id).subtotal_cents == 1500


@pytest.mark.django_db
def test_guest_checkout_creates_no_order():
    product = ProductFactory()

    result = start_checkout(lines=[CheckoutItem(product.id, None, 1)], email="guest@example.com", gateway=FakeGateway())

    assert result.order_id is None
    assert not Order.objects.exists()


@pytest.mark.django_db
def test_missing_lines_are_dropped_and_all_missing_rejected():
    product = ProductFactory()
    gateway = FakeGateway()

    start_checkout(
        lines=[CheckoutItem(product.id, None, 1), CheckoutItem(999999, None, 1)], owner=UserFactory(), gateway=gateway
    )
    assert len(gateway.created[0]["line_items"]) == 3

    with pytest.raises(CheckoutValidationError):
        start_checkout(lines=[CheckoutItem(999999, None, 1)], gateway=gateway)


@pytest.mark.django_db
def test_empty_cart_and_bad_quantity_rejected():
    product = ProductFactory()
    with pytest.raises(CheckoutValidationError):
        start_checkout(lines=[], gateway=FakeGateway())
    with pytest.raises(CheckoutValidationError):
        start_checkout(lines=[CheckoutItem(product.id, None, 0)], gateway=FakeGateway())


@pytest.mark.django_db
def test_gateway_failure_leaves_no_order():
    product = ProductFactory()
    with pytest.raises(GatewayError):
        start_checkout(lines=[CheckoutItem(product.id, None, 1)], owner=UserFactory(), gateway=FakeGateway(fail=True))
    assert not Order.objects.exists()


@pytest.mark.django_db
def test_zero_tax_still_sends_tax_line():
    # 5 * 0.085 rounds to 0
    product = ProductFactory(price_cents=5)
    gateway = FakeGateway()

    start_checkout(lines=[CheckoutItem(product.id, None, 1)], gateway=gateway)

    tail = [
        (item["price_data"]["product_data"]["name"], item["price_data"]["unit_amount"])
        for item in gateway.created[0]["line_items"][1:]
    ]
    assert tail == [("Shipping", 600), ("Tax", 0)]
