import hashlib
import hmac
import json
import time

import pytest
from catalog.tests.factories import ProductVariantFactory
from orders.models import Order
from orders.tests.factories import OrderFactory
from rest_framework.test import APIClient

URL = "/api/v1/payments/webhooks/stripe/"
SECRET = "whsec_test_secret"


def sign(payload: str, secret: str = SECRET, timestamp: int | None = None) -> str:
    timestamp = int(time.time()) if timestamp is None else timestamp
    signature = hmac.new(secret.encode(), f"{timestamp}.{payload}".encode(), hashlib.sha256).hexdigest()
    return f"t={timestamp},v1={signature}"


def post_event(event: dict, signature: str | None = None):
    payload = json.dumps(event)
    headers = {}
    if signature is not False:
        headers["HTTP_STRIPE_SIGNATURE"] = signature or sign(payload)
    return APIClient().post(URL, data=payload, content_type="application/json", **headers)


def completed_event(session_id):
    return {
        "id": "evt_test_1",
        "type": "checkout.session.completed",
        "data": {"object": {"id": session_id, "payment_intent": "pi_hook", "customer_email": "payer@example.com"}},
    }


@pytest.mark.django_db
def test_signed_completion_marks_order_paid():
    variant = ProductVariantFactory(stock=3)
    order = OrderFactory(
        temp_cart=[
            {
                "productId": variant.product_id,
                "variantId": variant.id,
                "quantity": 1,
                "unitPrice": 1000,
                "name": "Tee - M",
                "sku": variant.sku,
            }
        ]
    )

    resp = post_event(completed_event(order.stripe_session_id))

    assert resp.status_code == 200
    assert resp.json() == {"received": True}
    order.refresh_from_db()
    assert order.status == Order.STATUS_PAID
    variant.refresh_from_db()
    assert variant.stock == 2


@pytest.mark.django_db
def test_redelivered_event_is_acknowledged_without_side_effects():
    variant = ProductVariantFactory(stock=3)
    order = OrderFactory(
        temp_cart=[{"productId": variant.product_id, "variantId": variant.id, "quantity": 2, "unitPrice": 1000}]
    )

    first = post_event(completed_event(order.stripe_session_id))
    second = post_event(completed_event(order.stripe_session_id))

    assert first.status_code == second.status_code == 200
    variant.refresh_from_db()
    assert variant.stock == 1
    assert order.items.count() == 1


@pytest.mark.django_db
def test_bad_signature_rejected_before_lookup(caplog):
    order = OrderFactory()
    payload = json.dumps(completed_event(order.stripe_session_id))

    resp = APIClient().post(
        URL, data=payload, content_type="application/json", HTTP_STRIPE_SIGNATURE=sign(payload, secret="whsec_wrong")
    )

    assert resp.status_code == 400
    assert resp.json() == {"detail": "Invalid signature."}
    order.refresh_from_db()
    assert order.status == Order.STATUS_PENDING
    assert any(r.name == "manicvanity.security" for r in caplog.records)


@pytest.mark.django_db
def test_missing_and_expired_signatures_rejected():
    order = OrderFactory()
    event = completed_event(order.stripe_session_id)
    payload = json.dumps(event)

    assert post_event(event, signature=False).status_code == 400
    stale = sign(payload, timestamp=int(time.time()) - 3600)
    assert post_event(event, signature=stale).status_code == 400
    order.refresh_from_db()
    assert order.status == Order.STATUS_PENDING


@pytest.mark.django_db
def test_unknown_session_is_acknowledged():
    resp = post_event(completed_event("cs_does_not_exist"))
    assert resp.status_code == 200
