from datetime import timedelta
from io import StringIO

import pytest
from django.core.management import call_command
from django.utils import timezone
from orders.models import Order
from orders.tests.factories import OrderFactory
from payments.tests.fakes import FakeGateway


def age(order, hours):
    Order.objects.filter(id=order.id).update(created_at=timezone.now() - timedelta(hours=hours))


@pytest.mark.django_db
def test_lists_stale_pending_orders_without_changing_them():
    stale = OrderFactory()
    age(stale, 48)
    OrderFactory()
    paid = OrderFactory(status=Order.STATUS_PAID)
    age(paid, 48)

    out = StringIO()
    call_command("report_stale_orders", "--hours", "24", stdout=out)

    assert stale.number in out.getvalue()
    assert "Stale pending orders: 1. Finalized: 0." in out.getvalue()
    stale.refresh_from_db()
    assert stale.status == Order.STATUS_PENDING


@pytest.mark.django_db
def test_reconcile_finalizes_paid_sessions(monkeypatch):
    paid_session = OrderFactory()
    open_session = OrderFactory()
    age(paid_session, 30)
    age(open_session, 30)
    gateway = FakeGateway(
        sessions={
            paid_session.stripe_session_id: {
                "id": paid_session.stripe_session_id,
                "payment_status": "paid",
                "customer_email": "payer@example.com",
                "payment_intent": "pi_reconciled",
            },
            open_session.stripe_session_id: {"id": open_session.stripe_session_id, "payment_status": "unpaid"},
        }
    )
    monkeypatch.setattr("orders.management.commands.report_stale_orders.get_gateway", lambda: gateway)

    out = StringIO()
    call_command("report_stale_orders", "--reconcile", stdout=out, stderr=StringIO())

    paid_session.refresh_from_db()
    open_session.refresh_from_db()
    assert paid_session.status == Order.STATUS_PAID
    assert paid_session.payment_reference == "pi_reconciled"
    assert open_session.status == Order.STATUS_PENDING
    assert "Finalized: 1." in out.getvalue()


@pytest.mark.django_db
def test_reconcile_reports_lookup_failures(monkeypatch):
    order = OrderFactory()
    age(order, 30)
    monkeypatch.setattr("orders.management.commands.report_stale_orders.get_gateway", lambda: FakeGateway())

    err = StringIO()
    call_command("report_stale_orders", "--reconcile", stdout=StringIO(), stderr=err)

    assert "lookup failed" in err.getvalue()
