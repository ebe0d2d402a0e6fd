from datetime import timedelta

from django.conf import settings
from django.core.management.base import BaseCommand
from django.utils import timezone
from orders.models import Order
from orders.services import handle_checkout_completed
from payments.gateway import GatewayError, get_gateway


class Command(BaseCommand):
    help = (
        "List pending orders older than PENDING_ORDER_STALE_HOURS. With --reconcile, finalize those whose "
        "Stripe session reports payment_status=paid. Status is never changed by age alone."
    )

    def add_arguments(self, parser):
        parser.add_argument("--hours", type=int, default=None, help="Override PENDING_ORDER_STALE_HOURS")
        parser.add_argument("--reconcile", action="store_true", help="Query Stripe and finalize paid sessions")

    def handle(self, *args, **options):
        hours = options["hours"] if options["hours"] is not None else settings.PENDING_ORDER_STALE_HOURS
        cutoff = timezone.now() - timedelta(hours=int(hours))
        qs = Order.objects.filter(status=Order.STATUS_PENDING, created_at__lt=cutoff).order_by("created_at")

        gateway = get_gateway() if options["reconcile"] else None
        stale = finalized = 0
        for order in qs.iterator():
            stale += 1
            self.stdout.write(f"{order.number or order.id} session={order.stripe_session_id} created={order.created_at}")
            if gateway is None or not order.stripe_session_id:
                continue
            try:
                session = gateway.retrieve_checkout_session(order.stripe_session_id)
            except (GatewayError, LookupError) as exc:
                self.stderr.write(f"  lookup failed: {exc}")
                continue
            if session.get("payment_status") == "paid" and handle_checkout_completed(session) is not None:
                finalized += 1
                self.stdout.write(f"  finalized {order.number or order.id}")

        self.stdout.write(self.style.SUCCESS(f"Stale pending orders: {stale}. Finalized: {finalized}."))
