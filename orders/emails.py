"""Email utilities for the orders app.

Uses Django's email backend, with links composed from FRONTEND_URL.
"""

from django.conf import settings
from django.core.mail import send_mail


def format_cents(amount_cents: int) -> str:
    return f"${amount_cents / 100:.2f}"


def send_order_confirmation_email(order, to_email: str) -> None:
    """Send the payment confirmation for a paid order.

    Errors from the mail backend propagate so finalization can log them.
    """
    frontend = settings.FRONTEND_URL.rstrip("/")
    subject = f"Order Confirmation - MANIC VANITY #{order.number or order.id}"
    body = (
        f"Thank you for your order! Your payment of {format_cents(order.total_cents)} "
        "has been processed successfully.\n\n"
        f"Order: {order.number or order.id}\n"
        f"You can view your order here: {frontend}/account/orders/{order.id}\n"
    )
    send_mail(subject, body, settings.DEFAULT_FROM_EMAIL, [to_email], fail_silently=False)
