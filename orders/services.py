"""Order lifecycle services.

Checkout creates a `pending` order alongside a hosted payment session;
gateway events move it to `paid` (with line items, stock, cart and email
side effects) and later to `refunded`. Status moves are single conditional
updates so a redelivered event changes nothing.
"""

import logging
from dataclasses import dataclass
from typing import Iterable, NamedTuple, Optional

from cart.services import clear_account_cart
from catalog.models import Product, ProductVariant
from catalog.selectors import resolve_checkout_lines
from django.conf import settings
from django.db import DatabaseError, transaction
from django.utils import timezone
from inventory.services import decrement_variant_stock
from payments.gateway import get_gateway

from .emails import send_order_confirmation_email
from .models import Order, OrderItem
from .pricing import compute_total

logger = logging.getLogger("manicvanity.orders")

CHECKOUT_SOURCE = "manic-vanity-store"


class CheckoutValidationError(Exception):
    """The checkout request cannot produce a payable session."""


class CheckoutItem(NamedTuple):
    product_id: int
    variant_id: Optional[int]
    quantity: int


@dataclass(frozen=True)
class CheckoutResult:
    url: str
    session_id: str
    order_id: Optional[int]


def order_number(order_id: int) -> str:
    return f"MV-{int(order_id):06d}"


def log_status_change(order: Order, status_from: str, status_to: str) -> None:
    logger.info(
        "order_status_changed",
        extra={
            "event": "order_status_changed",
            "order_id": order.id,
            "user_id": order.user_id,
            "status_from": status_from,
            "status_to": status_to,
        },
    )


def _line_item(name: str, unit_amount: int, quantity: int, currency: str, metadata: Optional[dict] = None) -> dict:
    product_data = {"name": name}
    if metadata:
        product_data["metadata"] = metadata
    return {
        "price_data": {"currency": currency, "product_data": product_data, "unit_amount": unit_amount},
        "quantity": quantity,
    }


def start_checkout(*, lines: Iterable, owner=None, email: Optional[str] = None, gateway=None) -> CheckoutResult:
    """Open a hosted checkout session for `lines` and record a pending order.

    `lines` holds objects with `product_id`, `variant_id` and `quantity`
    (cart lines or `CheckoutItem`). Prices are always re-read from the
    catalog. The order row is written only for a signed-in `owner`; a
    failed insert is logged and the session URL is still returned.
    """

    lines = list(lines or [])
    if not lines:
        raise CheckoutValidationError("Cart is empty")
    if any(int(line.quantity) <= 0 for line in lines):
        raise CheckoutValidationError("Quantities must be positive")

    resolved = resolve_checkout_lines(lines)
    if not resolved:
        raise CheckoutValidationError("None of the cart items are available")

    subtotal = sum(line.line_total_cents for line in resolved)
    breakdown = compute_total(subtotal)
    currency = settings.STORE_CURRENCY

    line_items = [
        _line_item(
            line.name,
            line.unit_price_cents,
            line.quantity,
            currency,
            metadata={"product_id": str(line.product_id), "variant_id": str(line.variant_id or "")},
        )
        for line in resolved
    ]
    line_items.append(_line_item("Shipping", breakdown.shipping_cents, 1, currency))
    line_items.append(_line_item("Tax", breakdown.tax_cents, 1, currency))

    if owner is not None and not email:
        email = owner.email

    frontend = settings.FRONTEND_URL.rstrip("/")
    gateway = gateway or get_gateway()
    session = gateway.create_checkout_session(
        line_items=line_items,
        success_url=f"{frontend}/checkout/success?session_id={{CHECKOUT_SESSION_ID}}",
        cancel_url=f"{frontend}/checkout/cancel",
        metadata={"source": CHECKOUT_SOURCE, "user_id": str(owner.id) if owner is not None else ""},
        customer_email=email,
    )

    snapshot = [
        {
            "productId": line.product_id,
            "variantId": line.variant_id,
            "quantity": line.quantity,
            "unitPrice": line.unit_price_cents,
            "name": line.name,
            "sku": line.sku,
        }
        for line in resolved
    ]

    order_id = None
    if owner is not None:
        try:
            with transaction.atomic():
                order = Order.objects.create(
                    user=owner,
                    email=email or "",
                    subtotal_cents=breakdown.subtotal_cents,
                    shipping_cents=breakdown.shipping_cents,
                    tax_cents=breakdown.tax_cents,
                    total_cents=breakdown.total_cents,
                    currency=currency,
                    status=Order.STATUS_PENDING,
                    stripe_session_id=session.id,
                    temp_cart=snapshot,
                )
                order.number = order_number(order.id)
                order.save(update_fields=["number"])
            order_id = order.id
        except DatabaseError:
            logger.exception(
                "order_insert_failed",
                extra={"event": "order_insert_failed", "session_id": session.id, "user_id": owner.id},
            )

    logger.info(
        "checkout_session_created",
        extra={
            "event": "checkout_session_created",
            "session_id": session.id,
            "order_id": order_id,
            "user_id": getattr(owner, "id", None),
            "total_cents": breakdown.total_cents,
        },
    )
    return CheckoutResult(url=session.url, session_id=session.id, order_id=order_id)


def handle_payment_event(event: dict) -> None:
    """Dispatch a verified gateway event to its handler."""

    event_type = event.get("type")
    obj = (event.get("data") or {}).get("object") or {}
    if event_type == "checkout.session.completed":
        handle_checkout_completed(obj)
    elif event_type == "charge.refunded":
        handle_charge_refunded(obj)
    else:
        logger.info("payment_event_unhandled", extra={"event": "payment_event_unhandled", "type": event_type})


def _run_step(order: Order, step: str, func, *args, **kwargs):
    """Run one finalization step in its own savepoint; failures are logged."""
    try:
        with transaction.atomic():
            return func(*args, **kwargs)
    except Exception:
        logger.exception(
            "finalization_step_failed",
            extra={"event": "finalization_step_failed", "order_id": order.id, "step": step},
        )
        return None


def _create_item(order: Order, entry: dict) -> OrderItem:
    product_id = entry.get("productId")
    variant_id = entry.get("variantId")
    if product_id is not None and not Product.objects.filter(id=product_id).exists():
        product_id = None
    if variant_id is not None and not ProductVariant.objects.filter(id=variant_id).exists():
        variant_id = None
    return OrderItem.objects.create(
        order=order,
        product_id=product_id,
        variant_id=variant_id,
        name=entry.get("name") or "",
        sku=entry.get("sku") or "",
        quantity=int(entry["quantity"]),
        unit_price_cents=int(entry["unitPrice"]),
    )


def handle_checkout_completed(session: dict) -> Optional[Order]:
    """Mark the session's order paid and run the finalization side effects.

    Returns the order when this call performed the transition, else None
    (unknown session or an order that is no longer pending).
    """

    session_id = session.get("id")
    order = Order.objects.filter(stripe_session_id=session_id).first() if session_id else None
    if order is None:
        logger.warning("order_not_found", extra={"event": "order_not_found", "session_id": session_id})
        return None

    payer_email = (session.get("customer_details") or {}).get("email") or session.get("customer_email")
    updated = Order.objects.filter(id=order.id, status=Order.STATUS_PENDING).update(
        status=Order.STATUS_PAID,
        payment_reference=session.get("payment_intent"),
        email=payer_email or order.email,
        updated_at=timezone.now(),
    )
    if not updated:
        logger.info(
            "duplicate_payment_event",
            extra={"event": "duplicate_payment_event", "order_id": order.id, "session_id": session_id},
        )
        return None

    order.refresh_from_db()
    log_status_change(order, Order.STATUS_PENDING, Order.STATUS_PAID)

    for entry in order.temp_cart or []:
        _run_step(order, "order_item", _create_item, order, entry)
        if entry.get("variantId"):
            _run_step(
                order,
                "stock_decrement",
                decrement_variant_stock,
                variant_id=entry["variantId"],
                quantity=int(entry["quantity"]),
                reason="order",
                reference=order.number or str(order.id),
            )

    if order.user_id:
        _run_step(order, "cart_clear", clear_account_cart, user=order.user)

    if payer_email:
        _run_step(order, "confirmation_email", send_order_confirmation_email, order, payer_email)
    else:
        logger.warning("order_email_missing", extra={"event": "order_email_missing", "order_id": order.id})

    return order


def handle_charge_refunded(charge: dict) -> Optional[Order]:
    """Move the paid order behind `charge["payment_intent"]` to refunded."""

    payment_intent = charge.get("payment_intent")
    order = (
        Order.objects.filter(payment_reference=payment_intent).order_by("-id").first() if payment_intent else None
    )
    if order is None:
        logger.warning(
            "refund_order_not_found",
            extra={"event": "refund_order_not_found", "payment_intent": payment_intent},
        )
        return None

    updated = Order.objects.filter(id=order.id, status=Order.STATUS_PAID).update(
        status=Order.STATUS_REFUNDED, updated_at=timezone.now()
    )
    if not updated:
        logger.info(
            "refund_ignored",
            extra={"event": "refund_ignored", "order_id": order.id, "status": order.status},
        )
        return None

    log_status_change(order, Order.STATUS_PAID, Order.STATUS_REFUNDED)
    order.refresh_from_db()
    return order
