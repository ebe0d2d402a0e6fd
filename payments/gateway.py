"""Stripe Checkout gateway.

Thin wrapper over the `stripe` SDK: create and retrieve hosted checkout
sessions, and verify signed webhook payloads. Everything returned to
callers is a plain dict or dataclass so the order services never touch
SDK objects.
"""

import json
import logging
from dataclasses import dataclass
from typing import Optional

import stripe
from django.conf import settings

logger = logging.getLogger("manicvanity.payments")

# Seconds a signed webhook timestamp stays valid
SIGNATURE_TOLERANCE = 300


class GatewayError(Exception):
    """The payment processor failed or was unreachable. Safe to retry."""


class SignatureError(Exception):
    """A webhook payload could not be authenticated."""


@dataclass(frozen=True)
class CheckoutSession:
    id: str
    url: str


class StripeGateway:
    def __init__(
        self,
        api_key: Optional[str] = None,
        webhook_secret: Optional[str] = None,
    ):
        self.api_key = api_key if api_key is not None else settings.STRIPE_SECRET_KEY
        self.webhook_secret = webhook_secret if webhook_secret is not None else settings.STRIPE_WEBHOOK_SECRET

    def create_checkout_session(
        self,
        *,
        line_items: list[dict],
        success_url: str,
        cancel_url: str,
        metadata: dict,
        customer_email: Optional[str] = None,
    ) -> CheckoutSession:
        params = {
            "mode": "payment",
            "payment_method_types": ["card"],
            "line_items": line_items,
            "success_url": success_url,
            "cancel_url": cancel_url,
            "metadata": metadata,
        }
        if customer_email:
            params["customer_email"] = customer_email
        try:
            session = stripe.checkout.Session.create(api_key=self.api_key, **params)
        except stripe.StripeError as exc:
            logger.error(
                "stripe.session_create_failed",
                extra={"event": "stripe.session_create_failed", "error": type(exc).__name__},
            )
            raise GatewayError(str(exc)) from exc
        return CheckoutSession(id=session.id, url=session.url)

    def retrieve_checkout_session(self, session_id: str) -> dict:
        """Return the session fields the storefront and reconciliation need."""
        try:
            session = stripe.checkout.Session.retrieve(session_id, api_key=self.api_key)
        except stripe.InvalidRequestError as exc:
            raise LookupError(session_id) from exc
        except stripe.StripeError as exc:
            raise GatewayError(str(exc)) from exc
        # SDK objects are not dicts; read fields from a plain copy
        session = session.to_dict()
        details = session.get("customer_details") or {}
        return {
            "id": session["id"],
            "amount_total": session.get("amount_total"),
            "currency": session.get("currency"),
            "payment_status": session.get("payment_status"),
            "customer_email": details.get("email") or session.get("customer_email"),
            "status": session.get("status"),
            "payment_intent": session.get("payment_intent"),
        }

    def verify_event(self, payload: bytes, sig_header: Optional[str]) -> dict:
        """Authenticate a webhook body and return the event as a plain dict."""
        if not sig_header:
            raise SignatureError("Missing Stripe-Signature header")
        if not self.webhook_secret:
            raise SignatureError("Webhook secret is not configured")
        try:
            body = payload.decode("utf-8")
            stripe.WebhookSignature.verify_header(body, sig_header, self.webhook_secret, SIGNATURE_TOLERANCE)
            event = json.loads(body)
        except (UnicodeDecodeError, ValueError, stripe.SignatureVerificationError) as exc:
            raise SignatureError(str(exc)) from exc
        if not isinstance(event, dict) or "type" not in event:
            raise SignatureError("Malformed event")
        return event


def get_gateway() -> StripeGateway:
    return StripeGateway()
