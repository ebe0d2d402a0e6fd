"""Checkout and payment webhook endpoints."""

import logging

from cart.stores import GUEST_TOKEN_HEADER, CartError, get_cart_store
from drf_spectacular.utils import OpenApiParameter, extend_schema, inline_serializer
from orders.services import CheckoutItem, CheckoutValidationError, handle_payment_event, start_checkout
from rest_framework import serializers as rf_serializers
from rest_framework import status
from rest_framework.permissions import AllowAny
from rest_framework.response import Response
from rest_framework.views import APIView

from .gateway import GatewayError, SignatureError, get_gateway
from .serializers import CheckoutRequestSerializer, CheckoutResponseSerializer, CheckoutSessionStatusSerializer

logger = logging.getLogger("manicvanity.payments")
security_logger = logging.getLogger("manicvanity.security")

DETAIL_RESPONSE = inline_serializer(name="PaymentsError", fields={"detail": rf_serializers.CharField()})


class CheckoutSessionView(APIView):
    """Start a hosted checkout for the request's items or current cart."""

    permission_classes = [AllowAny]
    throttle_scope = "checkout"

    @extend_schema(
        tags=["Checkout"],
        summary="Create checkout session",
        description=(
            "Re-prices the items from the catalog, opens a Stripe Checkout session and, for signed-in "
            "shoppers, records a pending order. Without `items` the current cart is used."
        ),
        parameters=[OpenApiParameter(GUEST_TOKEN_HEADER, str, OpenApiParameter.HEADER, required=False)],
        request=CheckoutRequestSerializer,
        responses={200: CheckoutResponseSerializer, 400: DETAIL_RESPONSE, 502: DETAIL_RESPONSE},
    )
    def post(self, request):
        serializer = CheckoutRequestSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        data = serializer.validated_data

        if data.get("items"):
            lines = [
                CheckoutItem(item["product_id"], item.get("variant_id"), item["quantity"]) for item in data["items"]
            ]
        else:
            try:
                lines = get_cart_store(request).lines()
            except CartError as exc:
                return Response({"detail": str(exc)}, status=status.HTTP_400_BAD_REQUEST)

        owner = request.user if request.user.is_authenticated else None
        try:
            result = start_checkout(lines=lines, owner=owner, email=data.get("email"), gateway=get_gateway())
        except CheckoutValidationError as exc:
            return Response({"detail": str(exc)}, status=status.HTTP_400_BAD_REQUEST)
        except GatewayError:
            return Response(
                {"detail": "Unable to start checkout. Please try again."}, status=status.HTTP_502_BAD_GATEWAY
            )

        body = CheckoutResponseSerializer(
            {"url": result.url, "session_id": result.session_id, "order_id": result.order_id}
        ).data
        return Response(body, status=status.HTTP_200_OK)


class CheckoutSessionStatusView(APIView):
    """Report a checkout session's payment status for the success page."""

    permission_classes = [AllowAny]
    throttle_scope = "checkout"

    @extend_schema(
        tags=["Checkout"],
        summary="Get checkout session status",
        responses={200: CheckoutSessionStatusSerializer, 404: DETAIL_RESPONSE, 502: DETAIL_RESPONSE},
    )
    def get(self, request, session_id: str):
        try:
            session = get_gateway().retrieve_checkout_session(session_id)
        except LookupError:
            return Response({"detail": "Not found."}, status=status.HTTP_404_NOT_FOUND)
        except GatewayError:
            return Response(
                {"detail": "Unable to retrieve checkout session."}, status=status.HTTP_502_BAD_GATEWAY
            )
        return Response(CheckoutSessionStatusSerializer(session).data, status=status.HTTP_200_OK)


class StripeWebhookView(APIView):
    """Receive Stripe events; only signature-verified payloads are processed."""

    permission_classes = [AllowAny]
    authentication_classes = []
    throttle_classes = []

    @extend_schema(
        tags=["Payments"],
        summary="Stripe webhook",
        request=None,
        responses={
            200: inline_serializer(name="WebhookAck", fields={"received": rf_serializers.BooleanField()}),
            400: DETAIL_RESPONSE,
        },
    )
    def post(self, request):
        try:
            event = get_gateway().verify_event(request.body, request.headers.get("Stripe-Signature"))
        except SignatureError as exc:
            security_logger.warning(
                "webhook_signature_invalid",
                extra={
                    "event": "webhook_signature_invalid",
                    "reason": str(exc),
                    "ip": request.META.get("REMOTE_ADDR"),
                },
            )
            return Response({"detail": "Invalid signature."}, status=status.HTTP_400_BAD_REQUEST)

        logger.info(
            "webhook_received",
            extra={"event": "webhook_received", "type": event.get("type"), "event_id": event.get("id")},
        )
        handle_payment_event(event)
        return Response({"received": True}, status=status.HTTP_200_OK)
