"""Orders API endpoints: the signed-in shopper's order history."""

from django.http import Http404
from drf_spectacular.utils import OpenApiExample, extend_schema, extend_schema_view
from rest_framework import generics
from rest_framework.permissions import IsAuthenticated

from . import selectors
from .models import Order
from .serializers import OrderSerializer

ORDER_EXAMPLE = {
    "id": 123,
    "number": "MV-000123",
    "status": "paid",
    "email": "shopper@example.com",
    "currency": "usd",
    "subtotal_cents": 2400,
    "shipping_cents": 600,
    "tax_cents": 204,
    "total_cents": 3204,
    "created_at": "2025-01-01T12:00:00Z",
    "updated_at": "2025-01-01T12:01:00Z",
    "items": [
        {
            "id": 10,
            "product": 7,
            "variant": 55,
            "name": "Velvet Lip - Ruby",
            "sku": "MV-LIP-RUBY",
            "quantity": 2,
            "unit_price_cents": 1200,
            "line_total_cents": 2400,
        }
    ],
    "snapshot": [
        {
            "productId": 7,
            "variantId": 55,
            "quantity": 2,
            "unitPrice": 1200,
            "name": "Velvet Lip - Ruby",
            "sku": "MV-LIP-RUBY",
        }
    ],
}


@extend_schema_view(
    get=extend_schema(
        tags=["Orders"],
        summary="List my orders",
        description="Orders of the authenticated user, newest first. Filter with `?status=paid`.",
    )
)
class OrderListView(generics.ListAPIView):
    permission_classes = [IsAuthenticated]
    throttle_scope = "orders"
    serializer_class = OrderSerializer
    filterset_fields = ["status"]
    ordering_fields = ["created_at", "total_cents"]

    def get_queryset(self):
        return selectors.list_orders_for_owner(self.request.user)


class OrderDetailView(generics.RetrieveAPIView):
    """Retrieve a single order; another user's order is reported as not found."""

    permission_classes = [IsAuthenticated]
    throttle_scope = "orders"
    serializer_class = OrderSerializer

    def get_object(self):
        try:
            return selectors.get_order_for_owner(self.kwargs["order_id"], self.request.user)
        except Order.DoesNotExist:
            raise Http404("Not found.")

    @extend_schema(
        tags=["Orders"],
        summary="Get order detail",
        examples=[OpenApiExample("Paid order", value=ORDER_EXAMPLE, response_only=True)],
    )
    def get(self, request, *args, **kwargs):
        return super().get(request, *args, **kwargs)
