"""DRF serializers for Orders. Money fields are integer cents."""

from rest_framework import serializers

from .models import Order, OrderItem


class OrderItemSerializer(serializers.ModelSerializer):
    line_total_cents = serializers.IntegerField(read_only=True)

    class Meta:
        model = OrderItem
        fields = [
            "id",
            "product",
            "variant",
            "name",
            "sku",
            "quantity",
            "unit_price_cents",
            "line_total_cents",
        ]
        read_only_fields = fields


class OrderSerializer(serializers.ModelSerializer):
    """Order with its persisted totals.

    `items` is filled once the order is paid; `snapshot` is the priced cart
    captured at checkout.
    """

    items = OrderItemSerializer(many=True, read_only=True)
    snapshot = serializers.JSONField(source="temp_cart", read_only=True)

    class Meta:
        model = Order
        fields = [
            "id",
            "number",
            "status",
            "email",
            "currency",
            "subtotal_cents",
            "shipping_cents",
            "tax_cents",
            "total_cents",
            "created_at",
            "updated_at",
            "items",
            "snapshot",
        ]
        read_only_fields = fields
