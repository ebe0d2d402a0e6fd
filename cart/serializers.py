"""Cart serializers for read and write operations."""

from rest_framework import serializers


class CartLineSerializer(serializers.Serializer):
    line_id = serializers.CharField()
    product_id = serializers.IntegerField()
    variant_id = serializers.IntegerField(allow_null=True)
    quantity = serializers.IntegerField()
    name = serializers.CharField()
    unit_price_cents = serializers.IntegerField()
    line_total_cents = serializers.IntegerField()


class CartReadSerializer(serializers.Serializer):
    """Cart lines plus the pricing preview shown before checkout."""

    lines = CartLineSerializer(many=True)
    subtotal_cents = serializers.IntegerField()
    shipping_cents = serializers.IntegerField()
    tax_cents = serializers.IntegerField()
    total_cents = serializers.IntegerField()
    currency = serializers.CharField()


class AddLineSerializer(serializers.Serializer):
    product_id = serializers.IntegerField()
    variant_id = serializers.IntegerField(required=False, allow_null=True)
    quantity = serializers.IntegerField(min_value=1, default=1)


class UpdateLineSerializer(serializers.Serializer):
    # Zero or negative removes the line
    quantity = serializers.IntegerField()
