from rest_framework import serializers


class CheckoutItemSerializer(serializers.Serializer):
    product_id = serializers.IntegerField()
    variant_id = serializers.IntegerField(required=False, allow_null=True)
    quantity = serializers.IntegerField(min_value=1)


class CheckoutRequestSerializer(serializers.Serializer):
    """Explicit items override the shopper's stored cart when given."""

    items = CheckoutItemSerializer(many=True, required=False)
    email = serializers.EmailField(required=False)


class CheckoutResponseSerializer(serializers.Serializer):
    url = serializers.URLField()
    session_id = serializers.CharField()
    order_id = serializers.IntegerField(allow_null=True)


class CheckoutSessionStatusSerializer(serializers.Serializer):
    id = serializers.CharField()
    amount_total = serializers.IntegerField(allow_null=True)
    currency = serializers.CharField(allow_null=True)
    payment_status = serializers.CharField(allow_null=True)
    customer_email = serializers.EmailField(allow_null=True)
    status = serializers.CharField(allow_null=True)
