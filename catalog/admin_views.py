"""Developer-only demo data endpoints guarded by `X-Admin-Secret`."""

from common.permissions import HasDemoAdminSecret
from drf_spectacular.utils import OpenApiParameter, extend_schema, inline_serializer
from orders.demo import MAX_DEMO_ORDERS, DemoOrdersError, generate_demo_orders
from rest_framework import serializers as rf_serializers
from rest_framework import status
from rest_framework.exceptions import NotAuthenticated
from rest_framework.response import Response
from rest_framework.views import APIView

from .demo import DemoDataError, reseed_catalog

ADMIN_SECRET_PARAM = OpenApiParameter("X-Admin-Secret", str, OpenApiParameter.HEADER, required=True)


class DemoAdminView(APIView):
    authentication_classes = []
    permission_classes = [HasDemoAdminSecret]
    throttle_scope = "demo_admin"

    def permission_denied(self, request, message=None, code=None):
        # Missing or wrong secret answers 401 rather than 403
        raise NotAuthenticated(detail="Unauthorized")

    def get_authenticate_header(self, request):
        return "X-Admin-Secret"


class DemoReseedView(DemoAdminView):
    @extend_schema(
        tags=["Admin Endpoints"],
        summary="Top up demo catalog",
        parameters=[ADMIN_SECRET_PARAM],
        request=None,
        responses={
            200: inline_serializer(
                name="DemoReseedResponse",
                fields={
                    "products_added": rf_serializers.IntegerField(),
                    "variants_restocked": rf_serializers.IntegerField(),
                    "product_count": rf_serializers.IntegerField(),
                },
            )
        },
    )
    def post(self, request):
        try:
            result = reseed_catalog()
        except DemoDataError as exc:
            return Response({"detail": str(exc)}, status=status.HTTP_400_BAD_REQUEST)
        return Response(
            {
                "products_added": result.products_added,
                "variants_restocked": result.variants_restocked,
                "product_count": result.product_count,
            },
            status=status.HTTP_200_OK,
        )


class DemoOrdersRequestSerializer(rf_serializers.Serializer):
    count = rf_serializers.IntegerField(min_value=1, max_value=MAX_DEMO_ORDERS, default=10)


class DemoOrdersView(DemoAdminView):
    @extend_schema(
        tags=["Admin Endpoints"],
        summary="Generate demo orders",
        parameters=[ADMIN_SECRET_PARAM],
        request=DemoOrdersRequestSerializer,
        responses={
            201: inline_serializer(
                name="DemoOrdersResponse",
                fields={
                    "orders_created": rf_serializers.IntegerField(),
                    "items_created": rf_serializers.IntegerField(),
                    "user": rf_serializers.EmailField(),
                },
            )
        },
    )
    def post(self, request):
        serializer = DemoOrdersRequestSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        try:
            orders = generate_demo_orders(count=serializer.validated_data["count"])
        except DemoOrdersError as exc:
            return Response({"detail": str(exc)}, status=status.HTTP_400_BAD_REQUEST)
        return Response(
            {
                "orders_created": len(orders),
                "items_created": sum(len(order.temp_cart) for order in orders),
                "user": orders[0].email,
            },
            status=status.HTTP_201_CREATED,
        )
