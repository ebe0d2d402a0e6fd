"""DRF views for cart operations.

Every endpoint serves both guest and account carts; the store is chosen per
request by `get_cart_store` (signed-in user, else the `X-Guest-Token`
header).
"""

from django.conf import settings
from drf_spectacular.utils import OpenApiExample, OpenApiParameter, extend_schema, inline_serializer
from orders.pricing import compute_total
from rest_framework import serializers as rf_serializers
from rest_framework import status
from rest_framework.permissions import AllowAny, IsAuthenticated
from rest_framework.response import Response
from rest_framework.views import APIView

from .serializers import AddLineSerializer, CartReadSerializer, UpdateLineSerializer
from .services import merge_guest_cart
from .stores import GUEST_TOKEN_HEADER, CartError, CartLineNotFound, get_cart_store

GUEST_TOKEN_PARAM = OpenApiParameter(
    GUEST_TOKEN_HEADER,
    str,
    OpenApiParameter.HEADER,
    required=False,
    description="Guest cart token; ignored when the request is authenticated",
)
ERROR_RESPONSE = inline_serializer(name="CartMutationError", fields={"detail": rf_serializers.CharField()})


def cart_payload(store) -> dict:
    lines = store.lines()
    subtotal = sum(line.line_total_cents for line in lines)
    if lines:
        breakdown = compute_total(subtotal)
        shipping, tax, total = breakdown.shipping_cents, breakdown.tax_cents, breakdown.total_cents
    else:
        shipping = tax = total = 0
    return CartReadSerializer(
        {
            "lines": [line.as_dict() for line in lines],
            "subtotal_cents": subtotal,
            "shipping_cents": shipping,
            "tax_cents": tax,
            "total_cents": total,
            "currency": settings.STORE_CURRENCY,
        }
    ).data


def _selection_error(exc) -> Response:
    return Response({"detail": str(exc)}, status=status.HTTP_400_BAD_REQUEST)


class CartDetailView(APIView):
    permission_classes = [AllowAny]
    throttle_scope = "cart"

    @extend_schema(
        tags=["Cart Endpoints"],
        summary="Get cart",
        description="Returns cart lines with subtotal, flat shipping, tax and total (integer cents).",
        parameters=[GUEST_TOKEN_PARAM],
        responses={200: CartReadSerializer, 400: ERROR_RESPONSE},
    )
    def get(self, request):
        try:
            store = get_cart_store(request)
        except CartError as exc:
            return _selection_error(exc)
        return Response(cart_payload(store), status=status.HTTP_200_OK)


class CartAddItemView(APIView):
    permission_classes = [AllowAny]
    throttle_scope = "cart_write"

    @extend_schema(
        tags=["Cart Endpoints"],
        summary="Add item to cart",
        description="Adds a product (optionally a variant); an existing line for the same pair is incremented.",
        parameters=[GUEST_TOKEN_PARAM],
        request=AddLineSerializer,
        responses={
            201: inline_serializer(name="CartLineCreatedResponse", fields={"line_id": rf_serializers.CharField()}),
            400: ERROR_RESPONSE,
        },
        examples=[OpenApiExample("Added", value={"line_id": "42"}, response_only=True)],
    )
    def post(self, request):
        try:
            store = get_cart_store(request)
        except CartError as exc:
            return _selection_error(exc)
        serializer = AddLineSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        data = serializer.validated_data
        try:
            line = store.add_line(data["product_id"], data.get("variant_id"), data["quantity"])
        except CartError:
            return Response({"detail": "Unable to update cart."}, status=status.HTTP_400_BAD_REQUEST)
        return Response({"line_id": line.line_id}, status=status.HTTP_201_CREATED)


class CartItemView(APIView):
    permission_classes = [AllowAny]
    throttle_scope = "cart_write"

    @extend_schema(
        tags=["Cart Endpoints"],
        summary="Update cart line quantity",
        description="Sets the quantity of a line; zero or less removes it.",
        parameters=[GUEST_TOKEN_PARAM],
        request=UpdateLineSerializer,
        responses={
            200: inline_serializer(
                name="CartLineUpdatedResponse",
                fields={
                    "line_id": rf_serializers.CharField(),
                    "quantity": rf_serializers.IntegerField(required=False),
                    "removed": rf_serializers.BooleanField(required=False),
                },
            ),
            400: ERROR_RESPONSE,
            404: inline_serializer(name="NotFoundError", fields={"detail": rf_serializers.CharField()}),
        },
    )
    def patch(self, request, line_id: str):
        try:
            store = get_cart_store(request)
        except CartError as exc:
            return _selection_error(exc)
        serializer = UpdateLineSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        try:
            line = store.set_quantity(line_id, serializer.validated_data["quantity"])
        except CartLineNotFound:
            return Response({"detail": "Not found."}, status=status.HTTP_404_NOT_FOUND)
        except CartError:
            return Response({"detail": "Unable to update cart."}, status=status.HTTP_400_BAD_REQUEST)
        if line is None:
            return Response({"line_id": line_id, "removed": True}, status=status.HTTP_200_OK)
        return Response({"line_id": line.line_id, "quantity": line.quantity}, status=status.HTTP_200_OK)

    @extend_schema(
        tags=["Cart Endpoints"],
        summary="Remove cart line",
        description="Removes a line. Removing an unknown line succeeds without changes.",
        parameters=[GUEST_TOKEN_PARAM],
        responses={204: None, 400: ERROR_RESPONSE},
    )
    def delete(self, request, line_id: str):
        try:
            store = get_cart_store(request)
        except CartError as exc:
            return _selection_error(exc)
        store.remove_line(line_id)
        return Response(status=status.HTTP_204_NO_CONTENT)


class CartClearView(APIView):
    permission_classes = [AllowAny]
    throttle_scope = "cart_write"

    @extend_schema(
        tags=["Cart Endpoints"],
        summary="Clear cart",
        parameters=[GUEST_TOKEN_PARAM],
        responses={
            200: inline_serializer(name="CartClearedResponse", fields={"status": rf_serializers.CharField()}),
            400: ERROR_RESPONSE,
        },
    )
    def post(self, request):
        try:
            store = get_cart_store(request)
        except CartError as exc:
            return _selection_error(exc)
        store.clear()
        return Response({"status": "cleared"}, status=status.HTTP_200_OK)


class MergeGuestCartView(APIView):
    """Merge the guest cart named by `X-Guest-Token` into the signed-in user's cart."""

    permission_classes = [IsAuthenticated]
    throttle_scope = "cart_write"

    @extend_schema(
        tags=["Cart Endpoints"],
        summary="Merge guest cart into account cart",
        parameters=[
            OpenApiParameter(GUEST_TOKEN_HEADER, str, OpenApiParameter.HEADER, required=True),
        ],
        request=None,
        responses={
            200: inline_serializer(
                name="CartMergedResponse",
                fields={"status": rf_serializers.CharField(), "merged_lines": rf_serializers.IntegerField()},
            ),
            400: ERROR_RESPONSE,
        },
    )
    def post(self, request):
        token = request.headers.get(GUEST_TOKEN_HEADER)
        if not token:
            return Response({"detail": f"{GUEST_TOKEN_HEADER} header is required."}, status=status.HTTP_400_BAD_REQUEST)
        merged = merge_guest_cart(token=token, user=request.user)
        return Response({"status": "merged", "merged_lines": merged}, status=status.HTTP_200_OK)
