"""Read-only storefront catalog endpoints."""

from drf_spectacular.types import OpenApiTypes
from drf_spectacular.utils import OpenApiParameter, extend_schema, extend_schema_view
from rest_framework import viewsets
from rest_framework.exceptions import NotFound

from . import selectors
from .serializers import CategorySerializer, ProductDetailSerializer, ProductListSerializer


@extend_schema_view(
    list=extend_schema(tags=["Catalog Endpoints"], summary="List categories"),
    retrieve=extend_schema(tags=["Catalog Endpoints"], summary="Get category by slug"),
)
class CategoryViewSet(viewsets.ReadOnlyModelViewSet):
    serializer_class = CategorySerializer
    lookup_field = "slug"
    throttle_scope = "catalog"

    def get_queryset(self):
        return selectors.list_categories()


@extend_schema_view(
    list=extend_schema(
        tags=["Catalog Endpoints"],
        summary="List products",
        description="Active products. Filter by `category` slug and search with `q`.",
        parameters=[
            OpenApiParameter("category", OpenApiTypes.STR, location="query", description="Category slug"),
            OpenApiParameter("q", OpenApiTypes.STR, location="query", description="Search name and description"),
        ],
    ),
    retrieve=extend_schema(tags=["Catalog Endpoints"], summary="Get product by slug, with variants"),
)
class ProductViewSet(viewsets.ReadOnlyModelViewSet):
    lookup_field = "slug"
    throttle_scope = "catalog"
    ordering_fields = ["name", "price_cents", "created_at"]

    def get_queryset(self):
        params = self.request.query_params
        return selectors.list_products(category_slug=params.get("category"), search=params.get("q"))

    def get_serializer_class(self):
        if self.action == "retrieve":
            return ProductDetailSerializer
        return ProductListSerializer

    def get_object(self):
        product = selectors.get_product_by_slug(self.kwargs["slug"])
        if product is None:
            raise NotFound("Not found.")
        return product
