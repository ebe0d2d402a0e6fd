"""Root URL configuration for the MANIC VANITY storefront API.

All public routes are versioned under /api/v1/.
"""

from django.contrib import admin
from django.urls import include, path
from drf_spectacular.views import SpectacularAPIView, SpectacularSwaggerView

from .health import health

admin.site.site_header = "MANIC VANITY Admin"
admin.site.index_title = "Admin"

urlpatterns = [
    path("admin/", admin.site.urls),
    # API schema and Swagger UI
    path("api/schema/", SpectacularAPIView.as_view(), name="api-schema"),
    path("api/docs/", SpectacularSwaggerView.as_view(url_name="api-schema"), name="api-docs"),
    # Healthcheck
    path("health/", health, name="health"),
    # Versioned v1 routes only
    path("api/v1/", include("users.urls")),
    path("api/v1/catalog/", include("catalog.urls")),
    path("api/v1/cart/", include("cart.urls")),
    path("api/v1/checkout/", include("payments.checkout_urls")),
    path("api/v1/payments/", include("payments.urls")),
    path("api/v1/orders/", include("orders.urls")),
    path("api/v1/admin/demo/", include("catalog.admin_urls")),
]
