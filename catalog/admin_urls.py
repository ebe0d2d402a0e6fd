"""Demo data routes, mounted at /api/v1/admin/demo/."""

from django.urls import path

from .admin_views import DemoOrdersView, DemoReseedView

urlpatterns = [
    path("reseed/", DemoReseedView.as_view(), name="demo-reseed"),
    path("orders/", DemoOrdersView.as_view(), name="demo-orders"),
]
