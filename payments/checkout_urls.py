"""Checkout routes, mounted at /api/v1/checkout/."""

from django.urls import path

from .views import CheckoutSessionStatusView, CheckoutSessionView

urlpatterns = [
    path("sessions/", CheckoutSessionView.as_view(), name="checkout-session"),
    path("sessions/<str:session_id>/", CheckoutSessionStatusView.as_view(), name="checkout-session-status"),
]
