"""User routes under /api/v1/."""

from django.urls import path

from .views import CurrentUserView, RefreshView, SignInView

urlpatterns = [
    path("auth/signin/", SignInView.as_view(), name="signin"),
    path("auth/refresh/", RefreshView.as_view(), name="token_refresh"),
    path("account/profile/", CurrentUserView.as_view(), name="current_user"),
]
