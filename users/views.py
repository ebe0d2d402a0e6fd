"""Users app API views: sign-in (with guest cart merge), refresh, profile."""

from drf_spectacular.utils import OpenApiParameter, OpenApiResponse, extend_schema
from rest_framework import status
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response
from rest_framework.throttling import ScopedRateThrottle
from rest_framework.views import APIView
from rest_framework_simplejwt.views import TokenObtainPairView, TokenRefreshView

from cart.services import merge_guest_cart

from .logging import log_auth_event
from .serializers import EmailTokenObtainPairSerializer, UserMeSerializer


class SignInView(TokenObtainPairView):
    """Issue JWTs; when `X-Guest-Token` is sent the guest cart is merged."""

    throttle_classes = [ScopedRateThrottle]
    throttle_scope = "signin"
    serializer_class = EmailTokenObtainPairSerializer

    @extend_schema(
        tags=["User Endpoints"],
        parameters=[OpenApiParameter("X-Guest-Token", str, OpenApiParameter.HEADER, required=False)],
    )
    def post(self, request, *args, **kwargs):
        serializer = self.get_serializer(data=request.data)
        if not serializer.is_valid():
            log_auth_event("signin", request, outcome="failed")
            return Response(serializer.errors, status=status.HTTP_401_UNAUTHORIZED)

        user = serializer.user
        merged = 0
        guest_token = request.headers.get("X-Guest-Token")
        if guest_token:
            merged = merge_guest_cart(token=guest_token, user=user)
        log_auth_event("signin", request, user=user, merged_lines=merged)
        return Response(serializer.validated_data, status=status.HTTP_200_OK)


class RefreshView(TokenRefreshView):
    throttle_classes = [ScopedRateThrottle]
    throttle_scope = "token_refresh"

    @extend_schema(tags=["User Endpoints"])
    def post(self, request, *args, **kwargs):
        resp = super().post(request, *args, **kwargs)
        log_auth_event("token_refresh", request, outcome="success" if resp.status_code == 200 else "failed")
        return resp


class CurrentUserView(APIView):
    permission_classes = [IsAuthenticated]

    @extend_schema(
        tags=["User Endpoints"],
        summary="Get current user profile",
        responses={200: UserMeSerializer, 401: OpenApiResponse(description="Unauthorized")},
    )
    def get(self, request):
        return Response(UserMeSerializer(request.user).data)
