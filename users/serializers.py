"""Serializers for sign-in and the current user's profile."""

from rest_framework import serializers
from rest_framework_simplejwt.tokens import RefreshToken

from .models import User


class UserMeSerializer(serializers.ModelSerializer):
    class Meta:
        model = User
        fields = ["id", "username", "email", "first_name", "last_name"]


class EmailTokenObtainPairSerializer(serializers.Serializer):
    """Obtain JWTs by authenticating with an email address and password.

    The authenticated user is exposed as `self.user` after validation so the
    view can run post-sign-in work (guest cart merge).
    """

    email = serializers.EmailField()
    password = serializers.CharField(write_only=True)

    def validate(self, attrs):
        email = (attrs.get("email") or "").strip().lower()
        password = attrs.get("password") or ""

        try:
            user = User.objects.get(email=email)
        except User.DoesNotExist:
            user = None

        if not user or not user.is_active or not user.check_password(password):
            raise serializers.ValidationError({"detail": "Invalid credentials."})

        self.user = user
        refresh = RefreshToken.for_user(user)
        return {"access": str(refresh.access_token), "refresh": str(refresh)}
