"""Shared DRF permission classes."""

import hmac
import logging

from django.conf import settings
from rest_framework.permissions import BasePermission

security_logger = logging.getLogger("manicvanity.security")


class HasDemoAdminSecret(BasePermission):
    """Allow access only when `X-Admin-Secret` matches `DEMO_ADMIN_SECRET`.

    An empty `DEMO_ADMIN_SECRET` disables the guarded endpoints entirely.
    """

    message = "Unauthorized"

    def has_permission(self, request, view) -> bool:
        expected = getattr(settings, "DEMO_ADMIN_SECRET", "") or ""
        provided = request.headers.get("X-Admin-Secret") or ""
        if expected and provided and hmac.compare_digest(provided.encode(), expected.encode()):
            return True
        security_logger.warning(
            "demo_admin.denied",
            extra={"event": "demo_admin.denied", "path": request.path, "ip": request.META.get("REMOTE_ADDR")},
        )
        return False
