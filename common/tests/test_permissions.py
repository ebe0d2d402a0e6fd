import pytest
from common.permissions import HasDemoAdminSecret
from rest_framework.test import APIRequestFactory

factory = APIRequestFactory()


def allowed(secret=None):
    headers = {"HTTP_X_ADMIN_SECRET": secret} if secret is not None else {}
    return HasDemoAdminSecret().has_permission(factory.post("/api/v1/admin/demo/reseed/", **headers), view=None)


def test_matching_secret_is_allowed(settings):
    settings.DEMO_ADMIN_SECRET = "s3cret"
    assert allowed("s3cret") is True


def test_missing_or_wrong_secret_is_denied(settings):
    settings.DEMO_ADMIN_SECRET = "s3cret"
    assert allowed() is False
    assert allowed("S3CRET") is False
    assert allowed("s3cret ") is False


def test_unset_secret_denies_everyone(settings, caplog):
    settings.DEMO_ADMIN_SECRET = ""
    assert allowed("") is False
    assert any(r.name == "manicvanity.security" for r in caplog.records)
