import pytest
from django.db import DatabaseError
from rest_framework.test import APIClient


@pytest.mark.django_db
def test_health_ok():
    resp = APIClient().get("/health/")
    assert resp.status_code == 200
    assert resp.json() == {"status": "ok"}


@pytest.mark.django_db
def test_health_reports_database_outage(monkeypatch):
    def broken_cursor():
        raise DatabaseError("connection refused")

    monkeypatch.setattr("config.health.connection.cursor", broken_cursor)

    resp = APIClient().get("/health/")

    assert resp.status_code == 503
    assert resp.json()["database"] == "unavailable"
