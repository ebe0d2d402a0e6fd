import pytest
from catalog.tests.factories import ProductFactory, ProductVariantFactory
from rest_framework.test import APIClient
from users.tests.factories import UserFactory


@pytest.mark.django_db
def test_cart_requires_user_or_guest_token():
    resp = APIClient().get("/api/v1/cart/")
    assert resp.status_code == 400


@pytest.mark.django_db
def test_malformed_guest_token_rejected():
    resp = APIClient().get("/api/v1/cart/", HTTP_X_GUEST_TOKEN="bad token!")
    assert resp.status_code == 400


@pytest.mark.django_db
def test_add_unknown_product_returns_generic_error():
    client = APIClient()
    client.force_authenticate(user=UserFactory())

    resp = client.post("/api/v1/cart/items/", {"product_id": 999999}, format="json")

    assert resp.status_code == 400
    assert resp.json()["detail"] == "Unable to update cart."


@pytest.mark.django_db
def test_add_variant_of_other_product_rejected():
    product = ProductFactory()
    foreign_variant = ProductVariantFactory()
    client = APIClient()
    client.force_authenticate(user=UserFactory())

    resp = client.post(
        "/api/v1/cart/items/",
        {"product_id": product.id, "variant_id": foreign_variant.id},
        format="json",
    )

    assert resp.status_code == 400


@pytest.mark.django_db
def test_add_non_positive_quantity_is_validation_error():
    product = ProductFactory()
    client = APIClient()
    client.force_authenticate(user=UserFactory())

    resp = client.post("/api/v1/cart/items/", {"product_id": product.id, "quantity": 0}, format="json")

    assert resp.status_code == 400


@pytest.mark.django_db
def test_update_unknown_line_is_404_and_delete_unknown_is_noop():
    client = APIClient()
    client.force_authenticate(user=UserFactory())

    assert client.patch("/api/v1/cart/items/424242/", {"quantity": 2}, format="json").status_code == 404
    assert client.delete("/api/v1/cart/items/424242/").status_code == 204


@pytest.mark.django_db
def test_merge_endpoint_requires_authentication():
    resp = APIClient().post("/api/v1/cart/merge-guest/", HTTP_X_GUEST_TOKEN="guest-token-0001")
    assert resp.status_code == 401
