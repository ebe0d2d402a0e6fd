import pytest
from cart.models import Cart, CartItem
from catalog.tests.factories import ProductFactory, ProductVariantFactory
from django.db import IntegrityError, transaction
from users.tests.factories import UserFactory


@pytest.mark.django_db
def test_one_active_cart_per_user():
    user = UserFactory()
    Cart.objects.create(user=user)
    with pytest.raises(IntegrityError), transaction.atomic():
        Cart.objects.create(user=user)


@pytest.mark.django_db
def test_duplicate_plain_product_line_rejected():
    cart = Cart.objects.create(user=UserFactory())
    product = ProductFactory()
    CartItem.objects.create(cart=cart, product=product, quantity=1)
    with pytest.raises(IntegrityError), transaction.atomic():
        CartItem.objects.create(cart=cart, product=product, quantity=1)


@pytest.mark.django_db
def test_duplicate_variant_line_rejected():
    cart = Cart.objects.create(user=UserFactory())
    variant = ProductVariantFactory()
    CartItem.objects.create(cart=cart, product=variant.product, variant=variant, quantity=1)
    with pytest.raises(IntegrityError), transaction.atomic():
        CartItem.objects.create(cart=cart, product=variant.product, variant=variant, quantity=2)


@pytest.mark.django_db
def test_zero_quantity_rejected():
    cart = Cart.objects.create(user=UserFactory())
    with pytest.raises(IntegrityError), transaction.atomic():
        CartItem.objects.create(cart=cart, product=ProductFactory(), quantity=0)
