import pytest
from catalog.tests.factories import ProductVariantFactory
from inventory.models import StockMovement
from inventory.services import MovementError, decrement_variant_stock, restock_variant


@pytest.mark.django_db
def test_decrement_reduces_stock_and_records_outbound_movement():
    v = ProductVariantFactory(stock=5)

    assert decrement_variant_stock(variant_id=v.id, quantity=2, reference="MV-000001") is True

    v.refresh_from_db()
    assert v.stock == 3
    movement = StockMovement.objects.get(variant=v)
    assert movement.movement_type == StockMovement.TYPE_OUTBOUND
    assert movement.quantity == -2
    assert movement.reference == "MV-000001"


@pytest.mark.django_db
def test_decrement_insufficient_stock_changes_nothing():
    v = ProductVariantFactory(stock=1)

    assert decrement_variant_stock(variant_id=v.id, quantity=2) is False

    v.refresh_from_db()
    assert v.stock == 1
    assert not StockMovement.objects.exists()


@pytest.mark.django_db
def test_sequential_decrements_never_go_negative():
    v = ProductVariantFactory(stock=1)

    results = [decrement_variant_stock(variant_id=v.id, quantity=1) for _ in range(2)]

    v.refresh_from_db()
    assert results == [True, False]
    assert v.stock == 0


@pytest.mark.django_db
def test_decrement_missing_variant_returns_false():
    assert decrement_variant_stock(variant_id=999999, quantity=1) is False


@pytest.mark.django_db
def test_decrement_rejects_non_positive_quantity():
    v = ProductVariantFactory(stock=3)
    with pytest.raises(MovementError):
        decrement_variant_stock(variant_id=v.id, quantity=0)


@pytest.mark.django_db
def test_restock_adds_stock_and_records_inbound_movement():
    v = ProductVariantFactory(stock=2)

    movement = restock_variant(variant_id=v.id, quantity=10, reason="demo_reseed")

    v.refresh_from_db()
    assert v.stock == 12
    assert movement.movement_type == StockMovement.TYPE_INBOUND
    assert movement.quantity == 10


@pytest.mark.django_db
def test_insufficient_stock_logged_on_inventory_logger(caplog):
    v = ProductVariantFactory(stock=0)

    decrement_variant_stock(variant_id=v.id, quantity=1, reference="MV-000002")

    records = [r for r in caplog.records if getattr(r, "event", None) == "insufficient_stock"]
    assert [r.name for r in records] == ["manicvanity.inventory"]
    assert records[0].reference == "MV-000002"
