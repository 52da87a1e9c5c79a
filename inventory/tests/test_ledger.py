import pytest
from django.contrib.auth.models import AnonymousUser

from core.exceptions import InsufficientStockError, NotFoundError, ValidationError
from inventory.models import StockHistory, StockLevel
from inventory.services.ledger import (
    adjust_stock,
    decrement_for_sale,
    get_radiator_stock,
    get_stock_by_warehouse,
    get_stock_status,
    get_total_stock,
)


def test_first_adjustment_creates_level_and_incoming_history(radiator, warehouse):
    assert not StockLevel.objects.exists()

    result = adjust_stock(radiator.pk, "WH_AKL", 10, "Initial stock")

    level = StockLevel.objects.get(radiator=radiator, warehouse=warehouse)
    assert level.quantity == 10
    assert level.created_at == level.updated_at

    history = StockHistory.objects.get()
    assert (history.old_quantity, history.new_quantity, history.quantity_change) == (0, 10, 10)
    assert history.movement_type == StockHistory.MovementType.INCOMING
    assert history.change_type == "Initial stock"
    assert history.sale is None
    assert result.history_id == history.pk
    assert result.warehouse_code == "WH_AKL"


def test_lowering_quantity_is_outgoing(stocked):
    radiator, warehouse = stocked

    result = adjust_stock(radiator.pk, warehouse.code, 4)

    assert result.old_quantity == 10
    assert result.quantity_change == -6
    assert result.movement_type == StockHistory.MovementType.OUTGOING
    assert StockLevel.objects.get(radiator=radiator, warehouse=warehouse).quantity == 4


def test_zero_delta_still_records_history(stocked):
    radiator, warehouse = stocked

    result = adjust_stock(radiator.pk, warehouse.code, 10)

    assert result.quantity_change == 0
    assert result.movement_type == StockHistory.MovementType.INCOMING
    assert StockLevel.objects.get(radiator=radiator, warehouse=warehouse).quantity == 10
    assert StockHistory.objects.count() == 2


def test_reason_defaults_to_manual_update(radiator, warehouse):
    adjust_stock(radiator.pk, warehouse.code, 3)
    assert StockHistory.objects.get().change_type == "Manual Update"


def test_updated_by_and_notes_are_recorded(radiator, warehouse, staff_user):
    adjust_stock(radiator.pk, warehouse.code, 3, updated_by=staff_user, notes="  counted  ")
    adjust_stock(radiator.pk, warehouse.code, 4, updated_by=AnonymousUser())

    first, second = StockHistory.objects.order_by("id")
    assert first.updated_by == staff_user
    assert first.notes == "counted"
    assert second.updated_by is None


def test_warehouse_code_is_case_insensitive(radiator, warehouse):
    result = adjust_stock(radiator.pk, " wh_akl ", 2)
    assert result.warehouse_id == warehouse.pk


@pytest.mark.parametrize("quantity", [-1, -100, 1.5, "5", None, True, 2**31])
def test_invalid_quantity_is_rejected_before_any_write(stocked, quantity):
    radiator, warehouse = stocked

    with pytest.raises(ValidationError) as exc:
        adjust_stock(radiator.pk, warehouse.code, quantity)

    assert exc.value.field == "new_quantity"
    assert StockLevel.objects.get(radiator=radiator, warehouse=warehouse).quantity == 10
    assert StockHistory.objects.count() == 1


def test_unknown_warehouse_is_not_found(radiator, warehouse):
    with pytest.raises(NotFoundError) as exc:
        adjust_stock(radiator.pk, "WH_NOPE", 5)

    assert exc.value.resource == "Warehouse"
    assert not StockLevel.objects.exists()
    assert not StockHistory.objects.exists()


@pytest.mark.parametrize("code", ["", "   ", None, 42, "WAREHOUSE_TOO_LONG"])
def test_malformed_warehouse_code_is_a_validation_error(radiator, warehouse, code):
    with pytest.raises(ValidationError) as exc:
        adjust_stock(radiator.pk, code, 5)
    assert exc.value.field == "warehouse_code"
    assert not StockHistory.objects.exists()


def test_unknown_radiator_is_not_found(warehouse):
    with pytest.raises(NotFoundError) as exc:
        adjust_stock(999999, warehouse.code, 5)
    assert exc.value.resource == "Radiator"


def test_reason_longer_than_column_is_rejected(radiator, warehouse):
    with pytest.raises(ValidationError) as exc:
        adjust_stock(radiator.pk, warehouse.code, 5, reason="x" * 101)
    assert exc.value.field == "reason"


def test_history_chain_composes(radiator, warehouse):
    for quantity in (5, 12, 0, 7, 7, 3):
        adjust_stock(radiator.pk, warehouse.code, quantity)

    rows = list(StockHistory.objects.order_by("id"))
    previous = 0
    for row in rows:
        assert row.old_quantity == previous
        assert row.new_quantity - row.old_quantity == row.quantity_change
        expected = "OUTGOING" if row.quantity_change < 0 else "INCOMING"
        assert row.movement_type == expected
        previous = row.new_quantity

    assert StockLevel.objects.get(radiator=radiator, warehouse=warehouse).quantity == previous == 3
    assert StockLevel.objects.count() == 1


def test_history_rows_are_immutable(stocked):
    history = StockHistory.objects.get()

    history.notes = "tampered"
    with pytest.raises(ValueError):
        history.save()
    with pytest.raises(ValueError):
        history.delete()

    assert StockHistory.objects.get().notes == ""


def test_total_stock_sums_all_warehouses(radiator, warehouse, other_warehouse, other_radiator):
    assert get_total_stock(radiator.pk) == 0

    adjust_stock(radiator.pk, warehouse.code, 7)
    adjust_stock(radiator.pk, other_warehouse.code, 5)
    adjust_stock(other_radiator.pk, warehouse.code, 100)

    assert get_total_stock(radiator.pk) == 12
    assert get_stock_by_warehouse(radiator.pk) == {"WH_AKL": 7, "WH_WLG": 5}


def test_radiator_stock_includes_status(radiator, warehouse):
    adjust_stock(radiator.pk, warehouse.code, 4)

    data = get_radiator_stock(radiator.pk)

    assert data["total_stock"] == 4
    assert data["status"] == "Low Stock"
    assert data["stock"] == {"WH_AKL": 4}


@pytest.mark.parametrize(
    "quantity, status",
    [(0, "Out of Stock"), (1, "Low Stock"), (5, "Low Stock"), (6, "Good"), (500, "Good")],
)
def test_stock_status(quantity, status):
    assert get_stock_status(quantity) == status


def test_stock_status_threshold_comes_from_settings(settings):
    settings.STOCK_LOW_THRESHOLD = 10
    assert get_stock_status(8) == "Low Stock"


def test_stock_status_accepts_totals_beyond_one_row():
    assert get_stock_status(2**31) == "Good"


def test_stock_status_rejects_negative():
    with pytest.raises(ValidationError):
        get_stock_status(-1)


def test_decrement_without_stock_row_reports_zero_available(radiator, warehouse):
    with pytest.raises(InsufficientStockError) as exc:
        decrement_for_sale(radiator.pk, warehouse.pk, 1, sale=None)

    err = exc.value
    assert (err.requested, err.available) == (1, 0)
    assert err.warehouse_code == "WH_AKL"
    assert not StockLevel.objects.exists()


def test_decrement_rejects_more_than_available(stocked):
    radiator, warehouse = stocked

    with pytest.raises(InsufficientStockError) as exc:
        decrement_for_sale(radiator.pk, warehouse.pk, 11, sale=None)

    assert exc.value.as_dict() == {
        "code": "insufficient_stock",
        "detail": exc.value.message,
        "radiator_id": radiator.pk,
        "warehouse_id": warehouse.pk,
        "warehouse_code": "WH_AKL",
        "requested": 11,
        "available": 10,
    }
    assert StockLevel.objects.get().quantity == 10
    assert StockHistory.objects.count() == 1
