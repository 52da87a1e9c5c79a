import re
from datetime import datetime, timezone as dt_timezone
from decimal import Decimal

import pytest

from core.exceptions import ConflictError, InsufficientStockError, NotFoundError, ValidationError
from inventory.models import StockHistory, StockLevel
from inventory.services.ledger import adjust_stock
from sales.models import Sale, SaleItem
from sales.services import numbering
from sales.services.checkout import SaleLine, compute_totals, create_sale, generate_sale_number, parse_price


def _line(radiator, warehouse, quantity=1, unit_price="100.00"):
    return {
        "radiator_id": radiator.pk,
        "warehouse_id": warehouse.pk,
        "quantity": quantity,
        "unit_price": unit_price,
    }


def test_sale_decrements_stock_and_links_history(stocked, customer, staff_user):
    radiator, warehouse = stocked

    sale = create_sale(
        customer.pk, "Cash", [_line(radiator, warehouse, quantity=3, unit_price="420.00")], processed_by=staff_user
    )

    assert sale.status == Sale.Status.COMPLETED
    assert sale.sub_total == Decimal("1260.00")
    assert sale.tax_amount == Decimal("189.00")
    assert sale.total_amount == Decimal("1449.00")
    assert sale.processed_by == staff_user

    (item,) = sale.items.all()
    assert (item.line_no, item.quantity, item.total_price) == (1, 3, Decimal("1260.00"))

    assert StockLevel.objects.get(radiator=radiator, warehouse=warehouse).quantity == 7
    history = StockHistory.objects.get(sale=sale)
    assert (history.old_quantity, history.new_quantity, history.quantity_change) == (10, 7, -3)
    assert history.movement_type == StockHistory.MovementType.OUTGOING
    assert history.change_type == "Sale"
    assert history.updated_by == staff_user


def test_sale_is_all_or_nothing(stocked, other_radiator, customer):
    radiator, warehouse = stocked
    adjust_stock(other_radiator.pk, warehouse.code, 1)
    history_before = StockHistory.objects.count()

    with pytest.raises(InsufficientStockError) as exc:
        create_sale(customer.pk, "Card", [
            _line(radiator, warehouse, quantity=2),
            _line(other_radiator, warehouse, quantity=5),
        ])

    err = exc.value
    assert (err.radiator_id, err.requested, err.available) == (other_radiator.pk, 5, 1)
    assert not Sale.objects.exists()
    assert not SaleItem.objects.exists()
    assert StockHistory.objects.count() == history_before
    assert StockLevel.objects.get(radiator=radiator, warehouse=warehouse).quantity == 10
    assert StockLevel.objects.get(radiator=other_radiator, warehouse=warehouse).quantity == 1


def test_same_radiator_on_two_lines_draws_down_twice(stocked, customer):
    radiator, warehouse = stocked

    create_sale(customer.pk, "Cash", [_line(radiator, warehouse, 4), _line(radiator, warehouse, 6)])

    assert StockLevel.objects.get(radiator=radiator, warehouse=warehouse).quantity == 0
    changes = StockHistory.objects.filter(change_type="Sale").order_by("id").values_list("new_quantity", flat=True)
    assert list(changes) == [6, 0]


def test_second_line_over_remaining_stock_fails(stocked, customer):
    radiator, warehouse = stocked

    with pytest.raises(InsufficientStockError):
        create_sale(customer.pk, "Cash", [_line(radiator, warehouse, 6), _line(radiator, warehouse, 6)])

    assert StockLevel.objects.get().quantity == 10


def test_sale_number_format(stocked, customer):
    radiator, warehouse = stocked

    sale = create_sale(customer.pk, "Cash", [_line(radiator, warehouse)])

    assert re.fullmatch(r"RS\d{14}\d{3}", sale.sale_number)


def test_generate_sale_number_uses_utc_timestamp():
    number = generate_sale_number(now=datetime(2025, 3, 14, 9, 30, 12, tzinfo=dt_timezone.utc))
    assert number.startswith("RS20250314093012")
    assert 100 <= int(number[-3:]) <= 999


def test_sale_number_collision_is_retried(stocked, customer, monkeypatch):
    radiator, warehouse = stocked
    first = create_sale(customer.pk, "Cash", [_line(radiator, warehouse)])

    numbers = iter([first.sale_number, "RS20990101000000123"])
    monkeypatch.setattr(numbering, "generate_number", lambda prefix, now=None: next(numbers))

    second = create_sale(customer.pk, "Cash", [_line(radiator, warehouse)])

    assert second.sale_number == "RS20990101000000123"
    assert StockLevel.objects.get().quantity == 8


def test_sale_number_collisions_exhausted_is_conflict(stocked, customer, monkeypatch, settings):
    radiator, warehouse = stocked
    first = create_sale(customer.pk, "Cash", [_line(radiator, warehouse)])
    monkeypatch.setattr(numbering, "generate_number", lambda prefix, now=None: first.sale_number)

    with pytest.raises(ConflictError) as exc:
        create_sale(customer.pk, "Cash", [_line(radiator, warehouse)])

    assert exc.value.details["attempts"] == settings.SALE_NUMBER_MAX_ATTEMPTS
    assert Sale.objects.count() == 1
    assert StockLevel.objects.get().quantity == 9


@pytest.mark.parametrize(
    "items, field",
    [
        ([], "items"),
        (None, "items"),
        (["nope"], "items[0]"),
        ([{"radiator_id": 1, "warehouse_id": 1, "quantity": 0, "unit_price": "1"}], "items[0].quantity"),
        ([{"radiator_id": 1, "warehouse_id": 1, "quantity": -2, "unit_price": "1"}], "items[0].quantity"),
        ([{"radiator_id": 1, "warehouse_id": 1, "quantity": 1, "unit_price": "-1"}], "items[0].unit_price"),
        ([{"radiator_id": 1, "warehouse_id": 1, "quantity": 1, "unit_price": "abc"}], "items[0].unit_price"),
        ([{"radiator_id": 1, "warehouse_id": 1, "quantity": 1}], "items[0].unit_price"),
        ([{"warehouse_id": 1, "quantity": 1, "unit_price": "1"}], "items[0].radiator_id"),
        ([{"radiator_id": 1, "warehouse_id": 1, "quantity": 2**31, "unit_price": "1"}], "items[0].quantity"),
        ([{"radiator_id": 1, "warehouse_id": 1, "quantity": 1, "unit_price": "1e13"}], "items[0].unit_price"),
        ([{"radiator_id": 1, "warehouse_id": 1, "quantity": 1000, "unit_price": "9999999999.99"}], "items[0].quantity"),
        ([{"radiator_id": 1, "warehouse_id": 1, "quantity": 100, "unit_price": "6000000000"}] * 2, "items"),
    ],
)
def test_malformed_items_are_rejected(customer, items, field):
    with pytest.raises(ValidationError) as exc:
        create_sale(customer.pk, "Cash", items)
    assert exc.value.field == field
    assert not Sale.objects.exists()


def test_unknown_payment_method(stocked, customer):
    radiator, warehouse = stocked
    with pytest.raises(ValidationError) as exc:
        create_sale(customer.pk, "Bitcoin", [_line(radiator, warehouse)])
    assert exc.value.field == "payment_method"


def test_unknown_or_inactive_customer(stocked, customer):
    radiator, warehouse = stocked

    with pytest.raises(NotFoundError):
        create_sale(424242, "Cash", [_line(radiator, warehouse)])

    customer.is_active = False
    customer.save()
    with pytest.raises(NotFoundError) as exc:
        create_sale(customer.pk, "Cash", [_line(radiator, warehouse)])
    assert exc.value.resource == "Customer"
    assert StockLevel.objects.get().quantity == 10


def test_unknown_warehouse_id(stocked, customer):
    radiator, _ = stocked
    with pytest.raises(NotFoundError) as exc:
        create_sale(customer.pk, "Cash", [{"radiator_id": radiator.pk, "warehouse_id": 9999, "quantity": 1,
                                           "unit_price": "1"}])
    assert exc.value.resource == "Warehouse"


def test_totals_round_half_up():
    lines = [SaleLine(radiator_id=1, warehouse_id=1, quantity=3, unit_price=Decimal("19.99"))]
    totals = compute_totals(lines)
    assert totals.sub_total == Decimal("59.97")
    assert totals.tax_amount == Decimal("9.00")
    assert totals.total_amount == Decimal("68.97")

    # 0.10 * 0.15 = 0.015 rounds up
    assert compute_totals([SaleLine(1, 1, 1, Decimal("0.10"))]).tax_amount == Decimal("0.02")
    assert compute_totals([SaleLine(1, 1, 1, Decimal("0.10"))], tax_rate=0).tax_amount == Decimal("0.00")


@pytest.mark.parametrize(
    "raw, expected",
    [
        (10, Decimal("10.00")),
        ("12.345", Decimal("12.35")),
        (0.1, Decimal("0.10")),
        (Decimal("5"), Decimal("5.00")),
        ("9999999999.99", Decimal("9999999999.99")),
    ],
)
def test_parse_price(raw, expected):
    assert parse_price(raw, "unit_price") == expected


@pytest.mark.parametrize(
    "raw", [True, None, "NaN", float("inf"), "1e", -0.01, "1e13", "1e40", "10000000000", "9999999999.995"]
)
def test_parse_price_rejects(raw):
    with pytest.raises(ValidationError):
        parse_price(raw, "unit_price")
