import pytest
from django_fsm_log.models import StateLog

from core.exceptions import ConflictError, NotFoundError, ValidationError
from inventory.models import StockHistory, StockLevel
from inventory.services.ledger import MAX_QUANTITY, adjust_stock
from sales.models import Sale
from sales.services.checkout import create_sale
from sales.services.lifecycle import cancel_sale, refund_sale


@pytest.fixture
def sale(stocked, customer, staff_user):
    radiator, warehouse = stocked
    return create_sale(
        customer.pk,
        "Card",
        [{"radiator_id": radiator.pk, "warehouse_id": warehouse.pk, "quantity": 4, "unit_price": "420.00"}],
        processed_by=staff_user,
    )


def _quantity():
    return StockLevel.objects.get(warehouse__code="WH_AKL").quantity


def test_cancel_keeps_stock_out(sale, shop_admin):
    assert _quantity() == 6

    cancelled = cancel_sale(sale.pk, by=shop_admin)

    assert cancelled.status == Sale.Status.CANCELLED
    assert cancelled.cancelled_by == shop_admin
    assert cancelled.cancelled_at is not None
    assert _quantity() == 6
    assert not StockHistory.objects.filter(change_type="Refund").exists()

    log = StateLog.objects.get(object_id=sale.pk, transition="cancel")
    assert log.state == Sale.Status.CANCELLED
    assert log.by == shop_admin


def test_refund_restocks_every_line(sale, shop_admin):
    refunded = refund_sale(sale.pk, by=shop_admin)

    assert refunded.status == Sale.Status.REFUNDED
    assert refunded.refunded_by == shop_admin
    assert Sale.objects.get(pk=sale.pk).status == Sale.Status.REFUNDED
    assert _quantity() == 10

    history = StockHistory.objects.get(change_type="Refund")
    assert history.sale_id == sale.pk
    assert (history.old_quantity, history.new_quantity) == (6, 10)
    assert history.movement_type == StockHistory.MovementType.INCOMING
    assert history.updated_by == shop_admin
    assert sale.sale_number in history.notes


def test_cancelled_sale_cannot_be_refunded(sale):
    cancel_sale(sale.pk)

    with pytest.raises(ConflictError) as exc:
        refund_sale(sale.pk)

    assert exc.value.details["status"] == Sale.Status.CANCELLED
    assert _quantity() == 6


def test_refund_twice_is_conflict(sale):
    refund_sale(sale.pk)

    with pytest.raises(ConflictError):
        refund_sale(sale.pk)
    with pytest.raises(ConflictError):
        cancel_sale(sale.pk)

    assert _quantity() == 10
    assert StockHistory.objects.filter(change_type="Refund").count() == 1


def test_unknown_sale(db):
    with pytest.raises(NotFoundError):
        cancel_sale(123456)
    with pytest.raises(ValidationError):
        refund_sale("12")


def test_status_cannot_be_assigned_directly(sale):
    with pytest.raises(AttributeError):
        sale.status = Sale.Status.REFUNDED


def test_deleting_a_sale_keeps_its_history(sale):
    Sale.objects.filter(pk=sale.pk).delete()

    history = StockHistory.objects.get(change_type="Sale")
    assert history.sale_id is None
    assert history.quantity_change == -4


def test_refund_that_would_overflow_the_row_is_rejected(sale):
    adjust_stock(sale.items.get().radiator_id, "WH_AKL", MAX_QUANTITY)

    with pytest.raises(ValidationError) as exc:
        refund_sale(sale.pk)

    assert exc.value.field == "quantity"
    assert Sale.objects.get(pk=sale.pk).status == Sale.Status.COMPLETED
    assert _quantity() == MAX_QUANTITY


def test_completed_sale_transitions(sale):
    assert {t.name for t in sale.get_available_status_transitions()} == {"cancel", "refund"}
