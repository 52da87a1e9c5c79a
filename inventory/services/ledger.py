"""Stock ledger: authoritative quantity per (radiator, warehouse) plus its history.

Every change goes through `_apply_movement`, which runs inside a transaction
with the StockLevel row locked (select_for_update), writes the new quantity
and appends exactly one StockHistory row. A reader therefore sees either both
the new quantity and its history row, or neither.

Lock order: when several rows are touched in one transaction (checkout,
refund), callers lock them sorted by (radiator_id, warehouse_id) to avoid
deadlocks between concurrent sales.
"""

import logging
from collections.abc import Mapping
from dataclasses import dataclass, field

from django.conf import settings
from django.db import IntegrityError, transaction
from django.db.models import Sum
from django.db.models.functions import Coalesce
from django.utils import timezone

from core.exceptions import InsufficientStockError, InventoryError, ValidationError
from inventory.models import StockHistory, StockLevel
from masterdata.models import Warehouse
from masterdata.services.directory import normalize_warehouse_code, resolve_radiator, resolve_warehouse

logger = logging.getLogger(__name__)

OUT_OF_STOCK = "Out of Stock"
LOW_STOCK = "Low Stock"
GOOD = "Good"

# Upper bound of the PositiveIntegerField quantity columns.
MAX_QUANTITY = 2147483647

CHANGE_TYPE_MAX_LENGTH = StockHistory._meta.get_field("change_type").max_length
NOTES_MAX_LENGTH = StockHistory._meta.get_field("notes").max_length


@dataclass(frozen=True)
class StockAdjustment:
    radiator_id: int
    warehouse_id: int
    warehouse_code: str
    old_quantity: int
    new_quantity: int
    quantity_change: int
    movement_type: str
    change_type: str
    history_id: int

    def as_dict(self):
        return {
            "radiator_id": self.radiator_id,
            "warehouse_id": self.warehouse_id,
            "warehouse_code": self.warehouse_code,
            "old_quantity": self.old_quantity,
            "new_quantity": self.new_quantity,
            "quantity_change": self.quantity_change,
            "movement_type": self.movement_type,
            "change_type": self.change_type,
            "history_id": self.history_id,
        }


@dataclass(frozen=True)
class BulkAdjustError:
    index: int
    radiator_id: object
    warehouse_code: object
    error: str
    code: str


@dataclass
class BulkAdjustResult:
    adjustments: list = field(default_factory=list)
    errors: list = field(default_factory=list)

    @property
    def success_count(self) -> int:
        return len(self.adjustments)

    @property
    def error_count(self) -> int:
        return len(self.errors)

    def as_dict(self):
        return {
            "success_count": self.success_count,
            "error_count": self.error_count,
            "adjustments": [a.as_dict() for a in self.adjustments],
            "errors": [
                {
                    "index": e.index,
                    "radiator_id": e.radiator_id,
                    "warehouse_code": e.warehouse_code,
                    "error": e.error,
                    "code": e.code,
                }
                for e in self.errors
            ],
        }


def _validate_quantity(value, field_name, *, minimum=0, maximum=MAX_QUANTITY) -> int:
    if isinstance(value, bool) or not isinstance(value, int):
        raise ValidationError(f"{field_name} must be an integer.", field=field_name)
    if value < minimum:
        raise ValidationError(f"{field_name} must be >= {minimum}.", field=field_name)
    if maximum is not None and value > maximum:
        raise ValidationError(f"{field_name} must be <= {maximum}.", field=field_name)
    return value


def _clean_text(value, field_name, max_length) -> str:
    if value is None:
        return ""
    if not isinstance(value, str):
        raise ValidationError(f"{field_name} must be text.", field=field_name)
    value = value.strip()
    if len(value) > max_length:
        raise ValidationError(f"{field_name} must be at most {max_length} characters.", field=field_name)
    return value


def _user_or_none(user):
    if user is None or not getattr(user, "is_authenticated", False):
        return None
    return user


def _lock_level(radiator_id, warehouse_id, *, create, now):
    """Return the locked StockLevel row, creating it when `create` is set.

    Must be called inside transaction.atomic(). Two transactions racing to
    create the same row: the loser hits the unique constraint, its savepoint
    is rolled back and it locks the winner's row instead.

    Only the stock row is locked; the joined warehouse row stays free so
    pairs sharing a warehouse do not queue behind each other.
    """
    qs = StockLevel.objects.select_for_update(of=("self",)).select_related("warehouse")
    level = qs.filter(radiator_id=radiator_id, warehouse_id=warehouse_id).first()
    if level is not None or not create:
        return level

    try:
        with transaction.atomic():
            StockLevel.objects.create(
                radiator_id=radiator_id,
                warehouse_id=warehouse_id,
                quantity=0,
                created_at=now,
                updated_at=now,
            )
    except IntegrityError:
        logger.info("Stock level for radiator %s @ warehouse %s created concurrently", radiator_id, warehouse_id)
    return qs.get(radiator_id=radiator_id, warehouse_id=warehouse_id)


def _apply_movement(level, new_quantity, *, change_type, now, sale=None, updated_by=None, notes=""):
    """Write the new quantity and its history row. Caller holds the row lock."""
    if new_quantity < 0:
        raise ValidationError("Stock quantity cannot become negative.", field="quantity")
    if new_quantity > MAX_QUANTITY:
        raise ValidationError(f"Stock quantity cannot exceed {MAX_QUANTITY}.", field="quantity")

    old_quantity = level.quantity
    quantity_change = new_quantity - old_quantity
    movement_type = StockHistory.movement_type_for(quantity_change)

    level.quantity = new_quantity
    level.updated_at = now
    level.save(update_fields=["quantity", "updated_at"])

    history = StockHistory.objects.create(
        radiator_id=level.radiator_id,
        warehouse_id=level.warehouse_id,
        old_quantity=old_quantity,
        new_quantity=new_quantity,
        quantity_change=quantity_change,
        movement_type=movement_type,
        change_type=change_type,
        sale=sale,
        updated_by=updated_by,
        notes=notes,
        created_at=now,
    )

    logger.info(
        "Stock %s (%s) radiator %s @ %s: %s -> %s",
        movement_type, change_type, level.radiator_id, level.warehouse.code, old_quantity, new_quantity,
    )

    return StockAdjustment(
        radiator_id=level.radiator_id,
        warehouse_id=level.warehouse_id,
        warehouse_code=level.warehouse.code,
        old_quantity=old_quantity,
        new_quantity=new_quantity,
        quantity_change=quantity_change,
        movement_type=movement_type,
        change_type=change_type,
        history_id=history.pk,
    )


def adjust_stock(radiator_id, warehouse_code, new_quantity, reason=None, updated_by=None, notes=None) -> StockAdjustment:
    """Set the absolute quantity of a radiator in a warehouse.

    Validation happens before the transaction opens: a negative quantity or a
    malformed code raises ValidationError, unknown radiator/warehouse raises
    NotFoundError, and nothing is written in either case.
    """
    new_quantity = _validate_quantity(new_quantity, "new_quantity")
    normalize_warehouse_code(warehouse_code)
    change_type = _clean_text(reason, "reason", CHANGE_TYPE_MAX_LENGTH) or StockHistory.ChangeType.MANUAL_UPDATE
    notes = _clean_text(notes, "notes", NOTES_MAX_LENGTH)

    radiator = resolve_radiator(radiator_id)
    warehouse = resolve_warehouse(warehouse_code)

    with transaction.atomic():
        now = timezone.now()
        level = _lock_level(radiator.pk, warehouse.pk, create=True, now=now)
        return _apply_movement(
            level,
            new_quantity,
            change_type=change_type,
            now=now,
            updated_by=_user_or_none(updated_by),
            notes=notes,
        )


def bulk_adjust_stock(items, updated_by=None, reason=None) -> BulkAdjustResult:
    """Apply each {radiator_id, warehouse_code, quantity} item on its own.

    A failing item is reported and skipped; it never undoes the others.
    """
    result = BulkAdjustResult()

    for index, item in enumerate(items):
        radiator_id = warehouse_code = None
        try:
            if not isinstance(item, Mapping):
                raise ValidationError("Each item must be an object.", field="items")
            radiator_id = item.get("radiator_id")
            warehouse_code = item.get("warehouse_code")
            adjustment = adjust_stock(
                radiator_id,
                warehouse_code,
                item.get("quantity"),
                reason=reason,
                updated_by=updated_by,
            )
        except InventoryError as e:
            logger.warning("Bulk stock item %s failed (%s): %s", index, e.code, e.message)
            result.errors.append(BulkAdjustError(
                index=index,
                radiator_id=radiator_id,
                warehouse_code=warehouse_code,
                error=e.message,
                code=e.code,
            ))
            continue
        result.adjustments.append(adjustment)

    logger.info("Bulk stock update: %s ok, %s failed", result.success_count, result.error_count)
    return result


@transaction.atomic
def decrement_for_sale(radiator_id, warehouse_id, quantity, sale) -> StockAdjustment:
    """Take `quantity` units out for a sale line.

    Meant to run inside the checkout transaction, so an InsufficientStockError
    here rolls back the whole sale.
    """
    quantity = _validate_quantity(quantity, "quantity", minimum=1)
    now = timezone.now()

    level = _lock_level(radiator_id, warehouse_id, create=False, now=now)
    available = level.quantity if level is not None else 0
    if available < quantity:
        code = level.warehouse.code if level is not None else (
            Warehouse.objects.filter(pk=warehouse_id).values_list("code", flat=True).first()
        )
        logger.warning(
            "Insufficient stock for radiator %s @ %s: requested %s, available %s",
            radiator_id, code, quantity, available,
        )
        raise InsufficientStockError(
            radiator_id=radiator_id,
            warehouse_id=warehouse_id,
            warehouse_code=code,
            requested=quantity,
            available=available,
        )

    return _apply_movement(
        level,
        available - quantity,
        change_type=StockHistory.ChangeType.SALE,
        now=now,
        sale=sale,
        updated_by=_user_or_none(getattr(sale, "processed_by", None)),
    )


@transaction.atomic
def restock_for_refund(radiator_id, warehouse_id, quantity, sale, updated_by=None) -> StockAdjustment:
    """Put refunded units back. The history row points at the refunded sale."""
    quantity = _validate_quantity(quantity, "quantity", minimum=1)
    now = timezone.now()

    level = _lock_level(radiator_id, warehouse_id, create=True, now=now)
    return _apply_movement(
        level,
        level.quantity + quantity,
        change_type=StockHistory.ChangeType.REFUND,
        now=now,
        sale=sale,
        updated_by=_user_or_none(updated_by),
        notes=f"Refund of sale {sale.sale_number}",
    )


def get_total_stock(radiator_id) -> int:
    """Sum of the radiator's quantity across all warehouses."""
    return StockLevel.objects.filter(radiator_id=radiator_id).aggregate(
        total=Coalesce(Sum("quantity"), 0)
    )["total"]


def get_stock_by_warehouse(radiator_id) -> dict[str, int]:
    """Warehouse code -> quantity for one radiator."""
    return dict(
        StockLevel.objects
        .filter(radiator_id=radiator_id)
        .order_by("warehouse__code")
        .values_list("warehouse__code", "quantity")
    )


def get_stock_status(quantity) -> str:
    quantity = _validate_quantity(quantity, "quantity", maximum=None)
    if quantity == 0:
        return OUT_OF_STOCK
    if quantity <= settings.STOCK_LOW_THRESHOLD:
        return LOW_STOCK
    return GOOD


def get_radiator_stock(radiator_id) -> dict:
    """Per-warehouse stock plus total and status for an existing radiator."""
    radiator = resolve_radiator(radiator_id)
    by_warehouse = get_stock_by_warehouse(radiator.pk)
    total = sum(by_warehouse.values())
    return {
        "radiator_id": radiator.pk,
        "code": radiator.code,
        "name": radiator.name,
        "brand": radiator.brand,
        "stock": by_warehouse,
        "total_stock": total,
        "status": get_stock_status(total),
    }
