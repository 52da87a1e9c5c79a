"""Read-only views over the stock ledger (dashboards, stock page, movement feed)."""

import logging
from dataclasses import dataclass

from django.conf import settings
from django.core.paginator import EmptyPage, Paginator
from django.db.models import Count, Prefetch, Q, Sum
from django.db.models.functions import Coalesce

from core.exceptions import ValidationError
from inventory.models import StockHistory, StockLevel
from inventory.services.ledger import get_stock_status
from masterdata.models import Radiator, Warehouse
from masterdata.services.directory import normalize_warehouse_code, resolve_radiator, resolve_warehouse

logger = logging.getLogger(__name__)


def _threshold(value=None) -> int:
    if value is None:
        return settings.STOCK_LOW_THRESHOLD
    if isinstance(value, bool) or not isinstance(value, int) or value < 0:
        raise ValidationError("threshold must be a non-negative integer.", field="threshold")
    return value


def _level_row(level, **extra):
    return {
        "radiator_id": level.radiator_id,
        "radiator_name": level.radiator.name,
        "radiator_code": level.radiator.code,
        "brand": level.radiator.brand,
        "warehouse_code": level.warehouse.code,
        "warehouse_name": level.warehouse.name,
        "current_stock": level.quantity,
        "last_updated": level.updated_at,
        **extra,
    }


def low_stock_items(threshold=None) -> list[dict]:
    """Stock levels with 0 < quantity <= threshold."""
    threshold = _threshold(threshold)
    qs = (
        StockLevel.objects
        .filter(quantity__gt=0, quantity__lte=threshold)
        .select_related("radiator", "warehouse")
        .order_by("quantity", "radiator__code", "warehouse__code")
    )
    return [_level_row(level, threshold=threshold) for level in qs]


def out_of_stock_items() -> list[dict]:
    qs = (
        StockLevel.objects
        .filter(quantity=0)
        .select_related("radiator", "warehouse")
        .order_by("radiator__code", "warehouse__code")
    )
    return [_level_row(level) for level in qs]


def stock_summary() -> dict:
    """Dashboard totals plus one summary per warehouse.

    Warehouses without any stock row still appear, with zeros.
    """
    threshold = settings.STOCK_LOW_THRESHOLD
    low = Q(quantity__gt=0, quantity__lte=threshold)

    totals = StockLevel.objects.aggregate(
        total_stock=Coalesce(Sum("quantity"), 0),
        low_stock=Count("id", filter=low),
        out_of_stock=Count("id", filter=Q(quantity=0)),
    )

    warehouses = Warehouse.objects.annotate(
        total_stock=Coalesce(Sum("stock_levels__quantity"), 0),
        unique_items=Count("stock_levels"),
        low_stock=Count(
            "stock_levels",
            filter=Q(stock_levels__quantity__gt=0, stock_levels__quantity__lte=threshold),
        ),
        out_of_stock=Count("stock_levels", filter=Q(stock_levels__quantity=0)),
    ).order_by("code")

    return {
        "total_radiators": Radiator.objects.count(),
        "total_stock_items": totals["total_stock"],
        "low_stock_items": totals["low_stock"],
        "out_of_stock_items": totals["out_of_stock"],
        "warehouse_summaries": [
            {
                "code": w.code,
                "name": w.name,
                "total_stock": w.total_stock,
                "unique_items": w.unique_items,
                "low_stock_items": w.low_stock,
                "out_of_stock_items": w.out_of_stock,
            }
            for w in warehouses
        ],
    }


def warehouse_stock(warehouse_code) -> dict:
    """Every stocked radiator of one warehouse with its status."""
    warehouse = resolve_warehouse(warehouse_code)
    levels = (
        StockLevel.objects
        .filter(warehouse=warehouse)
        .select_related("radiator", "warehouse")
        .order_by("radiator__brand", "radiator__code")
    )

    items = [_level_row(level, status=get_stock_status(level.quantity)) for level in levels]
    return {
        "warehouse_code": warehouse.code,
        "warehouse_name": warehouse.name,
        "location": warehouse.location,
        "total_items": len(items),
        "total_stock": sum(i["current_stock"] for i in items),
        "low_stock_items": sum(1 for i in items if i["status"] == "Low Stock"),
        "out_of_stock_items": sum(1 for i in items if i["status"] == "Out of Stock"),
        "items": items,
    }


def radiators_with_stock(search=None, low_stock_only=False, warehouse_code=None) -> list[dict]:
    """Catalog joined with per-warehouse stock, in two queries.

    low_stock_only keeps radiators with at least one warehouse at or below
    the threshold (out of stock included); with warehouse_code it must be
    that warehouse.
    """
    threshold = settings.STOCK_LOW_THRESHOLD
    qs = Radiator.objects.prefetch_related(
        Prefetch("stock_levels", queryset=StockLevel.objects.select_related("warehouse").order_by("warehouse__code"))
    )

    search = (search or "").strip()
    if search:
        qs = qs.filter(Q(name__icontains=search) | Q(code__icontains=search) | Q(brand__icontains=search))

    # One filter() call so both conditions apply to the same stock row.
    level_filter = {}
    if warehouse_code:
        level_filter["stock_levels__warehouse__code"] = normalize_warehouse_code(warehouse_code)
    if low_stock_only:
        level_filter["stock_levels__quantity__lte"] = threshold
    if level_filter:
        qs = qs.filter(**level_filter)

    rows = []
    for radiator in qs.distinct():
        stock = {level.warehouse.code: level.quantity for level in radiator.stock_levels.all()}
        total = sum(stock.values())
        rows.append({
            "id": radiator.pk,
            "name": radiator.name,
            "code": radiator.code,
            "brand": radiator.brand,
            "year": radiator.year,
            "retail_price": radiator.retail_price,
            "trade_price": radiator.trade_price,
            "cost_price": radiator.cost_price,
            "is_price_overridable": radiator.is_price_overridable,
            "max_discount_percent": radiator.max_discount_percent,
            "stock": stock,
            "total_stock": total,
            "status": get_stock_status(total),
            "has_low_stock": any(0 < q <= threshold for q in stock.values()),
            "has_out_of_stock": any(q == 0 for q in stock.values()),
            "created_at": radiator.created_at,
            "updated_at": radiator.updated_at,
        })

    logger.debug("radiators_with_stock returned %s rows", len(rows))
    return rows


@dataclass(frozen=True)
class MovementPage:
    items: list
    page: int
    page_size: int
    total_count: int
    num_pages: int

    @property
    def has_next(self) -> bool:
        return self.page < self.num_pages

    def as_dict(self):
        return {
            "items": self.items,
            "page": self.page,
            "page_size": self.page_size,
            "total_count": self.total_count,
            "num_pages": self.num_pages,
            "has_next": self.has_next,
        }


def _movement_row(h):
    sale = h.sale
    return {
        "id": h.pk,
        "radiator_id": h.radiator_id,
        "radiator_name": h.radiator.name,
        "radiator_code": h.radiator.code,
        "brand": h.radiator.brand,
        "warehouse_code": h.warehouse.code,
        "warehouse_name": h.warehouse.name,
        "old_quantity": h.old_quantity,
        "new_quantity": h.new_quantity,
        "quantity_change": h.quantity_change,
        "movement_type": h.movement_type,
        "change_type": h.change_type,
        "notes": h.notes,
        "sale_id": h.sale_id,
        "sale_number": sale.sale_number if sale else None,
        "customer_name": sale.customer.full_name if sale else None,
        "updated_by": h.updated_by.get_username() if h.updated_by_id else None,
        "created_at": h.created_at,
    }


def stock_movements(
    radiator_id=None,
    warehouse_code=None,
    date_from=None,
    date_to=None,
    movement_type=None,
    page=1,
    page_size=None,
) -> MovementPage:
    """Reverse-chronological movement feed, newest first.

    date_from / date_to are inclusive datetimes. An unknown radiator or
    warehouse raises NotFoundError rather than returning an empty page.
    """
    if page_size is None:
        page_size = settings.STOCK_MOVEMENTS_PAGE_SIZE
    for name, value in (("page", page), ("page_size", page_size)):
        if isinstance(value, bool) or not isinstance(value, int) or value < 1:
            raise ValidationError(f"{name} must be a positive integer.", field=name)
    page_size = min(page_size, settings.STOCK_MOVEMENTS_MAX_PAGE_SIZE)

    qs = StockHistory.objects.select_related(
        "radiator", "warehouse", "sale", "sale__customer", "updated_by"
    ).order_by("-created_at", "-id")

    if radiator_id is not None:
        qs = qs.filter(radiator=resolve_radiator(radiator_id))
    if warehouse_code:
        qs = qs.filter(warehouse=resolve_warehouse(warehouse_code))
    if date_from and date_to and date_from > date_to:
        raise ValidationError("date_from must not be after date_to.", field="date_from")
    if date_from:
        qs = qs.filter(created_at__gte=date_from)
    if date_to:
        qs = qs.filter(created_at__lte=date_to)
    if movement_type:
        movement_type = str(movement_type).upper()
        if movement_type not in StockHistory.MovementType.values:
            raise ValidationError("movement_type must be INCOMING or OUTGOING.", field="movement_type")
        qs = qs.filter(movement_type=movement_type)

    paginator = Paginator(qs, page_size)
    try:
        current = paginator.page(page)
        items = [_movement_row(h) for h in current.object_list]
    except EmptyPage:
        items = []

    return MovementPage(
        items=items,
        page=page,
        page_size=page_size,
        total_count=paginator.count,
        num_pages=paginator.num_pages,
    )
