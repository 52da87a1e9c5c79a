"""Checkout: write a sale with its lines and take the stock out, all or nothing.

create_sale() validates everything it can before opening the transaction.
Inside the transaction it inserts the Sale and its SaleItems and then calls
inventory.services.ledger.decrement_for_sale for every line. The first
InsufficientStockError (or any other error) rolls the whole attempt back: no
Sale, SaleItem, StockLevel change or StockHistory row survives.
"""

import logging
import math
from dataclasses import dataclass
from decimal import ROUND_HALF_UP, Decimal, InvalidOperation

from django.conf import settings
from django.db import transaction
from django.utils import timezone

from core.exceptions import ValidationError
from inventory.services.ledger import MAX_QUANTITY, decrement_for_sale
from masterdata.services.directory import resolve_customer, resolve_radiator, resolve_warehouse_id
from sales.models import PaymentMethod, Sale, SaleItem
from sales.services.numbering import create_numbered, generate_number

logger = logging.getLogger(__name__)

TWO_PLACES = Decimal("0.01")
NOTES_MAX_LENGTH = Sale._meta.get_field("notes").max_length


def _digits_limit(model, name) -> Decimal:
    field = model._meta.get_field(name)
    return Decimal(10) ** (field.max_digits - field.decimal_places)


UNIT_PRICE_LIMIT = _digits_limit(SaleItem, "unit_price")
AMOUNT_LIMIT = _digits_limit(Sale, "total_amount")


def money(value: Decimal) -> Decimal:
    return value.quantize(TWO_PLACES, rounding=ROUND_HALF_UP)


def parse_price(value, field_name) -> Decimal:
    """Accept Decimal, int, float or numeric string; return a 2 dp Decimal >= 0."""
    if isinstance(value, bool) or value is None:
        raise ValidationError(f"{field_name} is required and must be a number.", field=field_name)
    if isinstance(value, float):
        if not math.isfinite(value):
            raise ValidationError(f"{field_name} must be a finite number.", field=field_name)
        value = str(value)
    try:
        price = Decimal(value)
    except (InvalidOperation, TypeError, ValueError):
        raise ValidationError(f"{field_name} must be a number.", field=field_name) from None
    if not price.is_finite():
        raise ValidationError(f"{field_name} must be a finite number.", field=field_name)
    if price < 0:
        raise ValidationError(f"{field_name} must be >= 0.", field=field_name)
    if price >= UNIT_PRICE_LIMIT or money(price) >= UNIT_PRICE_LIMIT:
        raise ValidationError(f"{field_name} must be less than {UNIT_PRICE_LIMIT}.", field=field_name)
    return money(price)


def _positive_int(value, field_name, maximum=None) -> int:
    if isinstance(value, bool) or not isinstance(value, int):
        raise ValidationError(f"{field_name} must be an integer.", field=field_name)
    if value <= 0:
        raise ValidationError(f"{field_name} must be > 0.", field=field_name)
    if maximum is not None and value > maximum:
        raise ValidationError(f"{field_name} must be <= {maximum}.", field=field_name)
    return value


@dataclass(frozen=True)
class SaleLine:
    radiator_id: int
    warehouse_id: int
    quantity: int
    unit_price: Decimal

    @property
    def total_price(self) -> Decimal:
        return money(self.unit_price * self.quantity)


@dataclass(frozen=True)
class Totals:
    sub_total: Decimal
    tax_amount: Decimal
    total_amount: Decimal


def compute_totals(lines, tax_rate=None) -> Totals:
    """sub_total = sum of line totals; tax rounded half-up to 2 dp."""
    if tax_rate is None:
        tax_rate = settings.SALES_TAX_RATE
    sub_total = money(sum((line.total_price for line in lines), Decimal("0.00")))
    tax_amount = money(sub_total * Decimal(tax_rate))
    return Totals(sub_total=sub_total, tax_amount=tax_amount, total_amount=sub_total + tax_amount)


def check_amounts(lines, totals) -> None:
    """Every line total and the document total must fit their columns."""
    for index, line in enumerate(lines):
        if line.total_price >= AMOUNT_LIMIT:
            raise ValidationError(
                f"items[{index}] total must be less than {AMOUNT_LIMIT}.", field=f"items[{index}].quantity"
            )
    if totals.total_amount >= AMOUNT_LIMIT:
        raise ValidationError(f"Total amount must be less than {AMOUNT_LIMIT}.", field="items")


def validate_sale_items(items) -> list[SaleLine]:
    if not isinstance(items, (list, tuple)) or not items:
        raise ValidationError("A sale needs at least one item.", field="items")

    lines = []
    for index, item in enumerate(items):
        if not isinstance(item, dict):
            raise ValidationError(f"items[{index}] must be an object.", field=f"items[{index}]")
        lines.append(SaleLine(
            radiator_id=_positive_int(item.get("radiator_id"), f"items[{index}].radiator_id"),
            warehouse_id=_positive_int(item.get("warehouse_id"), f"items[{index}].warehouse_id"),
            quantity=_positive_int(item.get("quantity"), f"items[{index}].quantity", MAX_QUANTITY),
            unit_price=parse_price(item.get("unit_price"), f"items[{index}].unit_price"),
        ))
    return lines


def validate_payment_method(value) -> str:
    if value not in PaymentMethod.values:
        raise ValidationError(
            f"payment_method must be one of: {', '.join(PaymentMethod.values)}.", field="payment_method"
        )
    return value


def clean_notes(value) -> str:
    if value is None:
        return ""
    if not isinstance(value, str):
        raise ValidationError("notes must be text.", field="notes")
    value = value.strip()
    if len(value) > NOTES_MAX_LENGTH:
        raise ValidationError(f"notes must be at most {NOTES_MAX_LENGTH} characters.", field="notes")
    return value


def generate_sale_number(now=None) -> str:
    return generate_number(settings.SALE_NUMBER_PREFIX, now=now)


def create_sale(customer_id, payment_method, items, notes=None, processed_by=None) -> Sale:
    """Create a completed sale and decrement stock for every line.

    Returns the sale with customer and items (radiator, warehouse) loaded.
    Raises ValidationError / NotFoundError before writing anything,
    InsufficientStockError naming the short line, or ConflictError when no
    unique sale number could be allocated.
    """
    lines = validate_sale_items(items)
    payment_method = validate_payment_method(payment_method)
    notes = clean_notes(notes)
    totals = compute_totals(lines)
    check_amounts(lines, totals)

    customer = resolve_customer(customer_id)
    for radiator_id in {line.radiator_id for line in lines}:
        resolve_radiator(radiator_id)
    for warehouse_id in {line.warehouse_id for line in lines}:
        resolve_warehouse_id(warehouse_id)

    if processed_by is not None and not processed_by.is_authenticated:
        processed_by = None

    with transaction.atomic():
        now = timezone.now()
        sale = create_numbered(
            Sale,
            "sale_number",
            settings.SALE_NUMBER_PREFIX,
            customer=customer,
            processed_by=processed_by,
            payment_method=payment_method,
            notes=notes,
            sub_total=totals.sub_total,
            tax_amount=totals.tax_amount,
            total_amount=totals.total_amount,
            sale_date=now,
            created_at=now,
            updated_at=now,
        )

        SaleItem.objects.bulk_create([
            SaleItem(
                sale=sale,
                line_no=line_no,
                radiator_id=line.radiator_id,
                warehouse_id=line.warehouse_id,
                quantity=line.quantity,
                unit_price=line.unit_price,
                total_price=line.total_price,
                created_at=now,
            )
            for line_no, line in enumerate(lines, start=1)
        ])

        # Stable lock order across concurrent checkouts.
        for line in sorted(lines, key=lambda l: (l.radiator_id, l.warehouse_id)):
            decrement_for_sale(line.radiator_id, line.warehouse_id, line.quantity, sale)

    logger.info(
        "Sale %s created for customer #%s: %s lines, total %s",
        sale.sale_number, customer.pk, len(lines), totals.total_amount,
    )

    return (
        Sale.objects
        .select_related("customer", "processed_by")
        .prefetch_related("items__radiator", "items__warehouse")
        .get(pk=sale.pk)
    )
