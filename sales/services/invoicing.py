"""Invoices: priced documents for a customer, independent of the stock ledger."""

import logging
from dataclasses import dataclass
from decimal import Decimal, InvalidOperation

from django.conf import settings
from django.db import transaction
from django.utils import timezone

from core.exceptions import ValidationError
from inventory.services.ledger import MAX_QUANTITY
from masterdata.services.directory import resolve_radiator, resolve_warehouse_id
from sales.models import Invoice, InvoiceItem
from sales.services.checkout import (
    check_amounts,
    clean_notes,
    compute_totals,
    money,
    parse_price,
    validate_payment_method,
)
from sales.services.numbering import create_numbered

logger = logging.getLogger(__name__)

CUSTOMER_FIELDS = ("full_name", "email", "phone", "company", "address")


@dataclass(frozen=True)
class InvoiceLine:
    description: str
    quantity: int
    unit_price: Decimal
    radiator: object = None
    warehouse: object = None

    @property
    def is_custom_item(self) -> bool:
        return self.radiator is None

    @property
    def total_price(self) -> Decimal:
        return money(self.unit_price * self.quantity)


def _customer_snapshot(customer) -> dict:
    if not isinstance(customer, dict):
        raise ValidationError("customer must be an object.", field="customer")
    snapshot = {}
    for name in CUSTOMER_FIELDS:
        value = customer.get(name) or ""
        if not isinstance(value, str):
            raise ValidationError(f"customer.{name} must be text.", field=f"customer.{name}")
        max_length = Invoice._meta.get_field(f"customer_{name}").max_length
        if len(value.strip()) > max_length:
            raise ValidationError(
                f"customer.{name} must be at most {max_length} characters.", field=f"customer.{name}"
            )
        snapshot[f"customer_{name}"] = value.strip()
    if not snapshot["customer_full_name"]:
        raise ValidationError("customer.full_name is required.", field="customer.full_name")
    return snapshot


def _tax_rate(value) -> Decimal:
    if value is None:
        return settings.SALES_TAX_RATE
    if isinstance(value, bool):
        raise ValidationError("tax_rate must be a number.", field="tax_rate")
    try:
        rate = Decimal(str(value)) if isinstance(value, float) else Decimal(value)
    except (InvalidOperation, TypeError, ValueError):
        raise ValidationError("tax_rate must be a number.", field="tax_rate") from None
    if not rate.is_finite() or not Decimal("0") <= rate <= Decimal("1"):
        raise ValidationError("tax_rate must be between 0 and 1.", field="tax_rate")
    return rate


def _invoice_lines(items) -> list[InvoiceLine]:
    if not isinstance(items, (list, tuple)) or not items:
        raise ValidationError("An invoice needs at least one item.", field="items")

    lines = []
    for index, item in enumerate(items):
        prefix = f"items[{index}]"
        if not isinstance(item, dict):
            raise ValidationError(f"{prefix} must be an object.", field=prefix)

        quantity = item.get("quantity")
        if isinstance(quantity, bool) or not isinstance(quantity, int) or not 0 < quantity <= MAX_QUANTITY:
            raise ValidationError(
                f"{prefix}.quantity must be an integer between 1 and {MAX_QUANTITY}.", field=f"{prefix}.quantity"
            )

        description = (item.get("description") or "").strip()
        unit_price = item.get("unit_price")

        if item.get("radiator_id") is not None:
            if item.get("warehouse_id") is None:
                raise ValidationError(
                    f"{prefix}.warehouse_id is required for radiator lines.", field=f"{prefix}.warehouse_id"
                )
            radiator = resolve_radiator(item["radiator_id"])
            warehouse = resolve_warehouse_id(item["warehouse_id"])
            lines.append(InvoiceLine(
                description=description or radiator.name,
                quantity=quantity,
                unit_price=(
                    radiator.retail_price if unit_price is None
                    else parse_price(unit_price, f"{prefix}.unit_price")
                ),
                radiator=radiator,
                warehouse=warehouse,
            ))
        else:
            if not description:
                raise ValidationError(
                    f"{prefix}.description is required for custom lines.", field=f"{prefix}.description"
                )
            if unit_price is None:
                raise ValidationError(
                    f"{prefix}.unit_price is required for custom lines.", field=f"{prefix}.unit_price"
                )
            lines.append(InvoiceLine(
                description=description,
                quantity=quantity,
                unit_price=parse_price(unit_price, f"{prefix}.unit_price"),
            ))
    return lines


def generate_invoice(customer, items, tax_rate=None, payment_method="Cash", notes=None, created_by=None) -> Invoice:
    """Issue an invoice.

    Radiator lines default to the radiator's retail price and name; custom
    lines must bring their own description and price.
    """
    snapshot = _customer_snapshot(customer)
    lines = _invoice_lines(items)
    rate = _tax_rate(tax_rate)
    payment_method = validate_payment_method(payment_method)
    notes = clean_notes(notes)
    totals = compute_totals(lines, rate)
    check_amounts(lines, totals)

    if created_by is not None and not created_by.is_authenticated:
        created_by = None

    with transaction.atomic():
        now = timezone.now()
        invoice = create_numbered(
            Invoice,
            "invoice_number",
            settings.INVOICE_NUMBER_PREFIX,
            tax_rate=rate,
            sub_total=totals.sub_total,
            tax_amount=totals.tax_amount,
            total_amount=totals.total_amount,
            payment_method=payment_method,
            notes=notes,
            status=Invoice.Status.ISSUED,
            issue_date=now,
            created_at=now,
            created_by=created_by,
            **snapshot,
        )
        InvoiceItem.objects.bulk_create([
            InvoiceItem(
                invoice=invoice,
                line_no=line_no,
                radiator=line.radiator,
                warehouse=line.warehouse,
                description=line.description,
                radiator_code=line.radiator.code if line.radiator else "",
                radiator_name=line.radiator.name if line.radiator else "",
                brand=line.radiator.brand if line.radiator else "",
                warehouse_code=line.warehouse.code if line.warehouse else "",
                warehouse_name=line.warehouse.name if line.warehouse else "",
                is_custom_item=line.is_custom_item,
                quantity=line.quantity,
                unit_price=line.unit_price,
                total_price=line.total_price,
            )
            for line_no, line in enumerate(lines, start=1)
        ])

    logger.info("Invoice %s issued to %s, total %s", invoice.invoice_number, invoice.customer_full_name, invoice.total_amount)
    return Invoice.objects.prefetch_related("items").get(pk=invoice.pk)
