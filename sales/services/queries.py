"""Sale and invoice lookups plus the payloads used by the API and receipts."""

from django.conf import settings

from core.exceptions import NotFoundError, ValidationError
from sales.models import Invoice, Sale


def _pk(value, field):
    if isinstance(value, bool) or not isinstance(value, int):
        raise ValidationError(f"{field} must be an integer id.", field=field)
    return value


def sales_queryset():
    return (
        Sale.objects
        .select_related("customer", "processed_by")
        .prefetch_related("items__radiator", "items__warehouse")
    )


def get_sale(sale_id) -> Sale:
    try:
        return sales_queryset().get(pk=_pk(sale_id, "sale_id"))
    except Sale.DoesNotExist:
        raise NotFoundError("Sale", sale_id) from None


def list_sales(date_from=None, date_to=None, status=None):
    """Sales between two datetimes (inclusive), newest first."""
    qs = sales_queryset()
    if date_from and date_to and date_from > date_to:
        raise ValidationError("date_from must not be after date_to.", field="date_from")
    if date_from:
        qs = qs.filter(sale_date__gte=date_from)
    if date_to:
        qs = qs.filter(sale_date__lte=date_to)
    if status:
        if status not in Sale.Status.values:
            raise ValidationError(f"status must be one of: {', '.join(Sale.Status.values)}.", field="status")
        qs = qs.filter(status=status)
    return qs.order_by("-sale_date", "-id")


def sale_payload(sale) -> dict:
    customer = sale.customer
    return {
        "id": sale.pk,
        "sale_number": sale.sale_number,
        "customer": {
            "id": customer.pk,
            "full_name": customer.full_name,
            "email": customer.email,
            "phone": customer.phone,
            "company": customer.company,
        },
        "processed_by": sale.processed_by.get_username() if sale.processed_by_id else None,
        "sub_total": sale.sub_total,
        "tax_amount": sale.tax_amount,
        "total_amount": sale.total_amount,
        "payment_method": sale.payment_method,
        "status": sale.status,
        "notes": sale.notes,
        "sale_date": sale.sale_date,
        "created_at": sale.created_at,
        "cancelled_at": sale.cancelled_at,
        "refunded_at": sale.refunded_at,
        "items": [
            {
                "line_no": item.line_no,
                "radiator_id": item.radiator_id,
                "radiator_code": item.radiator.code,
                "radiator_name": item.radiator.name,
                "brand": item.radiator.brand,
                "warehouse_id": item.warehouse_id,
                "warehouse_code": item.warehouse.code,
                "warehouse_name": item.warehouse.name,
                "quantity": item.quantity,
                "unit_price": item.unit_price,
                "total_price": item.total_price,
            }
            for item in sale.items.all()
        ],
    }


def build_receipt(sale) -> dict:
    """Sale payload with the shop header printed on receipts."""
    return {
        "company": dict(settings.RECEIPT_COMPANY),
        "sale": sale_payload(sale),
    }


def get_invoice(invoice_id) -> Invoice:
    try:
        return Invoice.objects.prefetch_related("items").get(pk=_pk(invoice_id, "invoice_id"))
    except Invoice.DoesNotExist:
        raise NotFoundError("Invoice", invoice_id) from None


def invoice_payload(invoice) -> dict:
    return {
        "id": invoice.pk,
        "invoice_number": invoice.invoice_number,
        "customer": {
            "full_name": invoice.customer_full_name,
            "email": invoice.customer_email,
            "phone": invoice.customer_phone,
            "company": invoice.customer_company,
            "address": invoice.customer_address,
        },
        "tax_rate": invoice.tax_rate,
        "sub_total": invoice.sub_total,
        "tax_amount": invoice.tax_amount,
        "total_amount": invoice.total_amount,
        "payment_method": invoice.payment_method,
        "notes": invoice.notes,
        "status": invoice.status,
        "issue_date": invoice.issue_date,
        "items": [
            {
                "line_no": item.line_no,
                "radiator_id": item.radiator_id,
                "warehouse_id": item.warehouse_id,
                "description": item.description,
                "radiator_code": item.radiator_code,
                "radiator_name": item.radiator_name,
                "brand": item.brand,
                "warehouse_code": item.warehouse_code,
                "warehouse_name": item.warehouse_name,
                "is_custom_item": item.is_custom_item,
                "quantity": item.quantity,
                "unit_price": item.unit_price,
                "total_price": item.total_price,
            }
            for item in invoice.items.all()
        ],
    }
