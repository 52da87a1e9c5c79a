"""Lookups used by the stock ledger and the sales services.

Each resolver returns the model instance or raises NotFoundError, so callers
can validate every reference before they open a write transaction.
"""

from core.exceptions import NotFoundError, ValidationError
from masterdata.models import Customer, Radiator, Warehouse

WAREHOUSE_CODE_MAX_LENGTH = Warehouse._meta.get_field("code").max_length


def normalize_warehouse_code(code) -> str:
    """Strip and upper-case a warehouse code. Rejects blank or over-long codes."""
    if not isinstance(code, str) or not code.strip():
        raise ValidationError("Warehouse code is required.", field="warehouse_code")
    code = code.strip().upper()
    if len(code) > WAREHOUSE_CODE_MAX_LENGTH:
        raise ValidationError(
            f"Warehouse code must be at most {WAREHOUSE_CODE_MAX_LENGTH} characters.",
            field="warehouse_code",
        )
    return code


def _require_pk(value, field):
    if isinstance(value, bool) or not isinstance(value, int):
        raise ValidationError(f"{field} must be an integer id.", field=field)
    return value


def resolve_warehouse(code) -> Warehouse:
    code = normalize_warehouse_code(code)
    try:
        return Warehouse.objects.get(code=code)
    except Warehouse.DoesNotExist:
        raise NotFoundError("Warehouse", code) from None


def resolve_warehouse_id(pk) -> Warehouse:
    pk = _require_pk(pk, "warehouse_id")
    try:
        return Warehouse.objects.get(pk=pk)
    except Warehouse.DoesNotExist:
        raise NotFoundError("Warehouse", pk) from None


def resolve_radiator(pk) -> Radiator:
    pk = _require_pk(pk, "radiator_id")
    try:
        return Radiator.objects.get(pk=pk)
    except Radiator.DoesNotExist:
        raise NotFoundError("Radiator", pk) from None


def resolve_customer(pk) -> Customer:
    """Inactive customers cannot take part in new sales."""
    pk = _require_pk(pk, "customer_id")
    try:
        return Customer.objects.get(pk=pk, is_active=True)
    except Customer.DoesNotExist:
        raise NotFoundError("Customer", pk) from None
