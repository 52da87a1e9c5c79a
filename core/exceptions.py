"""Error taxonomy shared by the stock ledger and the sales services.

Every error carries a stable `code` (used by the JSON API and the bulk
stock report) and a `details` dict with the identifiers the caller needs to
correct the request. Services raise these; they never return None for a
failed operation.
"""


class InventoryError(Exception):
    code = "inventory_error"
    status_code = 400

    def __init__(self, message, **details):
        super().__init__(message)
        self.message = message
        self.details = {k: v for k, v in details.items() if v is not None}

    def as_dict(self):
        return {"code": self.code, "detail": self.message, **self.details}


class ValidationError(InventoryError):
    """Malformed input. Raised before anything is written."""

    code = "validation_error"
    status_code = 400

    def __init__(self, message, *, field=None, **details):
        super().__init__(message, field=field, **details)
        self.field = field


class NotFoundError(InventoryError):
    code = "not_found"
    status_code = 404

    def __init__(self, resource, lookup):
        super().__init__(f"{resource} not found: {lookup}", resource=resource, lookup=lookup)
        self.resource = resource
        self.lookup = lookup


class InsufficientStockError(InventoryError):
    """Requested decrement is larger than the quantity on hand."""

    code = "insufficient_stock"
    status_code = 409

    def __init__(self, *, radiator_id, warehouse_id, requested, available, warehouse_code=None):
        where = warehouse_code or f"warehouse #{warehouse_id}"
        super().__init__(
            f"Insufficient stock for radiator #{radiator_id} in {where}: "
            f"requested {requested}, available {available}",
            radiator_id=radiator_id,
            warehouse_id=warehouse_id,
            warehouse_code=warehouse_code,
            requested=requested,
            available=available,
        )
        self.radiator_id = radiator_id
        self.warehouse_id = warehouse_id
        self.warehouse_code = warehouse_code
        self.requested = requested
        self.available = available


class ConflictError(InventoryError):
    """Constraint violation or illegal state change; the caller may retry."""

    code = "conflict"
    status_code = 409


class PermissionDeniedError(InventoryError):
    code = "permission_denied"
    status_code = 403

    def __init__(self, decision):
        super().__init__(
            decision.reason,
            capability=decision.capability.value,
            role=decision.role.value if decision.role else None,
        )
        self.decision = decision
