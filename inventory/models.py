from django.conf import settings
from django.db import models
from django.db.models import F, Q


class StockLevel(models.Model):
    """On-hand quantity of one radiator in one warehouse.

    Exactly one row per (radiator, warehouse). Rows are created lazily by the
    ledger on the first movement and only ever changed through
    inventory.services.ledger.
    """
    radiator = models.ForeignKey("masterdata.Radiator", on_delete=models.PROTECT, related_name="stock_levels")
    warehouse = models.ForeignKey("masterdata.Warehouse", on_delete=models.PROTECT, related_name="stock_levels")

    quantity = models.PositiveIntegerField(default=0)

    created_at = models.DateTimeField(editable=False)
    updated_at = models.DateTimeField(editable=False)

    class Meta:
        ordering = ["radiator_id", "warehouse_id"]
        constraints = [
            models.UniqueConstraint(fields=["radiator", "warehouse"], name="stocklevel_radiator_warehouse_uq"),
            models.CheckConstraint(condition=Q(quantity__gte=0), name="stocklevel_quantity_non_negative"),
        ]

    def __str__(self):
        return f"{self.radiator_id}@{self.warehouse_id}: {self.quantity}"


class StockHistory(models.Model):
    """Audit trail for stock movements. Append-only.

    new_quantity - old_quantity == quantity_change, and movement_type follows
    the sign of quantity_change.
    """

    class MovementType(models.TextChoices):
        INCOMING = "INCOMING", "Incoming"
        OUTGOING = "OUTGOING", "Outgoing"

    class ChangeType:
        MANUAL_UPDATE = "Manual Update"
        SALE = "Sale"
        REFUND = "Refund"

    radiator = models.ForeignKey("masterdata.Radiator", on_delete=models.PROTECT, related_name="stock_history")
    warehouse = models.ForeignKey("masterdata.Warehouse", on_delete=models.PROTECT, related_name="stock_history")

    old_quantity = models.IntegerField()
    new_quantity = models.IntegerField()
    quantity_change = models.IntegerField()

    movement_type = models.CharField(max_length=10, choices=MovementType.choices, db_index=True)
    change_type = models.CharField(max_length=100)

    # Weak reference: the history row survives the sale.
    sale = models.ForeignKey(
        "sales.Sale", null=True, blank=True, on_delete=models.SET_NULL, related_name="stock_movements"
    )
    updated_by = models.ForeignKey(
        settings.AUTH_USER_MODEL, null=True, blank=True, on_delete=models.SET_NULL, related_name="+"
    )
    notes = models.CharField(max_length=500, blank=True, default="")

    created_at = models.DateTimeField(editable=False, db_index=True)

    class Meta:
        ordering = ("-created_at", "-id")
        verbose_name_plural = "stock history"
        constraints = [
            models.CheckConstraint(
                condition=Q(quantity_change=F("new_quantity") - F("old_quantity")),
                name="stockhistory_change_matches_quantities",
            ),
        ]

    def __str__(self):
        return f"{self.movement_type} {self.quantity_change:+d} radiator #{self.radiator_id} @ #{self.warehouse_id}"

    @staticmethod
    def movement_type_for(quantity_change: int) -> str:
        if quantity_change < 0:
            return StockHistory.MovementType.OUTGOING
        return StockHistory.MovementType.INCOMING

    def save(self, *args, **kwargs):
        if self.pk is not None and not self._state.adding:
            raise ValueError("Stock history rows are immutable.")
        super().save(*args, **kwargs)

    def delete(self, *args, **kwargs):
        raise ValueError("Stock history rows cannot be deleted.")
