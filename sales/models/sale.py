from decimal import Decimal

from django.conf import settings
from django.db import models
from django.db.models import Q
from django.utils import timezone
from django_fsm import FSMField, transition
from django_fsm_log.decorators import fsm_log_by


class PaymentMethod(models.TextChoices):
    CASH = "Cash", "Cash"
    CARD = "Card", "Card"
    BANK_TRANSFER = "Bank Transfer", "Bank transfer"
    OTHER = "Other", "Other"


class Sale(models.Model):
    """Point of sale transaction with state machine.

    Totals are computed once at checkout and stored; they are never
    recomputed from the lines afterwards. Status changes only go through the
    transitions below (FSMField is protected), and every transition is
    logged by django-fsm-log.
    """

    class Status(models.TextChoices):
        PENDING = "pending", "Pending"
        COMPLETED = "completed", "Completed"
        CANCELLED = "cancelled", "Cancelled"
        REFUNDED = "refunded", "Refunded"

    sale_number = models.CharField(max_length=50, unique=True)

    customer = models.ForeignKey("masterdata.Customer", on_delete=models.PROTECT, related_name="sales")
    processed_by = models.ForeignKey(
        settings.AUTH_USER_MODEL, null=True, blank=True, on_delete=models.PROTECT, related_name="+"
    )

    sub_total = models.DecimalField(max_digits=14, decimal_places=2, default=Decimal("0.00"))
    tax_amount = models.DecimalField(max_digits=14, decimal_places=2, default=Decimal("0.00"))
    total_amount = models.DecimalField(max_digits=14, decimal_places=2, default=Decimal("0.00"))

    payment_method = models.CharField(max_length=20, choices=PaymentMethod.choices, default=PaymentMethod.CASH)
    status = FSMField(default=Status.COMPLETED, choices=Status.choices, protected=True)
    notes = models.CharField(max_length=500, blank=True, default="")

    sale_date = models.DateTimeField()
    created_at = models.DateTimeField(editable=False)
    updated_at = models.DateTimeField(editable=False)

    cancelled_at = models.DateTimeField(null=True, blank=True)
    cancelled_by = models.ForeignKey(
        settings.AUTH_USER_MODEL, null=True, blank=True, on_delete=models.PROTECT, related_name="+"
    )
    refunded_at = models.DateTimeField(null=True, blank=True)
    refunded_by = models.ForeignKey(
        settings.AUTH_USER_MODEL, null=True, blank=True, on_delete=models.PROTECT, related_name="+"
    )

    class Meta:
        ordering = ("-sale_date", "-id")
        indexes = [
            models.Index(fields=["status", "sale_date"], name="sale_status_date_idx"),
        ]

    def __str__(self):
        return self.sale_number

    @fsm_log_by
    @transition(field=status, source=[Status.PENDING, Status.COMPLETED], target=Status.CANCELLED)
    def cancel(self, by=None):
        """Cancel the sale. Stock is not returned; use a manual adjustment for that."""
        self.cancelled_at = timezone.now()
        self.cancelled_by = by

    @fsm_log_by
    @transition(field=status, source=Status.COMPLETED, target=Status.REFUNDED)
    def refund(self, by=None):
        """Mark as refunded. The restock itself is done by sales.services.lifecycle.refund_sale."""
        self.refunded_at = timezone.now()
        self.refunded_by = by


class SaleItem(models.Model):
    sale = models.ForeignKey(Sale, on_delete=models.CASCADE, related_name="items")
    line_no = models.PositiveIntegerField()

    radiator = models.ForeignKey("masterdata.Radiator", on_delete=models.PROTECT, related_name="sale_items")
    warehouse = models.ForeignKey("masterdata.Warehouse", on_delete=models.PROTECT, related_name="sale_items")

    quantity = models.PositiveIntegerField()
    unit_price = models.DecimalField(max_digits=12, decimal_places=2)
    total_price = models.DecimalField(max_digits=14, decimal_places=2)

    created_at = models.DateTimeField(editable=False)

    class Meta:
        ordering = ["line_no"]
        constraints = [
            models.UniqueConstraint(fields=["sale", "line_no"], name="saleitem_sale_line_uq"),
            models.CheckConstraint(condition=Q(quantity__gt=0), name="saleitem_quantity_positive"),
            models.CheckConstraint(condition=Q(unit_price__gte=0), name="saleitem_unit_price_non_negative"),
        ]

    def __str__(self):
        return f"{self.sale_id}/{self.line_no}: {self.quantity} x radiator #{self.radiator_id}"
