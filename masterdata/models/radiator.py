from decimal import Decimal

from django.core.validators import MaxValueValidator, MinValueValidator
from django.db import models
from django.utils import timezone
from simple_history.models import HistoricalRecords


class Radiator(models.Model):
    """Product sold by the shop. Stock is tracked per warehouse in inventory.StockLevel."""

    brand = models.CharField(max_length=100)
    code = models.CharField(max_length=50, unique=True)
    name = models.CharField(max_length=200)
    year = models.IntegerField(validators=[MinValueValidator(1900), MaxValueValidator(2100)])

    retail_price = models.DecimalField(max_digits=12, decimal_places=2, default=Decimal("0.00"))
    trade_price = models.DecimalField(max_digits=12, decimal_places=2, null=True, blank=True)
    cost_price = models.DecimalField(max_digits=12, decimal_places=2, null=True, blank=True)
    is_price_overridable = models.BooleanField(default=True)
    max_discount_percent = models.DecimalField(
        max_digits=5, decimal_places=2, null=True, blank=True, default=Decimal("20.00"),
        validators=[MinValueValidator(0), MaxValueValidator(100)],
    )

    product_type = models.CharField(max_length=100, blank=True, default="")  # Vehicle, Truck, Machinery...
    dimensions = models.CharField(max_length=200, blank=True, default="")
    notes = models.CharField(max_length=500, blank=True, default="")

    created_at = models.DateTimeField(default=timezone.now, editable=False)
    updated_at = models.DateTimeField(default=timezone.now, editable=False)

    # Price changes are audited here; stock changes live in inventory.StockHistory.
    history = HistoricalRecords()

    class Meta:
        ordering = ["brand", "code"]

    def __str__(self):
        return f"{self.code} {self.name}"
