from decimal import Decimal

from django.conf import settings
from django.db import models


class Invoice(models.Model):
    """Invoice issued to a walk-in or account customer.

    Customer details are copied onto the invoice so it reads the same after
    the customer record changes. Issuing an invoice never moves stock.
    """

    class Status(models.TextChoices):
        DRAFT = "draft", "Draft"
        ISSUED = "issued", "Issued"
        PAID = "paid", "Paid"
        CANCELLED = "cancelled", "Cancelled"

    invoice_number = models.CharField(max_length=50, unique=True)

    customer_full_name = models.CharField(max_length=150)
    customer_email = models.EmailField(max_length=150, blank=True, default="")
    customer_phone = models.CharField(max_length=30, blank=True, default="")
    customer_company = models.CharField(max_length=200, blank=True, default="")
    customer_address = models.CharField(max_length=300, blank=True, default="")

    tax_rate = models.DecimalField(max_digits=5, decimal_places=4)
    sub_total = models.DecimalField(max_digits=14, decimal_places=2, default=Decimal("0.00"))
    tax_amount = models.DecimalField(max_digits=14, decimal_places=2, default=Decimal("0.00"))
    total_amount = models.DecimalField(max_digits=14, decimal_places=2, default=Decimal("0.00"))

    payment_method = models.CharField(max_length=20, default="Cash")
    notes = models.CharField(max_length=500, blank=True, default="")
    status = models.CharField(max_length=20, choices=Status.choices, default=Status.ISSUED)

    issue_date = models.DateTimeField()
    created_at = models.DateTimeField(editable=False)
    created_by = models.ForeignKey(
        settings.AUTH_USER_MODEL, null=True, blank=True, on_delete=models.PROTECT, related_name="+"
    )

    class Meta:
        ordering = ("-issue_date", "-id")

    def __str__(self):
        return self.invoice_number


class InvoiceItem(models.Model):
    invoice = models.ForeignKey(Invoice, on_delete=models.CASCADE, related_name="items")
    line_no = models.PositiveIntegerField()

    # Set for radiator lines only; the code/name/brand below are a snapshot.
    radiator = models.ForeignKey(
        "masterdata.Radiator", null=True, blank=True, on_delete=models.SET_NULL, related_name="+"
    )
    warehouse = models.ForeignKey(
        "masterdata.Warehouse", null=True, blank=True, on_delete=models.SET_NULL, related_name="+"
    )

    description = models.CharField(max_length=500)
    radiator_code = models.CharField(max_length=100, blank=True, default="")
    radiator_name = models.CharField(max_length=200, blank=True, default="")
    brand = models.CharField(max_length=100, blank=True, default="")
    warehouse_code = models.CharField(max_length=50, blank=True, default="")
    warehouse_name = models.CharField(max_length=200, blank=True, default="")
    is_custom_item = models.BooleanField(default=False)

    quantity = models.PositiveIntegerField()
    unit_price = models.DecimalField(max_digits=12, decimal_places=2)
    total_price = models.DecimalField(max_digits=14, decimal_places=2)

    class Meta:
        ordering = ["line_no"]
        unique_together = ("invoice", "line_no")

    def __str__(self):
        return f"{self.invoice_id}/{self.line_no}: {self.description}"
