from django.db import models
from django.utils import timezone
from simple_history.models import HistoricalRecords


class Warehouse(models.Model):
    """Stock location. Referenced by stock levels, history rows and sale lines.

    Codes are stored upper-case ("WH_AKL"); lookups normalize before comparing.
    """
    code = models.CharField(max_length=10, unique=True)
    name = models.CharField(max_length=100)

    location = models.CharField(max_length=200, blank=True, default="")
    address = models.CharField(max_length=500, blank=True, default="")
    phone = models.CharField(max_length=30, blank=True, default="")
    email = models.EmailField(max_length=150, blank=True, default="")

    created_at = models.DateTimeField(default=timezone.now, editable=False)
    updated_at = models.DateTimeField(default=timezone.now, editable=False)

    history = HistoricalRecords()

    class Meta:
        ordering = ["code"]

    def __str__(self):
        return f"{self.code} {self.name}"

    def save(self, *args, **kwargs):
        self.code = (self.code or "").strip().upper()
        super().save(*args, **kwargs)
