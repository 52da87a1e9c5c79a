from decimal import Decimal

import django.core.validators
import django.db.models.deletion
import django.utils.timezone
import simple_history.models
from django.conf import settings
from django.db import migrations, models

HISTORY_TYPES = [("+", "Created"), ("~", "Changed"), ("-", "Deleted")]


def history_fields():
    return [
        ("history_id", models.AutoField(primary_key=True, serialize=False)),
        ("history_date", models.DateTimeField(db_index=True)),
        ("history_change_reason", models.CharField(max_length=100, null=True)),
        ("history_type", models.CharField(choices=HISTORY_TYPES, max_length=1)),
        (
            "history_user",
            models.ForeignKey(
                null=True,
                on_delete=django.db.models.deletion.SET_NULL,
                related_name="+",
                to=settings.AUTH_USER_MODEL,
            ),
        ),
    ]


def history_options(name):
    return {
        "verbose_name": f"historical {name}",
        "verbose_name_plural": f"historical {name}s",
        "ordering": ("-history_date", "-history_id"),
        "get_latest_by": ("history_date", "history_id"),
    }


def warehouse_fields(history=False):
    return [
        ("code", models.CharField(db_index=True, max_length=10) if history else models.CharField(max_length=10, unique=True)),
        ("name", models.CharField(max_length=100)),
        ("location", models.CharField(blank=True, default="", max_length=200)),
        ("address", models.CharField(blank=True, default="", max_length=500)),
        ("phone", models.CharField(blank=True, default="", max_length=30)),
        ("email", models.EmailField(blank=True, default="", max_length=150)),
        ("created_at", models.DateTimeField(default=django.utils.timezone.now, editable=False)),
        ("updated_at", models.DateTimeField(default=django.utils.timezone.now, editable=False)),
    ]


def radiator_fields(history=False):
    return [
        ("brand", models.CharField(max_length=100)),
        ("code", models.CharField(db_index=True, max_length=50) if history else models.CharField(max_length=50, unique=True)),
        ("name", models.CharField(max_length=200)),
        (
            "year",
            models.IntegerField(
                validators=[
                    django.core.validators.MinValueValidator(1900),
                    django.core.validators.MaxValueValidator(2100),
                ]
            ),
        ),
        ("retail_price", models.DecimalField(decimal_places=2, default=Decimal("0.00"), max_digits=12)),
        ("trade_price", models.DecimalField(blank=True, decimal_places=2, max_digits=12, null=True)),
        ("cost_price", models.DecimalField(blank=True, decimal_places=2, max_digits=12, null=True)),
        ("is_price_overridable", models.BooleanField(default=True)),
        (
            "max_discount_percent",
            models.DecimalField(
                blank=True,
                decimal_places=2,
                default=Decimal("20.00"),
                max_digits=5,
                null=True,
                validators=[
                    django.core.validators.MinValueValidator(0),
                    django.core.validators.MaxValueValidator(100),
                ],
            ),
        ),
        ("product_type", models.CharField(blank=True, default="", max_length=100)),
        ("dimensions", models.CharField(blank=True, default="", max_length=200)),
        ("notes", models.CharField(blank=True, default="", max_length=500)),
        ("created_at", models.DateTimeField(default=django.utils.timezone.now, editable=False)),
        ("updated_at", models.DateTimeField(default=django.utils.timezone.now, editable=False)),
    ]


def customer_fields():
    return [
        ("first_name", models.CharField(max_length=100)),
        ("last_name", models.CharField(max_length=100)),
        ("email", models.EmailField(blank=True, db_index=True, default="", max_length=150)),
        ("phone", models.CharField(blank=True, db_index=True, default="", max_length=20)),
        ("company", models.CharField(blank=True, default="", max_length=200)),
        ("address", models.CharField(blank=True, default="", max_length=500)),
        ("is_active", models.BooleanField(default=True)),
        ("created_at", models.DateTimeField(default=django.utils.timezone.now, editable=False)),
        ("updated_at", models.DateTimeField(default=django.utils.timezone.now, editable=False)),
    ]


def pk():
    return ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID"))


def history_pk():
    return ("id", models.BigIntegerField(auto_created=True, blank=True, db_index=True, verbose_name="ID"))


class Migration(migrations.Migration):
    initial = True

    dependencies = [
        migrations.swappable_dependency(settings.AUTH_USER_MODEL),
    ]

    operations = [
        migrations.CreateModel(
            name="Warehouse",
            fields=[pk(), *warehouse_fields()],
            options={"ordering": ["code"]},
        ),
        migrations.CreateModel(
            name="Radiator",
            fields=[pk(), *radiator_fields()],
            options={"ordering": ["brand", "code"]},
        ),
        migrations.CreateModel(
            name="Customer",
            fields=[pk(), *customer_fields()],
            options={"ordering": ["last_name", "first_name"]},
        ),
        migrations.CreateModel(
            name="HistoricalWarehouse",
            fields=[history_pk(), *warehouse_fields(history=True), *history_fields()],
            options=history_options("warehouse"),
            bases=(simple_history.models.HistoricalChanges, models.Model),
        ),
        migrations.CreateModel(
            name="HistoricalRadiator",
            fields=[history_pk(), *radiator_fields(history=True), *history_fields()],
            options=history_options("radiator"),
            bases=(simple_history.models.HistoricalChanges, models.Model),
        ),
        migrations.CreateModel(
            name="HistoricalCustomer",
            fields=[history_pk(), *customer_fields(), *history_fields()],
            options=history_options("customer"),
            bases=(simple_history.models.HistoricalChanges, models.Model),
        ),
    ]
