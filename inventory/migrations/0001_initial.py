import django.db.models.deletion
from django.conf import settings
from django.db import migrations, models


class Migration(migrations.Migration):
    initial = True

    dependencies = [
        ("masterdata", "0001_initial"),
        ("sales", "0001_initial"),
        migrations.swappable_dependency(settings.AUTH_USER_MODEL),
    ]

    operations = [
        migrations.CreateModel(
            name="StockLevel",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("quantity", models.PositiveIntegerField(default=0)),
                ("created_at", models.DateTimeField(editable=False)),
                ("updated_at", models.DateTimeField(editable=False)),
                (
                    "radiator",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.PROTECT, related_name="stock_levels", to="masterdata.radiator"
                    ),
                ),
                (
                    "warehouse",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.PROTECT, related_name="stock_levels", to="masterdata.warehouse"
                    ),
                ),
            ],
            options={
                "ordering": ["radiator_id", "warehouse_id"],
                "constraints": [
                    models.UniqueConstraint(fields=["radiator", "warehouse"], name="stocklevel_radiator_warehouse_uq"),
                    models.CheckConstraint(condition=models.Q(quantity__gte=0), name="stocklevel_quantity_non_negative"),
                ],
            },
        ),
        migrations.CreateModel(
            name="StockHistory",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("old_quantity", models.IntegerField()),
                ("new_quantity", models.IntegerField()),
                ("quantity_change", models.IntegerField()),
                (
                    "movement_type",
                    models.CharField(
                        choices=[("INCOMING", "Incoming"), ("OUTGOING", "Outgoing")], db_index=True, max_length=10
                    ),
                ),
                ("change_type", models.CharField(max_length=100)),
                ("notes", models.CharField(blank=True, default="", max_length=500)),
                ("created_at", models.DateTimeField(db_index=True, editable=False)),
                (
                    "radiator",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.PROTECT, related_name="stock_history", to="masterdata.radiator"
                    ),
                ),
                (
                    "warehouse",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.PROTECT, related_name="stock_history", to="masterdata.warehouse"
                    ),
                ),
                (
                    "sale",
                    models.ForeignKey(
                        blank=True,
                        null=True,
                        on_delete=django.db.models.deletion.SET_NULL,
                        related_name="stock_movements",
                        to="sales.sale",
                    ),
                ),
                (
                    "updated_by",
                    models.ForeignKey(
                        blank=True,
                        null=True,
                        on_delete=django.db.models.deletion.SET_NULL,
                        related_name="+",
                        to=settings.AUTH_USER_MODEL,
                    ),
                ),
            ],
            options={
                "ordering": ("-created_at", "-id"),
                "verbose_name_plural": "stock history",
                "constraints": [
                    models.CheckConstraint(
                        condition=models.Q(quantity_change=models.F("new_quantity") - models.F("old_quantity")),
                        name="stockhistory_change_matches_quantities",
                    ),
                ],
            },
        ),
    ]
