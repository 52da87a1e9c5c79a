from django.contrib import admin
from guardian.admin import GuardedModelAdmin

from core.admin_utils import ReadOnlyAdminMixin
from inventory.models import StockHistory, StockLevel


@admin.register(StockLevel)
class StockLevelAdmin(ReadOnlyAdminMixin, GuardedModelAdmin, admin.ModelAdmin):
    list_display = ("radiator", "warehouse", "quantity", "updated_at")
    list_filter = ("warehouse",)
    search_fields = ("radiator__code", "radiator__name", "warehouse__code")
    list_select_related = ("radiator", "warehouse")


@admin.register(StockHistory)
class StockHistoryAdmin(ReadOnlyAdminMixin, GuardedModelAdmin, admin.ModelAdmin):
    list_display = (
        "created_at", "radiator", "warehouse", "movement_type", "change_type",
        "old_quantity", "new_quantity", "quantity_change", "sale", "updated_by",
    )
    list_filter = ("movement_type", "change_type", "warehouse")
    search_fields = ("radiator__code", "radiator__name", "sale__sale_number")
    list_select_related = ("radiator", "warehouse", "sale", "updated_by")
    date_hierarchy = "created_at"
