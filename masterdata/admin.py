from django.contrib import admin
from guardian.admin import GuardedModelAdmin
from simple_history.admin import SimpleHistoryAdmin

from core.admin_utils import GuardedSaveAdminMixin
from masterdata.models import Customer, Radiator, Warehouse


@admin.register(Warehouse)
class WarehouseAdmin(GuardedSaveAdminMixin, GuardedModelAdmin, SimpleHistoryAdmin):
    list_display = ("code", "name", "location", "phone", "updated_at")
    search_fields = ("code", "name", "location")


@admin.register(Radiator)
class RadiatorAdmin(GuardedSaveAdminMixin, GuardedModelAdmin, SimpleHistoryAdmin):
    list_display = ("code", "brand", "name", "year", "retail_price", "trade_price", "updated_at")
    list_filter = ("brand", "product_type", "is_price_overridable")
    search_fields = ("code", "name", "brand")


@admin.register(Customer)
class CustomerAdmin(GuardedSaveAdminMixin, GuardedModelAdmin, SimpleHistoryAdmin):
    list_display = ("last_name", "first_name", "company", "email", "phone", "is_active")
    list_filter = ("is_active",)
    search_fields = ("first_name", "last_name", "email", "phone", "company")
