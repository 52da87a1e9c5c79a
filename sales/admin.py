from django.contrib import admin, messages
from django_object_actions import DjangoObjectActions, action
from guardian.admin import GuardedModelAdmin

from core.admin_utils import GuardedSaveAdminMixin
from core.exceptions import InventoryError
from core.permissions import Capability, check_capability
from sales.models import Invoice, InvoiceItem, Sale, SaleItem
from sales.services.lifecycle import cancel_sale, refund_sale


class SaleItemInline(admin.TabularInline):
    model = SaleItem
    extra = 0
    can_delete = False
    fields = ("line_no", "radiator", "warehouse", "quantity", "unit_price", "total_price")
    readonly_fields = fields

    def has_add_permission(self, request, obj=None):
        return False


@admin.register(Sale)
class SaleAdmin(DjangoObjectActions, GuardedSaveAdminMixin, GuardedModelAdmin, admin.ModelAdmin):
    """Sales are created by checkout only; the admin can look, cancel and refund."""

    inlines = [SaleItemInline]
    list_display = ("sale_number", "sale_date", "customer", "total_amount", "payment_method", "status")
    list_filter = ("status", "payment_method")
    search_fields = ("sale_number", "customer__first_name", "customer__last_name")
    list_select_related = ("customer",)
    date_hierarchy = "sale_date"
    readonly_fields = (
        "sale_number", "customer", "processed_by", "sub_total", "tax_amount", "total_amount",
        "payment_method", "status", "sale_date", "created_at", "updated_at",
        "cancelled_at", "cancelled_by", "refunded_at", "refunded_by",
    )
    fields = ("notes",) + readonly_fields

    change_actions = ("cancel_action", "refund_action")
    actions = ["cancel_selected"]

    def has_add_permission(self, request):
        return False

    def has_delete_permission(self, request, obj=None):
        return False

    def get_change_actions(self, request, object_id, form_url):
        obj = self.get_object(request, object_id)
        if not obj:
            return ()
        shown = []
        if obj.status in (Sale.Status.PENDING, Sale.Status.COMPLETED) and check_capability(
            request.user, Capability.CANCEL_SALE
        ):
            shown.append("cancel_action")
        if obj.status == Sale.Status.COMPLETED and check_capability(request.user, Capability.REFUND_SALE):
            shown.append("refund_action")
        return shown

    @action(label="Cancel sale", description="Cancel this sale (stock is not returned)")
    def cancel_action(self, request, obj):
        self._run(request, cancel_sale, obj, "Cancelled", Capability.CANCEL_SALE)

    @action(label="Refund sale", description="Refund this sale and return its items to stock")
    def refund_action(self, request, obj):
        self._run(request, refund_sale, obj, "Refunded", Capability.REFUND_SALE)

    @admin.action(description="Cancel selected sales")
    def cancel_selected(self, request, queryset):
        for sale in queryset:
            self._run(request, cancel_sale, sale, "Cancelled", Capability.CANCEL_SALE)

    def _run(self, request, service, obj, done, capability):
        decision = check_capability(request.user, capability)
        if not decision:
            self.message_user(request, decision.reason, level=messages.ERROR)
            return
        try:
            service(obj.pk, by=request.user)
        except InventoryError as e:
            self.message_user(request, f"{obj.sale_number}: {e.message}", level=messages.ERROR)
            return
        self.message_user(request, f"{done} {obj.sale_number}.", level=messages.SUCCESS)


class InvoiceItemInline(admin.TabularInline):
    model = InvoiceItem
    extra = 0
    can_delete = False
    fields = ("line_no", "description", "radiator_code", "warehouse_code", "quantity", "unit_price", "total_price")
    readonly_fields = fields

    def has_add_permission(self, request, obj=None):
        return False


@admin.register(Invoice)
class InvoiceAdmin(GuardedModelAdmin, admin.ModelAdmin):
    inlines = [InvoiceItemInline]
    list_display = ("invoice_number", "issue_date", "customer_full_name", "total_amount", "status")
    list_filter = ("status", "payment_method")
    search_fields = ("invoice_number", "customer_full_name", "customer_company")
    date_hierarchy = "issue_date"
    readonly_fields = (
        "invoice_number", "customer_full_name", "customer_email", "customer_phone", "customer_company",
        "customer_address", "tax_rate", "sub_total", "tax_amount", "total_amount", "payment_method",
        "issue_date", "created_at", "created_by",
    )

    def has_add_permission(self, request):
        return False
