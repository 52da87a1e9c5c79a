"""Admin mixins to keep admin code simple and consistent."""

from django.utils import timezone

from core.permissions import assign_object_perms_to_admins, assign_object_perms_to_user


class GuardedSaveAdminMixin:
    """Mixin: after save, assign guardian permissions for visibility.

    This avoids relying on signals (signals don't know the request.user).
    """

    def save_model(self, request, obj, form, change):
        if hasattr(obj, "updated_at"):
            obj.updated_at = timezone.now()
        super().save_model(request, obj, form, change)

        if not change:
            assign_object_perms_to_user(request.user, obj)
            assign_object_perms_to_admins(obj)


class ReadOnlyAdminMixin:
    """Rows owned by a service (stock ledger, sales) are never edited by hand."""

    def has_add_permission(self, request, obj=None):
        return False

    def has_change_permission(self, request, obj=None):
        return False

    def has_delete_permission(self, request, obj=None):
        return False
