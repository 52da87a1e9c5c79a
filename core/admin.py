from django.contrib import admin
from django.contrib.auth import get_user_model
from django.contrib.auth.admin import UserAdmin
from guardian.admin import GuardedModelAdmin

from core.admin_utils import GuardedSaveAdminMixin
from core.models import UserProfile

User = get_user_model()


class UserProfileInline(admin.StackedInline):
    model = UserProfile
    can_delete = False
    fields = ("role", "first_name", "last_name")


admin.site.unregister(User)


@admin.register(User)
class ShopUserAdmin(UserAdmin):
    inlines = [UserProfileInline]
    list_display = ("username", "email", "is_active", "is_superuser", "role")

    @admin.display(description="Role")
    def role(self, obj):
        profile = getattr(obj, "profile", None)
        return profile.get_role_display() if profile else "-"


@admin.register(UserProfile)
class UserProfileAdmin(GuardedSaveAdminMixin, GuardedModelAdmin, admin.ModelAdmin):
    list_display = ("user", "role", "first_name", "last_name", "updated_at")
    list_filter = ("role",)
    search_fields = ("user__username", "first_name", "last_name")
