"""Role based access for the shop.

One capability check at the service boundary:

    decision = require_capability(request.user, Capability.ADJUST_STOCK)

`check_capability` never raises and returns a typed `PermissionDecision`;
`require_capability` raises `PermissionDeniedError` when the decision is a no.

The guardian helpers at the bottom assign object permissions after admin
saves so staff keep seeing the rows they created.
"""

from dataclasses import dataclass
from enum import Enum

from django.contrib.auth import get_user_model
from guardian.shortcuts import assign_perm

from core.exceptions import PermissionDeniedError
from core.models import Role, UserProfile


class Capability(str, Enum):
    VIEW_STOCK = "view_stock"
    ADJUST_STOCK = "adjust_stock"
    CREATE_SALE = "create_sale"
    CANCEL_SALE = "cancel_sale"
    REFUND_SALE = "refund_sale"
    ISSUE_INVOICE = "issue_invoice"
    MANAGE_CATALOG = "manage_catalog"
    DELETE_CATALOG = "delete_catalog"
    MANAGE_USERS = "manage_users"


ROLE_CAPABILITIES = {
    Role.ADMIN: frozenset(Capability),
    Role.STAFF: frozenset({
        Capability.VIEW_STOCK,
        Capability.ADJUST_STOCK,
        Capability.CREATE_SALE,
        Capability.ISSUE_INVOICE,
        Capability.MANAGE_CATALOG,
    }),
}


@dataclass(frozen=True)
class PermissionDecision:
    allowed: bool
    capability: Capability
    role: Role | None
    reason: str

    def __bool__(self):
        return self.allowed


def role_for(user) -> Role | None:
    """Resolve the effective role. Superusers are admins, inactive users have none."""
    if user is None or not getattr(user, "is_authenticated", False) or not user.is_active:
        return None
    if user.is_superuser:
        return Role.ADMIN
    try:
        return Role(user.profile.role)
    except (UserProfile.DoesNotExist, ValueError):
        return None


def check_capability(user, capability: Capability) -> PermissionDecision:
    capability = Capability(capability)
    role = role_for(user)
    if role is None:
        return PermissionDecision(False, capability, None, "User has no active role.")
    if capability in ROLE_CAPABILITIES[role]:
        return PermissionDecision(True, capability, role, "ok")
    return PermissionDecision(
        False, capability, role, f"Role '{role.value}' may not {capability.value.replace('_', ' ')}."
    )


def require_capability(user, capability: Capability) -> PermissionDecision:
    decision = check_capability(user, capability)
    if not decision.allowed:
        raise PermissionDeniedError(decision)
    return decision


DEFAULT_PERMS = ("view", "change", "delete")


def assign_object_perms_to_user(user, obj, perms=DEFAULT_PERMS):
    """Assign view/change/delete perms for obj to a user."""
    if not user or not user.is_authenticated:
        return
    app_label = obj._meta.app_label
    model_name = obj._meta.model_name
    for p in perms:
        assign_perm(f"{app_label}.{p}_{model_name}", user, obj)


def assign_object_perms_to_admins(obj, perms=DEFAULT_PERMS):
    """Assign perms for obj to every user holding the admin role."""
    admins = get_user_model().objects.filter(profile__role=Role.ADMIN, is_active=True)
    for user in admins:
        assign_object_perms_to_user(user, obj, perms=perms)
