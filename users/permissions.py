from rest_framework.permissions import BasePermission

from core.constants import USER_ADMIN_ROLES


class IsUserAdmin(BasePermission):
    """
    Managers and admins may add or remove accounts.
    Checked before the target user is looked up, so a denied caller
    never learns whether the id exists.
    """
    message = "Not authorized to manage users"

    def has_permission(self, request, view):
        user = request.user
        if not user or not user.is_authenticated:
            return False
        return getattr(user, "role", None) in USER_ADMIN_ROLES
