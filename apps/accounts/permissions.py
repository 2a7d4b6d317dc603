"""
Custom permission classes shared across apps.

Permission Classes:
    IsSuperAdmin - Only users with the super_admin role
    HasSettingsAccess - Super admins or users granted settings access
"""
from rest_framework.permissions import BasePermission


class IsSuperAdmin(BasePermission):
    """
    Allow access only to super admins.

    Usage:
        @permission_classes([IsAuthenticated, IsSuperAdmin])
        def list_histories(request):
            ...
    """

    message = 'Only super admins can perform this action.'

    def has_permission(self, request, view):
        user = request.user
        return bool(user and user.is_authenticated and user.is_super_admin)


class HasSettingsAccess(BasePermission):
    """
    Allow access to super admins and to managers flagged with settings_access.
    """

    message = 'You do not have access to application settings.'

    def has_permission(self, request, view):
        user = request.user
        if not (user and user.is_authenticated):
            return False
        return user.is_super_admin or user.settings_access
