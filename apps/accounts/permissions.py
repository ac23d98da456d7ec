"""
Custom permission classes for café staff endpoints.
"""
from rest_framework.permissions import BasePermission

from .services import is_cafe_admin


class IsCafeAdmin(BasePermission):
    """
    Allows access only to users whose profile has the admin role.

    Usage:
        @permission_classes([IsAuthenticated, IsCafeAdmin])
        def redeem(request):
            ...
    """

    message = 'You do not have permission to perform this action.'

    def has_permission(self, request, view):
        return is_cafe_admin(request.user)
