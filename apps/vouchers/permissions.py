"""
Custom permission classes for vouchers app.
"""
from rest_framework.permissions import BasePermission

from apps.accounts.services import is_cafe_admin


class IsVoucherOwnerOrCafeAdmin(BasePermission):
    """
    Permission to view a voucher or its QR code.

    Allows access if:
    - User owns the voucher
    - User is a café admin
    """

    message = 'You do not have permission to view this voucher.'

    def has_object_permission(self, request, view, obj):
        if obj.user_id == request.user.pk:
            return True
        return is_cafe_admin(request.user)
