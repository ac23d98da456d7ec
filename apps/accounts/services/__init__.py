"""Services for accounts business logic."""

from .exceptions import (
    AccountsServiceError,
    UnauthenticatedError,
    NotCafeAdminError,
    UserNotFoundError,
)
from .profile_management import ensure_profile, update_profile
from .roles import get_role, is_cafe_admin, require_cafe_admin

__all__ = [
    # Exceptions
    'AccountsServiceError',
    'UnauthenticatedError',
    'NotCafeAdminError',
    'UserNotFoundError',
    # Services
    'ensure_profile',
    'update_profile',
    'get_role',
    'is_cafe_admin',
    'require_cafe_admin',
]
