"""Role lookup for café staff operations."""

from apps.accounts.models import User, ProfileRole

from .exceptions import NotCafeAdminError
from .profile_management import ensure_profile


def get_role(user: User) -> str:
    """
    Return the user's café role.

    Raises:
        UnauthenticatedError: If user is missing or anonymous
    """
    profile, _ = ensure_profile(user)
    return profile.role


def is_cafe_admin(user: User) -> bool:
    if user is None or not user.is_authenticated:
        return False
    return get_role(user) == ProfileRole.ADMIN


def require_cafe_admin(user: User) -> None:
    """
    Ensure the acting user may perform staff operations.

    Raises:
        UnauthenticatedError: If user is missing or anonymous
        NotCafeAdminError: If user is not a café admin
    """
    if get_role(user) != ProfileRole.ADMIN:
        raise NotCafeAdminError("You do not have permission to perform this action.")
