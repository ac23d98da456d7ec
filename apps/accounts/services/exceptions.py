"""Domain-specific exceptions for accounts services."""


class AccountsServiceError(Exception):
    """Base exception for accounts services."""
    pass


class UnauthenticatedError(AccountsServiceError):
    """Raised when an operation is attempted without an authenticated identity."""
    pass


class NotCafeAdminError(AccountsServiceError):
    """Raised when an authenticated user lacks the café admin role."""
    pass


class UserNotFoundError(AccountsServiceError):
    """Raised when user does not exist."""
    pass
