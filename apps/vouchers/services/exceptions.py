"""
Domain-specific exceptions for vouchers app.

These exceptions represent business rule violations and should be
caught in views and converted to appropriate HTTP responses.
"""


class VouchersServiceError(Exception):
    """Base exception for all vouchers service errors."""
    pass


class VoucherNotFoundError(VouchersServiceError):
    """Raised when no voucher exists for a code."""
    pass


class VoucherAlreadyRedeemedError(VouchersServiceError):
    """Raised when a voucher has already been used."""
    pass


class VoucherExpiredError(VouchersServiceError):
    """Raised when a voucher is past its expiry time."""
    pass


class InvalidVoucherCodeError(VouchersServiceError):
    """Raised when a voucher code is missing or malformed."""
    pass


class InvalidVoucherReasonError(VouchersServiceError):
    """Raised when a voucher reason is not one of the known tags."""
    pass


class InvalidValidityError(VouchersServiceError):
    """Raised when a validity window is zero or negative."""
    pass


class DuplicateVoucherCodeError(VouchersServiceError):
    """Raised when a generated code collides with an existing voucher."""
    pass


class VoucherStoreError(VouchersServiceError):
    """Raised when the database fails during a voucher operation."""
    pass
