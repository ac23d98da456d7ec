"""
Vouchers app services layer.

Services contain the voucher lifecycle: issuance, redemption and the
birthday batch. The acting user is always passed in explicitly.
"""

from .exceptions import (
    VouchersServiceError,
    VoucherNotFoundError,
    VoucherAlreadyRedeemedError,
    VoucherExpiredError,
    InvalidVoucherCodeError,
    InvalidVoucherReasonError,
    InvalidValidityError,
    DuplicateVoucherCodeError,
    VoucherStoreError,
)

from .code_generation import (
    generate_voucher_code,
    normalize_voucher_code,
)

from .issuance import (
    issue_voucher,
    issue_voucher_with_retry,
    gift_voucher,
    schedule_voucher_notification,
)

from .redemption import (
    redeem_voucher,
)

from .birthday import (
    celebration_date,
    next_birthday,
    run_birthday_batch,
    upcoming_birthdays,
)

from .qr import (
    render_voucher_qr,
)


__all__ = [
    # Exceptions
    'VouchersServiceError',
    'VoucherNotFoundError',
    'VoucherAlreadyRedeemedError',
    'VoucherExpiredError',
    'InvalidVoucherCodeError',
    'InvalidVoucherReasonError',
    'InvalidValidityError',
    'DuplicateVoucherCodeError',
    'VoucherStoreError',

    # Codes
    'generate_voucher_code',
    'normalize_voucher_code',

    # Issuance
    'issue_voucher',
    'issue_voucher_with_retry',
    'gift_voucher',
    'schedule_voucher_notification',

    # Redemption
    'redeem_voucher',

    # Birthdays
    'celebration_date',
    'next_birthday',
    'run_birthday_batch',
    'upcoming_birthdays',

    # QR
    'render_voucher_qr',
]
