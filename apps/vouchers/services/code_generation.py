"""
Voucher code generation.

Codes look like ``LOKAL-BDAY-7QX2M0KPA``: a configurable prefix, a tag for
the reason and a random suffix. Uniqueness is best-effort; the unique
constraint on ``Voucher.code`` is what actually guarantees it.
"""

import secrets
import string

from django.conf import settings

from apps.vouchers.models import VoucherReason

CODE_ALPHABET = string.ascii_uppercase + string.digits
CODE_RANDOM_LENGTH = 9

REASON_TAGS = {
    VoucherReason.GIFT: 'GIFT',
    VoucherReason.BIRTHDAY: 'BDAY',
    VoucherReason.DISCOUNT: 'DISC',
}


def generate_voucher_code(reason: str) -> str:
    """Return a fresh random code for a voucher with the given reason."""
    suffix = ''.join(secrets.choice(CODE_ALPHABET) for _ in range(CODE_RANDOM_LENGTH))
    prefix = getattr(settings, 'VOUCHER_CODE_PREFIX', 'LOKAL').upper()
    return f"{prefix}-{REASON_TAGS[reason]}-{suffix}"


def normalize_voucher_code(code) -> str:
    """Strip whitespace and upper-case, so typed codes match scanned ones."""
    if code is None:
        return ''
    return str(code).strip().upper()
