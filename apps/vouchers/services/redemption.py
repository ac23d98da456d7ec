"""
Voucher redemption service.

A voucher moves from unused to used exactly once. The transition is a
single conditional UPDATE (unused and not expired) and the affected row
count decides the winner, so concurrent scans of the same code produce
one success and the rest fail with VoucherAlreadyRedeemedError.
"""

import logging
from datetime import datetime
from typing import Optional

from django.db import transaction, DatabaseError
from django.db.models import Q
from django.utils import timezone

from apps.accounts.models import User
from apps.accounts.services import require_cafe_admin
from apps.vouchers.models import Voucher

from .code_generation import normalize_voucher_code
from .exceptions import (
    InvalidVoucherCodeError,
    VoucherNotFoundError,
    VoucherAlreadyRedeemedError,
    VoucherExpiredError,
    VoucherStoreError,
)

logger = logging.getLogger(__name__)


def redeem_voucher(
    *,
    code: str,
    acting_user: User,
    now: Optional[datetime] = None,
) -> Voucher:
    """
    Redeem a voucher code on behalf of café staff.

    Args:
        code: Voucher code as scanned or typed
        acting_user: Staff member performing the redemption (must be admin)
        now: Redemption time, defaults to now

    Returns:
        The redeemed Voucher, with is_used=True and used_at=now

    Raises:
        UnauthenticatedError: If acting_user is missing or anonymous
        NotCafeAdminError: If acting_user is not a café admin
        InvalidVoucherCodeError: If code is empty
        VoucherNotFoundError: If no voucher has this code
        VoucherAlreadyRedeemedError: If the voucher was already used
        VoucherExpiredError: If the voucher expired before now
        VoucherStoreError: If the database fails
    """
    require_cafe_admin(acting_user)

    normalized = normalize_voucher_code(code)
    if not normalized:
        raise InvalidVoucherCodeError("Voucher code is required.")

    now = now or timezone.now()

    try:
        with transaction.atomic():
            claimed = (
                Voucher.objects
                .filter(code=normalized, is_used=False)
                .filter(Q(expires_at__isnull=True) | Q(expires_at__gte=now))
                .update(is_used=True, used_at=now, redeemed_by=acting_user)
            )
            voucher = Voucher.objects.filter(code=normalized).first()
    except DatabaseError:
        logger.exception("Store failure in redeem_voucher (code=%s)", normalized)
        raise VoucherStoreError("Could not redeem the voucher. Please try again.")

    if claimed == 1:
        logger.info("Voucher %s redeemed by %s", normalized, acting_user.email)
        return voucher

    if voucher is None:
        raise VoucherNotFoundError("Invalid voucher code.")

    if voucher.is_used:
        logger.info("Rejected redemption of used voucher %s", normalized)
        raise VoucherAlreadyRedeemedError("This voucher has already been used.")

    if voucher.is_expired(now):
        logger.info("Rejected redemption of expired voucher %s", normalized)
        raise VoucherExpiredError("This voucher has expired.")

    # Unused and unexpired, yet the conditional update matched nothing
    logger.error("Inconsistent voucher state in redeem_voucher (code=%s)", normalized)
    raise VoucherStoreError("Could not redeem the voucher. Please try again.")
