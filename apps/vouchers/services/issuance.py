"""
Voucher issuance service.

Creates vouchers for admin gifts and birthday batches. Codes are random,
so the unique constraint on ``Voucher.code`` decides collisions; a
collision surfaces as ``DuplicateVoucherCodeError`` and the retrying
caller generates a new code.
"""

import logging
from datetime import datetime, timedelta
from functools import partial
from typing import Iterable, Optional
from uuid import UUID

from django.conf import settings
from django.db import transaction, IntegrityError
from django.db.models import F
from django.utils import timezone

from apps.accounts.models import User, Profile
from apps.accounts.services import (
    ensure_profile,
    require_cafe_admin,
    UserNotFoundError,
)
from apps.notifications.services import notify_voucher_issued, CHANNEL_EMAIL, CHANNEL_SMS
from apps.vouchers.models import Voucher, VoucherReason

from .code_generation import generate_voucher_code, normalize_voucher_code
from .exceptions import (
    DuplicateVoucherCodeError,
    InvalidVoucherCodeError,
    InvalidVoucherReasonError,
    InvalidValidityError,
)

logger = logging.getLogger(__name__)


def issue_voucher(
    *,
    user_id: UUID,
    reason: str,
    validity: Optional[timedelta] = None,
    code: Optional[str] = None,
    issued_by: Optional[User] = None,
    issued_at: Optional[datetime] = None,
) -> Voucher:
    """
    Create one unused voucher for a user.

    Args:
        user_id: UUID of the voucher owner (must exist)
        reason: One of VoucherReason values
        validity: How long the voucher stays redeemable; None means no expiry
        code: Explicit code, stored normalized; a random one is generated when omitted
        issued_by: Admin issuing the voucher, kept for audit
        issued_at: Creation time, defaults to now

    Returns:
        Created Voucher instance

    Raises:
        InvalidVoucherReasonError: If reason is unknown
        InvalidValidityError: If validity is zero or negative
        InvalidVoucherCodeError: If an explicit code is blank
        UserNotFoundError: If user doesn't exist
        DuplicateVoucherCodeError: If the code is already taken
    """
    if reason not in VoucherReason.values:
        raise InvalidVoucherReasonError(f"Unknown voucher reason: {reason}")

    if validity is not None and validity <= timedelta(0):
        raise InvalidValidityError("Voucher validity must be positive")

    try:
        user = User.objects.get(id=user_id)
    except User.DoesNotExist:
        raise UserNotFoundError(f"User with ID {user_id} not found")

    code = normalize_voucher_code(code or generate_voucher_code(reason))
    if not code:
        raise InvalidVoucherCodeError("Voucher code must not be blank")
    created_at = issued_at or timezone.now()

    try:
        with transaction.atomic():
            voucher = Voucher.objects.create(
                code=code,
                user=user,
                reason=reason,
                created_at=created_at,
                expires_at=created_at + validity if validity is not None else None,
                issued_by=issued_by,
            )
    except IntegrityError:
        raise DuplicateVoucherCodeError(f"Voucher code {code} already exists")

    # Counter is best-effort and not tied to the voucher insert
    profile, _ = ensure_profile(user)
    Profile.objects.filter(pk=profile.pk).update(
        coffee_voucher_count=F('coffee_voucher_count') + 1
    )

    logger.info("Issued %s voucher %s to %s", reason, voucher.code, user.email)
    return voucher


def issue_voucher_with_retry(*, max_retries: Optional[int] = None, **kwargs) -> Voucher:
    """
    Issue a voucher, generating a new code after each collision.

    Accepts the keyword arguments of ``issue_voucher`` except ``code``.

    Raises:
        DuplicateVoucherCodeError: If every attempt collided
    """
    if max_retries is None:
        max_retries = getattr(settings, 'VOUCHER_CODE_MAX_RETRIES', 5)

    for attempt in range(max_retries):
        try:
            return issue_voucher(**kwargs)
        except DuplicateVoucherCodeError:
            logger.warning(
                "Voucher code collision (attempt %d/%d)", attempt + 1, max_retries
            )
            if attempt == max_retries - 1:
                raise DuplicateVoucherCodeError(
                    f"Failed to generate unique voucher code after {max_retries} attempts"
                )

    # Only reached when max_retries < 1
    raise DuplicateVoucherCodeError("No attempts made to generate a voucher code")


def gift_voucher(
    *,
    user_id: UUID,
    issued_by: User,
    reason: str = VoucherReason.GIFT,
    validity: Optional[timedelta] = None,
    message: str = '',
    send_email: bool = True,
    send_sms: bool = False,
) -> Voucher:
    """
    Gift a voucher to a member and announce it (admin only).

    Notifications are sent after the transaction commits and never undo
    the voucher when delivery fails.

    Args:
        user_id: UUID of the recipient
        issued_by: Admin gifting the voucher
        reason: Voucher reason, gift by default
        validity: Validity window, VOUCHER_GIFT_VALIDITY_DAYS by default
        message: Personal message for the notification
        send_email: Announce by email
        send_sms: Announce by SMS

    Returns:
        Created Voucher instance

    Raises:
        UnauthenticatedError: If issued_by is missing or anonymous
        NotCafeAdminError: If issued_by is not a café admin
        UserNotFoundError: If recipient doesn't exist
        DuplicateVoucherCodeError: If no unique code could be generated
    """
    require_cafe_admin(issued_by)

    if validity is None:
        validity = timedelta(days=settings.VOUCHER_GIFT_VALIDITY_DAYS)

    with transaction.atomic():
        voucher = issue_voucher_with_retry(
            user_id=user_id,
            reason=reason,
            validity=validity,
            issued_by=issued_by,
        )

        channels = []
        if send_email:
            channels.append(CHANNEL_EMAIL)
        if send_sms:
            channels.append(CHANNEL_SMS)

        if channels:
            schedule_voucher_notification(voucher, message=message, channels=channels)

    return voucher


def schedule_voucher_notification(voucher: Voucher, *, message: str = '',
                                  channels: Iterable[str] = (CHANNEL_EMAIL,)) -> None:
    """Announce the voucher once the surrounding transaction commits."""
    transaction.on_commit(
        partial(notify_voucher_issued, voucher, message=message, channels=list(channels))
    )
