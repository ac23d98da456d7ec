"""
Voucher notification services.

Delivery is fire-and-forget: a failed email or SMS is logged and never
raised, so it cannot undo the voucher it announces. Callers schedule
``notify_voucher_issued`` with ``transaction.on_commit`` and may call it
again later to resend.
"""

import logging
from typing import Iterable, List

from django.conf import settings
from django.core.mail import send_mail
from django.utils.html import escape

from apps.accounts.services import ensure_profile

from .sms import send_sms

logger = logging.getLogger(__name__)

CHANNEL_EMAIL = 'email'
CHANNEL_SMS = 'sms'
CHANNELS = (CHANNEL_EMAIL, CHANNEL_SMS)

DEFAULT_GIFT_MESSAGE = 'Enjoy! A coffee on us.'
EMAIL_SUBJECT = 'You have a voucher from Lokal!'


def send_voucher_email(profile, voucher, message: str = '') -> bool:
    """
    Email the voucher code to the profile owner.

    Returns:
        True if the mail backend accepted the message, False otherwise
    """
    recipient = profile.email
    if not recipient:
        return False

    message = message or DEFAULT_GIFT_MESSAGE
    text_body = (
        f"Hi {profile.full_name},\n\n"
        f"{message}\n\n"
        f"Your voucher code: {voucher.code}\n"
    )
    html_body = (
        f"<p>Hi {escape(profile.full_name)},</p>"
        f"<p>{escape(message)}</p>"
        f"<p>Your voucher code: <strong>{escape(voucher.code)}</strong></p>"
    )

    try:
        sent = send_mail(
            EMAIL_SUBJECT,
            text_body,
            settings.DEFAULT_FROM_EMAIL,
            [recipient],
            html_message=html_body,
        )
    except Exception:
        logger.exception("Voucher email failed (code=%s, to=%s)", voucher.code, recipient)
        return False

    return sent > 0


def send_voucher_sms(profile, voucher, message: str = '') -> bool:
    """
    Text the voucher code to the profile's phone number.

    Returns:
        True if the SMS backend accepted the message, False otherwise
    """
    if not profile.phone_number:
        return False

    message = message or DEFAULT_GIFT_MESSAGE
    body = f"Hi {profile.full_name}, {message} Your voucher code: {voucher.code}"

    try:
        message_id = send_sms(profile.phone_number, body)
    except Exception:
        logger.exception("Voucher SMS failed (code=%s)", voucher.code)
        return False

    logger.info("Voucher SMS sent (code=%s, id=%s)", voucher.code, message_id)
    return True


def notify_voucher_issued(voucher, *, message: str = '',
                          channels: Iterable[str] = (CHANNEL_EMAIL,)) -> List[str]:
    """
    Deliver a voucher announcement over the requested channels.

    Channels the owner has no contact details for are skipped.

    Args:
        voucher: Issued Voucher
        message: Personal message shown above the code
        channels: Any of 'email', 'sms'

    Returns:
        Channels that were delivered successfully
    """
    profile, _ = ensure_profile(voucher.user)
    delivered = []

    for channel in channels:
        if channel == CHANNEL_EMAIL:
            ok = send_voucher_email(profile, voucher, message)
        elif channel == CHANNEL_SMS:
            ok = send_voucher_sms(profile, voucher, message)
        else:
            logger.warning("Unknown notification channel %r for voucher %s", channel, voucher.code)
            continue

        if ok:
            delivered.append(channel)
        else:
            logger.warning("Voucher %s not delivered over %s", voucher.code, channel)

    return delivered
