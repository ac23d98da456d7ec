"""
Birthday voucher service.

Issues at most one birthday voucher per member per calendar year and
feeds the admin birthday tracker.
"""

import calendar
import logging
from datetime import date, datetime, time, timedelta
from typing import List, Optional, Set

from django.conf import settings
from django.db import transaction
from django.db.models import Q, QuerySet
from django.utils import timezone

from apps.accounts.models import User, Profile
from apps.notifications.services import CHANNEL_EMAIL
from apps.vouchers.models import Voucher, VoucherReason

from .issuance import issue_voucher_with_retry, schedule_voucher_notification

logger = logging.getLogger(__name__)

BIRTHDAY_MESSAGE = 'Happy birthday! Your next coffee is on us.'


def celebration_date(birthday: date, year: int) -> date:
    """
    Date a birthday is celebrated in the given year.

    29 February falls back to 28 February in non-leap years.
    """
    if birthday.month == 2 and birthday.day == 29 and not calendar.isleap(year):
        return date(year, 2, 28)
    return birthday.replace(year=year)


def next_birthday(birthday: date, today: date) -> date:
    """Next celebration on or after today."""
    this_year = celebration_date(birthday, today.year)
    if this_year >= today:
        return this_year
    return celebration_date(birthday, today.year + 1)


def profiles_celebrating(today: date) -> QuerySet:
    """Profiles whose birthday month/day matches today, ignoring the year."""
    matches = Q(birthday__month=today.month, birthday__day=today.day)
    if today.month == 2 and today.day == 28 and not calendar.isleap(today.year):
        matches |= Q(birthday__month=2, birthday__day=29)
    return Profile.objects.filter(matches).select_related('user')


def batch_issue_time(today: date) -> datetime:
    """Issue time for a batch run; past or future dates are pinned to that day."""
    now = timezone.now()
    if today == timezone.localdate(now):
        return now
    return timezone.make_aware(datetime.combine(today, time(hour=9)))


def birthday_voucher_owners(year: int, user_ids=None) -> Set:
    """IDs of users who already got a birthday voucher in the given year."""
    vouchers = Voucher.objects.filter(
        reason=VoucherReason.BIRTHDAY,
        created_at__date__range=(date(year, 1, 1), date(year, 12, 31)),
    )
    if user_ids is not None:
        vouchers = vouchers.filter(user_id__in=user_ids)
    return set(vouchers.values_list('user_id', flat=True))


def run_birthday_batch(
    *,
    today: Optional[date] = None,
    validity: Optional[timedelta] = None,
    notify: bool = True,
    issued_by: Optional[User] = None,
) -> dict:
    """
    Issue birthday vouchers to everyone celebrating today.

    Idempotent: a member who already has a birthday voucher dated in
    today's calendar year is skipped. Each profile row is locked while
    it is checked and issued, so overlapping runs cannot double-issue.

    Args:
        today: Batch date, defaults to the local date
        validity: Voucher validity, VOUCHER_BIRTHDAY_VALIDITY_DAYS by default
        notify: Email each new voucher to its owner after commit
        issued_by: Admin who triggered the batch, if any

    Returns:
        dict: A dictionary containing:
            - date (date): The batch date.
            - issued (list[Voucher]): Vouchers created by this run.
            - skipped (list[Profile]): Celebrating profiles that already had one.
    """
    today = today or timezone.localdate()
    if validity is None:
        validity = timedelta(days=settings.VOUCHER_BIRTHDAY_VALIDITY_DAYS)

    issued = []
    skipped = []

    for profile in profiles_celebrating(today):
        with transaction.atomic():
            Profile.objects.select_for_update().get(pk=profile.pk)

            if birthday_voucher_owners(today.year, [profile.user_id]):
                skipped.append(profile)
                continue

            voucher = issue_voucher_with_retry(
                user_id=profile.user_id,
                reason=VoucherReason.BIRTHDAY,
                validity=validity,
                issued_by=issued_by,
                issued_at=batch_issue_time(today),
            )
            issued.append(voucher)

            if notify:
                schedule_voucher_notification(
                    voucher, message=BIRTHDAY_MESSAGE, channels=[CHANNEL_EMAIL]
                )

    logger.info(
        "Birthday batch for %s: %d issued, %d skipped",
        today.isoformat(), len(issued), len(skipped),
    )
    return {
        'date': today,
        'issued': issued,
        'skipped': skipped,
    }


def upcoming_birthdays(*, today: Optional[date] = None, days: int = 7) -> List[dict]:
    """
    Members celebrating within the next ``days`` days, today included.

    Returns:
        list[dict]: Sorted by days_until, each containing:
            - profile (Profile)
            - next_birthday (date)
            - days_until (int): 0 means today
            - has_voucher (bool): Birthday voucher already issued this year
    """
    today = today or timezone.localdate()

    entries = []
    for profile in Profile.objects.filter(birthday__isnull=False).select_related('user'):
        upcoming = next_birthday(profile.birthday, today)
        days_until = (upcoming - today).days
        if days_until <= days:
            entries.append({
                'profile': profile,
                'next_birthday': upcoming,
                'days_until': days_until,
            })

    owners = birthday_voucher_owners(today.year, [e['profile'].user_id for e in entries])
    for entry in entries:
        entry['has_voucher'] = entry['profile'].user_id in owners

    entries.sort(key=lambda e: (e['days_until'], e['profile'].full_name))
    return entries
