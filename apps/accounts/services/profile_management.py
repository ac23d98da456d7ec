"""Profile management service."""

import logging
from typing import Tuple

from django.db import transaction, IntegrityError

from apps.accounts.models import User, Profile, ProfileRole

from .exceptions import UnauthenticatedError

logger = logging.getLogger(__name__)

EDITABLE_PROFILE_FIELDS = ('full_name', 'phone_number', 'birthday')


def _default_full_name(user: User) -> str:
    return user.display_name or user.email.split('@')[0] or 'User'


def ensure_profile(user: User) -> Tuple[Profile, bool]:
    """
    Return the user's profile, creating it on first access.

    Concurrent first requests race on the one-to-one constraint; the loser
    reads back the winner's row instead of failing.

    Args:
        user: Authenticated user

    Returns:
        (profile, created) tuple

    Raises:
        UnauthenticatedError: If user is missing or anonymous
    """
    if user is None or not user.is_authenticated:
        raise UnauthenticatedError("Authentication required")

    try:
        return Profile.objects.get(user=user), False
    except Profile.DoesNotExist:
        pass

    try:
        with transaction.atomic():
            profile = Profile.objects.create(
                user=user,
                full_name=_default_full_name(user),
                role=ProfileRole.ADMIN if user.is_superuser else ProfileRole.MEMBER,
                coffee_voucher_count=0,
                activity_attendance_count=0,
            )
    except IntegrityError:
        return Profile.objects.get(user=user), False

    logger.info("Created profile for %s", user.email)
    return profile, True


@transaction.atomic
def update_profile(*, user: User, **fields) -> Profile:
    """
    Update the member-editable fields of a profile.

    Role and counters are ignored here; they change only through
    admin tooling and voucher issuance.

    Args:
        user: Profile owner
        **fields: Any of full_name, phone_number, birthday

    Returns:
        Updated Profile instance
    """
    profile, _ = ensure_profile(user)
    profile = Profile.objects.select_for_update().get(pk=profile.pk)

    update_fields = []
    for name in EDITABLE_PROFILE_FIELDS:
        if name in fields:
            setattr(profile, name, fields[name])
            update_fields.append(name)

    if update_fields:
        profile.save(update_fields=update_fields + ['updated_at'])

    return profile
