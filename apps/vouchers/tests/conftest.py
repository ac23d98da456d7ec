import pytest
from datetime import timedelta
from django.utils import timezone
from rest_framework.test import APIClient
from rest_framework_simplejwt.tokens import RefreshToken
from apps.accounts.models import User, Profile, ProfileRole
from apps.notifications import sms
from apps.vouchers.models import Voucher, VoucherReason


@pytest.fixture(autouse=True)
def clear_sms_outbox():
    """Start every test with an empty locmem SMS outbox."""
    sms.outbox.clear()
    yield
    sms.outbox.clear()


@pytest.fixture
def api_client():
    """Return an unauthenticated API client."""
    return APIClient()


@pytest.fixture
def cafe_admin(db):
    """Create and return a staff user with the café admin role."""
    user = User.objects.create_user(
        email='barista@example.com',
        password='TestPass123!',
        display_name='Head Barista',
    )
    Profile.objects.create(user=user, full_name='Head Barista', role=ProfileRole.ADMIN)
    return user


@pytest.fixture
def voucher_member(db):
    """Create and return a regular member with full contact details."""
    user = User.objects.create_user(
        email='member@example.com',
        password='TestPass123!',
        display_name='Coffee Member',
    )
    Profile.objects.create(
        user=user,
        full_name='Coffee Member',
        role=ProfileRole.MEMBER,
        phone_number='+905551112233',
    )
    return user


@pytest.fixture
def voucher_other_member(db):
    """Create and return a second member."""
    user = User.objects.create_user(
        email='other@example.com',
        password='TestPass123!',
        display_name='Other Member',
    )
    Profile.objects.create(user=user, full_name='Other Member')
    return user


def _client_for(user):
    client = APIClient()
    refresh = RefreshToken.for_user(user)
    client.credentials(HTTP_AUTHORIZATION=f'Bearer {refresh.access_token}')
    return client


@pytest.fixture
def admin_client(cafe_admin):
    """Return API client authenticated as café admin."""
    return _client_for(cafe_admin)


@pytest.fixture
def member_client(voucher_member):
    """Return API client authenticated as a regular member."""
    return _client_for(voucher_member)


@pytest.fixture
def other_member_client(voucher_other_member):
    """Return API client authenticated as the second member."""
    return _client_for(voucher_other_member)


@pytest.fixture
def active_voucher(voucher_member):
    """Unused gift voucher valid for another week."""
    return Voucher.objects.create(
        code='LOKAL-GIFT-ACTIVE001',
        user=voucher_member,
        reason=VoucherReason.GIFT,
        expires_at=timezone.now() + timedelta(days=7),
    )


@pytest.fixture
def expired_voucher(voucher_member):
    """Unused birthday voucher that expired yesterday."""
    return Voucher.objects.create(
        code='LOKAL-BDAY-ABC123',
        user=voucher_member,
        reason=VoucherReason.BIRTHDAY,
        created_at=timezone.now() - timedelta(days=8),
        expires_at=timezone.now() - timedelta(days=1),
    )


@pytest.fixture
def used_voucher(voucher_member, cafe_admin):
    """Gift voucher redeemed two hours ago."""
    return Voucher.objects.create(
        code='LOKAL-GIFT-XYZ789',
        user=voucher_member,
        reason=VoucherReason.GIFT,
        is_used=True,
        used_at=timezone.now() - timedelta(hours=2),
        redeemed_by=cafe_admin,
    )


@pytest.fixture
def open_ended_voucher(voucher_member):
    """Discount voucher with no expiry."""
    return Voucher.objects.create(
        code='LOKAL-DISC-NOEXPIRY1',
        user=voucher_member,
        reason=VoucherReason.DISCOUNT,
        expires_at=None,
    )
