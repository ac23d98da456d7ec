import pytest
from apps.accounts.models import User, Profile
from apps.notifications import sms
from apps.vouchers.models import Voucher, VoucherReason


@pytest.fixture(autouse=True)
def clear_sms_outbox():
    sms.outbox.clear()
    yield
    sms.outbox.clear()


@pytest.fixture
def recipient(db):
    """Member with both email and phone number."""
    user = User.objects.create_user(
        email='guest@example.com',
        password='TestPass123!',
        display_name='Guest',
    )
    Profile.objects.create(user=user, full_name='Guest <b>Star</b>', phone_number='+905550000001')
    return user


@pytest.fixture
def gift(recipient):
    return Voucher.objects.create(
        code='LOKAL-GIFT-NOTIFY001',
        user=recipient,
        reason=VoucherReason.GIFT,
    )
