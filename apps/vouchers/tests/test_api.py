"""
API tests for the vouchers endpoints.
"""

from datetime import date, timedelta
from unittest.mock import patch

import pytest
from django.core import mail
from django.db import DatabaseError
from django.urls import reverse
from django.utils import timezone
from rest_framework import status

from apps.accounts.models import Profile
from apps.notifications import sms
from apps.vouchers.models import Voucher, VoucherReason


REDEEM_URL = '/api/vouchers/redeem'


# =============================================================================
# REDEEM
# =============================================================================

@pytest.mark.django_db
class TestRedeemAPI:
    """Tests for POST /api/vouchers/redeem."""

    def test_redeem_success(self, admin_client, active_voucher):
        response = admin_client.post(REDEEM_URL, {'voucherCode': active_voucher.code}, format='json')

        assert response.status_code == status.HTTP_200_OK
        assert response.data['message'] == 'Voucher redeemed successfully.'
        assert response.data['voucherCode'] == active_voucher.code
        assert response.data['voucher']['code'] == active_voucher.code
        assert response.data['voucher']['used_at'] is not None

        active_voucher.refresh_from_db()
        assert active_voucher.is_used is True

    def test_redeem_with_trailing_slash(self, admin_client, active_voucher):
        response = admin_client.post(f'{REDEEM_URL}/', {'voucherCode': active_voucher.code}, format='json')
        assert response.status_code == status.HTTP_200_OK

    def test_redeem_lowercase_code(self, admin_client, active_voucher):
        response = admin_client.post(
            REDEEM_URL, {'voucherCode': active_voucher.code.lower()}, format='json'
        )

        assert response.status_code == status.HTTP_200_OK
        assert response.data['voucherCode'] == active_voucher.code

    def test_redeem_expired(self, admin_client, expired_voucher):
        response = admin_client.post(REDEEM_URL, {'voucherCode': 'LOKAL-BDAY-ABC123'}, format='json')

        assert response.status_code == status.HTTP_400_BAD_REQUEST
        assert response.data == {'error': 'This voucher has expired.'}

    def test_redeem_used(self, admin_client, used_voucher):
        response = admin_client.post(REDEEM_URL, {'voucherCode': 'LOKAL-GIFT-XYZ789'}, format='json')

        assert response.status_code == status.HTTP_400_BAD_REQUEST
        assert response.data == {'error': 'This voucher has already been used.'}

    def test_redeem_unknown(self, admin_client):
        response = admin_client.post(REDEEM_URL, {'voucherCode': 'LOKAL-GIFT-MISSING01'}, format='json')

        assert response.status_code == status.HTTP_404_NOT_FOUND
        assert response.data == {'error': 'Invalid voucher code.'}

    @pytest.mark.parametrize('body', [{}, {'voucherCode': ''}, {'voucherCode': '   '}])
    def test_redeem_missing_code(self, admin_client, body):
        response = admin_client.post(REDEEM_URL, body, format='json')

        assert response.status_code == status.HTTP_400_BAD_REQUEST
        assert 'error' in response.data

    @pytest.mark.parametrize('body', [{'voucherCode': 'X' * 65}, {'voucherCode': None}])
    def test_redeem_malformed_code(self, admin_client, body):
        response = admin_client.post(REDEEM_URL, body, format='json')

        assert response.status_code == status.HTTP_400_BAD_REQUEST
        assert response.data == {'error': 'A valid voucher code is required.'}

    @pytest.mark.parametrize('body', [
        {'voucherCode': 'X' * 65},
        {'voucherCode': None},
        {},
    ])
    def test_member_with_malformed_body_forbidden(self, member_client, body):
        response = member_client.post(REDEEM_URL, body, format='json')

        assert response.status_code == status.HTTP_403_FORBIDDEN
        assert list(response.data) == ['error']

    def test_redeem_as_member_forbidden(self, member_client, active_voucher):
        response = member_client.post(REDEEM_URL, {'voucherCode': active_voucher.code}, format='json')

        assert response.status_code == status.HTTP_403_FORBIDDEN
        assert 'error' in response.data

        active_voucher.refresh_from_db()
        assert active_voucher.is_used is False

    def test_redeem_unauthenticated(self, api_client, active_voucher):
        response = api_client.post(REDEEM_URL, {'voucherCode': active_voucher.code}, format='json')

        assert response.status_code == status.HTTP_401_UNAUTHORIZED

    def test_redeem_store_failure(self, admin_client, active_voucher):
        with patch.object(Voucher.objects, 'filter', side_effect=DatabaseError('locked')):
            response = admin_client.post(
                REDEEM_URL, {'voucherCode': active_voucher.code}, format='json'
            )

        assert response.status_code == status.HTTP_500_INTERNAL_SERVER_ERROR
        assert response.data == {'error': 'An error occurred while redeeming the voucher.'}

    def test_redeem_twice(self, admin_client, active_voucher):
        first = admin_client.post(REDEEM_URL, {'voucherCode': active_voucher.code}, format='json')
        second = admin_client.post(REDEEM_URL, {'voucherCode': active_voucher.code}, format='json')

        assert first.status_code == status.HTTP_200_OK
        assert second.status_code == status.HTTP_400_BAD_REQUEST


# =============================================================================
# GIFT
# =============================================================================

@pytest.mark.django_db
class TestGiftAPI:
    """Tests for POST /api/vouchers/gift/."""

    def test_gift_voucher(
        self, admin_client, voucher_member, django_capture_on_commit_callbacks
    ):
        url = reverse('vouchers:gift')
        data = {
            'user_id': str(voucher_member.id),
            'message': 'Thanks for the latte art class!',
            'send_sms': True,
        }

        with django_capture_on_commit_callbacks(execute=True):
            response = admin_client.post(url, data, format='json')

        assert response.status_code == status.HTTP_201_CREATED
        assert response.data['reason'] == VoucherReason.GIFT
        assert response.data['status'] == 'active'
        assert response.data['code'].startswith('LOKAL-GIFT-')

        assert len(mail.outbox) == 1
        assert len(sms.outbox) == 1
        assert Profile.objects.get(user=voucher_member).coffee_voucher_count == 1

    def test_gift_with_validity(self, admin_client, voucher_member):
        url = reverse('vouchers:gift')
        data = {
            'user_id': str(voucher_member.id),
            'reason': VoucherReason.DISCOUNT,
            'validity_days': 3,
            'send_email': False,
        }

        response = admin_client.post(url, data, format='json')

        assert response.status_code == status.HTTP_201_CREATED
        voucher = Voucher.objects.get(code=response.data['code'])
        assert voucher.reason == VoucherReason.DISCOUNT
        assert voucher.expires_at - voucher.created_at == timedelta(days=3)

    def test_gift_unknown_user(self, admin_client):
        url = reverse('vouchers:gift')
        data = {'user_id': '00000000-0000-0000-0000-000000000000'}

        response = admin_client.post(url, data, format='json')

        assert response.status_code == status.HTTP_404_NOT_FOUND
        assert 'error' in response.data

    def test_gift_invalid_reason(self, admin_client, voucher_member):
        url = reverse('vouchers:gift')
        data = {'user_id': str(voucher_member.id), 'reason': 'bribe'}

        response = admin_client.post(url, data, format='json')

        assert response.status_code == status.HTTP_400_BAD_REQUEST

    def test_gift_as_member_forbidden(self, member_client, voucher_other_member):
        url = reverse('vouchers:gift')
        data = {'user_id': str(voucher_other_member.id)}

        response = member_client.post(url, data, format='json')

        assert response.status_code == status.HTTP_403_FORBIDDEN
        assert not Voucher.objects.exists()


# =============================================================================
# BIRTHDAYS
# =============================================================================

@pytest.mark.django_db
class TestBirthdayAPI:
    """Tests for the birthday batch and tracker endpoints."""

    def test_run_batch(self, admin_client, voucher_member):
        Profile.objects.filter(user=voucher_member).update(birthday=date(1990, 3, 14))
        url = reverse('vouchers:birthdays-run')

        response = admin_client.post(url, {'date': '2026-03-14', 'notify': False}, format='json')

        assert response.status_code == status.HTTP_200_OK
        assert response.data['date'] == '2026-03-14'
        assert response.json()['issued'][0]['code'].startswith('LOKAL-BDAY-')
        assert response.data['issued_count'] == 1
        assert response.data['skipped_count'] == 0
        assert response.data['issued'][0]['reason'] == VoucherReason.BIRTHDAY

        again = admin_client.post(url, {'date': '2026-03-14', 'notify': False}, format='json')

        assert again.data['issued_count'] == 0
        assert again.data['skipped_count'] == 1
        assert again.data['skipped'][0]['user_id'] == str(voucher_member.id)

    def test_run_batch_as_member_forbidden(self, member_client):
        response = member_client.post(reverse('vouchers:birthdays-run'), {}, format='json')

        assert response.status_code == status.HTTP_403_FORBIDDEN

    def test_upcoming(self, admin_client, voucher_member, voucher_other_member):
        today = timezone.localdate()
        Profile.objects.filter(user=voucher_member).update(
            birthday=(today + timedelta(days=2)).replace(year=2000)
        )
        Profile.objects.filter(user=voucher_other_member).update(
            birthday=(today + timedelta(days=40)).replace(year=2000)
        )

        response = admin_client.get(reverse('vouchers:birthdays-upcoming'))

        assert response.status_code == status.HTTP_200_OK
        assert len(response.data) == 1
        assert response.data[0]['profile']['user_id'] == str(voucher_member.id)
        assert response.data[0]['days_until'] == 2
        assert response.data[0]['has_voucher'] is False

        wider = admin_client.get(reverse('vouchers:birthdays-upcoming'), {'days': 60})
        assert len(wider.data) == 2

    def test_upcoming_invalid_window(self, admin_client):
        response = admin_client.get(reverse('vouchers:birthdays-upcoming'), {'days': 365})

        assert response.status_code == status.HTTP_400_BAD_REQUEST

    def test_upcoming_as_member_forbidden(self, member_client):
        response = member_client.get(reverse('vouchers:birthdays-upcoming'))

        assert response.status_code == status.HTTP_403_FORBIDDEN


# =============================================================================
# VOUCHER LISTING AND QR
# =============================================================================

@pytest.mark.django_db
class TestVoucherViewSet:
    """Tests for the read-only voucher endpoints."""

    def test_list_own_vouchers(
        self, member_client, other_member_client, active_voucher, expired_voucher, used_voucher
    ):
        response = member_client.get(reverse('vouchers:voucher-list'))

        assert response.status_code == status.HTTP_200_OK
        assert response.data['count'] == 3

        other = other_member_client.get(reverse('vouchers:voucher-list'))
        assert other.data['count'] == 0

    @pytest.mark.parametrize('voucher_status,expected_code', [
        ('active', 'LOKAL-GIFT-ACTIVE001'),
        ('used', 'LOKAL-GIFT-XYZ789'),
        ('expired', 'LOKAL-BDAY-ABC123'),
    ])
    def test_list_filtered_by_status(
        self, member_client, active_voucher, expired_voucher, used_voucher,
        voucher_status, expected_code,
    ):
        response = member_client.get(reverse('vouchers:voucher-list'), {'status': voucher_status})

        assert response.status_code == status.HTTP_200_OK
        assert [v['code'] for v in response.data['results']] == [expected_code]
        assert response.data['results'][0]['status'] == voucher_status

    def test_list_invalid_status(self, member_client):
        response = member_client.get(reverse('vouchers:voucher-list'), {'status': 'lost'})

        assert response.status_code == status.HTTP_400_BAD_REQUEST

    def test_retrieve_own_voucher(self, member_client, active_voucher):
        url = reverse('vouchers:voucher-detail', kwargs={'code': active_voucher.code})

        response = member_client.get(url)

        assert response.status_code == status.HTTP_200_OK
        assert response.data['status'] == 'active'

    def test_retrieve_someone_elses_voucher(self, other_member_client, active_voucher):
        url = reverse('vouchers:voucher-detail', kwargs={'code': active_voucher.code})

        response = other_member_client.get(url)

        assert response.status_code == status.HTTP_404_NOT_FOUND

    def test_admin_retrieves_any_voucher(self, admin_client, active_voucher):
        url = reverse('vouchers:voucher-detail', kwargs={'code': active_voucher.code.lower()})

        response = admin_client.get(url)

        assert response.status_code == status.HTTP_200_OK
        assert response.data['code'] == active_voucher.code

    def test_qr_code(self, member_client, active_voucher):
        url = reverse('vouchers:voucher-qr', kwargs={'code': active_voucher.code})

        response = member_client.get(url)

        assert response.status_code == status.HTTP_200_OK
        assert response['Content-Type'] == 'image/png'
        assert response.content.startswith(b'\x89PNG')

    def test_list_unauthenticated(self, api_client):
        response = api_client.get(reverse('vouchers:voucher-list'))

        assert response.status_code == status.HTTP_401_UNAUTHORIZED
