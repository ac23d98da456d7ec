"""
Tests for accounts services: lazy profiles and café roles.
"""

from datetime import date
from unittest.mock import patch

import pytest
from django.contrib.auth.models import AnonymousUser
from django.db import IntegrityError

from apps.accounts.models import User, Profile, ProfileRole
from apps.accounts.services import (
    ensure_profile,
    update_profile,
    get_role,
    is_cafe_admin,
    require_cafe_admin,
    UnauthenticatedError,
    NotCafeAdminError,
)


@pytest.mark.django_db
class TestEnsureProfile:
    """Tests for ensure_profile."""

    def test_creates_profile_on_first_access(self, user):
        profile, created = ensure_profile(user)

        assert created is True
        assert profile.user == user
        assert profile.full_name == 'Test User'
        assert profile.role == ProfileRole.MEMBER
        assert profile.coffee_voucher_count == 0
        assert profile.activity_attendance_count == 0

    def test_returns_existing_profile(self, user):
        first, _ = ensure_profile(user)
        second, created = ensure_profile(user)

        assert created is False
        assert second.pk == first.pk
        assert Profile.objects.filter(user=user).count() == 1

    def test_full_name_falls_back_to_email(self, db):
        user = User.objects.create_user(email='barista.joe@example.com', password='TestPass123!')

        profile, _ = ensure_profile(user)

        assert profile.full_name == 'barista.joe'

    def test_superuser_gets_admin_role(self, superuser):
        profile, _ = ensure_profile(superuser)
        assert profile.role == ProfileRole.ADMIN

    def test_lost_creation_race_reads_winner(self, user):
        winner = Profile.objects.create(user=user, full_name='Winner')

        # Simulate a request that checked before the winner committed
        with patch.object(Profile.objects, 'get', side_effect=[Profile.DoesNotExist, winner]):
            with patch.object(Profile.objects, 'create', side_effect=IntegrityError):
                profile, created = ensure_profile(user)

        assert created is False
        assert profile.pk == winner.pk

    @pytest.mark.parametrize('anonymous', [None, AnonymousUser()])
    def test_requires_authenticated_user(self, anonymous):
        with pytest.raises(UnauthenticatedError):
            ensure_profile(anonymous)


@pytest.mark.django_db
class TestUpdateProfile:
    """Tests for update_profile."""

    def test_updates_editable_fields(self, user):
        profile = update_profile(
            user=user,
            full_name='Ayşe Yılmaz',
            phone_number='+905551234567',
            birthday=date(1992, 4, 5),
        )

        profile.refresh_from_db()
        assert profile.full_name == 'Ayşe Yılmaz'
        assert profile.phone_number == '+905551234567'
        assert profile.birthday == date(1992, 4, 5)

    def test_ignores_role_and_counters(self, user):
        profile = update_profile(user=user, role=ProfileRole.ADMIN, coffee_voucher_count=99)

        profile.refresh_from_db()
        assert profile.role == ProfileRole.MEMBER
        assert profile.coffee_voucher_count == 0


@pytest.mark.django_db
class TestRoles:
    """Tests for role lookup helpers."""

    def test_member_role(self, user):
        assert get_role(user) == ProfileRole.MEMBER
        assert is_cafe_admin(user) is False

        with pytest.raises(NotCafeAdminError):
            require_cafe_admin(user)

    def test_admin_role(self, user):
        ensure_profile(user)
        Profile.objects.filter(user=user).update(role=ProfileRole.ADMIN)

        assert get_role(user) == ProfileRole.ADMIN
        assert is_cafe_admin(user) is True
        require_cafe_admin(user)

    def test_anonymous_is_not_admin(self):
        assert is_cafe_admin(AnonymousUser()) is False
        assert is_cafe_admin(None) is False

    def test_require_admin_unauthenticated(self):
        with pytest.raises(UnauthenticatedError):
            require_cafe_admin(AnonymousUser())
