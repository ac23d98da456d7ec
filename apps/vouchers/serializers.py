from rest_framework import serializers
from .models import Voucher, VoucherReason, VoucherStatus


class VoucherSerializer(serializers.ModelSerializer):
    """Voucher as shown to its owner or to staff."""

    status = serializers.CharField(read_only=True)

    class Meta:
        model = Voucher
        fields = [
            'id',
            'code',
            'reason',
            'status',
            'created_at',
            'expires_at',
            'is_used',
            'used_at',
        ]
        read_only_fields = fields


class RedeemedVoucherSerializer(serializers.ModelSerializer):
    """Redemption confirmation; carries no owner data."""

    class Meta:
        model = Voucher
        fields = [
            'code',
            'reason',
            'created_at',
            'expires_at',
            'used_at',
        ]
        read_only_fields = fields


# =============================================================================
# Input serializers
# =============================================================================

class RedeemVoucherInputSerializer(serializers.Serializer):
    """Body of POST /api/vouchers/redeem."""

    voucherCode = serializers.CharField(
        max_length=64,
        allow_blank=True,
        required=False,
        help_text="Voucher code as scanned from the QR code or typed in"
    )


class GiftVoucherInputSerializer(serializers.Serializer):
    """Body of POST /api/vouchers/gift/."""

    user_id = serializers.UUIDField()
    reason = serializers.ChoiceField(choices=VoucherReason.choices, default=VoucherReason.GIFT)
    validity_days = serializers.IntegerField(min_value=1, max_value=365, required=False)
    message = serializers.CharField(max_length=500, required=False, allow_blank=True, default='')
    send_email = serializers.BooleanField(default=True)
    send_sms = serializers.BooleanField(default=False)


class BirthdayBatchInputSerializer(serializers.Serializer):
    """Body of POST /api/vouchers/birthdays/run/."""

    date = serializers.DateField(required=False)
    notify = serializers.BooleanField(default=True)


class UpcomingBirthdaysFilterSerializer(serializers.Serializer):
    """Query parameters of GET /api/vouchers/birthdays/upcoming/."""

    days = serializers.IntegerField(min_value=0, max_value=60, default=7)


class VoucherFilterSerializer(serializers.Serializer):
    """Query parameters of GET /api/vouchers/."""

    status = serializers.ChoiceField(choices=VoucherStatus.choices, required=False)


# =============================================================================
# Response serializers
# =============================================================================

class RedeemResponseSerializer(serializers.Serializer):
    message = serializers.CharField()
    voucherCode = serializers.CharField()
    voucher = RedeemedVoucherSerializer()


class BirthdayProfileSerializer(serializers.Serializer):
    user_id = serializers.UUIDField(source='user.id')
    full_name = serializers.CharField()
    birthday = serializers.DateField()
    phone_number = serializers.CharField()


class BirthdayBatchResponseSerializer(serializers.Serializer):
    date = serializers.DateField()
    issued_count = serializers.IntegerField()
    skipped_count = serializers.IntegerField()
    issued = VoucherSerializer(many=True)
    skipped = BirthdayProfileSerializer(many=True)


class UpcomingBirthdaySerializer(serializers.Serializer):
    profile = BirthdayProfileSerializer()
    next_birthday = serializers.DateField()
    days_until = serializers.IntegerField()
    has_voucher = serializers.BooleanField()
