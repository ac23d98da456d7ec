from django.db import models
from django.utils import timezone
import uuid


class VoucherReason(models.TextChoices):
    GIFT = 'gift', 'Gift'
    BIRTHDAY = 'birthday', 'Birthday'
    DISCOUNT = 'discount', 'Discount'


class VoucherStatus(models.TextChoices):
    ACTIVE = 'active', 'Active'
    USED = 'used', 'Used'
    EXPIRED = 'expired', 'Expired'


class Voucher(models.Model):
    """
    Single-use coffee voucher.

    Transitions unused -> used exactly once, through the redemption
    service's conditional update. Never deleted; used vouchers stay as
    the audit record.
    """

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    code = models.CharField(max_length=32, unique=True, editable=False)

    user = models.ForeignKey(
        'accounts.User',
        on_delete=models.CASCADE,
        related_name='vouchers'
    )
    reason = models.CharField(max_length=20, choices=VoucherReason.choices)

    # Lifecycle
    created_at = models.DateTimeField(default=timezone.now, editable=False)
    expires_at = models.DateTimeField(null=True, blank=True)
    is_used = models.BooleanField(default=False)
    used_at = models.DateTimeField(null=True, blank=True)

    # Audit
    issued_by = models.ForeignKey(
        'accounts.User',
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name='vouchers_issued'
    )
    redeemed_by = models.ForeignKey(
        'accounts.User',
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name='vouchers_redeemed'
    )

    class Meta:
        db_table = 'coffee_vouchers'
        indexes = [
            models.Index(fields=['user', 'reason', 'created_at'], name='coffee_vouc_user_id_8d2c3e_idx'),
            models.Index(fields=['user', 'is_used'], name='coffee_vouc_user_id_51a0f7_idx'),
        ]
        ordering = ['-created_at']

    def __str__(self):
        return f"{self.code} ({self.get_reason_display()})"

    def is_expired(self, at=None):
        """Expired means strictly past expires_at; no expiry never expires."""
        if self.expires_at is None:
            return False
        return (at or timezone.now()) > self.expires_at

    def get_status(self, at=None):
        if self.is_used:
            return VoucherStatus.USED
        if self.is_expired(at):
            return VoucherStatus.EXPIRED
        return VoucherStatus.ACTIVE

    @property
    def status(self):
        return self.get_status()
