# ==========================================
# apps/vouchers/admin.py
# ==========================================

from django.contrib import admin, messages
from django.utils.html import format_html
from .models import Voucher, VoucherStatus
from .services import redeem_voucher, VouchersServiceError
from apps.accounts.services import AccountsServiceError


@admin.register(Voucher)
class VoucherAdmin(admin.ModelAdmin):
    """
    Admin interface for coffee vouchers.

    Vouchers are created by the issuance services and kept forever as
    audit records, so add and delete are disabled here. Redemption goes
    through the same service as the scanner endpoint.
    """

    list_display = [
        'code',
        'user',
        'reason',
        'status_badge',
        'created_at',
        'expires_at',
        'used_at',
    ]

    list_filter = [
        'reason',
        'is_used',
        'created_at',
    ]

    search_fields = [
        'code',
        'user__email',
        'user__display_name',
    ]

    readonly_fields = [
        'code',
        'user',
        'reason',
        'created_at',
        'is_used',
        'used_at',
        'issued_by',
        'redeemed_by',
    ]

    fields = readonly_fields[:4] + ['expires_at'] + readonly_fields[4:]

    list_select_related = ['user']
    date_hierarchy = 'created_at'
    ordering = ['-created_at']
    actions = ['redeem_selected']

    def status_badge(self, obj):
        """Display voucher status as colored badge."""
        colors = {
            VoucherStatus.ACTIVE: ('#6B8E5E', 'white'),
            VoucherStatus.USED: ('#A47449', 'white'),
            VoucherStatus.EXPIRED: ('#B85C5C', 'white'),
        }
        voucher_status = obj.status
        bg, fg = colors.get(voucher_status, ('#ccc', '#666'))
        return format_html(
            '<span style="background: {}; color: {}; padding: 3px 8px; '
            'border-radius: 10px; font-size: 11px;">{}</span>',
            bg, fg, voucher_status.label
        )
    status_badge.short_description = 'Status'

    def has_add_permission(self, request):
        """Vouchers are issued by the services, not by hand."""
        return False

    def has_delete_permission(self, request, obj=None):
        return False

    @admin.action(description='Redeem selected vouchers')
    def redeem_selected(self, request, queryset):
        redeemed = 0
        for voucher in queryset:
            try:
                redeem_voucher(code=voucher.code, acting_user=request.user)
                redeemed += 1
            except (VouchersServiceError, AccountsServiceError) as e:
                self.message_user(request, f'{voucher.code}: {e}', level=messages.WARNING)
        self.message_user(request, f'Redeemed {redeemed} voucher(s).')
