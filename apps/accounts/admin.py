"""
Django admin configuration for accounts app.
"""

from django.contrib import admin
from django.contrib.auth.admin import UserAdmin as BaseUserAdmin
from django.utils.html import format_html
from .models import User, Profile, ProfileRole


class ProfileInline(admin.StackedInline):
    model = Profile
    can_delete = False
    fields = ['full_name', 'role', 'phone_number', 'birthday',
              'coffee_voucher_count', 'activity_attendance_count']
    readonly_fields = ['coffee_voucher_count', 'activity_attendance_count']


@admin.register(User)
class UserAdmin(BaseUserAdmin):
    """Admin interface for the email-based User model."""

    list_display = [
        'email',
        'display_name',
        'is_active',
        'is_staff',
        'created_at',
        'last_login',
    ]

    list_filter = [
        'is_active',
        'is_staff',
        'is_superuser',
        'created_at',
    ]

    search_fields = [
        'email',
        'display_name',
    ]

    ordering = ['-created_at']

    # Remove username field references from BaseUserAdmin
    fieldsets = (
        ('Basic Information', {
            'fields': ('email', 'display_name', 'password')
        }),
        ('Permissions', {
            'fields': ('is_active', 'is_staff', 'is_superuser', 'groups', 'user_permissions'),
        }),
        ('Timestamps', {
            'fields': ('created_at', 'last_login'),
            'classes': ('collapse',),
        }),
    )

    add_fieldsets = (
        ('Create User', {
            'classes': ('wide',),
            'fields': ('email', 'display_name', 'password1', 'password2'),
        }),
    )

    readonly_fields = ['created_at', 'last_login']
    filter_horizontal = ['groups', 'user_permissions']
    inlines = [ProfileInline]


@admin.register(Profile)
class ProfileAdmin(admin.ModelAdmin):
    """Admin interface for café member profiles."""

    list_display = [
        'full_name',
        'email',
        'role_badge',
        'birthday',
        'coffee_voucher_count',
        'activity_attendance_count',
    ]
    list_filter = ['role']
    search_fields = ['full_name', 'user__email', 'phone_number']
    readonly_fields = ['created_at', 'updated_at']
    list_select_related = ['user']
    actions = ['make_admin', 'make_member']

    def role_badge(self, obj):
        """Display role as colored badge."""
        if obj.role == ProfileRole.ADMIN:
            return format_html(
                '<span style="background: #A47449; color: white; padding: 3px 8px; '
                'border-radius: 10px; font-size: 11px;">Admin</span>'
            )
        return format_html(
            '<span style="background: #ccc; color: #666; padding: 3px 8px; '
            'border-radius: 10px; font-size: 11px;">Member</span>'
        )
    role_badge.short_description = 'Role'
    role_badge.admin_order_field = 'role'

    @admin.action(description='Grant café admin role')
    def make_admin(self, request, queryset):
        count = queryset.update(role=ProfileRole.ADMIN)
        self.message_user(request, f'Granted admin role to {count} profile(s).')

    @admin.action(description='Revoke café admin role')
    def make_member(self, request, queryset):
        count = queryset.update(role=ProfileRole.MEMBER)
        self.message_user(request, f'Revoked admin role from {count} profile(s).')
