from rest_framework import serializers
from .models import User, Profile


class UserSerializer(serializers.ModelSerializer):
    """Basic user serializer for identity display."""

    class Meta:
        model = User
        fields = [
            'id',
            'email',
            'display_name',
            'created_at',
            'last_login',
        ]
        read_only_fields = fields


class ProfileSerializer(serializers.ModelSerializer):
    """Full profile as shown to its owner."""

    user_id = serializers.UUIDField(source='user.id', read_only=True)
    email = serializers.EmailField(source='user.email', read_only=True)

    class Meta:
        model = Profile
        fields = [
            'id',
            'user_id',
            'email',
            'full_name',
            'role',
            'phone_number',
            'birthday',
            'coffee_voucher_count',
            'activity_attendance_count',
            'created_at',
            'updated_at',
        ]
        read_only_fields = fields


class ProfileUpdateSerializer(serializers.Serializer):
    """Input serializer for member-editable profile fields."""

    full_name = serializers.CharField(max_length=150, required=False)
    phone_number = serializers.RegexField(
        r'^\+?[0-9 ()-]{7,32}$',
        required=False,
        allow_blank=True,
        error_messages={'invalid': 'Enter a valid phone number.'},
    )
    birthday = serializers.DateField(required=False, allow_null=True)
