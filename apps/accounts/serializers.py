from rest_framework import serializers
from django.contrib.auth.password_validation import validate_password
from .models import User, UserRole


# =============================================================================
# Input Serializers
# =============================================================================

class UserLoginSerializer(serializers.Serializer):
    """Serializer for user login."""

    email = serializers.EmailField(required=True)
    password = serializers.CharField(
        required=True,
        write_only=True,
        style={'input_type': 'password'}
    )


class PasswordChangeSerializer(serializers.Serializer):
    """Serializer for changing the current user's password."""

    current_password = serializers.CharField(
        required=True,
        style={'input_type': 'password'}
    )
    new_password = serializers.CharField(
        required=True,
        validators=[validate_password],
        style={'input_type': 'password'}
    )
    new_password_confirm = serializers.CharField(
        required=True,
        style={'input_type': 'password'}
    )

    def validate(self, attrs):
        """Validate password confirmation."""
        if attrs['new_password'] != attrs['new_password_confirm']:
            raise serializers.ValidationError({
                'new_password_confirm': 'Passwords do not match'
            })
        return attrs


class UserCreateSerializer(serializers.Serializer):
    """Input for creating a back-office user (super admin only)."""

    email = serializers.EmailField()
    name = serializers.CharField(max_length=100, required=False, allow_blank=True, default='')
    role = serializers.ChoiceField(choices=UserRole.choices, default=UserRole.MANAGER)
    password = serializers.CharField(
        required=False,
        allow_blank=True,
        write_only=True,
        validators=[validate_password],
        style={'input_type': 'password'}
    )
    settings_access = serializers.BooleanField(default=False)
    phone = serializers.CharField(max_length=30, required=False, allow_blank=True, default='')
    city = serializers.CharField(max_length=100, required=False, allow_blank=True, default='')
    state = serializers.CharField(max_length=100, required=False, allow_blank=True, default='')
    is_active = serializers.BooleanField(default=True)


class UserUpdateSerializer(serializers.Serializer):
    """Input for updating a back-office user; every field is optional."""

    email = serializers.EmailField(required=False)
    name = serializers.CharField(max_length=100, required=False, allow_blank=True)
    role = serializers.ChoiceField(choices=UserRole.choices, required=False)
    password = serializers.CharField(
        required=False,
        write_only=True,
        validators=[validate_password],
        style={'input_type': 'password'}
    )
    settings_access = serializers.BooleanField(required=False)
    phone = serializers.CharField(max_length=30, required=False, allow_blank=True)
    city = serializers.CharField(max_length=100, required=False, allow_blank=True)
    state = serializers.CharField(max_length=100, required=False, allow_blank=True)
    is_active = serializers.BooleanField(required=False)


# =============================================================================
# Output Serializers
# =============================================================================

class UserSerializer(serializers.ModelSerializer):
    """User profile as returned by the API."""

    class Meta:
        model = User
        fields = [
            'id',
            'email',
            'name',
            'role',
            'settings_access',
            'phone',
            'city',
            'state',
            'is_active',
            'created_at',
            'updated_at',
            'last_login',
        ]
        read_only_fields = [
            'id', 'email', 'role', 'settings_access', 'is_active',
            'created_at', 'updated_at', 'last_login',
        ]


class UserMinimalSerializer(serializers.ModelSerializer):
    """Minimal user info for nested serialization."""

    display_name = serializers.SerializerMethodField()

    class Meta:
        model = User
        fields = ['id', 'email', 'display_name']
        read_only_fields = fields

    def get_display_name(self, obj):
        return obj.get_display_name()
