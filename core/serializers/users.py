from django.contrib.auth import password_validation
from django.contrib.auth.validators import UnicodeUsernameValidator
from django.core.exceptions import ValidationError as DjangoValidationError
from rest_framework import serializers

from core.models import Role, User
from core.serializers.common import ClinicModelSerializer


class UserSerializer(ClinicModelSerializer):
    """Staff account as shown to other staff; never exposes the hash."""

    active = serializers.BooleanField(source='is_active', read_only=True)
    created_at = serializers.DateTimeField(source='date_joined', read_only=True)

    class Meta:
        model = User
        fields = ['id', 'name', 'username', 'role', 'shift', 'phone', 'active', 'created_at']
        read_only_fields = ['id', 'username', 'role']


class UserCreateSerializer(ClinicModelSerializer):
    password = serializers.CharField(write_only=True, trim_whitespace=False)

    class Meta:
        model = User
        fields = ['id', 'name', 'username', 'password', 'role', 'shift', 'phone']
        read_only_fields = ['id']
        extra_kwargs = {
            # Uniqueness is checked under the store's write lock instead.
            'username': {'validators': [UnicodeUsernameValidator()]},
            'name': {'required': True, 'allow_blank': False},
            'role': {'required': True},
        }

    def validate(self, attrs):
        candidate = User(username=attrs.get('username'), name=attrs.get('name', ''))
        try:
            password_validation.validate_password(attrs['password'], user=candidate)
        except DjangoValidationError as exc:
            raise serializers.ValidationError({'password': exc.messages})
        return attrs


class UserAdminUpdateSerializer(ClinicModelSerializer):
    """Fields an administrator may change on any account."""

    class Meta:
        model = User
        fields = ['name', 'role', 'shift', 'phone']


class UserSelfUpdateSerializer(ClinicModelSerializer):
    """Fields staff may change on their own account."""

    class Meta:
        model = User
        fields = ['name', 'shift', 'phone']


class PasswordChangeSerializer(serializers.Serializer):
    new_password = serializers.CharField(trim_whitespace=False, write_only=True)

    def validate_new_password(self, value):
        password_validation.validate_password(value, user=self.context.get('user'))
        return value


class UserListQuerySerializer(serializers.Serializer):
    role = serializers.ChoiceField(choices=Role.choices, required=False)
    active = serializers.BooleanField(required=False, allow_null=True, default=None)
