from rest_framework import serializers

from core.models import Role


class LoginSerializer(serializers.Serializer):
    username = serializers.CharField(max_length=150)
    password = serializers.CharField(trim_whitespace=False, write_only=True)
    # Optional department the operator is logging into.
    role = serializers.ChoiceField(choices=Role.choices, required=False, allow_blank=True)
