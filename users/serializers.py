from rest_framework import serializers

from core.constants import ROLE_CHOICES, ROLE_TEAM_LEADER
from .models import User


class UserSerializer(serializers.ModelSerializer):
    """Directory view of a user. Never includes the password hash."""

    class Meta:
        model = User
        fields = ["id", "name", "email", "role", "date_joined"]


class UserCreateSerializer(serializers.Serializer):
    """
    Used by managers/admins to add people. Missing fields and duplicate
    e-mails are reported by the view with fixed messages.
    """
    name = serializers.CharField(required=False, allow_blank=True)
    email = serializers.EmailField(required=False, allow_blank=True)
    password = serializers.CharField(required=False, allow_blank=True, write_only=True)
    role = serializers.ChoiceField(choices=ROLE_CHOICES, required=False, default=ROLE_TEAM_LEADER)

    def create(self, validated_data):
        return User.objects.create_user(
            username=validated_data["email"],
            email=validated_data["email"],
            password=validated_data["password"],
            name=validated_data["name"],
            role=validated_data["role"],
        )
