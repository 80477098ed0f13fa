from django.contrib.auth import password_validation
from rest_framework import serializers
from rest_framework_simplejwt.serializers import TokenObtainPairSerializer
from rest_framework_simplejwt.tokens import RefreshToken

from .models import User


class UserSerializer(serializers.ModelSerializer):
    # Write-only: the hash never leaves the server
    password = serializers.CharField(
        write_only=True,
        required=True,
        style={"input_type": "password"},
    )

    class Meta:
        model = User
        fields = ("id", "email", "created_at", "password")
        read_only_fields = ["id", "created_at"]

    def validate_password(self, value):
        password_validation.validate_password(value)
        return value

    def create(self, validated_data):
        # create_user hashes the password
        return User.objects.create_user(**validated_data)


class UserSerializerWithToken(UserSerializer):
    token = serializers.SerializerMethodField(read_only=True)

    class Meta(UserSerializer.Meta):
        fields = UserSerializer.Meta.fields + ("token",)

    def get_token(self, obj):
        token = RefreshToken.for_user(obj)
        return str(token.access_token)


class LoginSerializer(TokenObtainPairSerializer):
    """Token pair plus the admin's public details, as the dashboard expects."""

    def validate(self, attrs):
        data = super().validate(attrs)
        data["admin"] = {"id": self.user.id, "email": self.user.email}
        return data
