"""
Serializers for Users app.
"""

from rest_framework import serializers


class SignUpSerializer(serializers.Serializer):
    """Sign-up request. Username rules are enforced by the auth service."""

    email = serializers.CharField(max_length=254)
    password = serializers.CharField(write_only=True, trim_whitespace=False)
    username = serializers.CharField(max_length=64)


class SignInSerializer(serializers.Serializer):
    email = serializers.CharField(max_length=254)
    password = serializers.CharField(write_only=True, trim_whitespace=False)


class UsernameQuerySerializer(serializers.Serializer):
    username = serializers.CharField(max_length=64)
