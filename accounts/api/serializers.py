from django.contrib.auth.models import User
from rest_framework import serializers

from accounts.models import SteamProfile


class SteamProfileSerializer(serializers.ModelSerializer):
    class Meta:
        model = SteamProfile
        fields = [
            'steam_id', 'persona_name', 'profile_url', 'avatar', 'profile_state',
            'has_cs2_game', 'email_notifications', 'push_notifications', 'profile_updated_at',
        ]
        read_only_fields = [
            'steam_id', 'persona_name', 'profile_url', 'avatar', 'profile_state',
            'has_cs2_game', 'profile_updated_at',
        ]


class UserSerializer(serializers.ModelSerializer):
    """The signed-in user with the cached Steam profile."""
    steam_profile = SteamProfileSerializer(read_only=True)

    class Meta:
        model = User
        fields = ['id', 'username', 'email', 'last_login', 'date_joined', 'steam_profile']
        read_only_fields = ['id', 'username', 'last_login', 'date_joined']
