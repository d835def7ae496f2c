"""
Data models for the `accounts` app.

Users sign in with Steam only. Django's ``User`` keeps the session side of
things (username, last_login, e-mail for alerts) and ``SteamProfile`` caches
the public Steam identity returned by the Steam Web API.
"""

from django.contrib.auth.models import User
from django.db import models
from django.db.models.signals import post_save
from django.dispatch import receiver


class SteamProfile(models.Model):
    """Cached Steam identity of a user."""

    STATE_CHOICES: list[tuple[str, str]] = [
        ('public', 'Public'),
        ('friends_only', 'Friends only'),
        ('private', 'Private'),
        ('unknown', 'Unknown'),
    ]

    user = models.OneToOneField(User, on_delete=models.CASCADE, related_name='steam_profile')
    steam_id = models.CharField(max_length=17, unique=True, null=True, blank=True)
    persona_name = models.CharField(max_length=255, blank=True, default='')
    profile_url = models.URLField(max_length=500, null=True, blank=True)
    avatar = models.URLField(max_length=500, null=True, blank=True)
    profile_state = models.CharField(max_length=20, choices=STATE_CHOICES, default='unknown')
    has_cs2_game = models.BooleanField(null=True, blank=True)
    email_notifications = models.BooleanField(default=True)
    push_notifications = models.BooleanField(default=True)
    profile_updated_at = models.DateTimeField(null=True, blank=True)
    created_at = models.DateTimeField(auto_now_add=True)

    def __str__(self):
        return self.persona_name or self.user.username


@receiver(post_save, sender=User)
def create_steam_profile(sender, instance, created, **kwargs):
    if created:
        SteamProfile.objects.get_or_create(user=instance)
