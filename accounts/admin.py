"""
Admin configuration for the `accounts` app.
"""
from __future__ import annotations

from django.contrib import admin

from .models import SteamProfile


@admin.register(SteamProfile)
class SteamProfileAdmin(admin.ModelAdmin):
    list_display = ('persona_name', 'steam_id', 'user', 'profile_state', 'has_cs2_game', 'profile_updated_at')
    list_filter = ('profile_state', 'has_cs2_game')
    search_fields = ('persona_name', 'steam_id', 'user__username')
