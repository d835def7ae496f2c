"""
Application configuration for the `accounts` app.

Loads the signal receivers that keep a SteamProfile next to every user.
"""
from __future__ import annotations

from django.apps import AppConfig


class AccountsConfig(AppConfig):
    """AppConfig for the accounts app."""

    default_auto_field = 'django.db.models.BigAutoField'
    name = 'accounts'
