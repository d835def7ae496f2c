"""
Application configuration for the `loadouts` app.
"""
from __future__ import annotations

from django.apps import AppConfig


class LoadoutsConfig(AppConfig):
    """AppConfig for the loadouts app."""

    default_auto_field = 'django.db.models.BigAutoField'
    name = 'loadouts'
