"""
Application configuration for the `alerts` app.
"""
from __future__ import annotations

from django.apps import AppConfig


class AlertsConfig(AppConfig):
    """AppConfig for the alerts app."""

    default_auto_field = 'django.db.models.BigAutoField'
    name = 'alerts'
