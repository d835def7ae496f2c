"""
Application configuration for the `inventory` app.
"""
from __future__ import annotations

from django.apps import AppConfig


class InventoryConfig(AppConfig):
    """AppConfig for the inventory app."""

    default_auto_field = 'django.db.models.BigAutoField'
    name = 'inventory'
