"""
Data models for the `inventory` app.

``UserInventory`` is the single per-user record of an imported Steam
inventory: the import cursor used to resume a partial fetch, the counters,
the last sync outcome and the GDPR consent metadata. ``InventoryItem`` rows
hold the matched catalog items; entries that have no catalog match are only
counted. ``AuditLog`` records personal-data processing events.
"""
from __future__ import annotations

from datetime import timedelta

from django.conf import settings
from django.contrib.auth.models import User
from django.db import models
from django.utils import timezone

from catalog.models import PLATFORM_CHOICES, Item


class UserInventory(models.Model):
    """Imported Steam inventory of one user."""

    SYNC_SUCCESS = 'success'
    SYNC_FAILED = 'failed'
    SYNC_PRIVATE = 'private'
    SYNC_RATE_LIMITED = 'rate_limited'
    SYNC_STATUS_CHOICES: list[tuple[str, str]] = [
        (SYNC_SUCCESS, 'Success'),
        (SYNC_FAILED, 'Failed'),
        (SYNC_PRIVATE, 'Private inventory'),
        (SYNC_RATE_LIMITED, 'Rate limited'),
    ]

    IMPORT_PENDING = 'pending'
    IMPORT_IN_PROGRESS = 'in_progress'
    IMPORT_COMPLETED = 'completed'
    IMPORT_FAILED = 'failed'
    IMPORT_STATUS_CHOICES: list[tuple[str, str]] = [
        (IMPORT_PENDING, 'Pending'),
        (IMPORT_IN_PROGRESS, 'In progress'),
        (IMPORT_COMPLETED, 'Completed'),
        (IMPORT_FAILED, 'Failed'),
    ]

    user = models.OneToOneField(User, on_delete=models.CASCADE, related_name='inventory')
    steam_id = models.CharField(max_length=17, blank=True, default='')
    total_items = models.IntegerField(default=0)
    total_value = models.DecimalField(max_digits=14, decimal_places=2, default=0)
    last_synced = models.DateTimeField(null=True, blank=True)
    sync_status = models.CharField(max_length=20, choices=SYNC_STATUS_CHOICES, null=True, blank=True)
    error_message = models.TextField(null=True, blank=True)
    is_public = models.BooleanField(default=True)

    # Import cursor
    import_status = models.CharField(max_length=20, choices=IMPORT_STATUS_CHOICES, default=IMPORT_PENDING)
    last_asset_id = models.CharField(max_length=32, null=True, blank=True)
    items_imported_count = models.IntegerField(default=0)
    items_unmatched_count = models.IntegerField(default=0)

    # GDPR consent
    consent_given = models.BooleanField(default=False)
    consent_date = models.DateTimeField(null=True, blank=True)
    consent_ip_hash = models.CharField(max_length=64, null=True, blank=True)
    consent_method = models.CharField(max_length=20, null=True, blank=True)
    consent_version = models.CharField(max_length=10, null=True, blank=True)
    scheduled_delete = models.DateTimeField(null=True, blank=True)

    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        verbose_name_plural = "User inventories"

    def __str__(self):
        return f"Inventory of {self.user.username}"

    @property
    def can_resume(self) -> bool:
        """A previous fetch stopped partway and left a cursor behind."""
        return self.import_status in (self.IMPORT_IN_PROGRESS, self.IMPORT_FAILED) and bool(self.last_asset_id)

    def is_fresh(self, now=None) -> bool:
        """Successful, completed and synced within the cache window."""
        if self.sync_status != self.SYNC_SUCCESS or self.import_status != self.IMPORT_COMPLETED:
            return False
        if self.last_synced is None:
            return False
        now = now or timezone.now()
        return now - self.last_synced < timedelta(hours=settings.INVENTORY_CACHE_TTL_HOURS)

    @property
    def unmatched_warning(self) -> str | None:
        if self.items_unmatched_count:
            return f"⚠️ {self.items_unmatched_count} items had issues"
        return None


class InventoryItem(models.Model):
    """One catalog-matched asset of a user's Steam inventory."""
    inventory = models.ForeignKey(UserInventory, on_delete=models.CASCADE, related_name='items')
    item = models.ForeignKey(Item, on_delete=models.CASCADE, related_name='inventory_items')
    steam_asset_id = models.CharField(max_length=32)
    market_hash_name = models.CharField(max_length=255)
    wear = models.CharField(max_length=30, null=True, blank=True)
    quality = models.CharField(max_length=20, default='normal')
    float_value = models.FloatField(null=True, blank=True)
    custom_name = models.CharField(max_length=255, null=True, blank=True)
    stickers = models.JSONField(default=list, blank=True)
    can_trade = models.BooleanField(default=True)
    trade_hold_until = models.DateTimeField(null=True, blank=True)
    inspect_link = models.CharField(max_length=500, null=True, blank=True)
    icon_url = models.URLField(max_length=500, null=True, blank=True)
    current_value = models.DecimalField(max_digits=12, decimal_places=2, null=True, blank=True)
    best_platform = models.CharField(max_length=20, choices=PLATFORM_CHOICES, null=True, blank=True)
    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        ordering = ['-current_value', 'market_hash_name']
        constraints = [
            models.UniqueConstraint(fields=['inventory', 'steam_asset_id'], name='unique_inventory_asset'),
        ]

    def __str__(self):
        return self.custom_name or self.market_hash_name


class AuditLog(models.Model):
    """Record of a personal-data processing event (consent, export, deletion)."""

    ACTION_CHOICES: list[tuple[str, str]] = [
        ('consent_given', 'Consent given'),
        ('data_exported', 'Data exported'),
        ('data_deleted', 'Data deleted'),
        ('data_purged', 'Data purged (retention)'),
    ]

    user = models.ForeignKey(User, on_delete=models.SET_NULL, null=True, blank=True, related_name='audit_logs')
    action = models.CharField(max_length=30, choices=ACTION_CHOICES)
    resource = models.CharField(max_length=50, default='inventory')
    ip_hash = models.CharField(max_length=64, null=True, blank=True)
    user_agent = models.TextField(null=True, blank=True)
    consent_version = models.CharField(max_length=10, null=True, blank=True)
    processing_purpose = models.TextField(blank=True, default='')
    metadata = models.JSONField(default=dict, blank=True)
    timestamp = models.DateTimeField(auto_now_add=True)

    class Meta:
        ordering = ['-timestamp']

    def __str__(self):
        return f"{self.action} ({self.timestamp:%Y-%m-%d %H:%M})"
