"""
Admin configuration for the `inventory` app.
"""
from __future__ import annotations

from django.contrib import admin

from .models import AuditLog, InventoryItem, UserInventory


@admin.register(UserInventory)
class UserInventoryAdmin(admin.ModelAdmin):
    list_display = (
        'user', 'steam_id', 'total_items', 'total_value', 'sync_status',
        'import_status', 'items_unmatched_count', 'last_synced', 'consent_given',
    )
    list_filter = ('sync_status', 'import_status', 'consent_given', 'is_public')
    search_fields = ('user__username', 'steam_id')


@admin.register(InventoryItem)
class InventoryItemAdmin(admin.ModelAdmin):
    list_display = ('market_hash_name', 'inventory', 'wear', 'quality', 'current_value', 'best_platform')
    list_filter = ('quality', 'best_platform', 'can_trade')
    search_fields = ('market_hash_name', 'custom_name', 'steam_asset_id')
    raw_id_fields = ('inventory', 'item')


@admin.register(AuditLog)
class AuditLogAdmin(admin.ModelAdmin):
    list_display = ('action', 'user', 'resource', 'consent_version', 'timestamp')
    list_filter = ('action', 'resource')
    readonly_fields = [f.name for f in AuditLog._meta.fields]
