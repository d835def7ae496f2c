from rest_framework import serializers

from inventory.models import InventoryItem, UserInventory


class InventoryItemSerializer(serializers.ModelSerializer):
    item_id = serializers.CharField(source='item.id', read_only=True)
    item_name = serializers.CharField(source='item.name', read_only=True)
    rarity = serializers.CharField(source='item.rarity', read_only=True)

    class Meta:
        model = InventoryItem
        fields = [
            'id', 'item_id', 'item_name', 'rarity', 'steam_asset_id', 'market_hash_name',
            'wear', 'quality', 'float_value', 'custom_name', 'stickers', 'can_trade',
            'trade_hold_until', 'inspect_link', 'icon_url', 'current_value', 'best_platform',
        ]


class UserInventorySerializer(serializers.ModelSerializer):
    unmatched_warning = serializers.CharField(read_only=True)

    class Meta:
        model = UserInventory
        fields = [
            'steam_id', 'total_items', 'total_value', 'last_synced', 'sync_status',
            'error_message', 'is_public', 'import_status', 'items_imported_count',
            'items_unmatched_count', 'unmatched_warning', 'consent_given', 'consent_date',
            'scheduled_delete',
        ]


class SyncRequestSerializer(serializers.Serializer):
    force = serializers.BooleanField(required=False, default=False)
    consent = serializers.BooleanField(required=False, default=False)
