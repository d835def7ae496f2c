from rest_framework import serializers

from alerts.models import AlertTrigger, PriceAlert
from catalog.api.serializers import ItemSerializer


class AlertTriggerSerializer(serializers.ModelSerializer):
    class Meta:
        model = AlertTrigger
        fields = ['id', 'triggered_price', 'platform', 'listing_url', 'email_sent', 'push_sent', 'triggered_at']


class PriceAlertSerializer(serializers.ModelSerializer):
    item = ItemSerializer(read_only=True)
    current_price = serializers.SerializerMethodField()

    class Meta:
        model = PriceAlert
        fields = [
            'id', 'item', 'target_price', 'current_price', 'notify_email', 'notify_push',
            'is_active', 'triggered_count', 'last_triggered_at', 'created_at', 'updated_at',
        ]

    def get_current_price(self, obj):
        lowest = obj.item.lowest_price()
        return str(lowest.total_cost) if lowest else None


class AlertCreateSerializer(serializers.Serializer):
    item_id = serializers.CharField()
    target_price = serializers.DecimalField(max_digits=12, decimal_places=2)
    notify_email = serializers.BooleanField(default=True)
    notify_push = serializers.BooleanField(default=False)


class AlertUpdateSerializer(serializers.Serializer):
    target_price = serializers.DecimalField(max_digits=12, decimal_places=2, required=False)
    notify_email = serializers.BooleanField(required=False)
    notify_push = serializers.BooleanField(required=False)
    is_active = serializers.BooleanField(required=False)


class PushKeysSerializer(serializers.Serializer):
    p256dh = serializers.CharField()
    auth = serializers.CharField()


class PushSubscriptionSerializer(serializers.Serializer):
    endpoint = serializers.URLField(max_length=500)
    keys = PushKeysSerializer()
