from rest_framework import serializers

from catalog.api.serializers import ItemSerializer
from loadouts.allocation import CATEGORIES
from loadouts.models import PRIORITIZE_CHOICES, Loadout, LoadoutItem


class LoadoutItemSerializer(serializers.ModelSerializer):
    item = ItemSerializer(read_only=True)

    class Meta:
        model = LoadoutItem
        fields = ['id', 'item', 'category', 'slot', 'price', 'selected_platform', 'added_at']


class LoadoutSerializer(serializers.ModelSerializer):
    owner = serializers.CharField(source='user.username', read_only=True)
    remaining_budget = serializers.DecimalField(max_digits=10, decimal_places=2, read_only=True)
    items = LoadoutItemSerializer(many=True, read_only=True)

    class Meta:
        model = Loadout
        fields = [
            'id', 'owner', 'name', 'description', 'budget', 'actual_cost', 'remaining_budget',
            'theme', 'prioritize', 'custom_allocation', 'is_public', 'slug', 'views', 'upvotes',
            'items', 'created_at', 'updated_at',
        ]


class LoadoutCreateSerializer(serializers.Serializer):
    """Shape of the create request; range checks happen in the service."""
    name = serializers.CharField(max_length=200)
    budget = serializers.DecimalField(max_digits=12, decimal_places=2)
    description = serializers.CharField(required=False, allow_blank=True, default='')
    theme = serializers.CharField(required=False, allow_blank=True, default='')
    prioritize = serializers.ChoiceField(choices=PRIORITIZE_CHOICES, default='balance')
    custom_allocation = serializers.DictField(required=False, allow_null=True, default=None)


class LoadoutItemRequestSerializer(serializers.Serializer):
    item_id = serializers.CharField()
    category = serializers.ChoiceField(choices=CATEGORIES)
