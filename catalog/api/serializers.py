from rest_framework import serializers

from catalog.models import Case, Collection, Item, MarketplacePrice


class ItemSerializer(serializers.ModelSerializer):
    class Meta:
        model = Item
        fields = [
            'id', 'name', 'market_hash_name', 'search_name', 'type', 'weapon_type',
            'rarity', 'quality', 'wear', 'min_float', 'max_float', 'image',
        ]


class MarketplacePriceSerializer(serializers.ModelSerializer):
    class Meta:
        model = MarketplacePrice
        fields = [
            'platform', 'price', 'currency', 'buyer_fee_percent', 'seller_fee_percent',
            'total_cost', 'quantity_available', 'listing_url', 'last_updated',
        ]


class ItemDetailSerializer(ItemSerializer):
    prices = MarketplacePriceSerializer(many=True, read_only=True)
    collections = serializers.SlugRelatedField(many=True, read_only=True, slug_field='slug')
    cases = serializers.SlugRelatedField(many=True, read_only=True, slug_field='slug')

    class Meta(ItemSerializer.Meta):
        fields = ItemSerializer.Meta.fields + ['prices', 'collections', 'cases']


class CaseSerializer(serializers.ModelSerializer):
    item_count = serializers.IntegerField(read_only=True)

    class Meta:
        model = Case
        fields = ['id', 'name', 'slug', 'image', 'key_price', 'release_date', 'item_count']


class CollectionSerializer(serializers.ModelSerializer):
    item_count = serializers.IntegerField(read_only=True)

    class Meta:
        model = Collection
        fields = ['id', 'name', 'slug', 'image', 'release_date', 'is_discontinued', 'item_count']


class FeeQuerySerializer(serializers.Serializer):
    price = serializers.DecimalField(max_digits=12, decimal_places=2, min_value=0)
    platform = serializers.CharField(max_length=20)
