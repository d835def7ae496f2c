"""
Admin configuration for the `catalog` app.
"""
from __future__ import annotations

from django.contrib import admin

from .models import Case, Collection, Item, MarketplacePrice, PlatformFeeConfig


class MarketplacePriceInline(admin.TabularInline):
    model = MarketplacePrice
    extra = 0
    readonly_fields = ('last_updated',)


@admin.register(Item)
class ItemAdmin(admin.ModelAdmin):
    list_display = ('name', 'type', 'weapon_type', 'rarity', 'quality', 'wear')
    list_filter = ('type', 'rarity', 'quality', 'wear')
    search_fields = ('name', 'market_hash_name', 'search_name')
    filter_horizontal = ('collections', 'cases')
    inlines = [MarketplacePriceInline]


@admin.register(Collection)
class CollectionAdmin(admin.ModelAdmin):
    list_display = ('name', 'slug', 'release_date', 'is_discontinued')
    search_fields = ('name',)
    prepopulated_fields = {'slug': ('name',)}


@admin.register(Case)
class CaseAdmin(admin.ModelAdmin):
    list_display = ('name', 'slug', 'key_price', 'release_date')
    search_fields = ('name',)
    prepopulated_fields = {'slug': ('name',)}


@admin.register(MarketplacePrice)
class MarketplacePriceAdmin(admin.ModelAdmin):
    list_display = ('item', 'platform', 'price', 'total_cost', 'quantity_available', 'last_updated')
    list_filter = ('platform',)
    search_fields = ('item__name',)
    raw_id_fields = ('item',)


@admin.register(PlatformFeeConfig)
class PlatformFeeConfigAdmin(admin.ModelAdmin):
    list_display = ('platform', 'buyer_fee_percent', 'seller_fee_percent', 'hidden_markup_percent', 'last_verified')
