"""
Data models for the `catalog` app.

The catalog mirrors the CS2 item database (skins, knives, gloves, cases,
stickers, agents...) together with the collections and cases they drop from.
``MarketplacePrice`` stores the latest listing per (item, platform) and
``PlatformFeeConfig`` the fee percentages used to turn a listed price into
what the buyer really pays.
"""
from __future__ import annotations

from decimal import Decimal

from django.db import models

from catalog.utils import normalize_item_name


PLATFORM_CHOICES: list[tuple[str, str]] = [
    ('steam', 'Steam Market'),
    ('csfloat', 'CSFloat'),
    ('csmoney', 'CS.MONEY'),
    ('tradeit', 'Tradeit.gg'),
    ('buff163', 'BUFF163'),
    ('dmarket', 'DMarket'),
    ('skinport', 'Skinport'),
]

WEAR_RANGES = {
    'Factory New': (0.00, 0.07),
    'Minimal Wear': (0.07, 0.15),
    'Field-Tested': (0.15, 0.38),
    'Well-Worn': (0.38, 0.45),
    'Battle-Scarred': (0.45, 1.00),
}


class Collection(models.Model):
    """A skin collection (e.g. "The Dust 2 Collection")."""
    id = models.CharField(primary_key=True, max_length=255)
    name = models.CharField(max_length=255)
    slug = models.SlugField(max_length=255, unique=True)
    image = models.URLField(max_length=500, null=True, blank=True)
    release_date = models.DateField(null=True, blank=True)
    is_discontinued = models.BooleanField(default=False)

    class Meta:
        ordering = ['name']

    def __str__(self):
        return self.name


class Case(models.Model):
    """A weapon case (crate) that items drop from."""
    id = models.CharField(primary_key=True, max_length=255)
    name = models.CharField(max_length=255)
    slug = models.SlugField(max_length=255, unique=True)
    image = models.URLField(max_length=500, null=True, blank=True)
    key_price = models.DecimalField(max_digits=10, decimal_places=2, null=True, blank=True)
    release_date = models.DateField(null=True, blank=True)

    class Meta:
        ordering = ['name']

    def __str__(self):
        return self.name


class Item(models.Model):
    """Every item of the game (skins, knives, gloves, stickers, cases...)."""

    TYPE_CHOICES: list[tuple[str, str]] = [
        ('skin', 'Weapon skin'),
        ('knife', 'Knife'),
        ('gloves', 'Gloves'),
        ('sticker', 'Sticker'),
        ('case', 'Case'),
        ('agent', 'Agent'),
        ('music_kit', 'Music kit'),
        ('charm', 'Charm'),
        ('other', 'Other'),
    ]

    QUALITY_CHOICES: list[tuple[str, str]] = [
        ('normal', 'Normal'),
        ('stattrak', 'StatTrak™'),
        ('souvenir', 'Souvenir'),
    ]

    id = models.CharField(primary_key=True, max_length=255)
    name = models.CharField(max_length=255, db_index=True)
    market_hash_name = models.CharField(max_length=255, unique=True)
    search_name = models.CharField(max_length=255, db_index=True, blank=True)
    type = models.CharField(max_length=20, choices=TYPE_CHOICES, default='skin', db_index=True)
    weapon_type = models.CharField(max_length=100, null=True, blank=True, db_index=True)
    rarity = models.CharField(max_length=100, null=True, blank=True, db_index=True)
    quality = models.CharField(max_length=20, choices=QUALITY_CHOICES, default='normal')
    wear = models.CharField(max_length=30, null=True, blank=True)
    min_float = models.FloatField(null=True, blank=True)
    max_float = models.FloatField(null=True, blank=True)
    image = models.URLField(max_length=500, null=True, blank=True)
    collections = models.ManyToManyField(Collection, related_name='items', blank=True)
    cases = models.ManyToManyField(Case, related_name='items', blank=True)

    class Meta:
        ordering = ['name']

    def __str__(self):
        return self.name

    def save(self, *args, **kwargs):
        if not self.search_name:
            self.search_name = normalize_item_name(self.market_hash_name or self.name)
        super().save(*args, **kwargs)

    def lowest_price(self) -> 'MarketplacePrice | None':
        """Cheapest listing by what the buyer actually pays."""
        return self.prices.order_by('total_cost').first()


class MarketplacePrice(models.Model):
    """Latest listing of an item on one marketplace."""
    item = models.ForeignKey(Item, on_delete=models.CASCADE, related_name='prices')
    platform = models.CharField(max_length=20, choices=PLATFORM_CHOICES)
    price = models.DecimalField(max_digits=12, decimal_places=2)
    currency = models.CharField(max_length=3, default='USD')
    seller_fee_percent = models.DecimalField(max_digits=5, decimal_places=2, default=Decimal('0'))
    buyer_fee_percent = models.DecimalField(max_digits=5, decimal_places=2, default=Decimal('0'))
    total_cost = models.DecimalField(max_digits=12, decimal_places=2, db_index=True)
    quantity_available = models.IntegerField(default=0)
    listing_url = models.URLField(max_length=500, null=True, blank=True)
    last_updated = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ['total_cost']
        constraints = [
            models.UniqueConstraint(fields=['item', 'platform'], name='unique_item_platform_price'),
        ]

    def __str__(self):
        return f"{self.item.name} @ {self.platform}: {self.total_cost}"


class PlatformFeeConfig(models.Model):
    """Fee percentages charged by a marketplace."""
    platform = models.CharField(primary_key=True, max_length=20, choices=PLATFORM_CHOICES)
    buyer_fee_percent = models.DecimalField(max_digits=5, decimal_places=2, default=Decimal('0'))
    seller_fee_percent = models.DecimalField(max_digits=5, decimal_places=2, default=Decimal('0'))
    hidden_markup_percent = models.DecimalField(max_digits=5, decimal_places=2, default=Decimal('0'))
    fee_notes = models.TextField(blank=True, default='')
    source_url = models.URLField(max_length=500, null=True, blank=True)
    last_verified = models.DateTimeField(auto_now=True)

    class Meta:
        verbose_name = "Platform fee config"
        verbose_name_plural = "Platform fee configs"

    def __str__(self):
        return self.get_platform_display()
