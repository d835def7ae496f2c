"""
Data models for the `loadouts` app.

A ``Loadout`` is a budgeted selection of cosmetics, one per slot. Publishing a
loadout gives it a unique slug; public loadouts collect views (one per
hashed IP per 24 hours) and upvotes (one per user).
"""
from __future__ import annotations

from django.contrib.auth.models import User
from django.db import models

from catalog.models import PLATFORM_CHOICES, Item

PRIORITIZE_CHOICES = [
    ('balance', 'Balanced'),
    ('price', 'Price'),
    ('quality', 'Quality'),
    ('color_match', 'Color match'),
]

CATEGORY_CHOICES = [
    ('weapon_skins', 'Weapon skins'),
    ('knife', 'Knife'),
    ('gloves', 'Gloves'),
    ('agents', 'Agents'),
    ('music_kit', 'Music kit'),
    ('charms', 'Charms'),
]


class Loadout(models.Model):
    user = models.ForeignKey(User, on_delete=models.CASCADE, related_name='loadouts')
    name = models.CharField(max_length=100)
    description = models.TextField(blank=True, default='')
    budget = models.DecimalField(max_digits=10, decimal_places=2)
    actual_cost = models.DecimalField(max_digits=10, decimal_places=2, default=0)
    theme = models.CharField(max_length=50, blank=True, default='')
    prioritize = models.CharField(max_length=20, choices=PRIORITIZE_CHOICES, default='balance')
    custom_allocation = models.JSONField(null=True, blank=True)

    is_public = models.BooleanField(default=False)
    slug = models.SlugField(max_length=120, unique=True, null=True, blank=True)
    views = models.PositiveIntegerField(default=0)
    upvotes = models.PositiveIntegerField(default=0)

    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ['-created_at']
        indexes = [
            models.Index(fields=['is_public', '-upvotes']),
            models.Index(fields=['is_public', '-created_at']),
        ]

    def __str__(self) -> str:
        return f"{self.name} (${self.budget})"

    @property
    def remaining_budget(self):
        return self.budget - self.actual_cost


class LoadoutItem(models.Model):
    loadout = models.ForeignKey(Loadout, on_delete=models.CASCADE, related_name='items')
    item = models.ForeignKey(Item, on_delete=models.CASCADE, related_name='loadout_entries')
    category = models.CharField(max_length=20, choices=CATEGORY_CHOICES)
    # weapon type for weapon skins, the category for everything else
    slot = models.CharField(max_length=50)
    price = models.DecimalField(max_digits=10, decimal_places=2)
    selected_platform = models.CharField(max_length=20, choices=PLATFORM_CHOICES, null=True, blank=True)
    added_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        ordering = ['category', 'slot']
        constraints = [
            models.UniqueConstraint(fields=['loadout', 'slot'], name='unique_loadout_slot'),
        ]

    def __str__(self) -> str:
        return f"{self.slot}: {self.item.name}"


class LoadoutView(models.Model):
    loadout = models.ForeignKey(Loadout, on_delete=models.CASCADE, related_name='view_records')
    viewer_ip_hash = models.CharField(max_length=64)
    viewed_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        indexes = [models.Index(fields=['loadout', 'viewer_ip_hash', 'viewed_at'])]


class LoadoutUpvote(models.Model):
    loadout = models.ForeignKey(Loadout, on_delete=models.CASCADE, related_name='upvote_records')
    user = models.ForeignKey(User, on_delete=models.CASCADE, related_name='loadout_upvotes')
    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        constraints = [
            models.UniqueConstraint(fields=['loadout', 'user'], name='unique_loadout_upvote'),
        ]


class WeaponUsagePriority(models.Model):
    """Per-weapon share of the weapon_skins budget; the active rows sum to 1."""
    weapon_type = models.CharField(max_length=50, unique=True)
    budget_weight = models.DecimalField(max_digits=4, decimal_places=3)
    is_essential = models.BooleanField(default=False)
    priority = models.PositiveSmallIntegerField(default=0)

    class Meta:
        ordering = ['priority', '-budget_weight']

    def __str__(self) -> str:
        return f"{self.weapon_type} ({self.budget_weight})"
