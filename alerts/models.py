"""
Data models for the `alerts` app.

A ``PriceAlert`` fires when the cheapest total cost of its item drops to the
target price. Each firing is kept as an ``AlertTrigger`` with the delivery
outcome. ``PushSubscription`` rows are the browser endpoints registered for
web push; one user may have several devices.
"""
from __future__ import annotations

from django.contrib.auth.models import User
from django.db import models

from catalog.models import PLATFORM_CHOICES, Item


class PriceAlert(models.Model):
    user = models.ForeignKey(User, on_delete=models.CASCADE, related_name='price_alerts')
    item = models.ForeignKey(Item, on_delete=models.CASCADE, related_name='price_alerts')
    target_price = models.DecimalField(max_digits=10, decimal_places=2)
    notify_email = models.BooleanField(default=True)
    notify_push = models.BooleanField(default=False)
    is_active = models.BooleanField(default=True)
    triggered_count = models.PositiveIntegerField(default=0)
    last_triggered_at = models.DateTimeField(null=True, blank=True)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ['-created_at']
        indexes = [models.Index(fields=['is_active', 'item'])]

    def __str__(self) -> str:
        return f"{self.item.name} <= ${self.target_price}"


class AlertTrigger(models.Model):
    alert = models.ForeignKey(PriceAlert, on_delete=models.CASCADE, related_name='triggers')
    triggered_price = models.DecimalField(max_digits=10, decimal_places=2)
    platform = models.CharField(max_length=20, choices=PLATFORM_CHOICES)
    listing_url = models.URLField(max_length=500, null=True, blank=True)
    email_sent = models.BooleanField(default=False)
    email_sent_at = models.DateTimeField(null=True, blank=True)
    push_sent = models.BooleanField(default=False)
    push_sent_at = models.DateTimeField(null=True, blank=True)
    triggered_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        ordering = ['-triggered_at']


class PushSubscription(models.Model):
    user = models.ForeignKey(User, on_delete=models.CASCADE, related_name='push_subscriptions')
    endpoint = models.URLField(max_length=500, unique=True)
    p256dh = models.CharField(max_length=255)
    auth = models.CharField(max_length=255)
    user_agent = models.CharField(max_length=500, blank=True, default='')
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    def __str__(self) -> str:
        return f"{self.user} @ {self.endpoint[:40]}"

    def as_subscription_info(self) -> dict:
        """The shape pywebpush expects."""
        return {'endpoint': self.endpoint, 'keys': {'p256dh': self.p256dh, 'auth': self.auth}}
