"""
Periodic price alert check.

For every active alert, the cheapest listing by total cost is compared with
the target. An alert fires when that price is at or below the target and its
last firing is older than ``ALERT_COOLDOWN_MINUTES``.
"""
from __future__ import annotations

import time
from datetime import timedelta

import structlog
from django.conf import settings
from django.db import DatabaseError, transaction
from django.db.models import F
from django.utils import timezone

from alerts import notifications
from alerts.models import AlertTrigger, PriceAlert
from catalog.models import MarketplacePrice

logger = structlog.get_logger(__name__)


def _lowest_prices(item_ids) -> dict:
    lowest = {}
    for price in MarketplacePrice.objects.filter(item_id__in=item_ids).order_by('item_id', 'total_cost'):
        lowest.setdefault(price.item_id, price)
    return lowest


def in_cooldown(alert: PriceAlert, now) -> bool:
    if alert.last_triggered_at is None:
        return False
    return now - alert.last_triggered_at < timedelta(minutes=settings.ALERT_COOLDOWN_MINUTES)


def trigger_alert(alert: PriceAlert, price: MarketplacePrice, now) -> AlertTrigger:
    """Record the firing, then notify through the channels the alert asks for."""
    with transaction.atomic():
        PriceAlert.objects.filter(pk=alert.pk).update(
            triggered_count=F('triggered_count') + 1,
            last_triggered_at=now,
        )
        trigger = AlertTrigger.objects.create(
            alert=alert,
            triggered_price=price.total_cost,
            platform=price.platform,
            listing_url=price.listing_url or None,
        )
    alert.last_triggered_at = now

    if alert.notify_email and notifications.send_alert_email(
        alert, price.total_cost, price.platform, price.listing_url,
    ):
        trigger.email_sent = True
        trigger.email_sent_at = timezone.now()

    if alert.notify_push and notifications.send_alert_push(alert, price.total_cost, price.listing_url):
        trigger.push_sent = True
        trigger.push_sent_at = timezone.now()

    trigger.save(update_fields=['email_sent', 'email_sent_at', 'push_sent', 'push_sent_at'])
    return trigger


def check_alerts(now=None) -> dict:
    now = now or timezone.now()
    started = time.monotonic()

    alerts = list(
        PriceAlert.objects.filter(is_active=True)
        .select_related('item', 'user', 'user__steam_profile')
    )
    lowest = _lowest_prices({alert.item_id for alert in alerts})

    triggered = []
    failed = 0
    for alert in alerts:
        price = lowest.get(alert.item_id)
        if price is None or price.total_cost > alert.target_price or in_cooldown(alert, now):
            continue
        try:
            trigger = trigger_alert(alert, price, now)
        except DatabaseError:
            logger.exception("price_alert_trigger_failed", alert_id=alert.pk)
            failed += 1
            continue
        triggered.append({
            'alert_id': alert.pk,
            'item_name': alert.item.name,
            'target_price': str(alert.target_price),
            'triggered_price': str(trigger.triggered_price),
            'platform': trigger.platform,
            'email_sent': trigger.email_sent,
            'push_sent': trigger.push_sent,
        })

    summary = {
        'success': True,
        'alerts_checked': len(alerts),
        'alerts_triggered': len(triggered),
        'alerts_failed': failed,
        'elapsed_ms': int((time.monotonic() - started) * 1000),
        'triggered_details': triggered,
    }
    logger.info("price_alerts_checked", checked=len(alerts), triggered=len(triggered), failed=failed)
    return summary
