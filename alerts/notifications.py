"""
Delivery of triggered price alerts by e-mail and web push.

Senders return True when the notification went out and False otherwise;
failures are logged and never raised, so one bad address or expired browser
endpoint does not stop the remaining alerts.
"""
from __future__ import annotations

import json
from decimal import Decimal
from smtplib import SMTPException

import structlog
from django.conf import settings
from django.core.mail import send_mail
from pywebpush import WebPushException, webpush

from alerts.models import PriceAlert, PushSubscription

logger = structlog.get_logger(__name__)

# Push services answer these for subscriptions that no longer exist
EXPIRED_STATUSES = (404, 410)


def alert_url(alert: PriceAlert, listing_url: str | None = None) -> str:
    return listing_url or f"{settings.SITE_URL}/items/{alert.item_id}/"


def email_subject(alert: PriceAlert, price: Decimal) -> str:
    return f"🔔 Price Alert: {alert.item.name} is now ${price:.2f}"


def email_body(alert: PriceAlert, price: Decimal, platform: str, listing_url: str | None) -> str:
    lines = [
        f"{alert.item.name} dropped to ${price:.2f} on {platform}.",
        f"Your target price: ${alert.target_price:.2f}",
        "",
        f"View listing: {alert_url(alert, listing_url)}",
        "",
        f"Manage your alerts: {settings.SITE_URL}/alerts/",
    ]
    return "\n".join(lines)


def send_alert_email(alert: PriceAlert, price: Decimal, platform: str, listing_url: str | None = None) -> bool:
    address = alert.user.email
    if not address:
        logger.info("alert_email_skipped", alert_id=alert.pk, reason="no_email")
        return False

    profile = getattr(alert.user, 'steam_profile', None)
    if profile is not None and not profile.email_notifications:
        logger.info("alert_email_skipped", alert_id=alert.pk, reason="disabled")
        return False

    try:
        send_mail(
            email_subject(alert, price),
            email_body(alert, price, platform, listing_url),
            settings.DEFAULT_FROM_EMAIL,
            [address],
        )
    except (SMTPException, OSError):
        logger.exception("alert_email_failed", alert_id=alert.pk)
        return False
    return True


def push_payload(alert: PriceAlert, price: Decimal, listing_url: str | None = None) -> dict:
    return {
        'title': f"Price Alert: {alert.item.name}",
        'body': f"Now ${price:.2f} - Your target: ${alert.target_price:.2f}",
        'icon': alert.item.image or '',
        'data': {'url': alert_url(alert, listing_url)},
    }


def send_push(subscription: PushSubscription, payload: dict) -> bool:
    """Send one push; subscriptions the push service reports as gone are deleted."""
    try:
        webpush(
            subscription_info=subscription.as_subscription_info(),
            data=json.dumps(payload),
            vapid_private_key=settings.VAPID_PRIVATE_KEY,
            vapid_claims={'sub': settings.VAPID_SUBJECT},
        )
    except WebPushException as e:
        status_code = getattr(e.response, 'status_code', None)
        if status_code in EXPIRED_STATUSES:
            logger.info("push_subscription_expired", subscription_id=subscription.pk, status=status_code)
            subscription.delete()
        else:
            logger.warning("push_failed", subscription_id=subscription.pk, status=status_code, error=str(e))
        return False
    return True


def send_alert_push(alert: PriceAlert, price: Decimal, listing_url: str | None = None) -> bool:
    """Push to every device of the user; True when at least one delivery succeeded."""
    if not settings.VAPID_PRIVATE_KEY:
        logger.warning("push_skipped", alert_id=alert.pk, reason="vapid_not_configured")
        return False

    profile = getattr(alert.user, 'steam_profile', None)
    if profile is not None and not profile.push_notifications:
        return False

    payload = push_payload(alert, price, listing_url)
    delivered = False
    for subscription in list(PushSubscription.objects.filter(user=alert.user)):
        if send_push(subscription, payload):
            delivered = True
    return delivered
