"""
Price alert management: create, update, pause/resume, delete, and the push
subscription registry.
"""
from __future__ import annotations

from decimal import Decimal, InvalidOperation

import structlog
from django.contrib.auth.models import User

from alerts.models import PriceAlert, PushSubscription
from catalog.models import Item
from csloadout.errors import Forbidden, NotFound, ValidationError

logger = structlog.get_logger(__name__)


def _target_price(value) -> Decimal:
    try:
        price = Decimal(str(value))
    except (InvalidOperation, ValueError, TypeError):
        raise ValidationError("Target price must be a number")
    if not price.is_finite() or price <= 0:
        raise ValidationError("Target price must be greater than $0")
    return price.quantize(Decimal('0.01'))


def _check_methods(notify_email: bool, notify_push: bool):
    if not notify_email and not notify_push:
        raise ValidationError("Select at least one notification method")


def create_alert(user: User, item_id: str, target_price, notify_email: bool = True,
                 notify_push: bool = False) -> PriceAlert:
    price = _target_price(target_price)
    _check_methods(notify_email, notify_push)

    if PriceAlert.objects.filter(user=user, item_id=item_id, is_active=True).exists():
        raise ValidationError("You already have an active alert for this item")

    item = Item.objects.filter(pk=item_id).first()
    if item is None:
        raise NotFound("Item not found")

    alert = PriceAlert.objects.create(
        user=user, item=item, target_price=price,
        notify_email=notify_email, notify_push=notify_push,
    )
    logger.info("price_alert_created", alert_id=alert.pk, user_id=user.pk, item_id=item.pk,
                target_price=str(price))
    return alert


def get_owned_alert(user: User, alert_id) -> PriceAlert:
    alert = PriceAlert.objects.select_related('item').filter(pk=alert_id).first()
    if alert is None:
        raise NotFound("Alert not found")
    if alert.user_id != user.pk:
        raise Forbidden("You do not own this alert")
    return alert


def update_alert(user: User, alert_id, target_price=None, notify_email: bool | None = None,
                 notify_push: bool | None = None, is_active: bool | None = None) -> PriceAlert:
    """Partial update; omitted fields keep their value."""
    alert = get_owned_alert(user, alert_id)

    if target_price is not None:
        alert.target_price = _target_price(target_price)
    if notify_email is not None:
        alert.notify_email = notify_email
    if notify_push is not None:
        alert.notify_push = notify_push
    _check_methods(alert.notify_email, alert.notify_push)

    if is_active is not None and is_active != alert.is_active:
        if is_active and PriceAlert.objects.filter(
            user=user, item_id=alert.item_id, is_active=True,
        ).exclude(pk=alert.pk).exists():
            raise ValidationError("You already have an active alert for this item")
        alert.is_active = is_active

    alert.save()
    return alert


def toggle_alert(user: User, alert_id) -> PriceAlert:
    """Pause an active alert or resume a paused one."""
    alert = get_owned_alert(user, alert_id)
    return update_alert(user, alert.pk, is_active=not alert.is_active)


def delete_alert(user: User, alert_id):
    alert = get_owned_alert(user, alert_id)
    alert.delete()
    logger.info("price_alert_deleted", alert_id=alert_id, user_id=user.pk)


def save_push_subscription(user: User, endpoint: str, keys: dict, user_agent: str = '') -> PushSubscription:
    """Register (or refresh) a browser endpoint for the user."""
    keys = keys or {}
    if not endpoint or not keys.get('p256dh') or not keys.get('auth'):
        raise ValidationError("Invalid subscription format")

    subscription, _ = PushSubscription.objects.update_or_create(
        endpoint=endpoint,
        defaults={
            'user': user,
            'p256dh': keys['p256dh'],
            'auth': keys['auth'],
            'user_agent': (user_agent or 'Unknown')[:500],
        },
    )
    return subscription


def remove_push_subscription(user: User, endpoint: str) -> int:
    if not endpoint:
        raise ValidationError("Endpoint is required")
    deleted, _ = PushSubscription.objects.filter(user=user, endpoint=endpoint).delete()
    return deleted
