"""
Personal-data handling for imported inventories: consent, export (right of
access / portability), deletion (right to erasure) and the retention purge.
"""
from __future__ import annotations

from datetime import timedelta
from decimal import Decimal

import structlog
from django.conf import settings
from django.contrib.auth.models import User
from django.db import transaction
from django.db.models import Q, Sum
from django.utils import timezone

from inventory.models import AuditLog, InventoryItem, UserInventory

logger = structlog.get_logger(__name__)

PROCESSING_PURPOSE = 'Inventory data collection for marketplace price comparison'

EXPORT_NOTICE = (
    'This export complies with GDPR Article 15 (Right of Access) and Article 20 '
    '(Right to Data Portability). Your personal data is provided in a structured, '
    'commonly used, and machine-readable format.'
)
DELETE_NOTICE = (
    'This deletion complies with GDPR Article 17 (Right to Erasure). Your personal '
    'inventory data has been permanently deleted and cannot be recovered.'
)
NOTHING_TO_DELETE_NOTICE = (
    'This deletion complies with GDPR Article 17 (Right to Erasure). Your request has been processed.'
)


@transaction.atomic
def record_consent(user: User, ip_hash: str, user_agent: str = '', method: str = 'modal') -> UserInventory:
    """Store the user's consent to inventory processing and log it."""
    now = timezone.now()
    steam_id = getattr(getattr(user, 'steam_profile', None), 'steam_id', None) or ''
    inventory, _ = UserInventory.objects.get_or_create(user=user, defaults={'steam_id': steam_id})
    inventory.consent_given = True
    inventory.consent_date = now
    inventory.consent_ip_hash = ip_hash
    inventory.consent_method = method
    inventory.consent_version = settings.CONSENT_VERSION
    inventory.save()

    AuditLog.objects.create(
        user=user,
        action='consent_given',
        resource='inventory',
        ip_hash=ip_hash,
        user_agent=user_agent[:500] if user_agent else None,
        consent_version=settings.CONSENT_VERSION,
        processing_purpose=PROCESSING_PURPOSE,
        metadata={'method': method},
    )
    logger.info("consent_recorded", user_id=user.pk, method=method)
    return inventory


def _money(value) -> str | None:
    return None if value is None else str(value)


def export_inventory(user: User) -> dict | None:
    """Everything stored about the user's inventory, or None when nothing was imported."""
    inventory = UserInventory.objects.filter(user=user).first()
    if inventory is None:
        return None

    items = (InventoryItem.objects.filter(inventory=inventory)
             .select_related('item').prefetch_related('item__prices'))
    now = timezone.now()

    exported_items = []
    for row in items:
        exported_items.append({
            'steam_asset_id': row.steam_asset_id,
            'market_hash_name': row.market_hash_name,
            'item_name': row.item.name,
            'wear': row.wear,
            'quality': row.quality,
            'float_value': row.float_value,
            'custom_name': row.custom_name,
            'stickers': row.stickers,
            'can_trade': row.can_trade,
            'trade_hold_until': row.trade_hold_until.isoformat() if row.trade_hold_until else None,
            'current_value': _money(row.current_value),
            'best_platform': row.best_platform,
            'pricing': {
                price.platform: {
                    'price': _money(price.price),
                    'total_cost': _money(price.total_cost),
                    'last_updated': price.last_updated.isoformat(),
                }
                for price in row.item.prices.all()
            },
            'imported_at': row.created_at.isoformat(),
        })

    AuditLog.objects.create(
        user=user,
        action='data_exported',
        resource='inventory',
        processing_purpose=PROCESSING_PURPOSE,
        metadata={'items': len(exported_items)},
    )

    return {
        'gdpr_compliance': EXPORT_NOTICE,
        'export_metadata': {
            'exported_at': now.isoformat(),
            'user_id': user.pk,
            'steam_id': inventory.steam_id,
        },
        'metadata': {
            'total_items': inventory.total_items,
            'total_value': _money(inventory.total_value),
            'items_unmatched': inventory.items_unmatched_count,
            'consent_given': inventory.consent_given,
            'consent_date': inventory.consent_date.isoformat() if inventory.consent_date else None,
            'consent_version': inventory.consent_version,
            'scheduled_delete': inventory.scheduled_delete.isoformat() if inventory.scheduled_delete else None,
        },
        'sync_history': {
            'last_synced': inventory.last_synced.isoformat() if inventory.last_synced else None,
            'sync_status': inventory.sync_status,
            'import_status': inventory.import_status,
            'error_message': inventory.error_message,
        },
        'items': exported_items,
    }


@transaction.atomic
def delete_inventory(user: User) -> dict:
    """
    Permanently delete the user's inventory and its items (cascade).

    There is no soft delete: once this returns the data is gone.
    """
    inventory = UserInventory.objects.filter(user=user).first()
    now = timezone.now()
    if inventory is None:
        return {
            'success': True,
            'message': 'No inventory data found to delete',
            'deleted_items': 0,
            'deleted_value': '0.00',
            'timestamp': now.isoformat(),
            'gdpr_compliance': NOTHING_TO_DELETE_NOTICE,
        }

    deleted_items = inventory.items.count()
    deleted_value = inventory.items.aggregate(total=Sum('current_value'))['total'] or Decimal('0')
    inventory.delete()

    AuditLog.objects.create(
        user=user,
        action='data_deleted',
        resource='inventory',
        processing_purpose=PROCESSING_PURPOSE,
        metadata={'deleted_items': deleted_items},
    )
    logger.info("inventory_deleted", user_id=user.pk, deleted_items=deleted_items)

    return {
        'success': True,
        'message': 'Inventory data deleted',
        'deleted_items': deleted_items,
        'deleted_value': str(deleted_value.quantize(Decimal('0.01'))),
        'timestamp': now.isoformat(),
        'gdpr_compliance': DELETE_NOTICE,
    }


def purge_scheduled_inventories(now=None) -> int:
    """
    Delete inventories past their retention deadline, or whose owner has not
    logged in within the retention window. Returns how many were removed.
    """
    now = now or timezone.now()
    inactive_since = now - timedelta(days=settings.GDPR_RETENTION_DAYS)
    expired = UserInventory.objects.filter(
        Q(scheduled_delete__lte=now) | Q(user__last_login__lt=inactive_since)
    ).select_related('user')

    purged = 0
    for inventory in expired:
        with transaction.atomic():
            AuditLog.objects.create(
                user=inventory.user,
                action='data_purged',
                resource='inventory',
                processing_purpose=PROCESSING_PURPOSE,
                metadata={'last_login': inventory.user.last_login.isoformat() if inventory.user.last_login else None},
            )
            inventory.delete()
        purged += 1
    if purged:
        logger.info("inventories_purged", count=purged)
    return purged
