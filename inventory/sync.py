"""
Inventory import and sync.

``InventorySyncService.sync`` pulls a user's CS2 inventory from Steam page by
page and stores the entries that match a catalog item:

* Every page is written in its own transaction together with the cursor
  (``last_asset_id``) and the running counters, so a fetch that dies halfway
  (rate limit, network, private inventory) resumes from the last stored page
  on the next attempt.
* Entries without a catalog match are counted in ``items_unmatched_count``
  and otherwise skipped.
* A successful import newer than ``INVENTORY_CACHE_TTL_HOURS`` is served from
  the database unless ``force`` is given.
"""
from __future__ import annotations

import time
from dataclasses import asdict, dataclass
from datetime import timedelta
from decimal import Decimal

import structlog
from django.conf import settings
from django.contrib.auth.models import User
from django.db import DatabaseError, transaction
from django.db.models import Sum
from django.utils import timezone

from catalog.models import Item, MarketplacePrice
from csloadout.errors import ConsentRequired, ErrorCode, NotFound, ServiceError
from inventory.models import InventoryItem, UserInventory
from inventory.steam import (
    InventoryPage,
    PrivateInventoryError,
    RateLimitedError,
    SteamInventoryClient,
    SteamInventoryError,
)

logger = structlog.get_logger(__name__)


@dataclass
class SyncResult:
    success: bool
    items_imported: int
    items_unmatched: int
    total_items: int
    total_value: Decimal
    cached: bool = False
    resumed: bool = False
    message: str = ''

    def as_dict(self) -> dict:
        return asdict(self)


def retention_deadline(user: User, now=None):
    """
    Deletion date for users inactive longer than the retention window, else None.
    """
    now = now or timezone.now()
    window = timedelta(days=settings.GDPR_RETENTION_DAYS)
    if user.last_login and now - user.last_login > window:
        return user.last_login + window
    return None


def _best_prices(item_ids) -> dict:
    """item_id -> cheapest MarketplacePrice by total cost."""
    best = {}
    for price in MarketplacePrice.objects.filter(item_id__in=item_ids).order_by('item_id', 'total_cost'):
        best.setdefault(price.item_id, price)
    return best


class InventorySyncService:
    """Imports Steam inventories into UserInventory/InventoryItem."""

    def __init__(self, client: SteamInventoryClient | None = None):
        self.client = client or SteamInventoryClient()

    def sync(self, user: User, force: bool = False) -> SyncResult:
        steam_id = self._steam_id_for(user)
        inventory = UserInventory.objects.filter(user=user).first()
        if inventory is None or not inventory.consent_given:
            raise ConsentRequired()

        if not force and inventory.is_fresh():
            return self._result(inventory, cached=True, message="Inventory is up to date")

        # A fresh run keeps the previous rows until Steam has returned a page
        resumed = inventory.can_resume
        cursor = inventory.last_asset_id if resumed else None

        inventory.steam_id = steam_id
        inventory.import_status = UserInventory.IMPORT_IN_PROGRESS
        inventory.save(update_fields=['steam_id', 'import_status', 'updated_at'])

        log = logger.bind(user_id=user.pk, steam_id=steam_id)
        log.info("inventory_sync_started", resumed=resumed, cursor=cursor,
                 already_imported=inventory.items_imported_count)

        pending_reset = not resumed
        try:
            for page in self.client.iter_pages(steam_id, start_asset_id=cursor):
                self._store_page(inventory, page, reset=pending_reset)
                pending_reset = False
            if pending_reset:
                self._reset(inventory)
        except PrivateInventoryError as e:
            self._mark_failed(inventory, UserInventory.SYNC_PRIVATE, e.message, is_public=False)
            log.info("inventory_private")
            raise ServiceError(e.message, code=ErrorCode.PRIVATE_INVENTORY) from e
        except RateLimitedError as e:
            self._mark_failed(inventory, UserInventory.SYNC_RATE_LIMITED, e.message)
            log.warning("inventory_rate_limited", cursor=inventory.last_asset_id)
            raise ServiceError(e.message, code=ErrorCode.RATE_LIMITED) from e
        except SteamInventoryError as e:
            self._mark_failed(inventory, UserInventory.SYNC_FAILED, e.message)
            log.error("inventory_steam_error", error=e.message, cursor=inventory.last_asset_id)
            raise ServiceError(e.message, code=ErrorCode.STEAM_API_ERROR) from e
        except DatabaseError as e:
            log.exception("inventory_database_error")
            self._mark_failed(inventory, UserInventory.SYNC_FAILED, "Database error while saving the inventory")
            raise ServiceError("Failed to save inventory", code=ErrorCode.DATABASE_ERROR) from e
        except Exception as e:
            log.exception("inventory_sync_failed", cursor=inventory.last_asset_id)
            self._mark_failed(inventory, UserInventory.SYNC_FAILED, "Unexpected error while importing the inventory")
            raise ServiceError("Failed to import inventory", code=ErrorCode.STEAM_API_ERROR) from e

        self._complete(inventory, user)
        log.info("inventory_sync_completed", items=inventory.items_imported_count,
                 unmatched=inventory.items_unmatched_count, total_value=str(inventory.total_value))

        message = f"{inventory.items_imported_count:,} items imported"
        return self._result(inventory, resumed=resumed, message=message)

    @staticmethod
    def _steam_id_for(user: User) -> str:
        profile = getattr(user, 'steam_profile', None)
        if profile is None or not profile.steam_id:
            raise NotFound("No Steam account linked to this user")
        return profile.steam_id

    @staticmethod
    def _reset(inventory: UserInventory):
        """Start over: drop previous rows and counters."""
        with transaction.atomic():
            inventory.items.all().delete()
            inventory.last_asset_id = None
            inventory.items_imported_count = 0
            inventory.items_unmatched_count = 0
            inventory.total_items = 0
            inventory.total_value = Decimal('0')
            inventory.save()

    @classmethod
    def _store_page(cls, inventory: UserInventory, page: InventoryPage, reset: bool = False):
        """
        Write one page plus the advanced cursor and counters atomically.
        With ``reset`` the previous rows are replaced in the same transaction.
        """
        asset_ids = [entry.asset_id for entry in page.entries]
        names = {entry.market_hash_name for entry in page.entries}

        with transaction.atomic():
            if reset:
                cls._reset(inventory)
            stored = set(
                InventoryItem.objects.filter(inventory=inventory, steam_asset_id__in=asset_ids)
                .values_list('steam_asset_id', flat=True)
            )
            items = {item.market_hash_name: item for item in Item.objects.filter(market_hash_name__in=names)}
            prices = _best_prices([item.pk for item in items.values()])

            rows = []
            processed = 0
            unmatched = 0
            for entry in page.entries:
                if entry.asset_id in stored:
                    continue
                stored.add(entry.asset_id)
                processed += 1

                item = items.get(entry.market_hash_name)
                if item is None:
                    unmatched += 1
                    continue

                price = prices.get(item.pk)
                rows.append(InventoryItem(
                    inventory=inventory,
                    item=item,
                    steam_asset_id=entry.asset_id,
                    market_hash_name=entry.market_hash_name,
                    wear=entry.wear,
                    quality=entry.quality,
                    custom_name=entry.custom_name,
                    stickers=entry.stickers,
                    can_trade=entry.tradable,
                    trade_hold_until=entry.trade_hold_until,
                    inspect_link=entry.inspect_link,
                    icon_url=entry.icon_url,
                    current_value=price.price if price else None,
                    best_platform=price.platform if price else None,
                ))

            InventoryItem.objects.bulk_create(rows, ignore_conflicts=True)

            inventory.items_imported_count += processed
            inventory.items_unmatched_count += unmatched
            inventory.total_items = page.total_count
            if page.last_asset_id:
                inventory.last_asset_id = page.last_asset_id
            inventory.save(update_fields=[
                'items_imported_count', 'items_unmatched_count', 'total_items',
                'last_asset_id', 'updated_at',
            ])

    @staticmethod
    def _complete(inventory: UserInventory, user: User):
        now = timezone.now()
        total = inventory.items.aggregate(total=Sum('current_value'))['total']
        inventory.total_value = total or Decimal('0')
        inventory.import_status = UserInventory.IMPORT_COMPLETED
        inventory.last_asset_id = None
        inventory.sync_status = UserInventory.SYNC_SUCCESS
        inventory.error_message = None
        inventory.is_public = True
        inventory.last_synced = now
        inventory.scheduled_delete = retention_deadline(user, now)
        inventory.save()

    @staticmethod
    def _mark_failed(inventory: UserInventory, sync_status: str, message: str, is_public: bool | None = None):
        """Record the failure; the cursor and counters stay as the last stored page left them."""
        inventory.import_status = UserInventory.IMPORT_FAILED
        inventory.sync_status = sync_status
        inventory.error_message = message
        fields = ['import_status', 'sync_status', 'error_message', 'updated_at']
        if is_public is not None:
            inventory.is_public = is_public
            fields.append('is_public')
        try:
            inventory.save(update_fields=fields)
        except DatabaseError:
            logger.exception("inventory_status_update_failed", inventory_id=inventory.pk)

    @staticmethod
    def _result(inventory: UserInventory, cached: bool = False, resumed: bool = False, message: str = '') -> SyncResult:
        return SyncResult(
            success=True,
            items_imported=inventory.items_imported_count,
            items_unmatched=inventory.items_unmatched_count,
            total_items=inventory.total_items,
            total_value=inventory.total_value,
            cached=cached,
            resumed=resumed,
            message=message,
        )


def eligible_for_refresh(now=None):
    """
    Users seen in the last 7 days whose public, consented inventory last
    synced successfully more than 24 hours ago.
    """
    now = now or timezone.now()
    return (
        User.objects.filter(
            last_login__gte=now - timedelta(days=7),
            inventory__last_synced__lt=now - timedelta(hours=24),
            inventory__sync_status=UserInventory.SYNC_SUCCESS,
            inventory__is_public=True,
            inventory__consent_given=True,
        )
        .select_related('steam_profile', 'inventory')
        .order_by('inventory__last_synced')
    )


def refresh_inventories(service: InventorySyncService | None = None, delay: float | None = None) -> dict:
    """Re-sync every eligible inventory one after the other."""
    service = service or InventorySyncService()
    delay = settings.INVENTORY_REFRESH_DELAY_SECONDS if delay is None else delay
    started = time.monotonic()

    users = list(eligible_for_refresh())
    processed = 0
    errors = []
    for index, user in enumerate(users):
        if index and delay:
            time.sleep(delay)
        try:
            service.sync(user, force=True)
            processed += 1
        except ServiceError as e:
            errors.append({'user_id': user.pk, 'error': e.code, 'message': e.message})
            logger.warning("inventory_refresh_failed", user_id=user.pk, code=e.code)

    summary = {
        'users_processed': processed,
        'total_eligible': len(users),
        'errors': errors,
        'duration': round(time.monotonic() - started, 2),
        'timestamp': timezone.now().isoformat(),
    }
    logger.info("inventory_refresh_finished", processed=processed,
                eligible=len(users), failed=len(errors))
    return summary
