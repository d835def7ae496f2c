"""Tests for consent, export, deletion and the retention purge."""
from __future__ import annotations

from datetime import timedelta
from decimal import Decimal

import pytest
from django.utils import timezone

from inventory import gdpr
from inventory.models import AuditLog, InventoryItem, UserInventory

pytestmark = pytest.mark.django_db


@pytest.fixture
def inventory(user, redline, asiimov):
    inventory = UserInventory.objects.create(user=user, steam_id=user.steam_profile.steam_id,
                                             consent_given=True, total_items=2)
    InventoryItem.objects.create(inventory=inventory, item=redline, steam_asset_id="1",
                                 market_hash_name=redline.market_hash_name,
                                 current_value=Decimal("46.50"), best_platform="csfloat",
                                 stickers=[{"name": "Crown (Foil)", "position": 0}])
    InventoryItem.objects.create(inventory=inventory, item=asiimov, steam_asset_id="2",
                                 market_hash_name=asiimov.market_hash_name,
                                 current_value=Decimal("80.00"), best_platform="buff163")
    return inventory


def test_record_consent_writes_audit_log(user, settings) -> None:
    inventory = gdpr.record_consent(user, ip_hash="abc123", user_agent="pytest")

    assert inventory.consent_given is True
    assert inventory.consent_version == settings.CONSENT_VERSION
    log = AuditLog.objects.get(user=user)
    assert log.action == "consent_given"
    assert log.ip_hash == "abc123"


def test_export_contains_items_and_pricing(user, inventory) -> None:
    data = gdpr.export_inventory(user)

    assert data["export_metadata"]["steam_id"] == inventory.steam_id
    assert len(data["items"]) == 2
    exported = {row["steam_asset_id"]: row for row in data["items"]}
    assert exported["1"]["stickers"] == [{"name": "Crown (Foil)", "position": 0}]
    assert set(exported["1"]["pricing"]) == {"csfloat", "steam"}
    assert AuditLog.objects.filter(user=user, action="data_exported").exists()


def test_export_without_inventory(user) -> None:
    assert gdpr.export_inventory(user) is None


def test_delete_cascades_to_items(user, inventory) -> None:
    result = gdpr.delete_inventory(user)

    assert result["deleted_items"] == 2
    assert result["deleted_value"] == "126.50"
    assert not UserInventory.objects.filter(user=user).exists()
    assert InventoryItem.objects.count() == 0
    assert AuditLog.objects.filter(user=user, action="data_deleted").exists()


def test_delete_without_inventory(user) -> None:
    result = gdpr.delete_inventory(user)
    assert result["message"] == "No inventory data found to delete"
    assert result["deleted_items"] == 0


def test_purge_removes_expired_and_inactive(user, other_user, settings) -> None:
    now = timezone.now()
    UserInventory.objects.create(user=user, scheduled_delete=now - timedelta(days=1))
    other_user.last_login = now - timedelta(days=settings.GDPR_RETENTION_DAYS + 1)
    other_user.save()
    UserInventory.objects.create(user=other_user)

    purged = gdpr.purge_scheduled_inventories(now)

    assert purged == 2
    assert UserInventory.objects.count() == 0
    assert AuditLog.objects.filter(action="data_purged").count() == 2


def test_purge_keeps_active_users(user) -> None:
    user.last_login = timezone.now()
    user.save()
    UserInventory.objects.create(user=user)

    assert gdpr.purge_scheduled_inventories() == 0
    assert UserInventory.objects.filter(user=user).exists()
