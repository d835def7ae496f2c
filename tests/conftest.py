"""
Shared pytest fixtures: users with Steam profiles, authenticated API
clients, and a small catalog with marketplace prices.
"""
from __future__ import annotations

from decimal import Decimal

import pytest
from django.contrib.auth.models import User
from django.core.cache import cache
from rest_framework.test import APIClient

from catalog.models import Item, MarketplacePrice, PlatformFeeConfig

STEAM_ID = "76561198000000001"
OTHER_STEAM_ID = "76561198000000002"


@pytest.fixture(autouse=True)
def test_settings(settings):
    """No sleeping between Steam requests and a fixed IP salt."""
    settings.INVENTORY_PAGE_DELAY_SECONDS = 0
    settings.INVENTORY_REFRESH_DELAY_SECONDS = 0
    settings.IP_HASH_SALT = "test-salt"
    settings.CRON_SECRET = "cron-secret"
    settings.VAPID_PRIVATE_KEY = "test-private-key"
    settings.VAPID_PUBLIC_KEY = "test-public-key"
    return settings


@pytest.fixture(autouse=True)
def clear_cache():
    cache.clear()
    yield
    cache.clear()


def _make_user(username: str, steam_id: str) -> User:
    user = User.objects.create_user(username, email=f"{username}@example.com", password="pw")
    profile = user.steam_profile
    profile.steam_id = steam_id
    profile.persona_name = username
    profile.save()
    return user


@pytest.fixture
def user(db):
    return _make_user("gaben", STEAM_ID)


@pytest.fixture
def other_user(db):
    return _make_user("robin", OTHER_STEAM_ID)


@pytest.fixture
def api_client():
    return APIClient()


@pytest.fixture
def auth_client(user):
    client = APIClient()
    client.force_authenticate(user=user)
    return client


@pytest.fixture
def fee_configs(db):
    PlatformFeeConfig.objects.create(platform='steam', seller_fee_percent=Decimal('15'),
                                     fee_notes='10% Steam fee + 5% game-specific fee')
    PlatformFeeConfig.objects.create(platform='csfloat', seller_fee_percent=Decimal('2'),
                                     fee_notes='2% sale fee, No buyer fees')
    PlatformFeeConfig.objects.create(platform='csmoney', seller_fee_percent=Decimal('7'),
                                     hidden_markup_percent=Decimal('20'),
                                     fee_notes='7% platform fee + ~20% bot markup (estimated)')


def make_item(item_id: str, market_hash_name: str, type: str = 'skin', weapon_type: str | None = None,
              **extra) -> Item:
    return Item.objects.create(
        id=item_id,
        name=market_hash_name,
        market_hash_name=market_hash_name,
        type=type,
        weapon_type=weapon_type,
        **extra,
    )


def make_price(item: Item, platform: str, total_cost, price=None, **extra) -> MarketplacePrice:
    return MarketplacePrice.objects.create(
        item=item,
        platform=platform,
        price=Decimal(str(price if price is not None else total_cost)),
        total_cost=Decimal(str(total_cost)),
        **extra,
    )


@pytest.fixture
def redline(db):
    item = make_item('skin-redline-ft', 'AK-47 | Redline (Field-Tested)', weapon_type='AK-47',
                     rarity='Classified', wear='Field-Tested',
                     image='https://example.com/redline.png')
    make_price(item, 'csfloat', '46.50')
    make_price(item, 'steam', '52.00',
               listing_url='https://steamcommunity.com/market/listings/730/AK-47%20%7C%20Redline')
    return item


@pytest.fixture
def asiimov(db):
    item = make_item('skin-asiimov-ft', 'AWP | Asiimov (Field-Tested)', weapon_type='AWP',
                     rarity='Covert', wear='Field-Tested')
    make_price(item, 'buff163', '80.00')
    return item


@pytest.fixture
def karambit(db):
    item = make_item('knife-karambit-doppler', '★ Karambit | Doppler (Factory New)', type='knife',
                     weapon_type='Karambit', rarity='Covert')
    make_price(item, 'csfloat', '900.00')
    return item
