"""
Steam Community Market price overview.

The endpoint is heavily rate limited, so calls are spaced out to stay under
``STEAM_MARKET_REQUESTS_PER_MINUTE`` and answers are cached for 15 minutes.
"""
from __future__ import annotations

import re
import time
from decimal import Decimal, InvalidOperation

import requests
import structlog
from django.conf import settings
from django.core.cache import cache

from catalog.fees import total_cost_for
from catalog.models import MarketplacePrice
from catalog.services.csgotrader import listing_url

logger = structlog.get_logger(__name__)

PRICE_OVERVIEW_URL = "https://steamcommunity.com/market/priceoverview/"
CACHE_SECONDS = 15 * 60

_last_request_at = 0.0


def parse_price(value: str | None) -> Decimal | None:
    """"$1,234.56" -> Decimal('1234.56'); "1,23€" -> Decimal('1.23')."""
    if not value:
        return None
    cleaned = re.sub(r'[^0-9.,]', '', value)
    if ',' in cleaned and '.' in cleaned:
        cleaned = cleaned.replace(',', '')
    else:
        cleaned = cleaned.replace(',', '.')
    try:
        return Decimal(cleaned).quantize(Decimal('0.01'))
    except InvalidOperation:
        return None


def _wait_for_slot():
    global _last_request_at
    interval = 60.0 / max(settings.STEAM_MARKET_REQUESTS_PER_MINUTE, 1)
    elapsed = time.monotonic() - _last_request_at
    if elapsed < interval:
        time.sleep(interval - elapsed)
    _last_request_at = time.monotonic()


def fetch_price_overview(market_hash_name: str) -> dict | None:
    """
    Lowest/median USD price and 24h volume of one item, or None when Steam
    has no data or refuses the request.
    """
    cache_key = f"steam_market:{market_hash_name}"
    cached = cache.get(cache_key)
    if cached:
        return cached

    _wait_for_slot()
    params = {'appid': 730, 'currency': 1, 'market_hash_name': market_hash_name}
    try:
        response = requests.get(PRICE_OVERVIEW_URL, params=params, timeout=10)
        if response.status_code == 429:
            logger.warning("steam_market_rate_limited", item=market_hash_name)
            return None
        response.raise_for_status()
        data = response.json()
    except (requests.RequestException, ValueError) as e:
        logger.warning("steam_market_request_failed", item=market_hash_name, error=str(e))
        return None

    if not data.get('success'):
        return None

    volume = data.get('volume')
    overview = {
        'lowest_price': parse_price(data.get('lowest_price')),
        'median_price': parse_price(data.get('median_price')),
        'volume': int(volume.replace(',', '')) if volume else None,
        'currency': 'USD',
    }
    cache.set(cache_key, overview, CACHE_SECONDS)
    return overview


def refresh_steam_price(item):
    """Store the current Steam lowest price of ``item``; returns the MarketplacePrice or None."""
    overview = fetch_price_overview(item.market_hash_name)
    if not overview or not overview['lowest_price']:
        return None

    price = overview['lowest_price']
    total_cost, buyer_pct, seller_pct = total_cost_for(price, 'steam')
    marketplace_price, _ = MarketplacePrice.objects.update_or_create(
        item=item,
        platform='steam',
        defaults={
            'price': price,
            'currency': 'USD',
            'buyer_fee_percent': buyer_pct,
            'seller_fee_percent': seller_pct,
            'total_cost': total_cost,
            'quantity_available': overview['volume'] or 0,
            'listing_url': listing_url('steam', item.market_hash_name),
        },
    )
    return marketplace_price
