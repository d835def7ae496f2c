"""
Bulk price import from the CSGOTrader price feed.

One request returns the latest prices of every CS2 item on several
marketplaces, so the whole catalog can be refreshed without hitting the
Steam Market once per item.
"""
from __future__ import annotations

from decimal import Decimal, InvalidOperation
from urllib.parse import quote

import requests
import structlog
from django.db import transaction

from catalog.fees import total_cost_for
from catalog.models import Item, MarketplacePrice, PlatformFeeConfig

logger = structlog.get_logger(__name__)

PRICES_URL = "https://prices.csgotrader.app/latest/prices_v6.json"

STEAM_LISTING_URL = "https://steamcommunity.com/market/listings/730/{name}"
SKINPORT_LISTING_URL = "https://skinport.com/market?search={name}"
BUFF_LISTING_URL = "https://buff.163.com/market/csgo#search={name}"


def fetch_bulk_prices(timeout: int = 60) -> dict:
    """Download the full price feed, keyed by market_hash_name."""
    response = requests.get(PRICES_URL, timeout=timeout)
    response.raise_for_status()
    return response.json()


def _to_price(value) -> Decimal | None:
    if value in (None, '', 0):
        return None
    try:
        price = Decimal(str(value)).quantize(Decimal('0.01'))
    except (InvalidOperation, TypeError, ValueError):
        return None
    return price if price > 0 else None


def extract_platform_prices(entry: dict) -> dict[str, Decimal]:
    """
    Prices per platform from one feed entry.

    Steam uses the most recent average available (24h, then 7d, 30d, 90d).
    """
    prices = {}

    steam = entry.get('steam') or {}
    for window in ('last_24h', 'last_7d', 'last_30d', 'last_90d'):
        price = _to_price(steam.get(window))
        if price:
            prices['steam'] = price
            break

    skinport = entry.get('skinport') or {}
    price = _to_price(skinport.get('starting_at', skinport.get('price')))
    if price:
        prices['skinport'] = price

    buff = entry.get('buff163') or {}
    price = _to_price((buff.get('starting_at') or {}).get('price'))
    if price:
        prices['buff163'] = price

    return prices


def listing_url(platform: str, market_hash_name: str) -> str | None:
    name = quote(market_hash_name)
    if platform == 'steam':
        return STEAM_LISTING_URL.format(name=name)
    if platform == 'skinport':
        return SKINPORT_LISTING_URL.format(name=name)
    if platform == 'buff163':
        return BUFF_LISTING_URL.format(name=name)
    return None


@transaction.atomic
def import_bulk_prices(data: dict) -> dict:
    """Upsert a MarketplacePrice for every catalog item present in the feed."""
    items = {item.market_hash_name: item for item in Item.objects.filter(market_hash_name__in=list(data))}
    configs = {c.platform: c for c in PlatformFeeConfig.objects.all()}

    stats = {'updated': 0, 'skipped': 0}
    for name, entry in data.items():
        item = items.get(name)
        if item is None or not isinstance(entry, dict):
            stats['skipped'] += 1
            continue

        for platform, price in extract_platform_prices(entry).items():
            total_cost, buyer_pct, seller_pct = total_cost_for(price, platform, configs)
            MarketplacePrice.objects.update_or_create(
                item=item,
                platform=platform,
                defaults={
                    'price': price,
                    'currency': 'USD',
                    'buyer_fee_percent': buyer_pct,
                    'seller_fee_percent': seller_pct,
                    'total_cost': total_cost,
                    'listing_url': listing_url(platform, name),
                },
            )
            stats['updated'] += 1

    logger.info("bulk_prices_imported", **stats)
    return stats
