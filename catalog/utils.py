"""
Helpers for item names and display currencies.
"""
from __future__ import annotations

import re
from decimal import Decimal

import requests
import structlog
from django.core.cache import cache

logger = structlog.get_logger(__name__)

WEAR_NAMES = (
    'Factory New',
    'Minimal Wear',
    'Field-Tested',
    'Well-Worn',
    'Battle-Scarred',
)

_WEAR_SUFFIX = re.compile(r'\((%s)\)\s*$' % '|'.join(re.escape(w) for w in WEAR_NAMES))
_WHITESPACE = re.compile(r'\s+')


def normalize_item_name(name: str) -> str:
    """
    Normalize an item name so the different platform formats search alike.

    "AK-47 | Case Hardened (Field-Tested)", "AK-47 Case Hardened" and
    "ak47_case_hardened" all reduce to lowercase space separated words with
    pipes, parentheses, ★ and ™ removed.
    """
    if not name:
        return ''
    name = name.lower()
    name = re.sub(r'[|()★™]', '', name)
    name = name.replace('_', ' ')
    return _WHITESPACE.sub(' ', name).strip()


def wear_from_name(market_hash_name: str) -> str | None:
    """"AWP | Asiimov (Field-Tested)" -> "Field-Tested"."""
    match = _WEAR_SUFFIX.search(market_hash_name or '')
    return match.group(1) if match else None


def quality_from_name(market_hash_name: str) -> str:
    if 'StatTrak™' in (market_hash_name or ''):
        return 'stattrak'
    if (market_hash_name or '').startswith('Souvenir '):
        return 'souvenir'
    return 'normal'


def get_exchange_rate(currency: str) -> Decimal | None:
    """Current USD -> ``currency`` rate, cached for an hour."""
    currency = currency.upper()
    if currency == 'USD':
        return Decimal('1')
    cache_key = f'fx:USD:{currency}'
    rate = cache.get(cache_key)
    if rate:
        return rate
    try:
        response = requests.get("https://open.er-api.com/v6/latest/USD", timeout=10)
        response.raise_for_status()
        data = response.json()
        rate = Decimal(str(data["rates"][currency])).quantize(Decimal("0.0001"))
        cache.set(cache_key, rate, 60 * 60)
        return rate
    except (requests.RequestException, KeyError, TypeError, ValueError) as e:
        logger.warning("exchange_rate_unavailable", currency=currency, error=str(e))
        return None


def convert_from_usd(amount: Decimal, currency: str) -> Decimal | None:
    """Converts a USD amount to ``currency``; None when no rate is available."""
    rate = get_exchange_rate(currency)
    if rate is None:
        return None
    return (Decimal(amount) * rate).quantize(Decimal('0.01'))
