"""
Client for the Steam Community inventory endpoint.

    GET https://steamcommunity.com/inventory/{steam_id}/730/2?count=N&start_assetid=C

A response lists ``assets`` (one per owned copy) and ``descriptions`` (shared
per ``classid``/``instanceid`` pair). While ``more_items`` is set, the
``last_assetid`` of the page is the cursor of the next one.

Steam answers 403 for private inventories and 429 when it throttles us. 429
and 5xx responses are retried with an exponential, jittered delay; a 403 is
final.
"""
from __future__ import annotations

import random
import re
import time
from dataclasses import dataclass, field
from datetime import datetime

import requests
import structlog
from django.conf import settings
from django.utils.dateparse import parse_datetime

from catalog.utils import quality_from_name, wear_from_name

logger = structlog.get_logger(__name__)

STEAM_COMMUNITY_URL = "https://steamcommunity.com"
STEAM_IMAGE_URL = "https://community.cloudflare.steamstatic.com/economy/image/"
CS2_APP_ID = 730
CS2_CONTEXT_ID = 2

PRIVATE_MESSAGE = "This Steam inventory is private. Please set it to public."
RATE_LIMIT_MESSAGE = "Rate limit exceeded. Please try again in a few minutes."

_NAME_TAG = re.compile(r"Name Tag:\s*(?:''|\")(.+?)(?:''|\")\s*$")
_STICKERS = re.compile(r'Sticker:\s*([^<]+)')


class SteamInventoryError(Exception):
    """Base error of the inventory client."""

    def __init__(self, message: str, status_code: int | None = None):
        self.message = message
        self.status_code = status_code
        super().__init__(message)


class PrivateInventoryError(SteamInventoryError):
    pass


class RateLimitedError(SteamInventoryError):
    pass


class SteamApiError(SteamInventoryError):
    pass


@dataclass
class InventoryEntry:
    """One asset merged with its description."""
    asset_id: str
    class_id: str
    instance_id: str
    market_hash_name: str
    name: str = ''
    type: str = ''
    icon_url: str | None = None
    custom_name: str | None = None
    wear: str | None = None
    quality: str = 'normal'
    stickers: list[dict] = field(default_factory=list)
    tradable: bool = True
    marketable: bool = True
    trade_hold_until: datetime | None = None
    inspect_link: str | None = None


@dataclass
class InventoryPage:
    entries: list[InventoryEntry]
    total_count: int
    last_asset_id: str | None
    more_items: bool


def parse_stickers(descriptions: list[dict]) -> list[dict]:
    """
    Applied stickers from the description block, in slot order.

    ``Sticker: Crown (Foil), Howling Dawn`` ->
    ``[{'name': 'Crown (Foil)', 'position': 0}, {'name': 'Howling Dawn', 'position': 1}]``
    """
    for description in descriptions or []:
        match = _STICKERS.search(description.get('value') or '')
        if match:
            names = [name.strip() for name in match.group(1).split(',')]
            return [{'name': name, 'position': i} for i, name in enumerate(names) if name]
    return []


def parse_custom_name(description: dict) -> str | None:
    for warning in description.get('fraudwarnings') or []:
        match = _NAME_TAG.search(warning)
        if match:
            return match.group(1)
    return None


def parse_inspect_link(description: dict, steam_id: str, asset_id: str) -> str | None:
    for action in description.get('actions') or []:
        if action.get('name', '').startswith('Inspect in Game') and action.get('link'):
            return (action['link']
                    .replace('%owner_steamid%', steam_id)
                    .replace('%assetid%', asset_id))
    return None


def parse_entry(asset: dict, description: dict, steam_id: str) -> InventoryEntry:
    market_hash_name = description.get('market_hash_name') or description.get('name') or ''
    tradable = description.get('tradable', 0) == 1
    trade_hold_until = None
    if not tradable and description.get('cache_expiration'):
        try:
            trade_hold_until = parse_datetime(description['cache_expiration'])
        except ValueError:
            logger.warning("inventory_bad_trade_hold", asset_id=asset.get('assetid'),
                           cache_expiration=description['cache_expiration'])
    icon = description.get('icon_url')

    return InventoryEntry(
        asset_id=str(asset['assetid']),
        class_id=str(asset.get('classid', '')),
        instance_id=str(asset.get('instanceid', '0')),
        market_hash_name=market_hash_name,
        name=description.get('name', ''),
        type=description.get('type', ''),
        icon_url=f"{STEAM_IMAGE_URL}{icon}" if icon else None,
        custom_name=parse_custom_name(description),
        wear=wear_from_name(market_hash_name),
        quality=quality_from_name(market_hash_name),
        stickers=parse_stickers(description.get('descriptions')),
        tradable=tradable,
        marketable=description.get('marketable', 0) == 1,
        trade_hold_until=trade_hold_until,
        inspect_link=parse_inspect_link(description, steam_id, str(asset['assetid'])),
    )


def parse_page(data: dict, steam_id: str) -> InventoryPage:
    descriptions = {
        f"{d['classid']}_{d.get('instanceid', '0')}": d
        for d in data.get('descriptions') or []
    }
    entries = []
    for asset in data.get('assets') or []:
        key = f"{asset['classid']}_{asset.get('instanceid', '0')}"
        description = descriptions.get(key)
        if description is None:
            logger.debug("inventory_asset_without_description", asset_id=asset.get('assetid'))
            continue
        entries.append(parse_entry(asset, description, steam_id))

    more_items = bool(data.get('more_items'))
    return InventoryPage(
        entries=entries,
        total_count=int(data.get('total_inventory_count') or len(entries)),
        last_asset_id=str(data['last_assetid']) if more_items and data.get('last_assetid') else None,
        more_items=more_items,
    )


class SteamInventoryClient:
    """Fetches CS2 inventories page by page."""

    def __init__(
        self,
        base_url: str = STEAM_COMMUNITY_URL,
        page_size: int = 2500,
        max_retries: int = 3,
        retry_delays: tuple = (2, 4, 8),
        max_delay: float = 30,
        page_delay: float | None = None,
        timeout: int = 15,
        session: requests.Session | None = None,
    ):
        self.base_url = base_url.rstrip('/')
        self.page_size = page_size
        self.max_retries = max_retries
        self.retry_delays = retry_delays
        self.max_delay = max_delay
        self.page_delay = settings.INVENTORY_PAGE_DELAY_SECONDS if page_delay is None else page_delay
        self.timeout = timeout
        self.session = session or requests.Session()

    def _retry_delay(self, attempt: int) -> float:
        base = self.retry_delays[min(attempt, len(self.retry_delays) - 1)]
        return min(base * random.uniform(0.5, 1.0), self.max_delay)

    def _get(self, url: str, params: dict) -> dict:
        last_error: SteamInventoryError | None = None

        for attempt in range(self.max_retries + 1):
            try:
                response = self.session.get(url, params=params, timeout=self.timeout)
            except requests.RequestException as e:
                raise SteamApiError(f"Network error while contacting Steam: {e}") from e

            if response.status_code == 403:
                raise PrivateInventoryError(PRIVATE_MESSAGE, status_code=403)

            if response.status_code == 429:
                last_error = RateLimitedError(RATE_LIMIT_MESSAGE, status_code=429)
            elif response.status_code >= 500:
                last_error = SteamApiError(f"Steam returned {response.status_code}", status_code=response.status_code)
            else:
                try:
                    response.raise_for_status()
                    return response.json()
                except requests.HTTPError as e:
                    raise SteamApiError(f"Steam returned {response.status_code}",
                                        status_code=response.status_code) from e
                except ValueError as e:
                    raise SteamApiError("Steam returned an invalid response") from e

            if attempt < self.max_retries:
                delay = self._retry_delay(attempt)
                logger.warning("steam_inventory_retry", status=response.status_code,
                               attempt=attempt + 1, delay=round(delay, 2))
                time.sleep(delay)

        raise last_error

    def fetch_page(self, steam_id: str, start_asset_id: str | None = None) -> InventoryPage:
        url = f"{self.base_url}/inventory/{steam_id}/{CS2_APP_ID}/{CS2_CONTEXT_ID}"
        params = {'l': 'english', 'count': self.page_size}
        if start_asset_id:
            params['start_assetid'] = start_asset_id

        data = self._get(url, params)
        if data is None:
            raise SteamApiError("Steam returned an empty response")
        if not data.get('success'):
            raise SteamApiError(data.get('Error') or "Steam could not load the inventory")
        return parse_page(data, steam_id)

    def iter_pages(self, steam_id: str, start_asset_id: str | None = None):
        """Yields pages until Steam reports no more items, pausing between requests."""
        cursor = start_asset_id
        first = True
        while True:
            if not first and self.page_delay:
                time.sleep(self.page_delay)
            first = False

            page = self.fetch_page(steam_id, cursor)
            yield page
            if not page.more_items or not page.last_asset_id:
                return
            cursor = page.last_asset_id
