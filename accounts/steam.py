"""
Steam identity helpers.

* ``extract_steam_id`` validates the OpenID ``claimed_id`` Steam sends back
  after login and pulls the 64-bit SteamID out of it.
* ``fetch_player_summary`` / ``owns_cs2`` talk to the Steam Web API.
* ``update_profile_from_summary`` writes a player summary into the user's
  cached ``SteamProfile``.
"""
from __future__ import annotations

import re
from urllib.parse import urlparse

import requests
import structlog
from django.conf import settings
from django.utils import timezone

from accounts.models import SteamProfile

logger = structlog.get_logger(__name__)

STEAM_OPENID_HOST = "steamcommunity.com"
STEAM_API_BASE = "https://api.steampowered.com"
CS2_APP_ID = 730

_CLAIMED_ID_PATH = re.compile(r'^/openid/id/(\d+)/?$')
_STEAM_ID = re.compile(r'^7656119\d{10}$')

VISIBILITY_STATES = {
    1: 'private',
    2: 'friends_only',
    3: 'public',
}


def is_valid_steam_id(steam_id: str | None) -> bool:
    """17 digit SteamID64 in the individual account range."""
    return bool(steam_id) and bool(_STEAM_ID.match(steam_id))


def extract_steam_id(claimed_id: str | None) -> str | None:
    """
    "https://steamcommunity.com/openid/id/76561198000000000" -> "76561198000000000".

    Anything not coming from steamcommunity.com, or not carrying a valid
    SteamID64, returns None.
    """
    if not claimed_id:
        return None
    parsed = urlparse(claimed_id)
    if parsed.scheme not in ('http', 'https') or parsed.hostname != STEAM_OPENID_HOST:
        return None
    match = _CLAIMED_ID_PATH.match(parsed.path)
    if not match:
        return None
    steam_id = match.group(1)
    return steam_id if is_valid_steam_id(steam_id) else None


def fetch_player_summary(steam_id: str, api_key: str | None = None) -> dict | None:
    """GetPlayerSummaries for one account, or None when Steam has no answer."""
    api_key = api_key or settings.STEAM_API_KEY
    url = f"{STEAM_API_BASE}/ISteamUser/GetPlayerSummaries/v0002/"
    try:
        response = requests.get(url, params={'key': api_key, 'steamids': steam_id}, timeout=10)
        response.raise_for_status()
        players = response.json().get('response', {}).get('players', [])
    except (requests.RequestException, ValueError) as e:
        logger.warning("steam_profile_fetch_failed", steam_id=steam_id, error=str(e))
        return None
    return players[0] if players else None


def owns_cs2(steam_id: str, api_key: str | None = None) -> bool | None:
    """Whether CS2 is in the account's library; None when the library is hidden or Steam fails."""
    api_key = api_key or settings.STEAM_API_KEY
    url = f"{STEAM_API_BASE}/IPlayerService/GetOwnedGames/v0001/"
    params = {'key': api_key, 'steamid': steam_id, 'include_played_free_games': 1, 'format': 'json'}
    try:
        response = requests.get(url, params=params, timeout=10)
        response.raise_for_status()
        games = response.json().get('response', {}).get('games')
    except (requests.RequestException, ValueError) as e:
        logger.warning("steam_owned_games_failed", steam_id=steam_id, error=str(e))
        return None
    if games is None:
        return None
    return any(game.get('appid') == CS2_APP_ID for game in games)


def update_profile_from_summary(user, summary: dict) -> SteamProfile:
    """Copy a GetPlayerSummaries entry into the user's SteamProfile."""
    profile, _ = SteamProfile.objects.get_or_create(user=user)
    steam_id = summary.get('steamid')
    if is_valid_steam_id(steam_id):
        profile.steam_id = steam_id
    profile.persona_name = summary.get('personaname') or profile.persona_name
    profile.profile_url = summary.get('profileurl') or profile.profile_url
    profile.avatar = summary.get('avatarfull') or summary.get('avatar') or profile.avatar
    profile.profile_state = VISIBILITY_STATES.get(summary.get('communityvisibilitystate'), 'unknown')
    profile.profile_updated_at = timezone.now()
    profile.save()
    return profile


def refresh_steam_profile(user) -> SteamProfile | None:
    """Re-fetch the user's Steam summary and library; None when the user has no SteamID."""
    profile = getattr(user, 'steam_profile', None)
    if profile is None or not profile.steam_id:
        return None

    summary = fetch_player_summary(profile.steam_id)
    if summary:
        profile = update_profile_from_summary(user, summary)

    has_game = owns_cs2(profile.steam_id)
    if has_game is not None:
        profile.has_cs2_game = has_game
        profile.save(update_fields=['has_cs2_game'])
    return profile
