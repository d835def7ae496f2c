"""Tests for SteamID extraction and the Steam profile cache."""
from __future__ import annotations

from types import SimpleNamespace
from unittest.mock import MagicMock, patch

import pytest
import requests
from django.apps import apps
from django.urls import reverse

from accounts.adapters import SteamSocialAccountAdapter
from accounts.steam import extract_steam_id, owns_cs2, refresh_steam_profile, update_profile_from_summary
from tests.conftest import STEAM_ID


class TestExtractSteamId:
    def test_valid_claimed_id(self) -> None:
        assert extract_steam_id(f"https://steamcommunity.com/openid/id/{STEAM_ID}") == STEAM_ID
        assert extract_steam_id(f"http://steamcommunity.com/openid/id/{STEAM_ID}/") == STEAM_ID

    @pytest.mark.parametrize("claimed_id", [
        None,
        "",
        f"https://evil.example.com/openid/id/{STEAM_ID}",
        f"https://steamcommunity.com.evil.com/openid/id/{STEAM_ID}",
        "https://steamcommunity.com/openid/id/12345",
        "https://steamcommunity.com/openid/id/86561198000000001",
        f"ftp://steamcommunity.com/openid/id/{STEAM_ID}",
        f"https://steamcommunity.com/profiles/{STEAM_ID}",
    ])
    def test_rejects_anything_else(self, claimed_id) -> None:
        assert extract_steam_id(claimed_id) is None


@pytest.mark.django_db
def test_update_profile_from_summary(user) -> None:
    profile = update_profile_from_summary(user, {
        "steamid": STEAM_ID,
        "personaname": "Gabe",
        "profileurl": "https://steamcommunity.com/id/gabe/",
        "avatarfull": "https://avatars.example.com/gabe_full.jpg",
        "communityvisibilitystate": 1,
    })
    profile.refresh_from_db()
    assert profile.persona_name == "Gabe"
    assert profile.avatar == "https://avatars.example.com/gabe_full.jpg"
    assert profile.profile_state == "private"
    assert profile.profile_updated_at is not None


@pytest.mark.django_db
def test_refresh_profile_records_cs2_ownership(user) -> None:
    summary = MagicMock()
    summary.json.return_value = {"response": {"players": [
        {"steamid": STEAM_ID, "personaname": "Gabe N", "communityvisibilitystate": 3},
    ]}}
    games = MagicMock()
    games.json.return_value = {"response": {"games": [{"appid": 440}, {"appid": 730}]}}

    with patch("accounts.steam.requests.get", side_effect=[summary, games]):
        profile = refresh_steam_profile(user)

    assert profile.persona_name == "Gabe N"
    assert profile.profile_state == "public"
    assert profile.has_cs2_game is True


def test_owns_cs2_unknown_when_steam_fails() -> None:
    with patch("accounts.steam.requests.get", side_effect=requests.Timeout()):
        assert owns_cs2(STEAM_ID, api_key="key") is None


def test_adapter_summary_falls_back_to_uid() -> None:
    sociallogin = SimpleNamespace(account=SimpleNamespace(uid=STEAM_ID, extra_data={"personaname": "Gabe"}))
    summary = SteamSocialAccountAdapter._summary(sociallogin)
    assert summary == {"personaname": "Gabe", "steamid": STEAM_ID}


def test_steam_login_route_is_registered() -> None:
    assert apps.is_installed("allauth.socialaccount.providers.openid")
    assert reverse("steam_login") == "/accounts/steam/login/"
