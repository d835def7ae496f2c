"""Tests for item name helpers and currency conversion."""
from __future__ import annotations

from decimal import Decimal
from unittest.mock import MagicMock, patch

import pytest
import requests

from catalog.utils import (
    convert_from_usd,
    get_exchange_rate,
    normalize_item_name,
    quality_from_name,
    wear_from_name,
)


class TestNormalizeItemName:
    @pytest.mark.parametrize("name", [
        "AK-47 | Case Hardened (Field-Tested)",
        "ak-47 case hardened field-tested",
        "AK-47_Case_Hardened  (Field-Tested)",
    ])
    def test_formats_reduce_to_same_string(self, name) -> None:
        assert normalize_item_name(name) == "ak-47 case hardened field-tested"

    def test_strips_star_and_trademark(self) -> None:
        assert normalize_item_name("★ StatTrak™ Karambit | Fade") == "stattrak karambit fade"

    def test_empty(self) -> None:
        assert normalize_item_name("") == ""


def test_wear_from_name() -> None:
    assert wear_from_name("AWP | Asiimov (Battle-Scarred)") == "Battle-Scarred"
    assert wear_from_name("Sticker | Crown (Foil)") is None


def test_quality_from_name() -> None:
    assert quality_from_name("StatTrak™ M4A4 | Howl (Minimal Wear)") == "stattrak"
    assert quality_from_name("Souvenir AWP | Dragon Lore (Factory New)") == "souvenir"
    assert quality_from_name("AK-47 | Redline (Field-Tested)") == "normal"


class TestExchangeRate:
    def test_usd_needs_no_lookup(self) -> None:
        with patch("catalog.utils.requests.get") as get:
            assert get_exchange_rate("usd") == Decimal("1")
        get.assert_not_called()

    def test_rate_is_cached(self) -> None:
        response = MagicMock()
        response.json.return_value = {"rates": {"EUR": 0.92}}
        with patch("catalog.utils.requests.get", return_value=response) as get:
            assert get_exchange_rate("EUR") == Decimal("0.9200")
            assert get_exchange_rate("EUR") == Decimal("0.9200")
        assert get.call_count == 1

    def test_network_error_returns_none(self) -> None:
        with patch("catalog.utils.requests.get", side_effect=requests.ConnectionError("down")):
            assert get_exchange_rate("BRL") is None
            assert convert_from_usd(Decimal("10"), "BRL") is None

    def test_convert(self) -> None:
        response = MagicMock()
        response.json.return_value = {"rates": {"BRL": 5}}
        with patch("catalog.utils.requests.get", return_value=response):
            assert convert_from_usd(Decimal("10.50"), "BRL") == Decimal("52.50")
