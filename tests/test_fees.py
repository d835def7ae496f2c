"""Tests for marketplace fee calculations."""
from __future__ import annotations

from decimal import Decimal

import pytest

from catalog import fees
from catalog.models import PlatformFeeConfig
from tests.conftest import make_item, make_price


def config(buyer='0', seller='0', markup='0', notes='') -> PlatformFeeConfig:
    return PlatformFeeConfig(
        platform='test',
        buyer_fee_percent=Decimal(buyer),
        seller_fee_percent=Decimal(seller),
        hidden_markup_percent=Decimal(markup),
        fee_notes=notes,
    )


class TestBuyerFees:
    def test_total_adds_each_rounded_component(self) -> None:
        result = fees.compute_buyer_fees(Decimal('10.005'), config(buyer='2.5', markup='3'))
        # base rounds to 10.01; 2.5% -> 0.25025 -> 0.25; 3% -> 0.3003 -> 0.30
        assert result.base_price == Decimal('10.01')
        assert result.platform_fee == Decimal('0.25')
        assert result.hidden_markup == Decimal('0.30')
        assert result.total_cost == Decimal('10.56')

    def test_zero_price_has_no_fees(self) -> None:
        result = fees.compute_buyer_fees(Decimal('0'), config(buyer='5', markup='20'))
        assert result.total_cost == Decimal('0.00')
        assert result.platform_fee == Decimal('0.00')
        assert result.fee_note == 'Free item - no fees'
        assert result.effective_fee_percent == '0%'

    def test_unknown_platform_warns(self) -> None:
        result = fees.compute_buyer_fees(Decimal('25'), None)
        assert result.total_cost == Decimal('25.00')
        assert result.has_warning is True
        assert result.warning_message == 'Fee information not available'

    def test_bot_markup_warning(self) -> None:
        result = fees.compute_buyer_fees(Decimal('10'), config(seller='7', markup='20', notes='bots'))
        assert result.hidden_markup == Decimal('2.00')
        assert result.total_cost == Decimal('12.00')
        assert result.effective_fee_percent == '20.00%'
        assert result.warning_message == '⚠️ Includes ~20% estimated bot markup'

    def test_fee_below_one_cent_is_noted(self) -> None:
        result = fees.compute_buyer_fees(Decimal('0.40'), config(buyer='1', notes='1% buyer fee'))
        assert result.platform_fee == Decimal('0.00')
        assert result.fee_note == '1% buyer fee - Fee less than $0.01'

    def test_seller_pays_note(self) -> None:
        result = fees.compute_buyer_fees(Decimal('100'), config(seller='2.5'))
        assert result.total_cost == Decimal('100.00')
        assert result.fee_note == '2.5% sale fee (seller pays, not buyer)'
        assert result.has_warning is False


class TestSellerProceeds:
    def test_low_fee_badge(self) -> None:
        result = fees.compute_seller_proceeds(Decimal('100'), config(seller='2'))
        assert result.platform_fee == Decimal('-2.00')
        assert result.seller_receives == Decimal('98.00')
        assert result.effective_fee_percent == '2.00%'
        assert result.badge_text == 'Low Fees: 2%'

    def test_no_badge_above_threshold(self) -> None:
        result = fees.compute_seller_proceeds(Decimal('10'), config(seller='15'))
        assert result.seller_receives == Decimal('8.50')
        assert result.badge_text is None


@pytest.mark.django_db
def test_compare_platforms_picks_cheapest_and_savings(fee_configs) -> None:
    item = make_item('skin-x', 'P250 | Sand Dune (Field-Tested)', weapon_type='P250')
    make_price(item, 'steam', '1.20')
    make_price(item, 'csfloat', '0.95')
    make_price(item, 'csmoney', '1.10')

    comparison = fees.compare_platforms(item)

    assert [listing['platform'] for listing in comparison['listings']] == ['csfloat', 'csmoney', 'steam']
    assert comparison['best']['platform'] == 'csfloat'
    assert comparison['savings'] == Decimal('0.25')


@pytest.mark.django_db
def test_compare_platforms_without_prices() -> None:
    item = make_item('skin-y', 'Glock-18 | Fade (Factory New)', weapon_type='Glock-18')
    assert fees.compare_platforms(item) == {'listings': [], 'best': None, 'savings': Decimal('0.00')}
