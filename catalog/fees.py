"""
Marketplace fee calculations.

A listed price is rarely what the buyer pays: some platforms add a buyer fee,
some bots hide a markup in their prices, and most take a cut from the seller.
The pure ``compute_*`` functions do the arithmetic against a fee config (or
``None`` when the platform is unknown); ``calculate_*`` look the config up in
the database first.

All amounts are ``Decimal`` rounded half-up to cents, and each component is
rounded on its own before being summed.
"""
from __future__ import annotations

from dataclasses import asdict, dataclass
from decimal import ROUND_HALF_UP, Decimal

from catalog.models import MarketplacePrice, PlatformFeeConfig

CENT = Decimal('0.01')
ZERO = Decimal('0.00')
LOW_FEE_THRESHOLD = Decimal('2')

DEFAULT_FEE_CONFIGS = {
    'steam': {'buyer': '0', 'seller': '15', 'markup': '0',
              'notes': '10% Steam fee + 5% game-specific fee',
              'source_url': 'https://steamcommunity.com/market/'},
    'csfloat': {'buyer': '0', 'seller': '2', 'markup': '0',
                'notes': '2% sale fee, No buyer fees',
                'source_url': 'https://csfloat.com/faq'},
    'csmoney': {'buyer': '0', 'seller': '7', 'markup': '20',
                'notes': '7% platform fee + ~20% bot markup (estimated)',
                'source_url': 'https://cs.money/faq/'},
    'tradeit': {'buyer': '0', 'seller': '2', 'markup': '0',
                'notes': '2-60% fee varies by item and trade method',
                'source_url': 'https://tradeit.gg/faq'},
    'buff163': {'buyer': '0', 'seller': '2.5', 'markup': '0',
                'notes': '2.5% sale fee',
                'source_url': 'https://buff.163.com/'},
    'dmarket': {'buyer': '0', 'seller': '2', 'markup': '0',
                'notes': '2-10% fee varies by item liquidity',
                'source_url': 'https://dmarket.com/faq'},
}


@dataclass
class FeeBreakdown:
    base_price: Decimal
    platform_fee: Decimal
    hidden_markup: Decimal
    total_cost: Decimal
    effective_fee_percent: str
    fee_note: str
    has_warning: bool = False
    warning_message: str | None = None

    def as_dict(self) -> dict:
        return asdict(self)


@dataclass
class SellerProceeds:
    sale_price: Decimal
    platform_fee: Decimal
    seller_receives: Decimal
    effective_fee_percent: str
    badge_text: str | None = None

    def as_dict(self) -> dict:
        return asdict(self)


def round_money(value) -> Decimal:
    return Decimal(value).quantize(CENT, rounding=ROUND_HALF_UP)


def percent_of(amount: Decimal, percent: Decimal) -> Decimal:
    return round_money(Decimal(amount) * Decimal(percent) / Decimal(100))


def format_percent(value: Decimal) -> str:
    """Decimal('2.50') -> '2.5', Decimal('15.00') -> '15'."""
    return f"{Decimal(value).normalize():f}"


def compute_buyer_fees(base_price, config: PlatformFeeConfig | None) -> FeeBreakdown:
    """What a buyer pays for an item listed at ``base_price``."""
    base_price = round_money(base_price)

    if base_price == 0:
        return FeeBreakdown(
            base_price=ZERO,
            platform_fee=ZERO,
            hidden_markup=ZERO,
            total_cost=ZERO,
            effective_fee_percent='0%',
            fee_note='Free item - no fees',
        )

    if config is None:
        return FeeBreakdown(
            base_price=base_price,
            platform_fee=ZERO,
            hidden_markup=ZERO,
            total_cost=base_price,
            effective_fee_percent='0%',
            fee_note='Fee information not available - Contact platform for fee details',
            has_warning=True,
            warning_message='Fee information not available',
        )

    buyer_pct = Decimal(config.buyer_fee_percent)
    seller_pct = Decimal(config.seller_fee_percent)
    markup_pct = Decimal(config.hidden_markup_percent)

    platform_fee = percent_of(base_price, buyer_pct)
    hidden_markup = percent_of(base_price, markup_pct)
    total_cost = round_money(base_price + platform_fee + hidden_markup)

    fee_total = platform_fee + hidden_markup
    if fee_total == 0:
        effective = '0%'
    else:
        effective = f"{(fee_total / base_price * 100).quantize(CENT, rounding=ROUND_HALF_UP)}%"

    fee_note = config.fee_notes
    if platform_fee == 0 and buyer_pct > 0:
        fee_note += ' - Fee less than $0.01'
    elif buyer_pct == 0 and seller_pct > 0 and markup_pct == 0:
        fee_note = f"{format_percent(seller_pct)}% sale fee (seller pays, not buyer)"

    has_warning = markup_pct > 0
    return FeeBreakdown(
        base_price=base_price,
        platform_fee=platform_fee,
        hidden_markup=hidden_markup,
        total_cost=total_cost,
        effective_fee_percent=effective,
        fee_note=fee_note,
        has_warning=has_warning,
        warning_message=(
            f"⚠️ Includes ~{format_percent(markup_pct)}% estimated bot markup" if has_warning else None
        ),
    )


def compute_seller_proceeds(sale_price, config: PlatformFeeConfig | None) -> SellerProceeds:
    """What a seller keeps after the platform takes its cut. The fee is reported as a negative amount."""
    sale_price = round_money(sale_price)

    if config is None:
        return SellerProceeds(
            sale_price=sale_price,
            platform_fee=ZERO,
            seller_receives=sale_price,
            effective_fee_percent='0%',
        )

    seller_pct = Decimal(config.seller_fee_percent)
    platform_fee = -percent_of(sale_price, seller_pct)
    return SellerProceeds(
        sale_price=sale_price,
        platform_fee=platform_fee,
        seller_receives=round_money(sale_price + platform_fee),
        effective_fee_percent=f"{seller_pct.quantize(CENT)}%",
        badge_text=f"Low Fees: {format_percent(seller_pct)}%" if seller_pct <= LOW_FEE_THRESHOLD else None,
    )


def get_fee_config(platform: str) -> PlatformFeeConfig | None:
    return PlatformFeeConfig.objects.filter(platform=platform).first()


def calculate_buyer_fees(base_price, platform: str) -> FeeBreakdown:
    return compute_buyer_fees(base_price, get_fee_config(platform))


def calculate_seller_proceeds(sale_price, platform: str) -> SellerProceeds:
    return compute_seller_proceeds(sale_price, get_fee_config(platform))


def compare_platforms(item) -> dict:
    """
    All listings of ``item`` cheapest first, with the best deal and how much
    it saves compared to the most expensive listing.
    """
    prices = list(MarketplacePrice.objects.filter(item=item).order_by('total_cost', 'platform'))
    configs = {c.platform: c for c in PlatformFeeConfig.objects.filter(
        platform__in=[p.platform for p in prices])}

    listings = []
    for price in prices:
        breakdown = compute_buyer_fees(price.price, configs.get(price.platform))
        listings.append({
            'platform': price.platform,
            'platform_name': price.get_platform_display(),
            'price': price.price,
            'total_cost': price.total_cost,
            'quantity_available': price.quantity_available,
            'listing_url': price.listing_url,
            'last_updated': price.last_updated,
            'fees': breakdown.as_dict(),
        })

    if not listings:
        return {'listings': [], 'best': None, 'savings': ZERO}

    savings = round_money(listings[-1]['total_cost'] - listings[0]['total_cost'])
    return {'listings': listings, 'best': listings[0], 'savings': savings}


def total_cost_for(price, platform: str, configs: dict | None = None) -> tuple[Decimal, Decimal, Decimal]:
    """(total_cost, buyer_fee_percent, seller_fee_percent) for storing a MarketplacePrice."""
    config = get_fee_config(platform) if configs is None else configs.get(platform)
    breakdown = compute_buyer_fees(price, config)
    if config is None:
        return breakdown.total_cost, ZERO, ZERO
    return breakdown.total_cost, Decimal(config.buyer_fee_percent), Decimal(config.seller_fee_percent)
