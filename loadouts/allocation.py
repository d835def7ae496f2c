"""
Budget allocation for loadouts.

A loadout's budget is split across item categories by percentage, either one
of the presets or a custom split. The weapon_skins share is then divided among
the ten most used weapons by their usage weight, and the total budget decides
which wear the buyer should aim for.

Everything here is plain arithmetic on ``Decimal`` and never touches the
database.
"""
from __future__ import annotations

from dataclasses import dataclass, field
from decimal import ROUND_HALF_UP, Decimal

CENT = Decimal('0.01')
HUNDRED = Decimal('100')
ALLOCATION_TOLERANCE = Decimal('0.01')
WEIGHT_TOLERANCE = Decimal('0.001')

CATEGORIES = ('weapon_skins', 'knife', 'gloves', 'agents', 'music_kit', 'charms')

# Catalog item type that fills each category
CATEGORY_ITEM_TYPES = {
    'weapon_skins': 'skin',
    'knife': 'knife',
    'gloves': 'gloves',
    'agents': 'agent',
    'music_kit': 'music_kit',
    'charms': 'charm',
}

PRESET_ALLOCATIONS = {
    'balance': {'weapon_skins': 70, 'knife': 15, 'gloves': 10, 'agents': 3, 'music_kit': 2, 'charms': 0},
    'price': {'weapon_skins': 80, 'knife': 10, 'gloves': 5, 'agents': 3, 'music_kit': 2, 'charms': 0},
    'quality': {'weapon_skins': 60, 'knife': 20, 'gloves': 15, 'agents': 3, 'music_kit': 2, 'charms': 0},
    'color_match': {'weapon_skins': 65, 'knife': 18, 'gloves': 12, 'agents': 3, 'music_kit': 2, 'charms': 0},
}


@dataclass(frozen=True)
class WeaponPriority:
    weapon_type: str
    budget_weight: Decimal
    is_essential: bool = False


DEFAULT_WEAPON_PRIORITIES = (
    WeaponPriority('AK-47', Decimal('0.25'), True),
    WeaponPriority('AWP', Decimal('0.20'), True),
    WeaponPriority('M4A4', Decimal('0.15'), True),
    WeaponPriority('M4A1-S', Decimal('0.15'), True),
    WeaponPriority('Desert Eagle', Decimal('0.10')),
    WeaponPriority('USP-S', Decimal('0.05')),
    WeaponPriority('Glock-18', Decimal('0.03')),
    WeaponPriority('Tec-9', Decimal('0.03')),
    WeaponPriority('P250', Decimal('0.02')),
    WeaponPriority('CZ75-Auto', Decimal('0.02')),
)


@dataclass
class WeaponAllocation:
    weapon_type: str
    budget_weight: Decimal
    allocated_budget: Decimal
    is_essential: bool


@dataclass
class FloatGuidance:
    wear: str
    float_min: float
    float_max: float
    reasoning: str


@dataclass
class BudgetAllocation:
    total_budget: Decimal
    percentages: dict[str, Decimal]
    categories: dict[str, Decimal]
    weapons: list[WeaponAllocation] = field(default_factory=list)
    float_guidance: FloatGuidance | None = None


def _money(value) -> Decimal:
    return Decimal(value).quantize(CENT, rounding=ROUND_HALF_UP)


def _to_decimal(value) -> Decimal | None:
    if isinstance(value, bool):
        return None
    try:
        return Decimal(str(value))
    except (ArithmeticError, ValueError, TypeError):
        return None


def validate_allocation(allocation: dict) -> list[str]:
    """Error messages for a custom allocation; empty when it is valid."""
    if not isinstance(allocation, dict):
        return ["Custom allocation must be an object of category percentages"]

    errors = []
    missing = [c for c in CATEGORIES if c not in allocation]
    if missing:
        errors.append(f"Missing categories: {', '.join(missing)}")
    unknown = [c for c in allocation if c not in CATEGORIES]
    if unknown:
        errors.append(f"Unknown categories: {', '.join(unknown)}")

    total = Decimal('0')
    for category, value in allocation.items():
        percentage = _to_decimal(value)
        if percentage is None or not percentage.is_finite():
            errors.append(f"{category}: Percentage must be a valid number, got {value}")
            continue
        if percentage < 0 or percentage > HUNDRED:
            errors.append(f"{category}: Percentage must be between 0.00 and 100.00, got {value}")
        total += percentage

    if abs(total - HUNDRED) > ALLOCATION_TOLERANCE:
        errors.append(f"Custom allocation must sum to 100.00%, got {total.quantize(CENT)}%")
    return errors


def resolve_allocation(prioritize: str = 'balance', custom: dict | None = None) -> dict[str, Decimal]:
    """The percentages in force: the custom split when given, else the preset."""
    source = custom if custom else PRESET_ALLOCATIONS.get(prioritize, PRESET_ALLOCATIONS['balance'])
    return {category: Decimal(str(source.get(category, 0))) for category in CATEGORIES}


def _split(total: Decimal, weights: list[tuple[str, Decimal]], scale: Decimal) -> dict[str, Decimal]:
    """Round each share to cents and give the rounding residue to the last weighted share."""
    shares = {key: _money(total * weight / scale) for key, weight in weights}
    residue = total - sum(shares.values(), Decimal('0'))
    if residue:
        weighted = [key for key, weight in weights if weight > 0]
        if weighted:
            shares[weighted[-1]] += residue
    return shares


def category_budgets(budget, percentages: dict[str, Decimal]) -> dict[str, Decimal]:
    """
    Dollar amount per category.

    >>> category_budgets(Decimal('150'), resolve_allocation('balance'))['knife']
    Decimal('22.50')
    """
    budget = _money(budget)
    return _split(budget, [(c, Decimal(percentages.get(c, 0))) for c in CATEGORIES], HUNDRED)


def weapon_budgets(weapon_skins_budget, priorities=DEFAULT_WEAPON_PRIORITIES) -> list[WeaponAllocation]:
    """Split the weapon_skins budget by usage weight; the weights must sum to 1."""
    priorities = sorted(priorities, key=lambda p: Decimal(p.budget_weight), reverse=True)
    if not priorities:
        return []

    total_weight = sum((Decimal(p.budget_weight) for p in priorities), Decimal('0'))
    if abs(total_weight - 1) > WEIGHT_TOLERANCE:
        raise ValueError(f"Weapon budget weights must sum to 1.00, got {total_weight:.3f}")

    shares = _split(
        _money(weapon_skins_budget),
        [(p.weapon_type, Decimal(p.budget_weight)) for p in priorities],
        Decimal('1'),
    )
    return [
        WeaponAllocation(
            weapon_type=p.weapon_type,
            budget_weight=Decimal(p.budget_weight),
            allocated_budget=shares[p.weapon_type],
            is_essential=p.is_essential,
        )
        for p in priorities
    ]


def float_guidance(budget) -> FloatGuidance:
    """Which wear gives the most value for a budget."""
    budget = Decimal(budget)
    if budget < 100:
        return FloatGuidance('Field-Tested', 0.15, 0.18,
                             'Target float 0.15-0.18 for best value (cheaper than 0.20-0.25)')
    if budget >= 300:
        return FloatGuidance('Minimal Wear', 0.07, 0.09,
                             'Target float 0.07-0.09 for near Factory New looks at Minimal Wear prices')
    return FloatGuidance('Minimal Wear', 0.10, 0.12,
                         'Target float 0.10-0.12 for a clean look without the low-float premium')


def allocate(budget, prioritize: str = 'balance', custom: dict | None = None,
             priorities=DEFAULT_WEAPON_PRIORITIES) -> BudgetAllocation:
    """Full breakdown of a loadout budget."""
    budget = _money(budget)
    percentages = resolve_allocation(prioritize, custom)
    categories = category_budgets(budget, percentages)
    return BudgetAllocation(
        total_budget=budget,
        percentages=percentages,
        categories=categories,
        weapons=weapon_budgets(categories['weapon_skins'], priorities),
        float_guidance=float_guidance(budget),
    )


def remaining_budget(budget, selected_prices) -> Decimal:
    """Budget left after the selected items; 150 - 46.50 = 103.50."""
    spent = sum((Decimal(p) for p in selected_prices), Decimal('0'))
    return _money(Decimal(budget) - spent)
