"""
Queryset builders for the public gallery.
"""
from __future__ import annotations

from decimal import Decimal, InvalidOperation

from loadouts.models import Loadout

GALLERY_SORTS = {
    'popular': ('-upvotes', '-views', '-created_at'),
    'recent': ('-created_at',),
    'views': ('-views', '-created_at'),
}


def _decimal_or_none(value):
    if value in (None, ''):
        return None
    try:
        return Decimal(str(value))
    except (InvalidOperation, ValueError):
        return None


def gallery_queryset(sort: str = 'popular', min_budget=None, max_budget=None):
    """Public loadouts, sorted and filtered by budget range. Unknown sorts fall back to popular."""
    queryset = (Loadout.objects.filter(is_public=True)
                .select_related('user')
                .prefetch_related('items__item'))

    low = _decimal_or_none(min_budget)
    high = _decimal_or_none(max_budget)
    if low is not None:
        queryset = queryset.filter(budget__gte=low)
    if high is not None:
        queryset = queryset.filter(budget__lte=high)

    return queryset.order_by(*GALLERY_SORTS.get(sort, GALLERY_SORTS['popular']))
