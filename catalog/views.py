"""
Server-rendered catalog pages: the browse page and an item's price comparison.
"""
from __future__ import annotations

from django.core.paginator import Paginator
from django.http import HttpRequest, HttpResponse
from django.shortcuts import get_object_or_404, render

from catalog import fees
from catalog.models import Item
from catalog.utils import normalize_item_name


def home(request: HttpRequest) -> HttpResponse:
    """Browse the catalog, filtered by type, rarity, weapon and search text."""
    items = Item.objects.all()
    filters = {}
    for field in ('type', 'rarity', 'weapon_type'):
        value = request.GET.get(field)
        if value:
            items = items.filter(**{field: value})
            filters[field] = value

    query = request.GET.get('q', '')
    if query:
        items = items.filter(search_name__icontains=normalize_item_name(query))

    paginator = Paginator(items.order_by('name'), 50)
    page_obj = paginator.get_page(request.GET.get('page'))
    context = {
        'page_obj': page_obj,
        'query': query,
        'filters': filters,
        'type_choices': Item.TYPE_CHOICES,
    }
    return render(request, "catalog/home.html", context)


def item_page(request: HttpRequest, item_id: str) -> HttpResponse:
    item = get_object_or_404(Item, pk=item_id)
    comparison = fees.compare_platforms(item)
    return render(request, "catalog/item_detail.html", {'item': item, **comparison})
