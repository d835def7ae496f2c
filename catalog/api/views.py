"""
JSON endpoints for browsing the catalog.

    GET /api/items/                      200
    GET /api/items/<id>/                 200, 404
    GET /api/items/<id>/prices/          200, 404 (unknown item or no price data)
    GET /api/search/?q=                  200
    GET /api/cases/, /api/cases/<slug>/  200, 404
    GET /api/collections/[<slug>/]       200, 404
    GET /api/fees/buyer/, /seller/       200, 400
"""
from __future__ import annotations

from django.core.paginator import Paginator
from django.db.models import Count
from django.shortcuts import get_object_or_404
from rest_framework.decorators import api_view
from rest_framework.response import Response

from catalog import fees
from catalog.models import Case, Collection, Item
from catalog.utils import convert_from_usd, normalize_item_name
from csloadout.errors import NotFound, ValidationError
from .serializers import (
    CaseSerializer,
    CollectionSerializer,
    FeeQuerySerializer,
    ItemDetailSerializer,
    ItemSerializer,
)

DEFAULT_PAGE_SIZE = 50
MAX_PAGE_SIZE = 100
SEARCH_LIMIT = 10

SORT_FIELDS = {
    'name': 'name',
    '-name': '-name',
    'rarity': 'rarity',
}


def _int_param(request, name: str, default: int) -> int:
    try:
        return int(request.query_params.get(name, default))
    except (TypeError, ValueError):
        return default


def _paginate(request, queryset, serializer_class, key: str = 'items') -> dict:
    page_size = min(MAX_PAGE_SIZE, max(1, _int_param(request, 'page_size', DEFAULT_PAGE_SIZE)))
    paginator = Paginator(queryset, page_size)
    page = paginator.get_page(_int_param(request, 'page', 1))
    return {
        key: serializer_class(page.object_list, many=True).data,
        'total': paginator.count,
        'page': page.number,
        'page_size': page_size,
    }


@api_view(['GET'])
def item_list(request):
    """Browse items with filters (type, rarity, weapon_type, q) and pagination."""
    items = Item.objects.all()
    for field in ('type', 'rarity', 'weapon_type', 'wear', 'quality'):
        value = request.query_params.get(field)
        if value:
            items = items.filter(**{field: value})

    query = normalize_item_name(request.query_params.get('q', ''))
    if query:
        items = items.filter(search_name__icontains=query)

    items = items.order_by(SORT_FIELDS.get(request.query_params.get('sort'), 'name'))
    return Response(_paginate(request, items, ItemSerializer))


@api_view(['GET'])
def item_detail(request, item_id):
    item = Item.objects.filter(pk=item_id).prefetch_related('prices', 'collections', 'cases').first()
    if item is None:
        raise NotFound("Item not found")
    return Response(ItemDetailSerializer(item).data)


@api_view(['GET'])
def item_prices(request, item_id):
    """
    All marketplace prices of an item, cheapest total first, plus the savings
    of the best deal. ``currency`` converts the totals for display.
    """
    item = Item.objects.filter(pk=item_id).first()
    if item is None:
        raise NotFound("Item not found")

    comparison = fees.compare_platforms(item)
    if not comparison['listings']:
        raise NotFound("No price data available for this item")

    currency = request.query_params.get('currency', 'USD').upper()
    if currency != 'USD':
        for listing in comparison['listings']:
            listing['display_total'] = convert_from_usd(listing['total_cost'], currency)

    return Response({
        'item_id': item.id,
        'item_name': item.name,
        'lowest_price': comparison['best'],
        'all_prices': comparison['listings'],
        'savings': comparison['savings'],
        'currency': currency,
        'updated_at': max(listing['last_updated'] for listing in comparison['listings']),
    })


@api_view(['GET'])
def search(request):
    """Autocomplete: up to ten items whose normalized name contains the query."""
    query = normalize_item_name(request.query_params.get('q', ''))
    if len(query) < 2:
        return Response({'results': []})

    items = (Item.objects.filter(search_name__icontains=query)
             .order_by('name')[:SEARCH_LIMIT])
    return Response({'results': ItemSerializer(items, many=True).data})


@api_view(['GET'])
def case_list(request):
    cases = Case.objects.annotate(item_count=Count('items')).order_by('name')
    return Response(_paginate(request, cases, CaseSerializer, key='cases'))


@api_view(['GET'])
def case_detail(request, slug):
    case = get_object_or_404(Case.objects.annotate(item_count=Count('items')), slug=slug)
    data = CaseSerializer(case).data
    data['items'] = ItemSerializer(case.items.order_by('rarity', 'name'), many=True).data
    return Response(data)


@api_view(['GET'])
def collection_list(request):
    collections = Collection.objects.annotate(item_count=Count('items')).order_by('name')
    return Response(_paginate(request, collections, CollectionSerializer, key='collections'))


@api_view(['GET'])
def collection_detail(request, slug):
    collection = get_object_or_404(Collection.objects.annotate(item_count=Count('items')), slug=slug)
    data = CollectionSerializer(collection).data
    data['items'] = ItemSerializer(collection.items.order_by('rarity', 'name'), many=True).data
    return Response(data)


def _fee_query(request):
    serializer = FeeQuerySerializer(data=request.query_params)
    if not serializer.is_valid():
        raise ValidationError(serializer.errors)
    return serializer.validated_data['price'], serializer.validated_data['platform']


@api_view(['GET'])
def buyer_fees(request):
    price, platform = _fee_query(request)
    return Response(fees.calculate_buyer_fees(price, platform).as_dict())


@api_view(['GET'])
def seller_proceeds(request):
    price, platform = _fee_query(request)
    return Response(fees.calculate_seller_proceeds(price, platform).as_dict())
