"""
Loadout endpoints.

    GET    /api/loadouts/                      200 (public gallery)
    POST   /api/loadouts/                      201, 400, 401
    GET    /api/loadouts/mine/                 200, 401
    GET    /api/loadouts/<id>/                 200, 403 (private, not owner), 404
    GET    /api/loadouts/<id>/allocation/      200, 403, 404
    GET    /api/loadouts/<id>/analytics/       200, 401, 403, 404
    POST   /api/loadouts/<id>/publish/         200, 401, 403, 404
    POST   /api/loadouts/<id>/upvote/          200, 401, 403, 404
    POST   /api/loadouts/<id>/items/           200, 400, 401, 403, 404
    DELETE /api/loadouts/<id>/items/<slot>/    200, 401, 403, 404
    POST   /api/loadouts/<slug>/view/          200, 403, 404
"""
from __future__ import annotations

from django.core.paginator import Paginator
from rest_framework import permissions, status
from rest_framework.decorators import api_view, permission_classes
from rest_framework.response import Response

from csloadout.errors import Forbidden, NotFound, ValidationError
from csloadout.utils import get_client_ip
from loadouts import services
from loadouts.models import Loadout
from loadouts.queries import gallery_queryset
from .serializers import (
    LoadoutCreateSerializer,
    LoadoutItemRequestSerializer,
    LoadoutItemSerializer,
    LoadoutSerializer,
)

GALLERY_PAGE_SIZE = 24


@api_view(['GET', 'POST'])
@permission_classes([permissions.IsAuthenticatedOrReadOnly])
def loadout_list(request):
    if request.method == 'POST':
        serializer = LoadoutCreateSerializer(data=request.data)
        if not serializer.is_valid():
            raise ValidationError(serializer.errors)
        loadout = services.create_loadout(request.user, **serializer.validated_data)
        return Response(LoadoutSerializer(loadout).data, status=status.HTTP_201_CREATED)

    queryset = gallery_queryset(
        sort=request.query_params.get('sort', 'popular'),
        min_budget=request.query_params.get('min_budget'),
        max_budget=request.query_params.get('max_budget'),
    )
    paginator = Paginator(queryset, GALLERY_PAGE_SIZE)
    page = paginator.get_page(request.query_params.get('page'))
    return Response({
        'loadouts': LoadoutSerializer(page.object_list, many=True).data,
        'total': paginator.count,
        'page': page.number,
        'page_size': GALLERY_PAGE_SIZE,
    })


@api_view(['GET'])
@permission_classes([permissions.IsAuthenticated])
def my_loadouts(request):
    loadouts = Loadout.objects.filter(user=request.user).prefetch_related('items__item')
    return Response({'loadouts': LoadoutSerializer(loadouts, many=True).data})


def _visible_loadout(request, loadout_id) -> Loadout:
    loadout = Loadout.objects.filter(pk=loadout_id).prefetch_related('items__item').first()
    if loadout is None:
        raise NotFound("Loadout not found")
    if not loadout.is_public and loadout.user_id != request.user.pk:
        raise Forbidden("This loadout is private")
    return loadout


@api_view(['GET'])
def loadout_detail(request, loadout_id):
    return Response(LoadoutSerializer(_visible_loadout(request, loadout_id)).data)


@api_view(['GET'])
def loadout_allocation(request, loadout_id):
    """Category and weapon budgets, float guidance and the budget left."""
    loadout = _visible_loadout(request, loadout_id)
    allocation = services.loadout_allocation(loadout)
    guidance = allocation.float_guidance
    return Response({
        'total_budget': allocation.total_budget,
        'percentages': allocation.percentages,
        'categories': allocation.categories,
        'weapons': [
            {
                'weapon_type': w.weapon_type,
                'budget_weight': w.budget_weight,
                'allocated_budget': w.allocated_budget,
                'is_essential': w.is_essential,
            }
            for w in allocation.weapons
        ],
        'float_guidance': {
            'wear': guidance.wear,
            'float_min': guidance.float_min,
            'float_max': guidance.float_max,
            'reasoning': guidance.reasoning,
        },
        'actual_cost': loadout.actual_cost,
        'remaining_budget': loadout.remaining_budget,
    })


@api_view(['GET'])
@permission_classes([permissions.IsAuthenticated])
def loadout_analytics(request, loadout_id):
    return Response(services.view_analytics(request.user, loadout_id))


@api_view(['POST'])
@permission_classes([permissions.IsAuthenticated])
def publish_loadout(request, loadout_id):
    return Response(services.toggle_publish(request.user, loadout_id))


@api_view(['POST'])
@permission_classes([permissions.IsAuthenticated])
def upvote_loadout(request, loadout_id):
    return Response(services.toggle_upvote(request.user, loadout_id))


@api_view(['POST'])
@permission_classes([permissions.IsAuthenticated])
def loadout_items(request, loadout_id):
    """Select an item for its slot, replacing what was there."""
    serializer = LoadoutItemRequestSerializer(data=request.data)
    if not serializer.is_valid():
        raise ValidationError(serializer.errors)
    entry = services.add_item(request.user, loadout_id, **serializer.validated_data)
    entry.loadout.refresh_from_db(fields=['actual_cost'])
    return Response({
        'item': LoadoutItemSerializer(entry).data,
        'actual_cost': entry.loadout.actual_cost,
        'remaining_budget': entry.loadout.remaining_budget,
    })


@api_view(['DELETE'])
@permission_classes([permissions.IsAuthenticated])
def remove_loadout_item(request, loadout_id, slot):
    loadout = services.remove_item(request.user, loadout_id, slot)
    return Response({
        'success': True,
        'actual_cost': loadout.actual_cost,
        'remaining_budget': loadout.remaining_budget,
    })


@api_view(['POST'])
def track_view(request, slug):
    return Response(services.track_view(slug, get_client_ip(request)))
