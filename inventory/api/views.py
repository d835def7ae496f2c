"""
Inventory endpoints.

    GET    /api/inventory/          200, 401
    POST   /api/inventory/sync/     200, 401, 403 (consent / private), 404 (no Steam id), 429, 500, 502
    POST   /api/inventory/consent/  200, 401
    GET    /api/inventory/export/   200 (JSON attachment), 401, 404
    DELETE /api/inventory/delete/   200, 401
    GET    /api/cron/daily-refresh/ 200, 401, 500 (bearer CRON_SECRET)
"""
from __future__ import annotations

from django.core.paginator import Paginator
from django.http import JsonResponse
from django.utils import timezone
from rest_framework import permissions
from rest_framework.decorators import api_view, permission_classes
from rest_framework.response import Response

from csloadout.errors import NotFound, ValidationError, json_errors
from csloadout.utils import cron_secret_required, get_client_ip, hash_ip
from inventory import gdpr
from inventory.models import UserInventory
from inventory.sync import InventorySyncService, refresh_inventories
from .serializers import InventoryItemSerializer, SyncRequestSerializer, UserInventorySerializer

PAGE_SIZE = 100


@api_view(['GET'])
@permission_classes([permissions.IsAuthenticated])
def inventory_detail(request):
    """The user's inventory summary and one page of items."""
    inventory = UserInventory.objects.filter(user=request.user).first()
    if inventory is None:
        return Response({'inventory': None, 'items': [], 'consent_required': True})

    paginator = Paginator(inventory.items.select_related('item'), PAGE_SIZE)
    page = paginator.get_page(request.query_params.get('page'))
    return Response({
        'inventory': UserInventorySerializer(inventory).data,
        'items': InventoryItemSerializer(page.object_list, many=True).data,
        'total': paginator.count,
        'page': page.number,
        'consent_required': not inventory.consent_given,
    })


@api_view(['POST'])
@permission_classes([permissions.IsAuthenticated])
def sync_inventory(request):
    """Import (or resume importing) the user's Steam inventory."""
    serializer = SyncRequestSerializer(data=request.data)
    if not serializer.is_valid():
        raise ValidationError(serializer.errors)

    if serializer.validated_data['consent']:
        gdpr.record_consent(
            request.user,
            ip_hash=hash_ip(get_client_ip(request)),
            user_agent=request.headers.get('User-Agent', ''),
        )

    result = InventorySyncService().sync(request.user, force=serializer.validated_data['force'])
    data = result.as_dict()
    data['warning'] = (
        f"⚠️ {result.items_unmatched} items had issues" if result.items_unmatched else None
    )
    return Response(data)


@api_view(['POST'])
@permission_classes([permissions.IsAuthenticated])
def give_consent(request):
    inventory = gdpr.record_consent(
        request.user,
        ip_hash=hash_ip(get_client_ip(request)),
        user_agent=request.headers.get('User-Agent', ''),
        method=request.data.get('method', 'modal'),
    )
    return Response({
        'success': True,
        'consent_date': inventory.consent_date,
        'consent_version': inventory.consent_version,
    })


@api_view(['GET'])
@permission_classes([permissions.IsAuthenticated])
def export_inventory(request):
    """GDPR export as a downloadable JSON file."""
    data = gdpr.export_inventory(request.user)
    if data is None:
        raise NotFound("No inventory data found")

    timestamp = timezone.now().strftime('%Y%m%d-%H%M%S')
    response = JsonResponse(data, json_dumps_params={'indent': 2})
    response['Content-Disposition'] = f'attachment; filename="inventory-export-{timestamp}.json"'
    return response


@api_view(['DELETE'])
@permission_classes([permissions.IsAuthenticated])
def delete_inventory(request):
    """GDPR erasure of the imported inventory."""
    return Response(gdpr.delete_inventory(request.user))


@cron_secret_required
@json_errors
def daily_refresh(request):
    """Cron entry point: re-sync the inventories of recently active users."""
    return JsonResponse(refresh_inventories())
