"""
Price alert and web push endpoints.

    GET    /api/alerts/                   200, 401
    POST   /api/alerts/                   201, 400, 401, 404
    PATCH  /api/alerts/<id>/              200, 400, 401, 403, 404
    DELETE /api/alerts/<id>/              200, 401, 403, 404
    POST   /api/alerts/<id>/toggle/       200, 401, 403, 404
    GET    /api/alerts/<id>/history/      200, 401, 403, 404
    POST   /api/push/subscribe/           200, 400, 401
    DELETE /api/push/subscribe/           200, 400, 401
    GET    /api/push/vapid-key/           200
    GET    /api/cron/check-alerts/        200, 401, 500 (bearer CRON_SECRET)
"""
from __future__ import annotations

from django.conf import settings
from django.http import JsonResponse
from rest_framework import permissions, status
from rest_framework.decorators import api_view, permission_classes
from rest_framework.response import Response

from alerts import services
from alerts.checker import check_alerts as run_alert_check
from alerts.models import PriceAlert
from csloadout.errors import ValidationError, json_errors
from csloadout.utils import cron_secret_required
from .serializers import (
    AlertCreateSerializer,
    AlertTriggerSerializer,
    AlertUpdateSerializer,
    PriceAlertSerializer,
    PushSubscriptionSerializer,
)


def _validated(serializer_class, data, **kwargs):
    serializer = serializer_class(data=data, **kwargs)
    if not serializer.is_valid():
        raise ValidationError(serializer.errors)
    return serializer.validated_data


@api_view(['GET', 'POST'])
@permission_classes([permissions.IsAuthenticated])
def alert_list(request):
    if request.method == 'POST':
        data = _validated(AlertCreateSerializer, request.data)
        alert = services.create_alert(request.user, **data)
        return Response(PriceAlertSerializer(alert).data, status=status.HTTP_201_CREATED)

    alerts = PriceAlert.objects.filter(user=request.user).select_related('item')
    return Response({'alerts': PriceAlertSerializer(alerts, many=True).data})


@api_view(['PATCH', 'DELETE'])
@permission_classes([permissions.IsAuthenticated])
def alert_detail(request, alert_id):
    if request.method == 'DELETE':
        services.delete_alert(request.user, alert_id)
        return Response({'success': True})

    data = _validated(AlertUpdateSerializer, request.data)
    alert = services.update_alert(request.user, alert_id, **data)
    return Response(PriceAlertSerializer(alert).data)


@api_view(['POST'])
@permission_classes([permissions.IsAuthenticated])
def toggle_alert(request, alert_id):
    """Pause or resume."""
    alert = services.toggle_alert(request.user, alert_id)
    return Response(PriceAlertSerializer(alert).data)


@api_view(['GET'])
@permission_classes([permissions.IsAuthenticated])
def alert_history(request, alert_id):
    alert = services.get_owned_alert(request.user, alert_id)
    return Response({'triggers': AlertTriggerSerializer(alert.triggers.all()[:50], many=True).data})


@api_view(['POST', 'DELETE'])
@permission_classes([permissions.IsAuthenticated])
def push_subscribe(request):
    if request.method == 'DELETE':
        removed = services.remove_push_subscription(request.user, request.data.get('endpoint'))
        return Response({'success': True, 'removed': removed})

    data = _validated(PushSubscriptionSerializer, request.data)
    subscription = services.save_push_subscription(
        request.user, data['endpoint'], data['keys'],
        user_agent=request.headers.get('User-Agent', ''),
    )
    return Response({'success': True, 'subscription': {'id': subscription.pk, 'endpoint': subscription.endpoint}})


@api_view(['GET'])
def vapid_public_key(request):
    return Response({'public_key': settings.VAPID_PUBLIC_KEY})


@cron_secret_required
@json_errors
def check_alerts(request):
    """Cron entry point: fire alerts whose price target was reached."""
    return JsonResponse(run_alert_check())
