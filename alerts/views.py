"""
Server-rendered alerts page.
"""
from __future__ import annotations

from django.conf import settings
from django.contrib.auth.decorators import login_required
from django.http import HttpRequest, HttpResponse
from django.shortcuts import render

from alerts.models import PriceAlert


@login_required
def alerts_page(request: HttpRequest) -> HttpResponse:
    alerts = (PriceAlert.objects.filter(user=request.user)
              .select_related('item')
              .prefetch_related('item__prices'))
    return render(request, "alerts/alerts.html", {
        'active_alerts': [a for a in alerts if a.is_active],
        'paused_alerts': [a for a in alerts if not a.is_active],
        'vapid_public_key': settings.VAPID_PUBLIC_KEY,
    })
