"""
URL configuration for csloadout.gg.
"""
from __future__ import annotations

from django.conf import settings
from django.contrib import admin
from django.urls import include, path

from alerts import views as alert_views
from alerts.api import views as alert_api_views
from catalog import views as catalog_views
from inventory import views as inventory_views
from inventory.api import views as inventory_api_views
from loadouts import views as loadout_views


def global_settings_context(request):
    """Values every template needs."""
    return {
        'SITE_URL': settings.SITE_URL,
        'VAPID_PUBLIC_KEY': settings.VAPID_PUBLIC_KEY,
    }


urlpatterns = [
    path("admin/", admin.site.urls),
    path('accounts/', include('allauth.urls')),

    # Pages
    path("", catalog_views.home, name="home"),
    path("items/<str:item_id>/", catalog_views.item_page, name="item_page"),
    path("inventory/", inventory_views.inventory_page, name="inventory_page"),
    path("loadouts/", loadout_views.gallery, name="loadout_gallery"),
    path("loadouts/new/", loadout_views.new_loadout, name="new_loadout"),
    path("loadouts/<int:loadout_id>/edit/", loadout_views.loadout_manage, name="loadout_manage"),
    path("loadouts/<slug:slug>/", loadout_views.loadout_detail, name="loadout_detail"),
    path("alerts/", alert_views.alerts_page, name="alerts_page"),

    # JSON API
    path("api/", include("catalog.urls")),
    path("api/", include("accounts.urls")),
    path("api/", include("alerts.urls")),
    path("api/inventory/", include("inventory.urls")),
    path("api/loadouts/", include("loadouts.urls")),

    # Cron (bearer CRON_SECRET)
    path("api/cron/daily-refresh/", inventory_api_views.daily_refresh, name="cron_daily_refresh"),
    path("api/cron/check-alerts/", alert_api_views.check_alerts, name="cron_check_alerts"),
]
