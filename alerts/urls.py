from django.urls import path

from alerts.api import views as api_views

urlpatterns = [
    path("alerts/", api_views.alert_list, name="api_alert_list"),
    path("alerts/<int:alert_id>/", api_views.alert_detail, name="api_alert_detail"),
    path("alerts/<int:alert_id>/toggle/", api_views.toggle_alert, name="api_alert_toggle"),
    path("alerts/<int:alert_id>/history/", api_views.alert_history, name="api_alert_history"),
    path("push/subscribe/", api_views.push_subscribe, name="api_push_subscribe"),
    path("push/vapid-key/", api_views.vapid_public_key, name="api_vapid_key"),
]
