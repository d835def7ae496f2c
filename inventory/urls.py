from django.urls import path

from inventory.api import views as api_views

urlpatterns = [
    path("", api_views.inventory_detail, name="api_inventory"),
    path("sync/", api_views.sync_inventory, name="api_inventory_sync"),
    path("consent/", api_views.give_consent, name="api_inventory_consent"),
    path("export/", api_views.export_inventory, name="api_inventory_export"),
    path("delete/", api_views.delete_inventory, name="api_inventory_delete"),
]
