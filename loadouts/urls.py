from django.urls import path

from loadouts.api import views as api_views

urlpatterns = [
    path("", api_views.loadout_list, name="api_loadout_list"),
    path("mine/", api_views.my_loadouts, name="api_my_loadouts"),
    path("<int:loadout_id>/", api_views.loadout_detail, name="api_loadout_detail"),
    path("<int:loadout_id>/allocation/", api_views.loadout_allocation, name="api_loadout_allocation"),
    path("<int:loadout_id>/analytics/", api_views.loadout_analytics, name="api_loadout_analytics"),
    path("<int:loadout_id>/publish/", api_views.publish_loadout, name="api_loadout_publish"),
    path("<int:loadout_id>/upvote/", api_views.upvote_loadout, name="api_loadout_upvote"),
    path("<int:loadout_id>/items/", api_views.loadout_items, name="api_loadout_items"),
    path("<int:loadout_id>/items/<str:slot>/", api_views.remove_loadout_item, name="api_loadout_remove_item"),
    path("<slug:slug>/view/", api_views.track_view, name="api_loadout_view"),
]
