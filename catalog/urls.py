from django.urls import path

from catalog.api import views as api_views

urlpatterns = [
    path("items/", api_views.item_list, name="api_item_list"),
    path("items/<str:item_id>/", api_views.item_detail, name="api_item_detail"),
    path("items/<str:item_id>/prices/", api_views.item_prices, name="api_item_prices"),
    path("search/", api_views.search, name="api_search"),
    path("cases/", api_views.case_list, name="api_case_list"),
    path("cases/<slug:slug>/", api_views.case_detail, name="api_case_detail"),
    path("collections/", api_views.collection_list, name="api_collection_list"),
    path("collections/<slug:slug>/", api_views.collection_detail, name="api_collection_detail"),
    path("fees/buyer/", api_views.buyer_fees, name="api_buyer_fees"),
    path("fees/seller/", api_views.seller_proceeds, name="api_seller_proceeds"),
]
