from django.urls import path

from accounts.api import views as api_views

urlpatterns = [
    path("me/", api_views.me, name="api_me"),
    path("me/refresh/", api_views.refresh_profile, name="api_me_refresh"),
]
