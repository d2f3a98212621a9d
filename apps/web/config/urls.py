"""
URL configuration for the ordering site.
"""

from django.urls import include, path

from apps.web.core import views as core_views

urlpatterns = [
    path("", core_views.home, name="home"),
    path("dashboard/", include("apps.web.dashboard.urls")),
    path("payment/success/", include("apps.web.orders.urls")),
    path("<slug:slug>/menu/checkout/", include("apps.web.checkout.urls")),
    path("<slug:slug>/menu/", include("apps.web.restaurant.urls")),
    path("<slug:slug>/user/", include("apps.web.dashboard.restaurant_urls")),
]
