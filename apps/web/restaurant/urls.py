"""
Restaurant URL routes.

Mounted under /<slug>/menu/
"""

from django.urls import path

from . import views

app_name = "restaurant"

urlpatterns = [
    path("", views.menu, name="menu"),
    path("cart/", views.update_cart, name="cart"),
]
