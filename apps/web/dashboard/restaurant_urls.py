"""
Per-restaurant dashboard URL routes.

Mounted under /<slug>/user/
"""

from django.urls import path

from . import views

app_name = "customer"

urlpatterns = [
    path("", views.restaurant_dashboard, name="dashboard"),
    path("sign-out/", views.restaurant_sign_out, name="sign_out"),
]
