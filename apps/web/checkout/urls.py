"""
Checkout URL routes.

Mounted under /<slug>/menu/checkout/
"""

from django.urls import path

from . import views

app_name = "checkout"

urlpatterns = [
    path("", views.checkout, name="checkout"),
    path("email/", views.submit_email, name="email"),
    path("resend/", views.resend, name="resend"),
    path("details/", views.submit_details, name="details"),
    path("back/", views.back, name="back"),
    path("close/", views.close, name="close"),
]
