"""
Order status URL routes.

Mounted under /payment/success/
"""

from django.urls import path

from . import views

app_name = "orders"

urlpatterns = [
    path("", views.payment_status, name="payment_status"),
    path("invoice/", views.create_invoice, name="create_invoice"),
]
