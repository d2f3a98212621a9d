"""Django app configuration for orders module."""

from django.apps import AppConfig


class OrdersConfig(AppConfig):
    """Order status and invoice app configuration."""

    name = "apps.web.orders"
    verbose_name = "Orders"
