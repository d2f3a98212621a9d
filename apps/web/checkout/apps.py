"""Django app configuration for checkout module."""

from django.apps import AppConfig


class CheckoutConfig(AppConfig):
    """Checkout app configuration."""

    name = "apps.web.checkout"
    verbose_name = "Checkout"
