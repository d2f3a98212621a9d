"""Django app configuration for menus and carts."""

from django.apps import AppConfig


class RestaurantConfig(AppConfig):
    """Menu browsing, the session cart, and order placement."""

    name = "apps.web.restaurant"
    verbose_name = "Restaurant menu"
