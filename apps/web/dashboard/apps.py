"""Django app configuration for dashboard module."""

from django.apps import AppConfig


class DashboardConfig(AppConfig):
    """Customer dashboard app configuration."""

    name = "apps.web.dashboard"
    verbose_name = "Dashboard"
