"""Django app configuration for shared view helpers."""

from django.apps import AppConfig


class CoreConfig(AppConfig):
    """Core app configuration."""

    name = "apps.web.core"
    verbose_name = "Core"
