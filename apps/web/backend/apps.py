"""Django app configuration for backend service adapters."""

from django.apps import AppConfig


class BackendConfig(AppConfig):
    """Backend adapters app configuration."""

    name = "apps.web.backend"
    verbose_name = "Backend service"
