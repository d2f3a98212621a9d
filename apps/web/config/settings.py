"""
Django settings for the ordering site.

Secrets come from the environment - never hardcode credentials.
Run with: uv run python manage.py runserver
"""

from pathlib import Path

import environ  # type: ignore[import-untyped]

# Build paths inside the project like this: BASE_DIR / 'subdir'.
BASE_DIR = Path(__file__).resolve().parent.parent

# Initialize environ
env = environ.Env(
    DEBUG=(bool, False),
    ALLOWED_HOSTS=(list, ["localhost", "127.0.0.1", "testserver"]),
    BACKEND_URL=(str, "http://localhost:54321"),
    BACKEND_ANON_KEY=(str, ""),
    INVOICE_API_URL=(str, "http://localhost:8000/api/invoice"),
    BACKEND_TIMEOUT=(float, 10.0),
    MAGIC_LINK_COOLDOWN_SECONDS=(int, 60),
    ORDER_STATUS_POLL_SECONDS=(int, 5),
    LOG_LEVEL=(str, "INFO"),
)

# SECURITY WARNING: keep the secret key used in production secret!
SECRET_KEY = env("SECRET_KEY", default="django-insecure-local-only-change-me")

# SECURITY WARNING: don't run with debug turned on in production!
DEBUG = env("DEBUG")

ALLOWED_HOSTS = env("ALLOWED_HOSTS")

# Application definition
INSTALLED_APPS = [
    "django.contrib.sessions",
    "django.contrib.staticfiles",
    # Local apps
    "apps.web.core",
    "apps.web.backend",
    "apps.web.restaurant",
    "apps.web.checkout",
    "apps.web.orders",
    "apps.web.dashboard",
]

MIDDLEWARE = [
    "django.middleware.security.SecurityMiddleware",
    "django.contrib.sessions.middleware.SessionMiddleware",
    "django.middleware.common.CommonMiddleware",
    "django.middleware.csrf.CsrfViewMiddleware",
    "django.middleware.clickjacking.XFrameOptionsMiddleware",
]

ROOT_URLCONF = "apps.web.config.urls"

TEMPLATES = [
    {
        "BACKEND": "django.template.backends.django.DjangoTemplates",
        "DIRS": [BASE_DIR / "templates"],
        "APP_DIRS": True,
        "OPTIONS": {
            "context_processors": [
                "django.template.context_processors.debug",
                "django.template.context_processors.request",
            ],
        },
    },
]

WSGI_APPLICATION = "apps.web.config.wsgi.application"
ASGI_APPLICATION = "apps.web.config.asgi.application"

# No relational database: orders, invoices, and identities live in the
# backend service, and sessions are signed cookies.
DATABASES: dict = {}

SESSION_ENGINE = "django.contrib.sessions.backends.signed_cookies"
SESSION_COOKIE_HTTPONLY = True

# Backend service
BACKEND_URL = env("BACKEND_URL")
BACKEND_ANON_KEY = env("BACKEND_ANON_KEY")
INVOICE_API_URL = env("INVOICE_API_URL")
BACKEND_TIMEOUT = env("BACKEND_TIMEOUT")

# Checkout and order status
MAGIC_LINK_COOLDOWN_SECONDS = env("MAGIC_LINK_COOLDOWN_SECONDS")
ORDER_STATUS_POLL_SECONDS = env("ORDER_STATUS_POLL_SECONDS")

# Internationalization
LANGUAGE_CODE = "en-us"
TIME_ZONE = "UTC"
USE_I18N = True
USE_TZ = True

# Static files (CSS, JavaScript, Images)
STATIC_URL = "static/"
STATIC_ROOT = BASE_DIR.parent.parent / "staticfiles"  # /app/staticfiles in production

# Logging
LOGGING = {
    "version": 1,
    "disable_existing_loggers": False,
    "formatters": {
        "simple": {"format": "{levelname} {asctime} {name}: {message}", "style": "{"},
    },
    "handlers": {
        "console": {"class": "logging.StreamHandler", "formatter": "simple"},
    },
    "loggers": {
        "apps": {"handlers": ["console"], "level": env("LOG_LEVEL"), "propagate": False},
        "django": {"handlers": ["console"], "level": "WARNING"},
    },
}
