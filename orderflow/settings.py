"""
Django settings for orderflow project.

Values come from environment variables so the same module serves local runs,
tests and deployments.
"""
import os
from pathlib import Path

BASE_DIR = Path(__file__).resolve().parent.parent


def _env_bool(name: str, default: bool = False) -> bool:
    value = os.environ.get(name)
    if value is None:
        return default
    return value.strip().lower() in ("1", "true", "yes", "on")


SECRET_KEY = os.environ.get("DJANGO_SECRET_KEY", "django-insecure-orderflow-local-only")

DEBUG = _env_bool("DJANGO_DEBUG", True)

ALLOWED_HOSTS = [
    host.strip()
    for host in os.environ.get("DJANGO_ALLOWED_HOSTS", "localhost,127.0.0.1,testserver").split(",")
    if host.strip()
]

INSTALLED_APPS = [
    "django.contrib.admin",
    "django.contrib.auth",
    "django.contrib.contenttypes",
    "django.contrib.sessions",
    "django.contrib.messages",
    "django.contrib.staticfiles",
    "ordering.apps.OrderingConfig",
]

MIDDLEWARE = [
    "django.middleware.security.SecurityMiddleware",
    "django.contrib.sessions.middleware.SessionMiddleware",
    "django.middleware.common.CommonMiddleware",
    "django.middleware.csrf.CsrfViewMiddleware",
    "django.contrib.auth.middleware.AuthenticationMiddleware",
    "django.contrib.messages.middleware.MessageMiddleware",
    "django.middleware.clickjacking.XFrameOptionsMiddleware",
]

ROOT_URLCONF = "orderflow.urls"

TEMPLATES = [
    {
        "BACKEND": "django.template.backends.django.DjangoTemplates",
        "DIRS": [],
        "APP_DIRS": True,
        "OPTIONS": {
            "context_processors": [
                "django.template.context_processors.request",
                "django.contrib.auth.context_processors.auth",
                "django.contrib.messages.context_processors.messages",
            ],
        },
    },
]

ASGI_APPLICATION = "orderflow.asgi.application"

if os.environ.get("POSTGRES_DB"):
    DATABASES = {
        "default": {
            "ENGINE": "django.db.backends.postgresql",
            "NAME": os.environ["POSTGRES_DB"],
            "USER": os.environ.get("POSTGRES_USER", "postgres"),
            "PASSWORD": os.environ.get("POSTGRES_PASSWORD", ""),
            "HOST": os.environ.get("POSTGRES_HOST", "localhost"),
            "PORT": os.environ.get("POSTGRES_PORT", "5432"),
        }
    }
else:
    DATABASES = {
        "default": {
            "ENGINE": "django.db.backends.sqlite3",
            "NAME": BASE_DIR / "db.sqlite3",
        }
    }

DEFAULT_AUTO_FIELD = "django.db.models.BigAutoField"

LANGUAGE_CODE = "en-us"
TIME_ZONE = os.environ.get("TIME_ZONE", "Europe/Madrid")
USE_I18N = True
USE_TZ = True

STATIC_URL = "static/"

# Mail transport. Without full SMTP credentials confirmations go to the console.
EMAIL_HOST = os.environ.get("SMTP_HOST", "")
EMAIL_PORT = int(os.environ.get("SMTP_PORT") or 587)
EMAIL_HOST_USER = os.environ.get("SMTP_USER", "")
EMAIL_HOST_PASSWORD = os.environ.get("SMTP_PASS", "")
EMAIL_USE_SSL = _env_bool("SMTP_SECURE", False)
EMAIL_USE_TLS = not EMAIL_USE_SSL and _env_bool("SMTP_STARTTLS", True)
EMAIL_TIMEOUT = int(os.environ.get("SMTP_TIMEOUT") or 10)

if os.environ.get("EMAIL_BACKEND"):
    EMAIL_BACKEND = os.environ["EMAIL_BACKEND"]
elif EMAIL_HOST and EMAIL_HOST_USER and EMAIL_HOST_PASSWORD:
    EMAIL_BACKEND = "django.core.mail.backends.smtp.EmailBackend"
else:
    EMAIL_BACKEND = "django.core.mail.backends.console.EmailBackend"

DEFAULT_FROM_EMAIL = os.environ.get("ORDER_FROM_EMAIL") or EMAIL_HOST_USER or "orders@bellavista.local"

ORDERFLOW = {
    "FROM_NAME": os.environ.get("ORDER_FROM_NAME", "Bella Vista Restaurant"),
    "MESSAGE_ID_DOMAIN": os.environ.get("ORDER_MESSAGE_ID_DOMAIN", "bellavista.local"),
    "MAX_NUMBER_ATTEMPTS": int(os.environ.get("ORDER_MAX_NUMBER_ATTEMPTS") or 3),
    "NUMBER_RETRY_DELAY": float(os.environ.get("ORDER_NUMBER_RETRY_DELAY") or 0.05),
    "ORDER_NUMBER_PREFIX": os.environ.get("ORDER_NUMBER_PREFIX", "ORD"),
    "DELIVER_IN_BACKGROUND": _env_bool("ORDER_DELIVER_IN_BACKGROUND", False),
    "DELIVERY_WORKERS": int(os.environ.get("ORDER_DELIVERY_WORKERS") or 2),
    "RESEND_MAX_ATTEMPTS": int(os.environ.get("ORDER_RESEND_MAX_ATTEMPTS") or 5),
    "PICKUP_MINUTES": 30,
    "DELIVERY_MINUTES": 45,
    "RESTAURANT_NAME": "Bella Vista Restaurant",
    "RESTAURANT_ADDRESS": "Calle Gran Vía, 123, Madrid",
    "RESTAURANT_PHONE": "+34 91 123 45 67",
    "CURRENCY_SYMBOL": "€",
}

LOGGING = {
    "version": 1,
    "disable_existing_loggers": False,
    "formatters": {
        "json": {
            "()": "ordering.utils.logging.JsonFormatter",
        },
    },
    "handlers": {
        "console": {
            "class": "logging.StreamHandler",
            "formatter": "json",
        },
    },
    "loggers": {
        "ordering": {
            "handlers": ["console"],
            "level": os.environ.get("LOG_LEVEL", "INFO"),
            "propagate": True,
        },
    },
}
