"""
Django settings for the MIF Market project.

Every deployment-specific value is read from the environment.
"""

import os
from pathlib import Path

BASE_DIR = Path(__file__).resolve().parent.parent


def _env_bool(name: str, default: bool = False) -> bool:
    raw = os.environ.get(name)
    if raw is None:
        return default
    return raw.strip().lower() in {"1", "true", "yes", "on"}


# --- SECURITY ---

SECRET_KEY = os.environ.get(
    "DJANGO_SECRET_KEY",
    "django-insecure-mifmarket-local-development-key",
)

DEBUG = _env_bool("DJANGO_DEBUG", True)

ALLOWED_HOSTS = [
    host.strip()
    for host in os.environ.get("DJANGO_ALLOWED_HOSTS", "localhost,127.0.0.1,testserver").split(",")
    if host.strip()
]

CSRF_TRUSTED_ORIGINS = [
    origin.strip()
    for origin in os.environ.get("DJANGO_CSRF_TRUSTED_ORIGINS", "").split(",")
    if origin.strip()
]

SITE_BASE_URL = os.environ.get("SITE_BASE_URL", "http://localhost:8000")


# --- APPLICATIONS ---

INSTALLED_APPS = [
    "django.contrib.admin",
    "django.contrib.auth",
    "django.contrib.contenttypes",
    "django.contrib.sessions",
    "django.contrib.messages",
    "django.contrib.staticfiles",
    "accounts",
    "auditing",
    "producers",
    "campaigns",
    "sitesettings",
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

ROOT_URLCONF = "mifmarket.urls"

TEMPLATES = [
    {
        "BACKEND": "django.template.backends.django.DjangoTemplates",
        "DIRS": [BASE_DIR / "templates"],
        "APP_DIRS": True,
        "OPTIONS": {
            "context_processors": [
                "django.template.context_processors.request",
                "django.contrib.auth.context_processors.auth",
                "django.contrib.messages.context_processors.messages",
                "sitesettings.context_processors.site_logo",
            ],
        },
    },
]

WSGI_APPLICATION = "mifmarket.wsgi.application"


# --- DATABASE ---

if os.environ.get("DB_ENGINE", "sqlite") == "postgresql":
    DATABASES = {
        "default": {
            "ENGINE": "django.db.backends.postgresql",
            "NAME": os.environ.get("DB_NAME", "mifmarket"),
            "USER": os.environ.get("DB_USER", "mifmarket"),
            "PASSWORD": os.environ.get("DB_PASSWORD", ""),
            "HOST": os.environ.get("DB_HOST", "localhost"),
            "PORT": os.environ.get("DB_PORT", "5432"),
        }
    }
else:
    DATABASES = {
        "default": {
            "ENGINE": "django.db.backends.sqlite3",
            "NAME": os.environ.get("DB_NAME", str(BASE_DIR / "db.sqlite3")),
        }
    }

DEFAULT_AUTO_FIELD = "django.db.models.BigAutoField"


# --- AUTH ---

AUTH_USER_MODEL = "accounts.User"

AUTH_PASSWORD_VALIDATORS = [
    {
        "NAME": "django.contrib.auth.password_validation.MinimumLengthValidator",
        "OPTIONS": {"min_length": 6},
    },
]

LOGIN_URL = "accounts:login"
LOGIN_REDIRECT_URL = "producers:dashboard"
LOGOUT_REDIRECT_URL = "producers:landing"

# The account that can never be deleted nor demoted from the back-office.
PROTECTED_ADMIN_EMAIL = os.environ.get("PROTECTED_ADMIN_EMAIL", "jdespoix@gmail.com")

# Shared secret for the emergency password reset endpoint; empty disables it.
EMERGENCY_RESET_SECRET = os.environ.get("EMERGENCY_RESET_SECRET", "")

ORPHAN_ACCOUNT_GRACE_MINUTES = int(os.environ.get("ORPHAN_ACCOUNT_GRACE_MINUTES", "60"))


# --- I18N / TIMEZONE ---

LANGUAGE_CODE = "fr"
TIME_ZONE = "Europe/Paris"
USE_I18N = True
USE_TZ = True


# --- STATIC / MEDIA ---

STATIC_URL = "/static/"
STATIC_ROOT = BASE_DIR / "staticfiles"

MEDIA_URL = "/media/"
MEDIA_ROOT = Path(os.environ.get("MEDIA_ROOT", str(BASE_DIR / "media")))

LOGO_MAX_UPLOAD_BYTES = int(os.environ.get("LOGO_MAX_UPLOAD_BYTES", str(5 * 1024 * 1024)))
CSV_MAX_UPLOAD_BYTES = int(os.environ.get("CSV_MAX_UPLOAD_BYTES", str(5 * 1024 * 1024)))
DEFAULT_LOGO_URL = os.environ.get("DEFAULT_LOGO_URL", "/static/LogoMifMarket2025.jpg")


# --- CACHE ---

CACHES = {
    "default": {
        "BACKEND": "django.core.cache.backends.locmem.LocMemCache",
        "LOCATION": "mifmarket",
    }
}

SITE_SETTINGS_CACHE_TIMEOUT = int(os.environ.get("SITE_SETTINGS_CACHE_TIMEOUT", "3600"))


# --- CELERY ---

CELERY_BROKER_URL = os.environ.get("CELERY_BROKER_URL", "redis://localhost:6379/0")
CELERY_TASK_ALWAYS_EAGER = _env_bool("CELERY_TASK_ALWAYS_EAGER", False)
CELERY_TIMEZONE = TIME_ZONE


# --- LOGGING ---

LOGGING = {
    "version": 1,
    "disable_existing_loggers": False,
    "formatters": {
        "simple": {
            "format": "%(asctime)s %(levelname)s %(name)s: %(message)s",
        },
    },
    "handlers": {
        "console": {
            "class": "logging.StreamHandler",
            "formatter": "simple",
        },
    },
    "root": {
        "handlers": ["console"],
        "level": os.environ.get("DJANGO_LOG_LEVEL", "INFO"),
    },
}
