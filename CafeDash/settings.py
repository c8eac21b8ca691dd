"""
Django settings for CafeDash project.

Environment values are read from the process environment (a local .env file
is loaded first when present).
"""

import os
from pathlib import Path

from dotenv import load_dotenv

load_dotenv()

BASE_DIR = Path(__file__).resolve().parent.parent


def env_bool(name, default=False):
    value = os.getenv(name)
    if value is None:
        return default
    return value.strip().lower() in ("1", "true", "yes", "on")


SECRET_KEY = os.getenv("DJANGO_SECRET_KEY", "django-insecure-cafedash-development-key")

DEBUG = env_bool("DJANGO_DEBUG", True)

ALLOWED_HOSTS = [
    host.strip()
    for host in os.getenv("DJANGO_ALLOWED_HOSTS", "localhost,127.0.0.1,testserver").split(",")
    if host.strip()
]

INSTALLED_APPS = [
    "django.contrib.admin",
    "django.contrib.auth",
    "django.contrib.contenttypes",
    "django.contrib.sessions",
    "django.contrib.messages",
    "django.contrib.staticfiles",
    "organizations",
    "accounts",
    "menu",
    "orders",
    "marketing",
    "bot",
]

MIDDLEWARE = [
    "django.middleware.security.SecurityMiddleware",
    "django.contrib.sessions.middleware.SessionMiddleware",
    "django.middleware.common.CommonMiddleware",
    "django.middleware.csrf.CsrfViewMiddleware",
    "django.contrib.auth.middleware.AuthenticationMiddleware",
    "organizations.rbac.RBACMiddleware",
    "django.contrib.messages.middleware.MessageMiddleware",
    "django.middleware.clickjacking.XFrameOptionsMiddleware",
]

ROOT_URLCONF = "CafeDash.urls"

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

WSGI_APPLICATION = "CafeDash.wsgi.application"

DATABASES = {
    "default": {
        "ENGINE": os.getenv("DB_ENGINE", "django.db.backends.sqlite3"),
        "NAME": os.getenv("DB_NAME", str(BASE_DIR / "db.sqlite3")),
        "USER": os.getenv("DB_USER", ""),
        "PASSWORD": os.getenv("DB_PASSWORD", ""),
        "HOST": os.getenv("DB_HOST", ""),
        "PORT": os.getenv("DB_PORT", ""),
    }
}

DEFAULT_AUTO_FIELD = "django.db.models.BigAutoField"

AUTH_PASSWORD_VALIDATORS = [
    {"NAME": "django.contrib.auth.password_validation.UserAttributeSimilarityValidator"},
    {"NAME": "django.contrib.auth.password_validation.MinimumLengthValidator"},
]

LANGUAGE_CODE = "en-us"
TIME_ZONE = os.getenv("TIME_ZONE", "Africa/Addis_Ababa")
USE_I18N = True
USE_TZ = True

STATIC_URL = "static/"
STATIC_ROOT = BASE_DIR / "staticfiles"

LOGIN_URL = "/admin/login/"

SITE_URL = os.getenv("SITE_URL", "http://localhost:8000")

# Tracking link used by the {trackinglink} placeholder
TRACKING_URL_TEMPLATE = os.getenv(
    "TRACKING_URL_TEMPLATE", SITE_URL.rstrip("/") + "/orders/track/{token}"
)

# Telegram
TELEGRAM_BOT_TOKEN = os.getenv("TELEGRAM_BOT_TOKEN", "")
TELEGRAM_HTTP_TIMEOUT = int(os.getenv("TELEGRAM_HTTP_TIMEOUT", "10"))

# SMS gateway (SMS Ethiopia)
SMS_ETHIOPIA = {
    "enabled": env_bool("SMS_ETHIOPIA_ENABLED", False),
    "base_url": os.getenv("SMS_ETHIOPIA_BASE_URL", "https://smsethiopia.et"),
    "key": os.getenv("SMS_ETHIOPIA_API_KEY", ""),
    "timeout": int(os.getenv("SMS_ETHIOPIA_TIMEOUT", "10")),
}

# Promo targeting business constants
PROMO_HIGH_VALUE_THRESHOLD = 2000
PROMO_DORMANT_DAYS = 90
PROMO_SAMPLE_SIZE = 20

# Reusable SMS templates, synced into the sms_templates table when missing
SMS_TEMPLATES = {
    "order_created": {
        "label": "Order Created",
        "body": "Hi {name}, your order #{orderid} is received at {branch}. Items: {itemlist}. Track: {trackinglink}",
    },
    "receipt_approved": {
        "label": "Receipt Approved",
        "body": "Hi {name}, your receipt for order #{orderid} has been approved. We are preparing your order at {branch}.",
    },
    "receipt_disapproved": {
        "label": "Receipt Disapproved",
        "body": "Hi {name}, receipt for order #{orderid} was disapproved. Reason: {disapprovalreason}. Re-upload: {trackinglink}",
    },
    "order_ready": {
        "label": "Order Ready",
        "body": "Hi {name}, your order #{orderid} is ready for pickup at {branch}.",
    },
    "promo_default": {
        "label": "Promo Message",
        "body": "Hi {name}, we have a special offer for you at {branch}.",
    },
}

SMS_PLACEHOLDERS = {
    "name": "Customer name",
    "phone": "Customer phone",
    "orderid": "Order ID",
    "orderstatus": "Order status",
    "receiptstatus": "Receipt status",
    "branch": "Pickup branch name",
    "branchaddress": "Pickup branch address",
    "pickupdate": "Pickup date",
    "trackinglink": "Tracking URL",
    "total": "Order total amount",
    "itemid": "First item menu ID",
    "itemids": "Comma-separated menu IDs",
    "itemlist": "Order item summary",
    "itemcount": "Total quantity of items",
    "recent_item": "Most recent purchased item",
    "recent_branch": "Most recent pickup branch",
    "freq_item": "Most frequently purchased item",
    "freq_branch": "Most frequently used pickup branch",
    "disapprovalreason": "Receipt disapproval reason",
}

LOGGING = {
    "version": 1,
    "disable_existing_loggers": False,
    "formatters": {
        "verbose": {
            "format": "{asctime} {levelname} {name} {message}",
            "style": "{",
        },
    },
    "handlers": {
        "console": {
            "class": "logging.StreamHandler",
            "formatter": "verbose",
        },
    },
    "root": {
        "handlers": ["console"],
        "level": "WARNING",
    },
    "loggers": {
        "marketing": {
            "handlers": ["console"],
            "level": os.getenv("MARKETING_LOG_LEVEL", "INFO"),
            "propagate": False,
        },
        "bot": {
            "handlers": ["console"],
            "level": os.getenv("BOT_LOG_LEVEL", "INFO"),
            "propagate": False,
        },
    },
}
