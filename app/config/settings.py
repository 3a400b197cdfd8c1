"""
Django settings for the Stripe gateway client.

This is the single settings file for all environments. Configuration is driven
by environment variables using django-environ, following the 12-factor app
methodology.

Environment files:
    - .env.development: Local settings (test keys, DEBUG logging)

The gateway keeps no local state, so no database is configured.

For more information on this file, see:
https://docs.djangoproject.com/en/5.2/topics/settings/
"""

import os
from pathlib import Path

import environ

# =============================================================================
# Path Configuration
# =============================================================================
# Build paths inside the project: BASE_DIR / 'subdir'
BASE_DIR = Path(__file__).resolve().parent.parent

# =============================================================================
# Environment Configuration
# =============================================================================
# Initialize django-environ
env = environ.Env(
    # Set default values and casting for common settings
    DEBUG=(bool, False),  # Default to False for safety
    LOG_LEVEL=(str, "INFO"),
    STRIPE_ENABLED=(bool, False),
)

# Note: In Docker, env vars are passed directly; .env files are for local dev
env_file = os.environ.get("ENV_FILE", BASE_DIR.parent / ".env.development")
if Path(env_file).exists():
    environ.Env.read_env(env_file)

# =============================================================================
# Core Settings
# =============================================================================
# SECURITY WARNING: keep the secret key used in production secret!
SECRET_KEY = env("SECRET_KEY", default="stripe-gateway-insecure-key")

DEBUG = env("DEBUG")

# =============================================================================
# Application Definition
# =============================================================================
INSTALLED_APPS = [
    "stripe_gateway",
]

# No local persistence: every read is a remote fetch
DATABASES = {}

USE_TZ = True
TIME_ZONE = "UTC"

# =============================================================================
# Stripe Configuration
# =============================================================================
# Build the shared gateway client at startup (stripe_gateway.apps)
STRIPE_ENABLED = env("STRIPE_ENABLED")

# Get your API keys from: https://dashboard.stripe.com/apikeys
# Use test keys (sk_test_...) for development, live keys (sk_live_...) for production
STRIPE_SECRET_KEY = env("STRIPE_SECRET_KEY", default="")

# API timeout in seconds (default: 10)
# Keep low for responsive error handling; increase if experiencing timeouts
STRIPE_API_TIMEOUT_SECONDS = env.int("STRIPE_API_TIMEOUT_SECONDS", default=10)

# Network retries done by the Stripe library itself (default: 0, no retries)
STRIPE_MAX_RETRIES = env.int("STRIPE_MAX_RETRIES", default=0)

# Stripe API version sent with every request. The gateway calls are written
# against this version; newer versions reject `coupon` on customer update
STRIPE_API_VERSION = env("STRIPE_API_VERSION", default="2024-12-18.acacia")

# Items requested per listing page; Stripe caps this at 100
STRIPE_PAGE_SIZE = env.int("STRIPE_PAGE_SIZE", default=100)

# =============================================================================
# Logging Configuration
# =============================================================================
LOG_LEVEL = env("LOG_LEVEL")

LOGGING = {
    "version": 1,
    "disable_existing_loggers": False,
    "formatters": {
        "verbose": {
            "format": "{levelname} {asctime} {name} {process:d} {thread:d} {message}",
            "style": "{",
        },
        "simple": {
            "format": "{levelname} {message}",
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
        "level": LOG_LEVEL,
    },
    "loggers": {
        "django": {
            "handlers": ["console"],
            "level": LOG_LEVEL,
            "propagate": False,
        },
        # Propagates to the root console handler
        "stripe_gateway": {
            "level": LOG_LEVEL,
        },
        # The Stripe library logs every request at INFO
        "stripe": {
            "handlers": ["console"],
            "level": "WARNING",
            "propagate": False,
        },
    },
}
