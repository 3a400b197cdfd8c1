"""
Django app configuration for the Stripe gateway client.

When STRIPE_ENABLED is set, one StripeGatewayClient is built from the
STRIPE_* settings as the app becomes ready and shared through
stripe_gateway.client.get_gateway_client().
"""

from __future__ import annotations

import logging

from django.apps import AppConfig
from django.conf import settings
from django.core.exceptions import ImproperlyConfigured

logger = logging.getLogger(__name__)


class StripeGatewayConfig(AppConfig):
    """Configuration for the stripe_gateway application."""

    name = "stripe_gateway"
    verbose_name = "Stripe Gateway"

    client = None

    def ready(self):
        """
        Build the shared gateway client when the integration is enabled.

        Raises:
            ImproperlyConfigured: Enabled without STRIPE_SECRET_KEY, or
                with invalid transport settings
        """
        type(self).client = None
        if not getattr(settings, "STRIPE_ENABLED", False):
            logger.debug("Stripe gateway disabled; no client built")
            return

        if not getattr(settings, "STRIPE_SECRET_KEY", ""):
            raise ImproperlyConfigured(
                "STRIPE_SECRET_KEY must be set when STRIPE_ENABLED is True"
            )

        from stripe_gateway.client import StripeGatewayClient

        try:
            type(self).client = StripeGatewayClient.from_settings()
        except ValueError as e:
            raise ImproperlyConfigured(f"Invalid Stripe gateway settings: {e}") from e
        logger.info("Stripe gateway client ready: %r", type(self).client)

    @classmethod
    def get_client(cls):
        """
        Return the shared client.

        Raises:
            ImproperlyConfigured: No client was built (STRIPE_ENABLED off)
        """
        if cls.client is None:
            raise ImproperlyConfigured(
                "Stripe gateway client is not configured; set STRIPE_ENABLED "
                "and STRIPE_SECRET_KEY"
            )
        return cls.client
