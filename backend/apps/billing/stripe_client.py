"""
Stripe client configuration.

Provides a configured Stripe module for price, checkout and webhook calls.
"""

from types import ModuleType

import stripe

from config.settings.base import settings

STRIPE_API_VERSION = "2025-06-30.basil"

# Network configuration
# Every call is bounded by STRIPE_TIMEOUT_SECONDS; a timeout surfaces as
# stripe.APIConnectionError. Retries are safe due to automatic idempotency keys.
STRIPE_MAX_NETWORK_RETRIES = 2

_http_client_timeout: float | None = None


def configure_stripe() -> None:
    """Configure Stripe API with settings."""
    global _http_client_timeout

    stripe.api_key = settings.STRIPE_SECRET_KEY
    stripe.api_version = STRIPE_API_VERSION
    stripe.max_network_retries = STRIPE_MAX_NETWORK_RETRIES

    if _http_client_timeout != settings.STRIPE_TIMEOUT_SECONDS:
        stripe.default_http_client = stripe.new_default_http_client(
            timeout=settings.STRIPE_TIMEOUT_SECONDS
        )
        _http_client_timeout = settings.STRIPE_TIMEOUT_SECONDS


def get_stripe() -> ModuleType:
    """
    Get configured Stripe module.

    Ensures Stripe is configured before use.
    """
    configure_stripe()
    return stripe
