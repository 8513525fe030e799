"""
Core security - authentication classes for API.
"""

import hmac

from django.http import HttpRequest
from ninja.security import APIKeyHeader

from apps.core.auth import ServiceCredential
from apps.core.logging import get_logger
from config.settings.base import settings

logger = get_logger(__name__)


class ProvisioningKeyAuth(APIKeyHeader):
    """
    API key authentication for the internal provisioning endpoint.

    The sales console sends the shared key in X-Provisioning-Key. A valid key
    yields a ServiceCredential scoped to organization creation, which ninja
    exposes as request.auth.
    """

    param_name = "X-Provisioning-Key"

    def authenticate(self, request: HttpRequest, key: str | None) -> ServiceCredential | None:
        """
        Compare the key in constant time.

        Returns None (triggers 401) when no key is configured or it does not match.
        """
        expected = settings.PROVISIONING_API_KEY
        if not expected:
            logger.error("provisioning_api_key_not_configured")
            return None
        if not key or not hmac.compare_digest(key.encode(), expected.encode()):
            logger.warning("provisioning_api_key_rejected")
            return None
        return ServiceCredential.for_provisioning()
