"""
Shared pytest fixtures for all tests.

This module provides common fixtures used across multiple test modules.
Individual test modules can override these fixtures if needed.

Factories
---------
Import factories directly from their modules:

    from tests.organizations.factories import OrganizationFactory

External services
-----------------
Stripe and Stytch are never called. Use the `mock_stripe` / `mock_stytch`
fixtures, which patch the module-level client getters:

    def test_something(mock_stripe):
        mock_stripe.Price.create.return_value = MagicMock(id="price_123")
"""

from collections.abc import Iterator
from unittest.mock import MagicMock, patch

import pytest
from django.test import Client

from apps.core.auth import ServiceCredential
from config.settings.base import settings

TEST_PROVISIONING_KEY = "test-provisioning-key"
TEST_WEBHOOK_SECRET = "whsec_test"


@pytest.fixture(autouse=True)
def onboarding_settings(monkeypatch: pytest.MonkeyPatch):
    """
    Deterministic onboarding settings for every test.

    Tests that need a different value override it with monkeypatch.
    """
    monkeypatch.setattr(settings, "APP_BASE_URL", "https://app.example.com")
    monkeypatch.setattr(settings, "PROVISIONING_API_KEY", TEST_PROVISIONING_KEY)
    monkeypatch.setattr(settings, "STRIPE_SECRET_KEY", "sk_test_123")
    monkeypatch.setattr(settings, "STRIPE_WEBHOOK_SECRET", TEST_WEBHOOK_SECRET)
    monkeypatch.setattr(settings, "STRIPE_PRODUCT_ID", "prod_test_123")
    monkeypatch.setattr(settings, "STRIPE_CURRENCY", "usd")
    return settings


@pytest.fixture
def api_client() -> Client:
    """
    Django test client for full HTTP request/response cycle tests.

    Example:
        def test_api_returns_200(api_client):
            response = api_client.get("/api/v1/health")
            assert response.status_code == 200
    """
    return Client()


@pytest.fixture
def provisioning_credential() -> ServiceCredential:
    return ServiceCredential.for_provisioning()


@pytest.fixture
def webhook_credential() -> ServiceCredential:
    return ServiceCredential.for_stripe_webhook()


@pytest.fixture
def reconciliation_credential() -> ServiceCredential:
    return ServiceCredential.for_reconciliation()


@pytest.fixture
def mock_stripe() -> Iterator[MagicMock]:
    """
    Stripe module seen by billing services.

    Defaults: Price.create -> price_test_123, Session.create -> cs_test_123.
    """
    stripe_module = MagicMock()
    stripe_module.Price.create.return_value = MagicMock(id="price_test_123")
    stripe_module.checkout.Session.create.return_value = MagicMock(
        id="cs_test_123",
        url="https://checkout.stripe.com/c/pay/cs_test_123",
    )
    with patch("apps.billing.services.get_stripe", return_value=stripe_module):
        yield stripe_module


@pytest.fixture
def mock_stytch() -> Iterator[MagicMock]:
    """
    Stytch B2B client seen by account services.

    Defaults: organizations.create -> organization-test-123, invite succeeds.
    """
    client = MagicMock()
    client.organizations.create.return_value = MagicMock(
        organization=MagicMock(organization_id="organization-test-123")
    )
    with patch("apps.accounts.services.get_stytch_client", return_value=client):
        yield client
