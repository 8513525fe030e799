"""
Tests for billing services.

All Stripe API calls are mocked to isolate tests from external dependencies.
"""

from decimal import Decimal
from unittest.mock import MagicMock, patch
from urllib.parse import parse_qs, urlparse

import pytest
import stripe

from apps.billing.services import (
    build_checkout_metadata,
    create_checkout_session,
    create_organization_price,
    retrieve_checkout_session,
    to_minor_units,
)
from apps.onboarding.exceptions import ExternalServiceError, ValidationError
from tests.organizations.factories import OrganizationFactory


class TestToMinorUnits:
    """Tests for decimal fee to cents conversion."""

    @pytest.mark.parametrize(
        ("amount", "expected"),
        [
            (Decimal("49.99"), 4999),
            (Decimal("100"), 10000),
            (Decimal("0.01"), 1),
            (Decimal("19.995"), 2000),
            (Decimal("19.994"), 1999),
            ("25.50", 2550),
        ],
    )
    def test_converts_to_cents(self, amount, expected: int) -> None:
        assert to_minor_units(amount) == expected

    @pytest.mark.parametrize("amount", [Decimal("0"), Decimal("-5"), Decimal("0.004")])
    def test_rejects_non_positive(self, amount: Decimal) -> None:
        with pytest.raises(ValidationError):
            to_minor_units(amount)

    def test_rejects_too_large(self) -> None:
        with pytest.raises(ValidationError):
            to_minor_units(Decimal("1000000.00"))

    def test_rejects_garbage(self) -> None:
        with pytest.raises(ValidationError):
            to_minor_units("not-a-number")


class TestCreateOrganizationPrice:
    """Tests for create_organization_price."""

    def test_creates_monthly_price_on_configured_product(self, mock_stripe: MagicMock) -> None:
        price_id = create_organization_price(Decimal("49.99"), "Denver Hiking")

        assert price_id == "price_test_123"
        mock_stripe.Price.create.assert_called_once_with(
            product="prod_test_123",
            unit_amount=4999,
            currency="usd",
            recurring={"interval": "month"},
            metadata={"org_name": "Denver Hiking"},
        )

    def test_invalid_fee_makes_no_stripe_call(self, mock_stripe: MagicMock) -> None:
        with pytest.raises(ValidationError):
            create_organization_price(Decimal("0"), "Denver Hiking")

        mock_stripe.Price.create.assert_not_called()

    def test_stripe_error_becomes_external_service_error(self, mock_stripe: MagicMock) -> None:
        mock_stripe.Price.create.side_effect = stripe.APIConnectionError("timed out")

        with pytest.raises(ExternalServiceError) as exc_info:
            create_organization_price(Decimal("49.99"), "Denver Hiking")

        assert exc_info.value.status_code == 502
        assert exc_info.value.service == "stripe"

    def test_missing_product_id(self, mock_stripe: MagicMock, monkeypatch) -> None:
        from config.settings.base import settings

        monkeypatch.setattr(settings, "STRIPE_PRODUCT_ID", "")

        with pytest.raises(ExternalServiceError):
            create_organization_price(Decimal("49.99"), "Denver Hiking")

        mock_stripe.Price.create.assert_not_called()


@pytest.mark.django_db
class TestBuildCheckoutMetadata:
    """Tests for build_checkout_metadata."""

    def test_includes_correlation_fields(self) -> None:
        org = OrganizationFactory(contact_name="Jane Doe", contact_email="jane@example.com", contact_phone="")

        metadata = build_checkout_metadata(org)

        assert metadata == {
            "org_id": str(org.id),
            "contact_name": "Jane Doe",
            "contact_email": "jane@example.com",
            "contact_phone": "",
        }

    def test_rejects_missing_email(self) -> None:
        org = OrganizationFactory.build(contact_email="")
        org.pk = 1

        with pytest.raises(ValidationError):
            build_checkout_metadata(org)

    def test_rejects_unsaved_organization(self) -> None:
        org = OrganizationFactory.build()

        with pytest.raises(ValidationError):
            build_checkout_metadata(org)


@pytest.mark.django_db
class TestCreateCheckoutSession:
    """Tests for create_checkout_session."""

    def test_creates_subscription_session(self, mock_stripe: MagicMock) -> None:
        org = OrganizationFactory(contact_email="jane@example.com")

        session = create_checkout_session("price_123", org, "https://app.example.com/")

        assert session.id == "cs_test_123"
        assert session.url == "https://checkout.stripe.com/c/pay/cs_test_123"

        kwargs = mock_stripe.checkout.Session.create.call_args.kwargs
        assert kwargs["mode"] == "subscription"
        assert kwargs["line_items"] == [{"price": "price_123", "quantity": 1}]
        assert kwargs["customer_email"] == "jane@example.com"
        assert kwargs["client_reference_id"] == str(org.id)
        assert kwargs["metadata"]["org_id"] == str(org.id)
        assert kwargs["metadata"]["contact_email"] == "jane@example.com"
        assert kwargs["subscription_data"] == {"metadata": {"org_id": str(org.id)}}

    def test_redirect_urls(self, mock_stripe: MagicMock) -> None:
        org = OrganizationFactory()

        create_checkout_session("price_123", org, "app.example.com")

        kwargs = mock_stripe.checkout.Session.create.call_args.kwargs
        success = urlparse(kwargs["success_url"])
        cancel = urlparse(kwargs["cancel_url"])
        assert (success.scheme, success.netloc, success.path) == ("https", "app.example.com", "/login")
        assert parse_qs(success.query) == {"setup_success": ["true"]}
        assert cancel.path == "/super-admin"
        assert parse_qs(cancel.query) == {"canceled": ["true"]}

    def test_invalid_base_url(self, mock_stripe: MagicMock) -> None:
        org = OrganizationFactory()

        with pytest.raises(ValidationError):
            create_checkout_session("price_123", org, "ftp://files.example.com")

        mock_stripe.checkout.Session.create.assert_not_called()

    def test_stripe_error(self, mock_stripe: MagicMock) -> None:
        org = OrganizationFactory()
        mock_stripe.checkout.Session.create.side_effect = stripe.InvalidRequestError(
            "No such price", "price"
        )

        with pytest.raises(ExternalServiceError):
            create_checkout_session("price_missing", org, "https://app.example.com")


class TestRetrieveCheckoutSession:
    """Tests for retrieve_checkout_session."""

    def test_returns_plain_dict(self, mock_stripe: MagicMock) -> None:
        mock_stripe.checkout.Session.retrieve.return_value = stripe.checkout.Session.construct_from(
            {"id": "cs_1", "status": "open", "metadata": {"org_id": "42"}},
            "sk_test_123",
        )

        session = retrieve_checkout_session("cs_1")

        assert isinstance(session, dict)
        assert session.get("status") == "open"
        assert session["metadata"].get("org_id") == "42"
        mock_stripe.checkout.Session.retrieve.assert_called_once_with("cs_1")

    def test_stripe_error(self, mock_stripe: MagicMock) -> None:
        mock_stripe.checkout.Session.retrieve.side_effect = stripe.APIError("boom")

        with pytest.raises(ExternalServiceError):
            retrieve_checkout_session("cs_1")


class TestStripeClient:
    """Tests for Stripe module configuration."""

    @patch("apps.billing.stripe_client.stripe")
    def test_configures_timeout_and_retries(self, mock_stripe_module: MagicMock, monkeypatch) -> None:
        from apps.billing import stripe_client
        from config.settings.base import settings

        monkeypatch.setattr(settings, "STRIPE_TIMEOUT_SECONDS", 7.5)
        monkeypatch.setattr(stripe_client, "_http_client_timeout", None)

        result = stripe_client.get_stripe()

        assert result is mock_stripe_module
        assert mock_stripe_module.api_key == "sk_test_123"
        assert mock_stripe_module.max_network_retries == stripe_client.STRIPE_MAX_NETWORK_RETRIES
        mock_stripe_module.new_default_http_client.assert_called_once_with(timeout=7.5)
