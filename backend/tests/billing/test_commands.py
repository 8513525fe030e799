"""
Tests for the setup_stripe management command.
"""

from io import StringIO
from unittest.mock import MagicMock, patch

import pytest
from django.core.management import CommandError, call_command

from config.settings.base import settings


@patch("apps.billing.management.commands.setup_stripe.get_stripe")
class TestSetupStripeCommand:
    def test_reuses_existing_product(self, mock_get_stripe: MagicMock) -> None:
        stripe_module = mock_get_stripe.return_value
        stripe_module.Product.search.return_value = MagicMock(data=[MagicMock(id="prod_existing")])
        out = StringIO()

        call_command("setup_stripe", stdout=out)

        assert "STRIPE_PRODUCT_ID=prod_existing" in out.getvalue()
        stripe_module.Product.create.assert_not_called()

    def test_creates_product(self, mock_get_stripe: MagicMock) -> None:
        stripe_module = mock_get_stripe.return_value
        stripe_module.Product.search.return_value = MagicMock(data=[])
        stripe_module.Product.create.return_value = MagicMock(id="prod_new")
        out = StringIO()

        call_command("setup_stripe", "--product-name=Club Subscription", stdout=out)

        assert "STRIPE_PRODUCT_ID=prod_new" in out.getvalue()
        assert stripe_module.Product.create.call_args.kwargs["name"] == "Club Subscription"

    def test_force_skips_lookup(self, mock_get_stripe: MagicMock) -> None:
        stripe_module = mock_get_stripe.return_value
        stripe_module.Product.create.return_value = MagicMock(id="prod_forced")

        call_command("setup_stripe", "--force", stdout=StringIO())

        stripe_module.Product.search.assert_not_called()
        stripe_module.Product.create.assert_called_once()

    def test_requires_secret_key(self, mock_get_stripe: MagicMock, monkeypatch) -> None:
        monkeypatch.setattr(settings, "STRIPE_SECRET_KEY", "")

        with pytest.raises(CommandError):
            call_command("setup_stripe", stdout=StringIO())
