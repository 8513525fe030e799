"""
Billing services - Stripe integration logic.

All Stripe API calls are isolated here for testability.
External calls must NOT be inside database transactions.
"""

from dataclasses import dataclass
from decimal import ROUND_HALF_UP, Decimal, InvalidOperation

import stripe

from apps.billing.stripe_client import get_stripe
from apps.core.logging import get_logger
from apps.core.url_validation import build_url
from apps.onboarding.exceptions import ExternalServiceError, ValidationError
from apps.organizations.models import Organization
from config.settings.base import settings

logger = get_logger(__name__)

# Largest unit_amount Stripe accepts for a single price (in minor units)
MAX_UNIT_AMOUNT = 99_999_999

SUCCESS_PATH = "/login"
CANCEL_PATH = "/super-admin"


@dataclass(frozen=True)
class CheckoutSession:
    """Hosted checkout session reference."""

    id: str
    url: str


def to_minor_units(amount: Decimal) -> int:
    """
    Convert a decimal currency amount to integer cents (half-up rounding).

    Raises:
        ValidationError: If the amount is not a positive value Stripe can bill
    """
    try:
        cents = int((Decimal(amount) * 100).quantize(Decimal("1"), rounding=ROUND_HALF_UP))
    except (InvalidOperation, TypeError, ValueError) as e:
        raise ValidationError(f"Invalid monthly fee: {amount!r}") from e

    if cents <= 0:
        raise ValidationError("Monthly fee must be greater than zero.")
    if cents > MAX_UNIT_AMOUNT:
        raise ValidationError("Monthly fee exceeds the maximum billable amount.")
    return cents


def create_organization_price(monthly_fee: Decimal, org_name: str) -> str:
    """
    Create a monthly recurring Stripe Price for one organization.

    Fees are negotiated per organization, so a fresh price is created every
    time on the single configured product; prices are never shared.

    Returns the Stripe price ID.

    Raises:
        ValidationError: If the fee is not billable
        ExternalServiceError: If Stripe rejects the request or is unreachable
    """
    unit_amount = to_minor_units(monthly_fee)

    if not settings.STRIPE_PRODUCT_ID:
        logger.error("stripe_product_not_configured")
        raise ExternalServiceError("STRIPE_PRODUCT_ID is not configured")

    stripe_module = get_stripe()

    try:
        price = stripe_module.Price.create(
            product=settings.STRIPE_PRODUCT_ID,
            unit_amount=unit_amount,
            currency=settings.STRIPE_CURRENCY,
            recurring={"interval": "month"},
            metadata={"org_name": org_name},
        )
    except stripe.StripeError as e:
        logger.error(
            "stripe_price_create_failed",
            org_name=org_name,
            unit_amount=unit_amount,
            error=str(e),
        )
        raise ExternalServiceError(f"Stripe price creation failed: {e}") from e

    logger.info("stripe_price_created", price_id=price.id, org_name=org_name, unit_amount=unit_amount)
    return price.id


def build_checkout_metadata(org: Organization) -> dict[str, str]:
    """
    Correlation metadata carried on the checkout session.

    This is the only link the stateless webhook has back to the organization,
    so every value is required except the phone number.
    """
    metadata = {
        "org_id": str(org.pk) if org.pk else "",
        "contact_name": org.contact_name,
        "contact_email": org.contact_email,
        "contact_phone": org.contact_phone or "",
    }
    missing = [key for key in ("org_id", "contact_name", "contact_email") if not metadata[key]]
    if missing:
        raise ValidationError(f"Checkout metadata missing: {', '.join(missing)}")
    return metadata


def create_checkout_session(price_id: str, org: Organization, base_url: str) -> CheckoutSession:
    """
    Create a Stripe Checkout Session for the organization's subscription.

    Single line item, subscription mode, payer email pre-filled, and the
    organization id plus contact fields attached as metadata.

    Raises:
        ValidationError: If metadata or the redirect base URL is unusable
        ExternalServiceError: If Stripe rejects the request or is unreachable
    """
    metadata = build_checkout_metadata(org)

    try:
        success_url = build_url(base_url, SUCCESS_PATH, setup_success="true")
        cancel_url = build_url(base_url, CANCEL_PATH, canceled="true")
    except ValueError as e:
        raise ValidationError(f"Invalid redirect base URL: {e}") from e

    stripe_module = get_stripe()

    try:
        session = stripe_module.checkout.Session.create(
            mode="subscription",
            payment_method_types=["card"],
            line_items=[{"price": price_id, "quantity": 1}],
            success_url=success_url,
            cancel_url=cancel_url,
            customer_email=org.contact_email,
            client_reference_id=metadata["org_id"],
            metadata=metadata,
            subscription_data={"metadata": {"org_id": metadata["org_id"]}},
        )
    except stripe.StripeError as e:
        logger.error(
            "stripe_checkout_session_create_failed",
            org_id=org.pk,
            price_id=price_id,
            error=str(e),
        )
        raise ExternalServiceError(f"Stripe checkout session creation failed: {e}") from e

    logger.info("stripe_checkout_session_created", session_id=session.id, org_id=org.pk)
    return CheckoutSession(id=session.id, url=session.url)


def retrieve_checkout_session(session_id: str) -> dict:
    """
    Fetch a checkout session from Stripe (used by reconciliation) as a plain dict.

    Raises:
        ExternalServiceError: If Stripe rejects the request or is unreachable
    """
    stripe_module = get_stripe()

    try:
        session = stripe_module.checkout.Session.retrieve(session_id)
    except stripe.StripeError as e:
        logger.error("stripe_checkout_session_retrieve_failed", session_id=session_id, error=str(e))
        raise ExternalServiceError(f"Stripe checkout session lookup failed: {e}") from e

    # StripeObject is not a dict subclass in current SDK releases
    return session.to_dict()
