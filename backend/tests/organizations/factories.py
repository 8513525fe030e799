"""
Factories for organizations app models.

Used in tests to create test data.
"""

from decimal import Decimal

import factory
from django.utils import timezone
from factory.django import DjangoModelFactory

from apps.organizations.models import Organization


class OrganizationFactory(DjangoModelFactory):
    """Factory for Organization model (pending payment by default)."""

    class Meta:
        model = Organization

    name = factory.Sequence(lambda n: f"Test Club {n}")
    subdomain = factory.Sequence(lambda n: f"test-club-{n}")
    contact_name = factory.Faker("name")
    contact_email = factory.Sequence(lambda n: f"contact{n}@example.com")
    contact_phone = "555-0100"
    monthly_fee = Decimal("49.99")
    subscription_status = Organization.SubscriptionStatus.PENDING_PAYMENT
    payment_status = Organization.PaymentStatus.PENDING
    onboarding_step = Organization.OnboardingStep.PRICE_CREATED
    stripe_price_id = factory.Sequence(lambda n: f"price_test_{n}")

    class Params:
        checkout = factory.Trait(
            onboarding_step=Organization.OnboardingStep.CHECKOUT_CREATED,
            stripe_checkout_session_id=factory.LazyAttribute(lambda o: f"cs_test_{o.subdomain}"),
            checkout_url=factory.LazyAttribute(
                lambda o: f"https://checkout.stripe.com/c/pay/{o.stripe_checkout_session_id}"
            ),
        )
        active = factory.Trait(
            subscription_status=Organization.SubscriptionStatus.ACTIVE,
            payment_status=Organization.PaymentStatus.GOOD_STANDING,
            onboarding_step=Organization.OnboardingStep.ACTIVATED,
            stripe_customer_id=factory.LazyAttribute(lambda o: f"cus_test_{o.subdomain}"),
            stripe_subscription_id=factory.LazyAttribute(lambda o: f"sub_test_{o.subdomain}"),
            activated_at=factory.LazyFunction(timezone.now),
        )
