"""
Organizations models - the tenant record and its onboarding lifecycle.
"""

from django.db import models

SUBDOMAIN_MAX_LENGTH = 50


class Organization(models.Model):
    """
    A tenant account representing one customer.

    Created by sales through the provisioning endpoint in pending_payment,
    activated exactly once by the Stripe checkout webhook.
    """

    class SubscriptionStatus(models.TextChoices):
        PENDING_PAYMENT = "pending_payment", "Pending Payment"
        ACTIVE = "active", "Active"
        SUSPENDED = "suspended", "Suspended"

    class PaymentStatus(models.TextChoices):
        PENDING = "pending", "Pending"
        GOOD_STANDING = "good_standing", "Good Standing"
        PAST_DUE = "past_due", "Past Due"

    class OnboardingStep(models.TextChoices):
        PRICE_CREATED = "price_created", "Price Created"
        CHECKOUT_CREATED = "checkout_created", "Checkout Created"
        ACTIVATED = "activated", "Activated"
        ADMIN_INVITED = "admin_invited", "Admin Invited"
        ABANDONED = "abandoned", "Abandoned"

    # Organization info
    name = models.CharField(max_length=255)
    subdomain = models.SlugField(
        max_length=SUBDOMAIN_MAX_LENGTH,
        unique=True,
        help_text="URL-safe identifier derived from the name, e.g. 'denver-hiking'",
    )

    # Contact
    contact_name = models.CharField(max_length=255)
    contact_email = models.EmailField()
    contact_phone = models.CharField(max_length=50, blank=True)
    address = models.CharField(max_length=255, blank=True)
    city = models.CharField(max_length=100, blank=True)
    state = models.CharField(max_length=100, blank=True)
    zip_code = models.CharField(max_length=20, blank=True)

    # Billing
    monthly_fee = models.DecimalField(
        max_digits=10,
        decimal_places=2,
        help_text="Negotiated monthly fee; fixed at creation",
    )
    storage_limit_gb = models.PositiveIntegerField(default=1)
    storage_used_gb = models.DecimalField(max_digits=10, decimal_places=3, default=0)
    file_count = models.PositiveIntegerField(default=0)

    # Lifecycle
    subscription_status = models.CharField(
        max_length=20,
        choices=SubscriptionStatus.choices,
        default=SubscriptionStatus.PENDING_PAYMENT,
        db_index=True,
    )
    payment_status = models.CharField(
        max_length=20,
        choices=PaymentStatus.choices,
        default=PaymentStatus.PENDING,
    )
    onboarding_step = models.CharField(
        max_length=20,
        choices=OnboardingStep.choices,
        default=OnboardingStep.PRICE_CREATED,
        db_index=True,
        help_text="Last completed onboarding saga step",
    )

    # Stripe integration
    stripe_price_id = models.CharField(
        max_length=255,
        blank=True,
        help_text="Per-organization Stripe price ID, e.g. 'price_xxx'",
    )
    stripe_checkout_session_id = models.CharField(
        max_length=255,
        blank=True,
        db_index=True,
        help_text="Latest Stripe Checkout session ID, e.g. 'cs_xxx'",
    )
    checkout_url = models.URLField(max_length=2048, blank=True)
    stripe_customer_id = models.CharField(
        max_length=255,
        null=True,
        blank=True,
        help_text="Stripe customer ID, e.g. 'cus_xxx'; set once at activation",
    )
    stripe_subscription_id = models.CharField(
        max_length=255,
        null=True,
        blank=True,
        help_text="Stripe subscription ID, e.g. 'sub_xxx'; set once at activation",
    )

    # Stytch sync (created on the first admin invite)
    stytch_org_id = models.CharField(
        max_length=255,
        null=True,
        blank=True,
        unique=True,
        help_text="Stytch organization_id, e.g. 'organization-xxx'",
    )

    # Timestamps
    activated_at = models.DateTimeField(null=True, blank=True)
    admin_invited_at = models.DateTimeField(null=True, blank=True)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ["-created_at"]
        indexes = [
            models.Index(
                fields=["subscription_status", "onboarding_step", "created_at"],
                name="org_onboarding_sweep_idx",
            ),
        ]

    def __str__(self) -> str:
        return self.name

    @property
    def is_active(self) -> bool:
        return self.subscription_status == self.SubscriptionStatus.ACTIVE
