"""Admin configuration for organizations app."""

from django.contrib import admin

from apps.organizations.models import Organization


@admin.register(Organization)
class OrganizationAdmin(admin.ModelAdmin):
    """Admin for Organization model. Onboarding fields are managed by the saga."""

    list_display = [
        "name",
        "subdomain",
        "subscription_status",
        "payment_status",
        "onboarding_step",
        "monthly_fee",
        "created_at",
    ]
    list_filter = ["subscription_status", "payment_status", "onboarding_step"]
    search_fields = ["name", "subdomain", "contact_email", "stripe_customer_id"]
    readonly_fields = [
        "subdomain",
        "monthly_fee",
        "subscription_status",
        "onboarding_step",
        "stripe_price_id",
        "stripe_checkout_session_id",
        "checkout_url",
        "stripe_customer_id",
        "stripe_subscription_id",
        "stytch_org_id",
        "activated_at",
        "admin_invited_at",
        "created_at",
        "updated_at",
    ]
    ordering = ["-created_at"]
