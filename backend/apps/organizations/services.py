"""
Organization record store.

Owns every write to Organization rows made by the onboarding saga.
Privileged writes take an explicit ServiceCredential instead of relying on a
request user, because a new organization has no users yet.
External calls must NOT be made from here; callers do them outside transactions.
"""

from dataclasses import dataclass
from datetime import datetime
from decimal import Decimal
from enum import StrEnum

from django.db import DatabaseError, IntegrityError, transaction
from django.db.models import QuerySet
from django.utils import timezone

from apps.core.auth import Scopes, ServiceCredential
from apps.core.logging import get_logger
from apps.onboarding.exceptions import OrganizationNotFound, PersistenceError
from apps.organizations.models import Organization
from apps.organizations.subdomains import MAX_SUBDOMAIN_ATTEMPTS, allocate_subdomain

logger = get_logger(__name__)


@dataclass(frozen=True)
class OrganizationCreateData:
    """Validated input for a new organization."""

    name: str
    contact_name: str
    contact_email: str
    monthly_fee: Decimal
    contact_phone: str = ""
    storage_limit_gb: int = 1
    address: str = ""
    city: str = ""
    state: str = ""
    zip_code: str = ""


class ActivationOutcome(StrEnum):
    ACTIVATED = "activated"
    ALREADY_ACTIVE = "already_active"
    CONFLICT = "conflict"


@dataclass(frozen=True)
class ActivationResult:
    organization: Organization
    outcome: ActivationOutcome

    @property
    def should_invite_admin(self) -> bool:
        return self.outcome in (ActivationOutcome.ACTIVATED, ActivationOutcome.ALREADY_ACTIVE)


def create_organization(
    credential: ServiceCredential,
    data: OrganizationCreateData,
    *,
    subdomain: str,
    stripe_price_id: str,
) -> Organization:
    """
    Insert a new organization in pending_payment / pending.

    The unique constraint on subdomain is the authoritative collision check:
    if the insert loses a race for `subdomain`, the next free candidate is
    allocated and the insert retried.

    Raises:
        CredentialScopeError: If the credential cannot create organizations
        AllocationExhausted: If every subdomain candidate is taken
        PersistenceError: On any other database failure
    """
    credential.require(Scopes.ORGANIZATIONS_CREATE)

    candidate = subdomain
    for _attempt in range(MAX_SUBDOMAIN_ATTEMPTS):
        try:
            with transaction.atomic():
                org = Organization.objects.create(
                    name=data.name,
                    subdomain=candidate,
                    contact_name=data.contact_name,
                    contact_email=data.contact_email,
                    contact_phone=data.contact_phone,
                    address=data.address,
                    city=data.city,
                    state=data.state,
                    zip_code=data.zip_code,
                    monthly_fee=data.monthly_fee,
                    storage_limit_gb=data.storage_limit_gb,
                    storage_used_gb=0,
                    file_count=0,
                    subscription_status=Organization.SubscriptionStatus.PENDING_PAYMENT,
                    payment_status=Organization.PaymentStatus.PENDING,
                    onboarding_step=Organization.OnboardingStep.PRICE_CREATED,
                    stripe_price_id=stripe_price_id,
                )
        except IntegrityError as e:
            if not Organization.objects.filter(subdomain=candidate).exists():
                logger.exception("organization_insert_failed", subdomain=candidate)
                raise PersistenceError(f"Organization insert failed: {e}") from e
            logger.info("subdomain_insert_conflict", subdomain=candidate)
            candidate = allocate_subdomain(data.name, after=candidate)
            continue
        except DatabaseError as e:
            logger.exception("organization_insert_failed", subdomain=candidate)
            raise PersistenceError(f"Organization insert failed: {e}") from e

        logger.info(
            "organization_created",
            org_id=org.id,
            subdomain=org.subdomain,
            principal=credential.principal,
        )
        return org

    # allocate_subdomain raises before the loop runs out; kept for type checkers
    raise PersistenceError("Subdomain retry loop ended without an insert")


def record_checkout_session(org: Organization, session_id: str, url: str) -> None:
    """
    Remember the latest checkout session for a pending organization.

    Ignored once the organization is no longer pending_payment so a late
    reconciliation run cannot move an activated org back to checkout_created.
    """
    now = timezone.now()
    try:
        updated = Organization.objects.filter(
            pk=org.pk,
            subscription_status=Organization.SubscriptionStatus.PENDING_PAYMENT,
        ).update(
            stripe_checkout_session_id=session_id,
            checkout_url=url,
            onboarding_step=Organization.OnboardingStep.CHECKOUT_CREATED,
            updated_at=now,
        )
    except DatabaseError as e:
        logger.exception("checkout_session_record_failed", org_id=org.pk)
        raise PersistenceError(f"Could not record checkout session: {e}") from e

    if updated:
        org.stripe_checkout_session_id = session_id
        org.checkout_url = url
        org.onboarding_step = Organization.OnboardingStep.CHECKOUT_CREATED
        org.updated_at = now


def activate_organization(
    credential: ServiceCredential,
    org_id: int,
    *,
    customer_id: str,
    subscription_id: str,
) -> ActivationResult:
    """
    Move an organization from pending_payment to active.

    A single conditional UPDATE keyed by primary key. Re-applying the same
    Stripe identifiers is a no-op; a different pair never overwrites the
    stored one.

    Raises:
        CredentialScopeError: If the credential cannot activate organizations
        OrganizationNotFound: If no organization has this id
        PersistenceError: On database failure
    """
    credential.require(Scopes.ORGANIZATIONS_ACTIVATE)

    now = timezone.now()
    try:
        updated = Organization.objects.filter(
            pk=org_id,
            subscription_status=Organization.SubscriptionStatus.PENDING_PAYMENT,
        ).update(
            subscription_status=Organization.SubscriptionStatus.ACTIVE,
            payment_status=Organization.PaymentStatus.GOOD_STANDING,
            stripe_customer_id=customer_id,
            stripe_subscription_id=subscription_id,
            onboarding_step=Organization.OnboardingStep.ACTIVATED,
            activated_at=now,
            updated_at=now,
        )
        org = Organization.objects.filter(pk=org_id).first()
    except DatabaseError as e:
        logger.exception("organization_activation_failed", org_id=org_id)
        raise PersistenceError(f"Activation update failed: {e}") from e

    if org is None:
        raise OrganizationNotFound(org_id)

    if updated:
        logger.info(
            "organization_activated",
            org_id=org.id,
            stripe_customer_id=customer_id,
            stripe_subscription_id=subscription_id,
            principal=credential.principal,
        )
        return ActivationResult(org, ActivationOutcome.ACTIVATED)

    if org.stripe_customer_id == customer_id and org.stripe_subscription_id == subscription_id:
        logger.info("organization_already_active", org_id=org.id)
        return ActivationResult(org, ActivationOutcome.ALREADY_ACTIVE)

    logger.error(
        "organization_activation_conflict",
        org_id=org.id,
        subscription_status=org.subscription_status,
        stored_customer_id=org.stripe_customer_id,
        stored_subscription_id=org.stripe_subscription_id,
        received_customer_id=customer_id,
        received_subscription_id=subscription_id,
    )
    return ActivationResult(org, ActivationOutcome.CONFLICT)


def set_stytch_org_id(org: Organization, stytch_org_id: str) -> None:
    """Link the organization to its Stytch organization (first invite only)."""
    Organization.objects.filter(pk=org.pk, stytch_org_id__isnull=True).update(
        stytch_org_id=stytch_org_id,
        updated_at=timezone.now(),
    )
    org.refresh_from_db(fields=["stytch_org_id"])


def mark_admin_invited(org: Organization) -> None:
    """Record that the first admin invitation went out."""
    now = timezone.now()
    Organization.objects.filter(pk=org.pk).update(
        admin_invited_at=now,
        onboarding_step=Organization.OnboardingStep.ADMIN_INVITED,
        updated_at=now,
    )
    org.admin_invited_at = now
    org.onboarding_step = Organization.OnboardingStep.ADMIN_INVITED


def mark_abandoned(credential: ServiceCredential, org: Organization) -> bool:
    """
    Flag a pending organization whose checkout never completed.

    subscription_status stays pending_payment; only the step marker changes.
    Returns False if the organization was activated in the meantime.
    """
    credential.require(Scopes.ORGANIZATIONS_RECONCILE)

    updated = Organization.objects.filter(
        pk=org.pk,
        subscription_status=Organization.SubscriptionStatus.PENDING_PAYMENT,
    ).update(
        onboarding_step=Organization.OnboardingStep.ABANDONED,
        updated_at=timezone.now(),
    )
    if updated:
        org.onboarding_step = Organization.OnboardingStep.ABANDONED
        logger.info("organization_abandoned", org_id=org.pk, subdomain=org.subdomain)
    return bool(updated)


def find_stalled_organizations(created_before: datetime) -> QuerySet[Organization]:
    """Pending organizations older than the cutoff that never finished checkout."""
    return Organization.objects.filter(
        subscription_status=Organization.SubscriptionStatus.PENDING_PAYMENT,
        onboarding_step__in=[
            Organization.OnboardingStep.PRICE_CREATED,
            Organization.OnboardingStep.CHECKOUT_CREATED,
        ],
        created_at__lt=created_before,
    ).order_by("created_at")


def find_uninvited_organizations() -> QuerySet[Organization]:
    """Active organizations whose admin invitation never succeeded."""
    return Organization.objects.filter(
        subscription_status=Organization.SubscriptionStatus.ACTIVE,
        onboarding_step=Organization.OnboardingStep.ACTIVATED,
    ).order_by("activated_at")
