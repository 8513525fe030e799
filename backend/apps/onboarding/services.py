"""
Onboarding saga - provisioning and activation.

Provisioning (synchronous, one request):
    allocate subdomain -> create Stripe price -> insert organization
    -> create checkout session -> record session

Activation (asynchronous, Stripe webhook):
    activate organization -> invite admin

There is no compensating transaction. Each completed step is recorded in
Organization.onboarding_step so the reconciliation sweep can resume or
abandon organizations that stall part-way.
"""

from dataclasses import dataclass

from apps.accounts.services import invite_organization_admin
from apps.billing.services import create_checkout_session, create_organization_price
from apps.core.auth import Scopes, ServiceCredential
from apps.core.logging import bind_contextvars, get_logger
from apps.onboarding.exceptions import InviteError, MalformedEventError, OrganizationNotFound
from apps.organizations.models import Organization
from apps.organizations.services import (
    ActivationResult,
    OrganizationCreateData,
    activate_organization,
    create_organization,
    record_checkout_session,
)
from apps.organizations.subdomains import allocate_subdomain

logger = get_logger(__name__)

REQUIRED_CHECKOUT_METADATA = ("org_id", "contact_email", "contact_name")


@dataclass(frozen=True)
class ProvisionResult:
    organization: Organization
    payment_url: str


@dataclass(frozen=True)
class CheckoutCompletion:
    """Fields pulled from a checkout.session.completed payload."""

    org_id: int
    contact_email: str
    contact_name: str
    customer_id: str
    subscription_id: str


def provision_organization(
    credential: ServiceCredential,
    data: OrganizationCreateData,
    base_url: str,
) -> ProvisionResult:
    """
    Turn sales input into a pending organization with a payment link.

    Failures before the insert leave nothing behind except, at worst, an
    unused Stripe price. Failures after the insert leave the organization at
    onboarding_step=price_created for the reconciliation sweep.

    Raises:
        ValidationError, AllocationExhausted, ExternalServiceError,
        PersistenceError, CredentialScopeError
    """
    credential.require(Scopes.ORGANIZATIONS_CREATE)

    subdomain = allocate_subdomain(data.name)
    price_id = create_organization_price(data.monthly_fee, data.name)

    org = create_organization(credential, data, subdomain=subdomain, stripe_price_id=price_id)
    bind_contextvars(**{"organization.id": str(org.pk)})

    session = create_checkout_session(price_id, org, base_url)
    record_checkout_session(org, session.id, session.url)

    logger.info(
        "organization_provisioned",
        org_id=org.pk,
        subdomain=org.subdomain,
        monthly_fee=str(org.monthly_fee),
        checkout_session_id=session.id,
    )
    return ProvisionResult(organization=org, payment_url=session.url)


def parse_checkout_completion(session: dict) -> CheckoutCompletion:
    """
    Extract activation fields from a Checkout Session object.

    Raises:
        MalformedEventError: If correlation metadata or Stripe ids are missing
    """
    metadata = session.get("metadata") or {}
    missing = [key for key in REQUIRED_CHECKOUT_METADATA if not metadata.get(key)]
    missing += [key for key in ("customer", "subscription") if not session.get(key)]
    if missing:
        raise MalformedEventError(
            f"Checkout session {session.get('id')} is missing {', '.join(missing)}",
            missing=missing,
        )

    try:
        org_id = int(metadata["org_id"])
    except (TypeError, ValueError) as e:
        raise MalformedEventError(
            f"Checkout session {session.get('id')} has non-numeric org_id {metadata['org_id']!r}",
            missing=["org_id"],
        ) from e

    return CheckoutCompletion(
        org_id=org_id,
        contact_email=metadata["contact_email"],
        contact_name=metadata["contact_name"],
        customer_id=_stripe_id(session["customer"]),
        subscription_id=_stripe_id(session["subscription"]),
    )


def _stripe_id(value: str | dict) -> str:
    # Expanded objects arrive as dicts
    if isinstance(value, dict):
        return value["id"]
    return value


def handle_checkout_session_completed(
    credential: ServiceCredential,
    session: dict,
) -> tuple[ActivationResult, CheckoutCompletion] | None:
    """
    Activate the organization a completed checkout belongs to.

    Must run inside the webhook's transaction. Business problems (bad
    metadata, unknown organization) are logged and yield None so the event
    is acknowledged; database failures propagate so Stripe retries.

    Returns:
        (activation result, parsed completion) or None when nothing was done
    """
    try:
        completion = parse_checkout_completion(session)
    except MalformedEventError as e:
        logger.warning(
            "checkout_completed_malformed",
            session_id=session.get("id"),
            missing=e.missing,
            error=str(e),
        )
        return None

    bind_contextvars(**{"organization.id": str(completion.org_id)})

    try:
        result = activate_organization(
            credential,
            completion.org_id,
            customer_id=completion.customer_id,
            subscription_id=completion.subscription_id,
        )
    except OrganizationNotFound:
        logger.warning(
            "checkout_completed_unknown_organization",
            org_id=completion.org_id,
            session_id=session.get("id"),
        )
        return None

    return result, completion


def invite_admin_after_activation(result: ActivationResult, completion: CheckoutCompletion) -> None:
    """
    Invite the contact as admin once activation has committed.

    Invite failures are logged and swallowed: redelivering the payment
    event would not fix them, and the reconciliation sweep can retry.
    """
    if not result.should_invite_admin:
        logger.info(
            "admin_invite_skipped",
            org_id=result.organization.pk,
            outcome=str(result.outcome),
        )
        return

    try:
        invite_organization_admin(
            result.organization,
            email=completion.contact_email,
            full_name=completion.contact_name,
        )
    except InviteError as e:
        logger.error(
            "admin_invite_after_activation_failed",
            org_id=result.organization.pk,
            email=completion.contact_email,
            error=str(e),
        )
