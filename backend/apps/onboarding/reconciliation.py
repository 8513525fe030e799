"""
Onboarding reconciliation sweep.

Provisioning and activation have no compensating transaction, so partial
progress is repaired here instead. Each stalled organization is examined by
its onboarding_step:

    price_created     -> create a fresh checkout session (or abandon)
    checkout_created  -> ask Stripe about the session:
                         complete -> activate (missed webhook) and invite
                         expired  -> fresh session (or abandon)
                         open     -> leave alone
    activated         -> re-run the admin invite (only with retry_invites)

Errors for one organization are logged and counted; the sweep carries on.
"""

from dataclasses import dataclass
from datetime import timedelta

from django.db import DatabaseError, transaction
from django.utils import timezone

from apps.accounts.services import invite_organization_admin
from apps.billing.services import create_checkout_session, retrieve_checkout_session
from apps.core.auth import ServiceCredential
from apps.core.logging import get_logger
from apps.onboarding.exceptions import InviteError, OnboardingError
from apps.onboarding.services import handle_checkout_session_completed, invite_admin_after_activation
from apps.organizations.models import Organization
from apps.organizations.services import (
    ActivationOutcome,
    find_stalled_organizations,
    find_uninvited_organizations,
    mark_abandoned,
    record_checkout_session,
)
from config.settings.base import settings

logger = get_logger(__name__)


@dataclass
class ReconciliationStats:
    examined: int = 0
    sessions_created: int = 0
    activated: int = 0
    abandoned: int = 0
    left_open: int = 0
    invites_sent: int = 0
    errors: int = 0


def reconcile_onboarding(
    grace: timedelta,
    abandon_after: timedelta,
    *,
    retry_invites: bool = False,
    dry_run: bool = False,
    credential: ServiceCredential | None = None,
) -> ReconciliationStats:
    """
    Resume or abandon organizations stuck part-way through onboarding.

    Only organizations older than `grace` are touched, so in-flight
    checkouts are left to finish. In dry-run mode Stripe sessions are still
    read but nothing is created or written.
    """
    credential = credential or ServiceCredential.for_reconciliation()
    stats = ReconciliationStats()
    now = timezone.now()
    abandon_cutoff = now - abandon_after

    for org in find_stalled_organizations(created_before=now - grace):
        stats.examined += 1
        try:
            _reconcile_organization(org, credential, stats, abandon_cutoff=abandon_cutoff, dry_run=dry_run)
        except (OnboardingError, DatabaseError) as e:
            stats.errors += 1
            logger.error(
                "onboarding_reconcile_failed",
                org_id=org.pk,
                onboarding_step=org.onboarding_step,
                error_type=type(e).__name__,
                error=str(e),
            )

    if retry_invites:
        _retry_invites(stats, dry_run=dry_run)

    return stats


def _reconcile_organization(
    org: Organization,
    credential: ServiceCredential,
    stats: ReconciliationStats,
    *,
    abandon_cutoff,
    dry_run: bool,
) -> None:
    if org.onboarding_step == Organization.OnboardingStep.CHECKOUT_CREATED and org.stripe_checkout_session_id:
        session = retrieve_checkout_session(org.stripe_checkout_session_id)
        status = session.get("status")

        if status == "complete":
            logger.info("onboarding_reconcile_missed_activation", org_id=org.pk, session_id=session.get("id"))
            if dry_run:
                stats.activated += 1
                return
            with transaction.atomic():
                handled = handle_checkout_session_completed(credential, session)
            if handled is None:
                stats.errors += 1
                return
            result, completion = handled
            if result.outcome == ActivationOutcome.ACTIVATED:
                stats.activated += 1
            elif result.outcome == ActivationOutcome.CONFLICT:
                stats.errors += 1
            invite_admin_after_activation(result, completion)
            if result.organization.admin_invited_at is not None:
                stats.invites_sent += 1
            return

        if status == "open":
            stats.left_open += 1
            logger.info("onboarding_reconcile_checkout_open", org_id=org.pk, session_id=session.get("id"))
            return

    # price_created, or an expired session
    if org.created_at < abandon_cutoff:
        if dry_run or mark_abandoned(credential, org):
            stats.abandoned += 1
        return

    if dry_run:
        stats.sessions_created += 1
        logger.info("onboarding_reconcile_would_create_session", org_id=org.pk)
        return

    session = create_checkout_session(org.stripe_price_id, org, settings.APP_BASE_URL)
    record_checkout_session(org, session.id, session.url)
    stats.sessions_created += 1
    logger.info("onboarding_reconcile_session_created", org_id=org.pk, session_id=session.id)


def _retry_invites(stats: ReconciliationStats, *, dry_run: bool) -> None:
    for org in find_uninvited_organizations():
        stats.examined += 1
        if dry_run:
            logger.info("onboarding_reconcile_would_invite", org_id=org.pk, email=org.contact_email)
            continue
        try:
            if invite_organization_admin(org, email=org.contact_email, full_name=org.contact_name):
                stats.invites_sent += 1
        except InviteError as e:
            stats.errors += 1
            logger.error("onboarding_reconcile_invite_failed", org_id=org.pk, error=str(e))
