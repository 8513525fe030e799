"""
Account services - admin invitations through Stytch.

The first administrator of a newly activated organization is invited by
magic link. The invite carries the organization id, the admin role, the
invitee's name and the default permission flags in Stytch trusted metadata.
"""

import requests
from stytch.core.response_base import StytchError

from apps.accounts.constants import ADMIN_ROLE, AdminPermissions, StytchRoles
from apps.accounts.stytch_client import get_stytch_client
from apps.core.logging import get_logger
from apps.core.url_validation import build_url
from apps.onboarding.exceptions import InviteError
from apps.organizations.models import Organization
from apps.organizations.services import mark_admin_invited, set_stytch_org_id
from config.settings.base import settings

logger = get_logger(__name__)

INVITE_REDIRECT_PATH = "/setup-account"

# Stytch error types meaning the member already exists / was already invited
_ALREADY_MEMBER_ERROR_TYPES = frozenset(
    {
        "duplicate_member_email",
        "member_already_exists",
        "member_already_invited",
    }
)
_DUPLICATE_SLUG_ERROR_TYPES = frozenset(
    {
        "organization_slug_already_used",
        "duplicate_organization_slug",
    }
)


def _error_type(error: StytchError) -> str:
    return (getattr(error.details, "error_type", "") or "").lower()


def build_admin_invite_metadata(org: Organization, full_name: str) -> dict:
    """
    Trusted metadata for the admin invite.

    Every known permission flag is present; only the configured defaults
    (ADMIN_INVITE_PERMISSIONS) are True.
    """
    granted = set(settings.ADMIN_INVITE_PERMISSIONS)
    return {
        "organization_id": org.pk,
        "role": ADMIN_ROLE,
        "full_name": full_name,
        **{flag: flag in granted for flag in AdminPermissions.ALL},
    }


def ensure_stytch_organization(org: Organization) -> str:
    """
    Return the Stytch organization for a tenant, creating it on first use.

    The subdomain doubles as the Stytch organization slug. If a previous
    attempt created the Stytch org but failed before we stored its id, the
    duplicate-slug answer is resolved by searching for the slug.

    Raises:
        InviteError: If Stytch cannot create or find the organization
    """
    if org.stytch_org_id:
        return org.stytch_org_id

    client = get_stytch_client()

    try:
        response = client.organizations.create(
            organization_name=org.name,
            organization_slug=org.subdomain,
            trusted_metadata={"organization_id": str(org.pk)},
        )
        stytch_org_id = response.organization.organization_id
    except StytchError as e:
        if _error_type(e) not in _DUPLICATE_SLUG_ERROR_TYPES:
            logger.warning(
                "stytch_organization_create_failed",
                org_id=org.pk,
                error_type=_error_type(e),
                error=e.details.error_message,
            )
            raise InviteError(f"Stytch organization creation failed: {e.details.error_message}") from e
        stytch_org_id = _find_stytch_organization_by_slug(org.subdomain)
    except requests.RequestException as e:
        logger.warning("stytch_organization_create_unreachable", org_id=org.pk, error=str(e))
        raise InviteError(f"Stytch organization creation failed: {e}") from e

    set_stytch_org_id(org, stytch_org_id)
    logger.info("stytch_organization_linked", org_id=org.pk, stytch_org_id=org.stytch_org_id)
    return org.stytch_org_id or stytch_org_id


def _find_stytch_organization_by_slug(slug: str) -> str:
    client = get_stytch_client()
    try:
        response = client.organizations.search(
            query={
                "operator": "AND",
                "operands": [{"filter_name": "organization_slugs", "filter_value": [slug]}],
            },
        )
    except (StytchError, requests.RequestException) as e:
        raise InviteError(f"Stytch organization lookup failed for slug '{slug}'") from e

    if not response.organizations:
        raise InviteError(f"Stytch reported slug '{slug}' as taken but no organization matches")
    return response.organizations[0].organization_id


def invite_organization_admin(org: Organization, email: str, full_name: str) -> bool:
    """
    Invite the organization's first administrator.

    Idempotent per invitee: an organization already marked as invited is
    skipped, and a Stytch "already a member" answer counts as success.

    Returns:
        True if an invite was sent, False if it had already been sent

    Raises:
        InviteError: If Stytch rejects the invite or times out
    """
    if org.admin_invited_at is not None:
        logger.info("admin_invite_already_sent", org_id=org.pk, email=email)
        return False

    try:
        redirect_url = build_url(settings.APP_BASE_URL, INVITE_REDIRECT_PATH)
    except ValueError as e:
        raise InviteError(f"Invalid invite redirect base URL: {e}") from e

    stytch_org_id = ensure_stytch_organization(org)
    client = get_stytch_client()

    try:
        client.magic_links.email.invite(
            organization_id=stytch_org_id,
            email_address=email,
            name=full_name,
            trusted_metadata=build_admin_invite_metadata(org, full_name),
            roles=[StytchRoles.ADMIN],
            invite_redirect_url=redirect_url,
        )
    except StytchError as e:
        if _error_type(e) in _ALREADY_MEMBER_ERROR_TYPES:
            logger.info("admin_already_member", org_id=org.pk, email=email)
            mark_admin_invited(org)
            return False
        logger.warning(
            "admin_invite_failed",
            org_id=org.pk,
            email=email,
            error_type=_error_type(e),
            error=e.details.error_message,
        )
        raise InviteError(f"Stytch invite failed: {e.details.error_message}") from e
    except requests.RequestException as e:
        logger.warning("admin_invite_unreachable", org_id=org.pk, email=email, error=str(e))
        raise InviteError(f"Stytch invite failed: {e}") from e

    mark_admin_invited(org)
    logger.info("admin_invited", org_id=org.pk, email=email, stytch_org_id=stytch_org_id)
    return True
