"""
Subdomain allocation.

Derives a URL-safe slug from an organization name and finds a free variant.
The lookup here is only a fast path: the unique constraint on
Organization.subdomain is what actually guarantees uniqueness, and the record
store resumes the search via allocate_subdomain(after=...) when an insert loses
a race.
"""

import re

from apps.core.logging import get_logger
from apps.onboarding.exceptions import AllocationExhausted, ValidationError
from apps.organizations.models import SUBDOMAIN_MAX_LENGTH, Organization

logger = get_logger(__name__)

MAX_SUBDOMAIN_ATTEMPTS = 10

_NON_ALPHANUMERIC = re.compile(r"[^a-z0-9]+")


def slugify_organization_name(name: str) -> str:
    """
    Lower-case, collapse non-alphanumeric runs to '-', trim edge hyphens,
    and truncate to SUBDOMAIN_MAX_LENGTH.

    >>> slugify_organization_name("Denver Hiking Club!")
    'denver-hiking-club'
    """
    slug = _NON_ALPHANUMERIC.sub("-", name.lower()).strip("-")
    return slug[:SUBDOMAIN_MAX_LENGTH].rstrip("-")


def candidate_subdomains(name: str) -> list[str]:
    """
    Return the ordered subdomain candidates for a name.

    The bare slug first, then slug-1 ... slug-9. The base is shortened where
    needed so each suffixed candidate still fits in SUBDOMAIN_MAX_LENGTH.

    Raises:
        ValidationError: If the name contains no letters or digits
    """
    base = slugify_organization_name(name)
    if not base:
        raise ValidationError("Organization name must contain at least one letter or digit.")

    candidates = [base]
    for n in range(1, MAX_SUBDOMAIN_ATTEMPTS):
        suffix = f"-{n}"
        stem = base[: SUBDOMAIN_MAX_LENGTH - len(suffix)].rstrip("-")
        candidates.append(f"{stem}{suffix}")
    return candidates


def allocate_subdomain(name: str, *, after: str | None = None) -> str:
    """
    Find the first candidate subdomain not used by any organization.

    Args:
        name: Organization name
        after: Skip candidates up to and including this one (used after an
            insert conflict on that candidate)

    Returns:
        A free subdomain at the time of the check

    Raises:
        ValidationError: If the name yields an empty slug
        AllocationExhausted: If every candidate is taken
    """
    candidates = candidate_subdomains(name)
    if after is not None and after in candidates:
        remaining = candidates[candidates.index(after) + 1 :]
    else:
        remaining = candidates

    taken = set(
        Organization.objects.filter(subdomain__in=remaining).values_list("subdomain", flat=True)
    )
    for candidate in remaining:
        if candidate not in taken:
            return candidate

    logger.warning(
        "subdomain_allocation_exhausted",
        base_subdomain=candidates[0],
        attempts=MAX_SUBDOMAIN_ATTEMPTS,
    )
    raise AllocationExhausted(candidates[0], MAX_SUBDOMAIN_ATTEMPTS)
