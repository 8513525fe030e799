"""
Onboarding API endpoints.

Internal provisioning entry point used by the sales console.
"""

from django.http import HttpRequest
from ninja import Router

from apps.core.logging import get_logger
from apps.core.security import ProvisioningKeyAuth
from apps.onboarding.exceptions import OnboardingError
from apps.onboarding.schemas import ProvisionErrorResponse, ProvisionRequest, ProvisionResponse
from apps.onboarding.services import provision_organization
from config.settings.base import settings

logger = get_logger(__name__)

router = Router(tags=["organizations"])
provisioning_auth = ProvisioningKeyAuth()

ERROR_STATUS_CODES = frozenset({400, 401, 403, 409, 500, 502})


@router.post(
    "/provision",
    response={
        200: ProvisionResponse,
        400: ProvisionErrorResponse,
        401: ProvisionErrorResponse,
        403: ProvisionErrorResponse,
        409: ProvisionErrorResponse,
        500: ProvisionErrorResponse,
        502: ProvisionErrorResponse,
    },
    auth=provisioning_auth,
    by_alias=True,
    operation_id="provisionOrganization",
    summary="Provision a new organization",
)
def provision(request: HttpRequest, payload: ProvisionRequest):
    """
    Create a pending organization, its Stripe price and a checkout session.

    The organization stays pending_payment until Stripe reports the checkout
    as completed; the returned paymentUrl is sent to the customer.
    """
    try:
        result = provision_organization(request.auth, payload.to_create_data(), settings.APP_BASE_URL)
    except OnboardingError as e:
        status = e.status_code if e.status_code in ERROR_STATUS_CODES else 500
        logger.warning(
            "organization_provision_failed",
            error_type=type(e).__name__,
            status_code=status,
            error=str(e),
            org_name=payload.name,
        )
        return status, ProvisionErrorResponse(error=e.response_message)

    org = result.organization
    return 200, ProvisionResponse(
        payment_url=result.payment_url,
        org_id=org.pk,
        org_name=org.name,
        subdomain=org.subdomain,
    )
