"""
Django Ninja API configuration.
"""

from django.http import HttpRequest, HttpResponse
from ninja import NinjaAPI
from ninja.errors import AuthenticationError
from ninja.errors import ValidationError as NinjaValidationError

from apps.core.logging import get_logger
from apps.onboarding.api import router as organizations_router

logger = get_logger(__name__)

api = NinjaAPI(
    title="Organization Onboarding API",
    version="1.0.0",
    description="Internal API for provisioning organizations and activating them through Stripe checkout.",
    openapi_extra={
        "info": {
            "contact": {"name": "API Support"},
        },
        "tags": [
            {
                "name": "organizations",
                "description": "Organization provisioning for the sales console",
            },
            {
                "name": "health",
                "description": "Service health and readiness checks",
            },
        ],
    },
)

# Register routers
api.add_router("/organizations", organizations_router)


@api.exception_handler(NinjaValidationError)
def validation_error_handler(request: HttpRequest, exc: NinjaValidationError) -> HttpResponse:
    """Report invalid request bodies as 400 in the {success, error} shape."""
    messages = []
    for error in exc.errors:
        field = ".".join(str(part) for part in error.get("loc", ()) if part not in ("body", "payload"))
        messages.append(f"{field}: {error.get('msg')}" if field else str(error.get("msg")))
    logger.info("api_validation_failed", path=request.path, errors=messages)
    return api.create_response(
        request,
        {"success": False, "error": "; ".join(messages) or "Invalid request."},
        status=400,
    )


@api.exception_handler(AuthenticationError)
def authentication_error_handler(request: HttpRequest, exc: AuthenticationError) -> HttpResponse:
    return api.create_response(
        request,
        {"success": False, "error": "Missing or invalid provisioning key."},
        status=401,
    )


@api.get("/health", tags=["health"], operation_id="healthCheck", summary="Health check")
def health_check(request: HttpRequest) -> dict:
    """Health check endpoint for load balancer."""
    return {"status": "ok"}
