"""
Stripe webhook handler.

Handles checkout.session.completed to activate organizations.
This is a separate view (not Django Ninja) for raw request handling
needed to verify Stripe signatures.

Every verified event is acknowledged with 200 unless the database fails, so
Stripe only retries deliveries that could succeed on a second attempt.
"""

import stripe
from django.db import DatabaseError, transaction
from django.http import HttpRequest, HttpResponse, JsonResponse
from django.views.decorators.csrf import csrf_exempt
from django.views.decorators.http import require_POST

from apps.billing.stripe_client import get_stripe
from apps.core.auth import ServiceCredential
from apps.core.logging import get_logger
from apps.core.webhooks import mark_webhook_processed
from apps.onboarding.exceptions import PersistenceError, SignatureError
from apps.onboarding.services import handle_checkout_session_completed, invite_admin_after_activation
from config.settings.base import settings

logger = get_logger(__name__)

WEBHOOK_SOURCE = "stripe"


def _webhook_error(message: str) -> HttpResponse:
    return HttpResponse(f"Webhook Error: {message}", status=400, content_type="text/plain")


def verify_stripe_event(payload: bytes, sig_header: str | None) -> stripe.Event:
    """
    Verify the Stripe-Signature header and parse the event.

    Raises:
        SignatureError: If the header is missing, the signature does not
            match STRIPE_WEBHOOK_SECRET, or the payload is not valid JSON
    """
    if not sig_header:
        logger.warning("stripe_webhook_missing_signature")
        raise SignatureError("missing Stripe-Signature header")

    get_stripe()  # Ensure Stripe is configured
    try:
        return stripe.Webhook.construct_event(
            payload,
            sig_header,
            settings.STRIPE_WEBHOOK_SECRET,
        )
    except ValueError as e:
        logger.warning("stripe_webhook_invalid_payload", error=str(e))
        raise SignatureError(str(e)) from e
    except stripe.SignatureVerificationError as e:
        logger.warning("stripe_webhook_invalid_signature", error=str(e))
        raise SignatureError(str(e)) from e


@csrf_exempt
@require_POST
def stripe_webhook(request: HttpRequest) -> HttpResponse:
    """
    Handle Stripe webhook events.

    Verifies the signature, deduplicates by event id, and activates the
    organization inside one transaction. The admin invite runs after commit.
    """
    if not settings.STRIPE_WEBHOOK_SECRET:
        logger.error("stripe_webhook_secret_not_configured")
        return HttpResponse(status=500)

    try:
        event = verify_stripe_event(request.body, request.headers.get("Stripe-Signature"))
    except SignatureError as e:
        return _webhook_error(e.response_message)

    event_id = event["id"]
    event_type = event["type"]
    logger.info("stripe_webhook_received", event_id=event_id, event_type=event_type)

    if event_type != "checkout.session.completed":
        logger.debug("stripe_webhook_unhandled", event_id=event_id, event_type=event_type)
        return JsonResponse({"received": True})

    handled = None
    try:
        with transaction.atomic():
            if not mark_webhook_processed(WEBHOOK_SOURCE, event_id):
                logger.info("stripe_webhook_duplicate", event_id=event_id, event_type=event_type)
                return JsonResponse({"received": True})

            handled = handle_checkout_session_completed(
                ServiceCredential.for_stripe_webhook(),
                event["data"]["object"].to_dict(),
            )
    except (DatabaseError, PersistenceError) as e:
        # Rolled back, including the processed marker, so Stripe's retry is not skipped
        logger.exception("stripe_webhook_handler_error", event_id=event_id, error=str(e))
        return HttpResponse(status=500)

    if handled is not None:
        result, completion = handled
        invite_admin_after_activation(result, completion)

    return JsonResponse({"received": True})
