# =============================================================================
# app/routers/billing.py - Billing Provider Webhook Endpoints
# =============================================================================
# Receives PayPal and Stripe notifications. These endpoints are public and
# authenticated by the provider's signature instead of a user token.
# =============================================================================

import json
import logging

from fastapi import APIRouter, Header, Request
from pydantic import BaseModel

from app.dependencies import client_ip
from app.events import emit_events
from app.exceptions import InvalidWebhookPayloadError, RateLimitedError
from core.services.billing_webhook_service import BillingWebhookService
from lib.rate_limiter import billing_webhook_limiter

logger = logging.getLogger(__name__)

router = APIRouter()


class WebhookAck(BaseModel):
    """Acknowledgement returned to the provider."""
    received: bool = True
    event_type: str | None = None
    events_emitted: int = 0


@router.post("/paypal/webhook", response_model=WebhookAck)
async def paypal_webhook(request: Request):
    """
    Apply a PayPal subscription or payment event.

    Rate limited per client IP. The signature is verified against
    PAYPAL_WEBHOOK_ID when one is configured.
    """
    allowed, retry_after = billing_webhook_limiter.check(client_ip(request) or "unknown")
    if not allowed:
        raise RateLimitedError(retry_after=retry_after)

    try:
        event = json.loads(await request.body())
    except (json.JSONDecodeError, UnicodeDecodeError):
        raise InvalidWebhookPayloadError()
    if not isinstance(event, dict):
        raise InvalidWebhookPayloadError()

    headers = {key.lower(): value for key, value in request.headers.items()}
    BillingWebhookService.verify_paypal_event(headers, event)

    events = BillingWebhookService.handle_paypal_event(event)
    return WebhookAck(event_type=event.get("event_type"), events_emitted=emit_events(events))


@router.post("/stripe/webhook", response_model=WebhookAck)
async def stripe_webhook(
    request: Request,
    stripe_signature: str | None = Header(default=None, alias="Stripe-Signature"),
):
    """
    Apply a Stripe event. Only checkout.session.completed for payment links
    changes state; other events are acknowledged.
    """
    payload = await request.body()
    event = BillingWebhookService.construct_stripe_event(payload, stripe_signature)
    events = BillingWebhookService.handle_stripe_event(event)
    return WebhookAck(event_type=event.get("type"), events_emitted=emit_events(events))
