# =============================================================================
# lib/webhook_dispatcher.py - Outbound Webhook Delivery
# =============================================================================
# Delivers events to user-configured webhook URLs.
#
# Each delivery is a JSON POST of {event, timestamp, data}. When the
# configuration has a secret, X-Webhook-Signature carries the hex
# HMAC-SHA256 of the exact request body, so receivers can verify with:
#
#   hmac.new(secret, raw_body, sha256).hexdigest() == header
#
# Usage:
#   from lib.webhook_dispatcher import dispatch_event
#   summary = dispatch_event(configs, "proposal.signed", {"proposal_id": "..."})
# =============================================================================

import hashlib
import hmac
import json
import logging
from datetime import datetime, timezone
from typing import Any

import httpx
from pydantic import BaseModel, Field

logger = logging.getLogger(__name__)

USER_AGENT = "ProposalKraft-Webhooks/1.0"
SIGNATURE_HEADER = "X-Webhook-Signature"
DEFAULT_TIMEOUT = 10.0


class DeliveryFailure(BaseModel):
    """A webhook that did not accept the event."""
    webhook_id: str | None = None
    url: str
    error: str


class DispatchSummary(BaseModel):
    """Outcome of sending one event to every matching webhook."""
    success: bool = True
    message: str = ""
    total: int = 0
    succeeded: int = 0
    failed: int = 0
    failures: list[DeliveryFailure] = Field(default_factory=list)


def sign_payload(secret: str, body: bytes) -> str:
    """
    Compute the hex HMAC-SHA256 signature of a request body.

    Example:
        sign_payload("s3cret", b'{"event": "proposal.viewed"}')
    """
    return hmac.new(secret.encode("utf-8"), body, hashlib.sha256).hexdigest()


def build_payload(event_type: str, data: dict[str, Any], timestamp: str | None = None) -> bytes:
    """Serialize the delivery body."""
    payload = {
        "event": event_type,
        "timestamp": timestamp or datetime.now(timezone.utc).isoformat(),
        "data": data,
    }
    return json.dumps(payload, default=str).encode("utf-8")


def deliver(
    config: dict[str, Any],
    event_type: str,
    data: dict[str, Any],
    timeout: float = DEFAULT_TIMEOUT,
    client: httpx.Client | None = None,
) -> DeliveryFailure | None:
    """
    POST one event to one webhook configuration.

    Args:
        config: webhook_configurations row (webhook_url, secret, id)
        event_type: Event name
        data: Event payload
        timeout: Request timeout in seconds
        client: Optional shared httpx client

    Returns:
        None on a 2xx response, otherwise a DeliveryFailure
    """
    url = config["webhook_url"]
    body = build_payload(event_type, data)
    headers = {
        "Content-Type": "application/json",
        "User-Agent": USER_AGENT,
    }
    if config.get("secret"):
        headers[SIGNATURE_HEADER] = sign_payload(config["secret"], body)

    http = client or httpx
    try:
        response = http.post(url, content=body, headers=headers, timeout=timeout)
    except httpx.HTTPError as e:
        logger.warning(f"Webhook {config.get('id')} to {url} failed: {e}")
        return DeliveryFailure(webhook_id=config.get("id"), url=url, error=str(e))

    if not 200 <= response.status_code < 300:
        logger.warning(f"Webhook {config.get('id')} to {url} returned {response.status_code}")
        return DeliveryFailure(
            webhook_id=config.get("id"),
            url=url,
            error=f"HTTP {response.status_code}",
        )

    logger.info(f"Webhook {config.get('id')} delivered {event_type} to {url}")
    return None


def dispatch_event(
    configs: list[dict[str, Any]],
    event_type: str,
    data: dict[str, Any],
    timeout: float = DEFAULT_TIMEOUT,
) -> DispatchSummary:
    """
    Send an event to every configuration and tally the results.

    Args:
        configs: Active webhook configurations subscribed to event_type
        event_type: Event name
        data: Event payload

    Returns:
        DispatchSummary with total/succeeded/failed counts
    """
    if not configs:
        return DispatchSummary(message="No active webhooks found for this event")

    failures: list[DeliveryFailure] = []
    with httpx.Client() as client:
        for config in configs:
            failure = deliver(config, event_type, data, timeout=timeout, client=client)
            if failure:
                failures.append(failure)

    total = len(configs)
    return DispatchSummary(
        success=True,
        message=f"Triggered {total} webhooks",
        total=total,
        succeeded=total - len(failures),
        failed=len(failures),
        failures=failures,
    )
