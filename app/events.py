# =============================================================================
# app/events.py - Background Side Effects
# =============================================================================
# Routers call these after a request has succeeded. Each helper queues a
# Celery task; if the broker is unreachable the failure is logged and the
# request still completes.
#
# Usage:
#   from app.events import emit_event
#   emit_event(user.id, "proposal.created", {"proposal_id": proposal["id"]})
# =============================================================================

import logging
from typing import Any
from uuid import UUID

from lib.utils import normalize_uuid

logger = logging.getLogger(__name__)


def emit_event(user_id: UUID | str, event_type: str, data: dict[str, Any]) -> bool:
    """
    Queue delivery of an event to the user's outbound webhooks.

    Returns:
        True if the task was queued
    """
    from workers.tasks import dispatch_webhook_event

    try:
        dispatch_webhook_event.delay(normalize_uuid(user_id), event_type, data)
        logger.debug(f"Queued {event_type} for user {user_id}")
        return True
    except Exception as e:
        logger.warning(f"Could not queue {event_type} for user {user_id}: {e}")
        return False


def emit_events(events: list[dict[str, Any]]) -> int:
    """
    Queue a batch of events as returned by the billing webhook handlers.

    Each entry has user_id, event_type and data.

    Returns:
        Number of events queued
    """
    queued = 0
    for event in events:
        if emit_event(event["user_id"], event["event_type"], event["data"]):
            queued += 1
    return queued


def queue_share_email(
    recipient_email: str,
    proposal_title: str,
    sender_name: str,
    share_url: str,
    message: str | None = None,
    recipient_name: str | None = None,
) -> bool:
    """Queue a share-link email. Returns True if the task was queued."""
    from workers.tasks import send_share_email

    try:
        send_share_email.delay(
            recipient_email=recipient_email,
            proposal_title=proposal_title,
            sender_name=sender_name,
            share_url=share_url,
            message=message,
            recipient_name=recipient_name,
        )
        return True
    except Exception as e:
        logger.warning(f"Could not queue share email to {recipient_email}: {e}")
        return False
