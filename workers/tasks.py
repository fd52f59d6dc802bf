# =============================================================================
# workers/tasks.py - Celery Task Definitions
# =============================================================================
# Background side effects queued by the API (see app/events.py).
#
# Tasks:
# - dispatch_webhook_event: Deliver an event to the user's webhooks
# - send_share_email: Email a share link to a recipient
# =============================================================================

import logging
from typing import Any

from celery import shared_task

logger = logging.getLogger(__name__)


# =============================================================================
# Outbound Webhooks
# =============================================================================

@shared_task(bind=True, name="workers.tasks.dispatch_webhook_event")
def dispatch_webhook_event(
    self,
    user_id: str,
    event_type: str,
    data: dict[str, Any],
) -> dict[str, Any]:
    """
    Deliver an event to every active webhook the user subscribed to it.

    Individual delivery failures are reported in the result, not retried;
    a failure to load the configurations is retried.

    Args:
        user_id: Owner of the webhook configurations
        event_type: Event name (e.g. "proposal.signed")
        data: Event payload

    Returns:
        DispatchSummary as a dict
    """
    logger.info(f"Dispatching {event_type} for user {user_id}")

    from core.services.webhook_service import WebhookService

    try:
        summary = WebhookService.trigger_event(user_id, event_type, data)
    except Exception as e:
        logger.exception(f"Webhook dispatch failed: {e}")
        raise self.retry(exc=e)

    if summary.failed:
        logger.warning(f"{summary.failed} of {summary.total} webhooks failed for {event_type}")

    return summary.model_dump()


# =============================================================================
# Email
# =============================================================================

@shared_task(bind=True, name="workers.tasks.send_share_email")
def send_share_email(
    self,
    recipient_email: str,
    proposal_title: str,
    sender_name: str,
    share_url: str,
    message: str | None = None,
    recipient_name: str | None = None,
) -> dict[str, Any]:
    """
    Email a share link.

    Returns:
        Dict with:
        - success: bool
        - message_id: Postmark MessageID (None when email is disabled)
    """
    from app.exceptions import InvalidRequestError
    from core.services.email_service import EmailService

    try:
        message_id = EmailService.send_share_email(
            recipient_email=recipient_email,
            proposal_title=proposal_title,
            sender_name=sender_name,
            share_url=share_url,
            message=message,
            recipient_name=recipient_name,
        )
    except InvalidRequestError as e:
        logger.error(f"Share email rejected: {e.message}")
        return {"success": False, "error": e.message}
    except Exception as e:
        logger.exception(f"Share email to {recipient_email} failed: {e}")
        raise self.retry(exc=e)

    return {"success": True, "message_id": message_id}
