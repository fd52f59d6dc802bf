# =============================================================================
# core/models/webhook.py - Outbound Webhook Schemas
# =============================================================================

from datetime import datetime
from enum import Enum
from typing import Any
from uuid import UUID

from pydantic import BaseModel, Field, HttpUrl


class WebhookEvent(str, Enum):
    """Events a user can subscribe a webhook to."""
    PROPOSAL_CREATED = "proposal.created"
    PROPOSAL_VIEWED = "proposal.viewed"
    PROPOSAL_SIGNED = "proposal.signed"
    PAYMENT_COMPLETED = "payment.completed"


class WebhookConfigCreate(BaseModel):
    """
    Register a webhook.

    Example:
        {
            "name": "Zapier",
            "webhook_url": "https://hooks.zapier.com/hooks/catch/123/abc",
            "events": ["proposal.signed"],
            "secret": "whsec_..."
        }
    """
    name: str = Field(..., min_length=1, max_length=100)
    webhook_url: HttpUrl
    events: list[WebhookEvent] = Field(..., min_length=1)
    secret: str | None = Field(default=None, max_length=255)
    is_active: bool = True


class WebhookConfigUpdate(BaseModel):
    """Partial webhook update."""
    name: str | None = Field(default=None, min_length=1, max_length=100)
    webhook_url: HttpUrl | None = None
    events: list[WebhookEvent] | None = Field(default=None, min_length=1)
    secret: str | None = Field(default=None, max_length=255)
    is_active: bool | None = None


class WebhookConfigResponse(BaseModel):
    """A stored webhook configuration (secret is never returned)."""
    id: UUID
    name: str
    webhook_url: str
    events: list[str]
    has_secret: bool = False
    is_active: bool
    created_at: datetime | None = None


class WebhookTriggerRequest(BaseModel):
    """Manually trigger an event (used by the settings page "test" button)."""
    event_type: WebhookEvent
    event_data: dict[str, Any] = Field(default_factory=dict)
