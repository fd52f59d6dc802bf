# =============================================================================
# app/routers/webhooks.py - Outbound Webhook Configuration Endpoints
# =============================================================================
# Users register URLs that receive proposal and payment events.
# Secrets are write-only; responses only report has_secret.
# =============================================================================

from typing import Annotated
from uuid import UUID

from fastapi import APIRouter, Depends, Path
from pydantic import BaseModel, Field

from app.auth import get_current_user, AuthUser
from core.models.webhook import (
    WebhookConfigCreate,
    WebhookConfigResponse,
    WebhookConfigUpdate,
    WebhookTriggerRequest,
)
from core.services.webhook_service import WebhookService, to_response
from lib.webhook_dispatcher import DispatchSummary

router = APIRouter()

WebhookPath = Annotated[UUID, Path(description="Webhook configuration UUID")]


class WebhookToggleRequest(BaseModel):
    """Set the active flag explicitly; omit to flip it."""
    is_active: bool | None = None


class WebhookDeleteResponse(BaseModel):
    webhook_id: str
    message: str = Field(default="Webhook deleted")


@router.get("", response_model=list[WebhookConfigResponse])
async def list_webhooks(user: AuthUser = Depends(get_current_user)):
    """List webhook configurations, newest first."""
    return [WebhookConfigResponse(**to_response(w)) for w in WebhookService.list_webhooks(user.id)]


@router.post("", response_model=WebhookConfigResponse, status_code=201)
async def create_webhook(
    request: WebhookConfigCreate,
    user: AuthUser = Depends(get_current_user),
):
    """Register a webhook for one or more events."""
    return WebhookConfigResponse(**to_response(WebhookService.create_webhook(user.id, request)))


@router.post("/trigger", response_model=DispatchSummary)
async def trigger_webhooks(
    request: WebhookTriggerRequest,
    user: AuthUser = Depends(get_current_user),
):
    """
    Send an event to the user's matching webhooks right away.

    Used to test an integration; delivery happens in the request and the
    per-webhook results are returned.
    """
    return WebhookService.trigger_event(user.id, request.event_type.value, request.event_data)


@router.get("/{webhook_id}", response_model=WebhookConfigResponse)
async def get_webhook(webhook_id: WebhookPath, user: AuthUser = Depends(get_current_user)):
    return WebhookConfigResponse(**to_response(WebhookService.get_webhook(webhook_id, user.id)))


@router.patch("/{webhook_id}", response_model=WebhookConfigResponse)
async def update_webhook(
    webhook_id: WebhookPath,
    request: WebhookConfigUpdate,
    user: AuthUser = Depends(get_current_user),
):
    """Update a webhook configuration."""
    config = WebhookService.update_webhook(webhook_id, user.id, request)
    return WebhookConfigResponse(**to_response(config))


@router.post("/{webhook_id}/toggle", response_model=WebhookConfigResponse)
async def toggle_webhook(
    webhook_id: WebhookPath,
    user: AuthUser = Depends(get_current_user),
    request: WebhookToggleRequest | None = None,
):
    """Enable or disable a webhook."""
    is_active = request.is_active if request else None
    config = WebhookService.toggle_webhook(webhook_id, user.id, is_active)
    return WebhookConfigResponse(**to_response(config))


@router.delete("/{webhook_id}", response_model=WebhookDeleteResponse)
async def delete_webhook(webhook_id: WebhookPath, user: AuthUser = Depends(get_current_user)):
    WebhookService.delete_webhook(webhook_id, user.id)
    return WebhookDeleteResponse(webhook_id=str(webhook_id))


